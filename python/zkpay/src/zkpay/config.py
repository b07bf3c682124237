"""
zkpay SDK configuration
Centralized service endpoints, timing constants and known chains
"""

import os
from typing import Dict

from zkpay.exceptions import ConfigurationError
from zkpay.types import Chain, NativeCurrency


class SdkConfig:
    """Service endpoints and timing defaults"""

    BASE_API_URL: str = os.getenv("ZKPAY_API_URL", "https://api.zkpay.cc")

    # Used as SIWE origin when no browser-like host is configured
    DEFAULT_ORIGIN = "https://zkpay.cc"

    DEFAULT_TIMEOUT_MS = 5000

    # Subtracted from the server-reported token lifetime
    AUTH_BUFFER_SECONDS = 60

    # Validity window of signed create/query payloads
    PAYLOAD_TTL_MS = 20_000

    TOKEN_LIST_URL = "https://gateway.ipfs.io/ipns/tokens.uniswap.org"
    CACHE_TTL_MS = 24 * 60 * 60 * 1000

    @classmethod
    def get_base_url(cls) -> str:
        """Get the service base URL

        Raises:
            ConfigurationError: If no base URL is configured
        """
        if not cls.BASE_API_URL:
            raise ConfigurationError("No base URL provided for API client")
        return cls.BASE_API_URL.rstrip("/")


def _evm_native(name: str = "Ether", symbol: str = "ETH") -> NativeCurrency:
    return NativeCurrency(name=name, symbol=symbol, decimals=18)


class Chains:
    """Well-known EVM chains"""

    MAINNET = Chain(
        id=1,
        name="Ethereum",
        nativeCurrency=_evm_native(),
        rpcUrl="https://eth.merkle.io",
    )
    SEPOLIA = Chain(
        id=11155111,
        name="Sepolia",
        nativeCurrency=_evm_native("Sepolia Ether"),
        rpcUrl="https://sepolia.drpc.org",
    )
    BASE = Chain(
        id=8453,
        name="Base",
        nativeCurrency=_evm_native(),
        rpcUrl="https://mainnet.base.org",
    )
    BSC = Chain(
        id=56,
        name="BNB Smart Chain",
        nativeCurrency=NativeCurrency(name="BNB", symbol="BNB", decimals=18),
        rpcUrl="https://56.rpc.thirdweb.com",
    )
    BSC_TESTNET = Chain(
        id=97,
        name="Binance Smart Chain Testnet",
        nativeCurrency=NativeCurrency(name="BNB", symbol="tBNB", decimals=18),
        rpcUrl="https://data-seed-prebsc-1-s1.bnbchain.org:8545",
    )
    POLYGON = Chain(
        id=137,
        name="Polygon",
        nativeCurrency=NativeCurrency(name="POL", symbol="POL", decimals=18),
        rpcUrl="https://polygon-rpc.com",
    )

    _BY_ID: Dict[int, Chain] = {
        chain.id: chain for chain in (MAINNET, SEPOLIA, BASE, BSC, BSC_TESTNET, POLYGON)
    }

    @classmethod
    def get_chain(cls, chain_id: int) -> Chain:
        """Get a known chain by id

        Args:
            chain_id: EVM chain id

        Returns:
            Chain definition

        Raises:
            ConfigurationError: If the chain is not known
        """
        chain = cls._BY_ID.get(chain_id)
        if chain is None:
            raise ConfigurationError(f"Unsupported chain: {chain_id}")
        return chain
