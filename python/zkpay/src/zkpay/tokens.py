"""
Token metadata resolution against the Uniswap token list, falling back to
on-chain ERC-20 reads
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

from zkpay.abi import ERC20_METADATA_ABI
from zkpay.clock import Clock, now_ms
from zkpay.config import SdkConfig
from zkpay.exceptions import TokenResolutionError
from zkpay.types import Chain, Token, TokenList

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNKNOWN_TOKEN_NAME = "Unknown Token"
UNKNOWN_TOKEN_SYMBOL = "UNKNOWN"
DEFAULT_TOKEN_DECIMALS = 18


@dataclass
class _CacheEntry(Generic[T]):
    value: T
    fetched_at: int


class TtlCache(Generic[T]):
    """Single-value cache with an injected clock"""

    def __init__(self, ttl_ms: int = SdkConfig.CACHE_TTL_MS, clock: Clock | None = None) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock or now_ms
        self._entry: _CacheEntry[T] | None = None

    def get(self) -> T | None:
        """Cached value if still fresh"""
        if self._entry is None:
            return None
        if self._clock() - self._entry.fetched_at >= self._ttl_ms:
            return None
        return self._entry.value

    def get_stale(self) -> T | None:
        """Cached value regardless of age"""
        return self._entry.value if self._entry is not None else None

    def set(self, value: T) -> None:
        self._entry = _CacheEntry(value=value, fetched_at=self._clock())

    def clear(self) -> None:
        self._entry = None


class TokenResolver:
    """
    Resolves currency symbols and token addresses to token metadata.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
        url: str = SdkConfig.TOKEN_LIST_URL,
    ) -> None:
        self._http_client = http_client
        self._owns_client = http_client is None
        self._url = url
        self._cache: TtlCache[TokenList] = TtlCache(SdkConfig.CACHE_TTL_MS, clock)

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    async def _fetch_token_list(self) -> TokenList:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
        response = await self._http_client.get(self._url)
        response.raise_for_status()
        return TokenList.model_validate(response.json())

    async def get_token_list(self) -> TokenList:
        """
        Get the token list, cached for 24 hours.

        Raises:
            TokenResolutionError: If the list cannot be fetched and nothing is cached
        """
        cached = self._cache.get()
        if cached is not None:
            return cached

        try:
            token_list = await self._fetch_token_list()
        except Exception as e:
            logger.error(f"Token list fetch error: {e}")
            stale = self._cache.get_stale()
            if stale is not None:
                logger.warning("Using expired token list cache due to fetch error")
                return stale
            raise TokenResolutionError("Failed to fetch token list and no cache available") from e

        self._cache.set(token_list)
        return token_list

    async def get_token_by_symbol(self, chain_id: int, symbol: str) -> Token | None:
        token_list = await self.get_token_list()
        for token in token_list.tokens:
            if token.chain_id == chain_id and token.symbol == symbol:
                return token
        return None

    async def get_token_by_address(self, chain: Chain, address: str) -> Token:
        """
        Find a token by contract address, reading it on-chain if unlisted.
        """
        token_list = await self.get_token_list()
        for token in token_list.tokens:
            if token.chain_id == chain.id and token.address.lower() == address.lower():
                return token

        symbol, decimals, name = await self._read_erc20_metadata(chain, address)
        return Token(
            chainId=chain.id,
            address=address,
            name=name if isinstance(name, str) else UNKNOWN_TOKEN_NAME,
            symbol=symbol if isinstance(symbol, str) else UNKNOWN_TOKEN_SYMBOL,
            decimals=decimals if isinstance(decimals, int) else DEFAULT_TOKEN_DECIMALS,
        )

    async def _read_erc20_metadata(self, chain: Chain, address: str) -> tuple[Any, Any, Any]:
        if not chain.rpc_url:
            raise TokenResolutionError(f"No RPC URL configured for chain {chain.name}")

        from web3 import AsyncHTTPProvider, AsyncWeb3

        w3 = AsyncWeb3(AsyncHTTPProvider(chain.rpc_url))
        contract = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=ERC20_METADATA_ABI
        )
        return await asyncio.gather(
            contract.functions.symbol().call(),
            contract.functions.decimals().call(),
            contract.functions.name().call(),
        )
