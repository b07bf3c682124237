"""
EvmSigner - EVM identity backed by a local private key
"""

import logging

from eth_account import Account
from eth_account.messages import encode_defunct

from zkpay.exceptions import ValidationError

logger = logging.getLogger(__name__)


class EvmSigner:
    """EVM signer implementation"""

    def __init__(self, private_key: str) -> None:
        if not private_key.startswith("0x"):
            private_key = "0x" + private_key
        self._private_key = private_key
        self._address = self._derive_address(private_key)
        logger.info(f"EvmSigner initialized: address={self._address}")

    @classmethod
    def from_private_key(cls, private_key: str) -> "EvmSigner":
        """Create signer from private key.

        Args:
            private_key: EVM private key (hex string, with or without 0x)

        Returns:
            EvmSigner instance
        """
        return cls(private_key)

    @staticmethod
    def _derive_address(private_key: str) -> str:
        """Derive checksummed EVM address from private key"""
        try:
            return Account.from_key(private_key).address
        except (ValueError, TypeError) as e:
            raise ValidationError(f"Invalid private key: {e}") from e

    def get_address(self) -> str:
        return self._address

    async def sign_message(self, message: str | bytes) -> str:
        """Sign message using ECDSA (EIP-191)"""
        if isinstance(message, bytes):
            signable = encode_defunct(primitive=message)
        else:
            signable = encode_defunct(text=message)
        signed = Account.sign_message(signable, private_key=self._private_key)
        return "0x" + signed.signature.hex().removeprefix("0x")
