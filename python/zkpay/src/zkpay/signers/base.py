"""
Signer identity interface
"""

from typing import Protocol, runtime_checkable

from zkpay.exceptions import ValidationError


@runtime_checkable
class Identity(Protocol):
    """
    Capability to report a public address and sign messages.

    Any object implementing both methods can be bound to a merchant,
    e.g. a wallet adapter or a remote signing service.
    """

    def get_address(self) -> str:
        """Get the signer's account address"""
        ...

    async def sign_message(self, message: str | bytes) -> str:
        """
        Sign a message (EIP-191 personal_sign).

        Args:
            message: Message text or raw bytes

        Returns:
            Signature string (hex)
        """
        ...


def ensure_identity(signer: object) -> Identity | None:
    """
    Validate that ``signer`` satisfies :class:`Identity`.

    Args:
        signer: Candidate signer, or None

    Returns:
        The signer, unchanged

    Raises:
        ValidationError: If the object lacks the required methods
    """
    if signer is None:
        return None
    if not isinstance(signer, Identity):
        raise ValidationError(
            f"Signer must implement get_address() and sign_message(), got {type(signer).__name__}"
        )
    return signer
