"""
Signers
"""

from zkpay.signers.base import Identity, ensure_identity
from zkpay.signers.evm_signer import EvmSigner

__all__ = ["Identity", "EvmSigner", "ensure_identity"]
