"""
zkpay - Merchant SDK for the zkpay payment service

Create, query and retrieve payment channels, optionally bound to a signer
identity authenticated through Sign-In with Ethereum.
"""

__version__ = "0.1.0"

from zkpay.api_client import ApiClient
from zkpay.auth import (
    AuthManager,
    CredentialStore,
    FileStorage,
    HostEnvironment,
    InMemoryStorage,
    KeyValueStorage,
)
from zkpay.config import Chains, SdkConfig
from zkpay.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    DecryptionError,
    RequestTimeoutError,
    TokenResolutionError,
    ValidationError,
    ZkPayError,
)
from zkpay.merchant import Merchant
from zkpay.signers import EvmSigner, Identity
from zkpay.tokens import TokenResolver
from zkpay.types import (
    Chain,
    Credential,
    GetChannelQuery,
    MerchantConfig,
    NativeCurrency,
    PaymentDetails,
    PaymentParams,
    PaymentResponse,
    PaymentsResponse,
)
from zkpay.webhook import WebhookVerifier, verify_signature

__all__ = [
    "__version__",
    # Clients
    "ApiClient",
    "Merchant",
    "AuthManager",
    "TokenResolver",
    "WebhookVerifier",
    "verify_signature",
    # Storage
    "CredentialStore",
    "FileStorage",
    "HostEnvironment",
    "InMemoryStorage",
    "KeyValueStorage",
    # Signers
    "Identity",
    "EvmSigner",
    # Config
    "Chains",
    "SdkConfig",
    # Types
    "Chain",
    "Credential",
    "GetChannelQuery",
    "MerchantConfig",
    "NativeCurrency",
    "PaymentDetails",
    "PaymentParams",
    "PaymentResponse",
    "PaymentsResponse",
    # Exceptions
    "ZkPayError",
    "ValidationError",
    "ConfigurationError",
    "ApiError",
    "RequestTimeoutError",
    "AuthenticationError",
    "DecryptionError",
    "TokenResolutionError",
]
