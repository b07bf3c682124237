"""
Authentication: SIWE challenge, token lifecycle and encrypted persistence
"""

from zkpay.auth.manager import AUTH_ENDPOINT, AuthManager
from zkpay.auth.siwe import build_siwe_message, format_issued_at, generate_nonce
from zkpay.auth.store import (
    STORAGE_KEY,
    CredentialStore,
    FileStorage,
    HostEnvironment,
    InMemoryStorage,
    KeyValueStorage,
)

__all__ = [
    "AUTH_ENDPOINT",
    "AuthManager",
    "CredentialStore",
    "FileStorage",
    "HostEnvironment",
    "InMemoryStorage",
    "KeyValueStorage",
    "STORAGE_KEY",
    "build_siwe_message",
    "format_issued_at",
    "generate_nonce",
]
