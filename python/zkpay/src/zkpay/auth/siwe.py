"""
Sign-In with Ethereum (EIP-4361) challenge messages.

The layout is verified byte-for-byte by the zkpay service, which does not
track nonces; the nonce only keeps repeated challenges distinct.
"""

import re
import secrets
import time
from datetime import datetime, timezone

SIWE_VERSION = "1"
SIWE_CHAIN_ID = 1

_SCHEME_RE = re.compile(r"^https?://")


def generate_nonce() -> str:
    """Generate an alphanumeric challenge nonce"""
    return secrets.token_hex(8)


def format_issued_at(timestamp_ms: int | None = None) -> str:
    """
    Render an epoch-millisecond instant as ISO-8601 UTC with millisecond
    precision, e.g. ``2025-03-28T03:03:03.333Z``.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp_ms % 1000:03d}Z"


def origin_to_domain(origin: str) -> str:
    """Strip the http(s) scheme from an origin"""
    return _SCHEME_RE.sub("", origin)


def build_siwe_message(
    address: str,
    origin: str,
    *,
    nonce: str | None = None,
    issued_at: str | None = None,
    chain_id: int = SIWE_CHAIN_ID,
    version: str = SIWE_VERSION,
) -> str:
    """
    Build the sign-in challenge for ``address``.

    Args:
        address: Signer address
        origin: Full origin URI (scheme and host)
        nonce: Freshness nonce, generated when omitted
        issued_at: ISO-8601 issuance time, now when omitted
        chain_id: Chain identifier expected by the verifier
        version: Message version expected by the verifier

    Returns:
        Message text to be signed
    """
    domain = origin_to_domain(origin)
    nonce = nonce or generate_nonce()
    issued_at = issued_at or format_issued_at()

    return (
        f"{domain} wants you to sign in with your Ethereum account:\n"
        f"{address}\n"
        "\n"
        "\n"
        f"URI: {origin}\n"
        f"Version: {version}\n"
        f"Chain ID: {chain_id}\n"
        f"Nonce: {nonce}\n"
        f"Issued At: {issued_at}"
    )
