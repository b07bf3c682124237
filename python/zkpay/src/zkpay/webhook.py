"""
Webhook signature verification

Webhook payloads are signed (EIP-191) by the zkpay operator. The operator
address is published at the service root and cached for 24 hours.
"""

import json
import logging
from typing import Any

import httpx
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_utils import is_address

from zkpay.clock import Clock
from zkpay.config import SdkConfig
from zkpay.tokens import TtlCache

logger = logging.getLogger(__name__)


def serialize_payload(payload: Any) -> str:
    """Compact JSON rendering of a webhook payload, as signed by the operator"""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


class WebhookVerifier:
    """Verifies webhook signatures against the operator address"""

    def __init__(
        self,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._base_url = base_url or SdkConfig.get_base_url()
        self._http_client = http_client
        self._owns_client = http_client is None
        self._cache: TtlCache[str] = TtlCache(SdkConfig.CACHE_TTL_MS, clock)

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def reset_cache(self) -> None:
        self._cache.clear()

    async def _fetch_operator_address(self) -> str:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0)
        response = await self._http_client.get(self._base_url)
        if response.is_error:
            raise RuntimeError(f"API request failed with status {response.status_code}")

        operator = response.json().get("operator")
        if not isinstance(operator, str) or not is_address(operator):
            raise ValueError("Invalid operator address in API response")
        return operator

    async def get_operator_address(self) -> str | None:
        """
        Operator address, cached for 24 hours.

        On fetch failure the previously cached address is returned, if any.
        """
        cached = self._cache.get()
        if cached is not None:
            return cached

        try:
            operator = await self._fetch_operator_address()
        except Exception as e:
            logger.error(f"Failed to fetch operator address: {e}")
            return self._cache.get_stale()

        self._cache.set(operator)
        return operator

    async def verify_signature(self, payload: Any, signature: str) -> bool:
        """
        Check that ``signature`` over ``payload`` was made by the operator.

        Returns:
            True if valid; False on mismatch or any verification error
        """
        try:
            operator = await self.get_operator_address()
            if not operator:
                return False

            signable = encode_defunct(text=serialize_payload(payload))
            recovered = Account.recover_message(signable, signature=signature)
            return recovered.lower() == operator.lower()
        except Exception as e:
            logger.error(f"Signature verification failed: {e}")
            return False


_default_verifier: WebhookVerifier | None = None


def _get_default_verifier() -> WebhookVerifier:
    global _default_verifier
    if _default_verifier is None:
        _default_verifier = WebhookVerifier()
    return _default_verifier


async def verify_signature(payload: Any, signature: str) -> bool:
    """Verify a webhook signature using a shared default verifier"""
    return await _get_default_verifier().verify_signature(payload, signature)
