"""
AuthManager - bearer token lifecycle for signer-bound merchants
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from zkpay.auth.siwe import SIWE_CHAIN_ID, SIWE_VERSION, build_siwe_message, format_issued_at
from zkpay.auth.store import CredentialStore, HostEnvironment
from zkpay.clock import Clock, now_ms
from zkpay.config import SdkConfig
from zkpay.exceptions import AuthenticationError
from zkpay.signers import Identity, ensure_identity
from zkpay.types import AuthResponse, Credential

if TYPE_CHECKING:
    from zkpay.api_client import ApiClient

logger = logging.getLogger(__name__)

AUTH_ENDPOINT = "/v1/auth"


class AuthManager:
    """
    Obtains and caches a short-lived bearer token via a SIWE challenge.

    Concurrent callers of :meth:`ensure_authenticated` share one refresh:
    the signer is asked for a single signature and the service receives a
    single exchange request per refresh episode.
    """

    def __init__(
        self,
        api_client: "ApiClient",
        identity: Identity | None = None,
        *,
        environment: HostEnvironment | None = None,
        clock: Clock | None = None,
        buffer_seconds: int = SdkConfig.AUTH_BUFFER_SECONDS,
        chain_id: int = SIWE_CHAIN_ID,
        version: str = SIWE_VERSION,
    ) -> None:
        """
        Initialize AuthManager.

        Args:
            api_client: Client for the zkpay service
            identity: Signer to authenticate as; without one every call is a no-op
            environment: Browser-like host enabling encrypted persistence
            clock: Callable returning the current time in epoch milliseconds
            buffer_seconds: Seconds subtracted from the reported token lifetime
            chain_id: Chain ID written into the challenge
            version: Version written into the challenge
        """
        self._api_client = api_client
        self._identity = ensure_identity(identity)
        self._environment = environment
        self._clock = clock or now_ms
        self._buffer_seconds = buffer_seconds
        self._chain_id = chain_id
        self._version = version
        self._store = CredentialStore(environment, self._identity, self._clock)
        self._credential: Credential | None = None
        self._refreshing: asyncio.Task | None = None

    @classmethod
    async def create(
        cls,
        api_client: "ApiClient",
        identity: Identity | None = None,
        **kwargs,
    ) -> "AuthManager":
        """Create a manager seeded with any persisted credential"""
        manager = cls(api_client, identity, **kwargs)
        await manager.load_persisted_auth()
        return manager

    @property
    def credential(self) -> Credential | None:
        return self._credential

    @property
    def origin(self) -> str:
        if self._environment is not None:
            return self._environment.origin
        return SdkConfig.DEFAULT_ORIGIN

    def get_auth_token(self) -> str | None:
        """Token of the held credential, if any. Never triggers a refresh."""
        if self._credential is None:
            return None
        return self._credential.token

    async def load_persisted_auth(self) -> None:
        credential = await self._store.load()
        if credential is not None:
            logger.debug("Loaded persisted auth")
            self._credential = credential

    async def ensure_authenticated(self) -> None:
        """
        Make sure a valid token is held when a signer is configured.

        Raises:
            AuthenticationError: If signing or the token exchange failed
        """
        if self._identity is None:
            return

        if self._credential is not None and self._credential.is_valid(self._clock()):
            return

        if self._refreshing is None:
            task = asyncio.ensure_future(self._refresh_auth_token())
            task.add_done_callback(self._on_refresh_done)
            self._refreshing = task

        # Shielded so one cancelled caller does not cancel the shared refresh
        await asyncio.shield(self._refreshing)

    def _on_refresh_done(self, task: asyncio.Task) -> None:
        if self._refreshing is task:
            self._refreshing = None

    async def _refresh_auth_token(self) -> None:
        self._credential = None
        try:
            address = self._identity.get_address()
            message = build_siwe_message(
                address,
                self.origin,
                issued_at=format_issued_at(self._clock()),
                chain_id=self._chain_id,
                version=self._version,
            )
            signature = await self._identity.sign_message(message)

            data = await self._api_client.post(
                AUTH_ENDPOINT, {"message": message, "signature": signature}
            )
            response = AuthResponse.model_validate(data)
        except Exception as e:
            logger.error(f"Failed to refresh auth token: {e}")
            raise AuthenticationError("Authentication failed") from e

        credential = Credential(
            token=response.token,
            expiredAt=self._clock() + (response.expires_in - self._buffer_seconds) * 1000,
        )
        self._credential = credential
        logger.info(f"Authenticated as {address}")

        await self._store.save(credential)
