"""
Tests for AuthManager token lifecycle
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from zkpay.auth import AUTH_ENDPOINT, STORAGE_KEY, AuthManager, HostEnvironment, InMemoryStorage
from zkpay.auth.crypto import derive_key, encrypt
from zkpay.exceptions import AuthenticationError, RequestTimeoutError, ValidationError
from zkpay.types import Credential


@pytest.fixture
def storage():
    storage = MagicMock(wraps=InMemoryStorage())
    return storage


@pytest.fixture
def environment(storage):
    return HostEnvironment(origin="https://testapp.com", storage=storage)


@pytest.fixture
def persist(storage, signer_address):
    def write(token, expired_at):
        credential = Credential(token=token, expiredAt=expired_at)
        storage.set_item(STORAGE_KEY, encrypt(credential, derive_key(signer_address)))
        storage.reset_mock()

    return write


class TestCreate:
    @pytest.mark.anyio
    async def test_without_signer(self, mock_api_client, environment, storage):
        manager = await AuthManager.create(mock_api_client, environment=environment)

        assert manager.get_auth_token() is None
        storage.get_item.assert_not_called()

    @pytest.mark.anyio
    async def test_with_signer_loads_persisted_auth(
        self, mock_api_client, mock_signer, environment, storage
    ):
        manager = await AuthManager.create(mock_api_client, mock_signer, environment=environment)

        assert manager.get_auth_token() is None
        storage.get_item.assert_called_with(STORAGE_KEY)

    def test_rejects_object_without_signer_methods(self, mock_api_client):
        with pytest.raises(ValidationError):
            AuthManager(mock_api_client, object())


class TestEnsureAuthenticated:
    @pytest.mark.anyio
    async def test_noop_without_signer(self, mock_api_client, environment, storage):
        manager = await AuthManager.create(mock_api_client, environment=environment)

        await manager.ensure_authenticated()

        mock_api_client.post.assert_not_called()
        storage.get_item.assert_not_called()
        storage.set_item.assert_not_called()
        assert manager.get_auth_token() is None

    @pytest.mark.anyio
    async def test_obtains_new_token(
        self, mock_api_client, mock_signer, environment, storage, signer_address
    ):
        manager = await AuthManager.create(mock_api_client, mock_signer, environment=environment)

        await manager.ensure_authenticated()

        mock_api_client.post.assert_awaited_once()
        endpoint, body = mock_api_client.post.call_args.args
        assert endpoint == AUTH_ENDPOINT
        assert body["signature"] == "mock-signature"
        assert body["message"].startswith(
            "testapp.com wants you to sign in with your Ethereum account:\n" + signer_address
        )
        mock_signer.sign_message.assert_awaited_once_with(body["message"])
        assert manager.get_auth_token() == "jwt-token"
        storage.set_item.assert_called_once()
        assert storage.set_item.call_args.args[0] == STORAGE_KEY

    @pytest.mark.anyio
    async def test_expiry_applies_buffer(self, mock_api_client, mock_signer, clock):
        manager = AuthManager(mock_api_client, mock_signer, clock=clock)

        await manager.ensure_authenticated()

        assert manager.credential.expired_at == clock() + (3600 - 60) * 1000

    @pytest.mark.anyio
    async def test_reuses_valid_persisted_token(
        self, mock_api_client, mock_signer, environment, storage, clock, persist
    ):
        persist("valid-token", clock() + 1000)
        manager = await AuthManager.create(
            mock_api_client, mock_signer, environment=environment, clock=clock
        )

        await manager.ensure_authenticated()

        mock_api_client.post.assert_not_called()
        assert manager.get_auth_token() == "valid-token"

    @pytest.mark.anyio
    async def test_refreshes_expired_persisted_token(
        self, mock_api_client, mock_signer, environment, storage, clock, persist
    ):
        persist("expired-token", clock() - 1000)
        manager = await AuthManager.create(
            mock_api_client, mock_signer, environment=environment, clock=clock
        )

        await manager.ensure_authenticated()

        mock_api_client.post.assert_awaited_once()
        assert manager.get_auth_token() == "jwt-token"
        storage.set_item.assert_called_once()

    @pytest.mark.anyio
    async def test_refreshes_once_held_token_expires(self, mock_api_client, mock_signer, clock):
        manager = AuthManager(mock_api_client, mock_signer, clock=clock)
        await manager.ensure_authenticated()

        mock_api_client.post.return_value = {"token": "second-token", "expiresIn": 3600}
        clock.advance(3540 * 1000 - 1)
        await manager.ensure_authenticated()
        assert mock_api_client.post.await_count == 1

        clock.advance(1)
        await manager.ensure_authenticated()
        assert mock_api_client.post.await_count == 2
        assert manager.get_auth_token() == "second-token"

    @pytest.mark.anyio
    async def test_concurrent_calls_share_one_refresh(self, mock_api_client, mock_signer):
        async def slow_post(endpoint, body):
            await asyncio.sleep(0.01)
            return {"token": "jwt-token", "expiresIn": 3600}

        mock_api_client.post = AsyncMock(side_effect=slow_post)
        manager = AuthManager(mock_api_client, mock_signer)

        await asyncio.gather(*(manager.ensure_authenticated() for _ in range(5)))

        assert mock_api_client.post.await_count == 1
        assert mock_signer.sign_message.await_count == 1
        assert manager.get_auth_token() == "jwt-token"

    @pytest.mark.anyio
    async def test_concurrent_callers_share_failure(self, mock_api_client, mock_signer):
        async def failing_post(endpoint, body):
            await asyncio.sleep(0.01)
            raise RuntimeError("API error")

        mock_api_client.post = AsyncMock(side_effect=failing_post)
        manager = AuthManager(mock_api_client, mock_signer)

        results = await asyncio.gather(
            manager.ensure_authenticated(),
            manager.ensure_authenticated(),
            return_exceptions=True,
        )

        assert all(isinstance(r, AuthenticationError) for r in results)
        assert mock_api_client.post.await_count == 1

    @pytest.mark.anyio
    async def test_new_attempt_after_failed_refresh(self, mock_api_client, mock_signer):
        mock_api_client.post.side_effect = [
            RuntimeError("API error"),
            {"token": "jwt-token", "expiresIn": 3600},
        ]
        manager = AuthManager(mock_api_client, mock_signer)

        with pytest.raises(AuthenticationError):
            await manager.ensure_authenticated()
        await manager.ensure_authenticated()

        assert mock_api_client.post.await_count == 2
        assert manager.get_auth_token() == "jwt-token"

    @pytest.mark.anyio
    async def test_cancelled_caller_does_not_cancel_refresh(self, mock_api_client, mock_signer):
        release = asyncio.Event()

        async def gated_post(endpoint, body):
            await release.wait()
            return {"token": "jwt-token", "expiresIn": 3600}

        mock_api_client.post = AsyncMock(side_effect=gated_post)
        manager = AuthManager(mock_api_client, mock_signer)

        first = asyncio.ensure_future(manager.ensure_authenticated())
        second = asyncio.ensure_future(manager.ensure_authenticated())
        await asyncio.sleep(0)
        first.cancel()
        release.set()
        await second

        with pytest.raises(asyncio.CancelledError):
            await first
        assert manager.get_auth_token() == "jwt-token"
        assert mock_api_client.post.await_count == 1

    @pytest.mark.anyio
    async def test_api_failure_raises_authentication_error(self, mock_api_client, mock_signer):
        cause = RuntimeError("API error")
        mock_api_client.post.side_effect = cause
        manager = AuthManager(mock_api_client, mock_signer)

        with pytest.raises(AuthenticationError, match="Authentication failed") as exc_info:
            await manager.ensure_authenticated()

        assert exc_info.value.__cause__ is cause
        assert manager.get_auth_token() is None

    @pytest.mark.anyio
    async def test_timeout_is_preserved_as_cause(self, mock_api_client, mock_signer):
        mock_api_client.post.side_effect = RequestTimeoutError(5000)
        manager = AuthManager(mock_api_client, mock_signer)

        with pytest.raises(AuthenticationError) as exc_info:
            await manager.ensure_authenticated()

        assert isinstance(exc_info.value.__cause__, RequestTimeoutError)
        assert exc_info.value.__cause__.timeout == 5000

    @pytest.mark.anyio
    async def test_signer_failure(self, mock_api_client, mock_signer):
        mock_signer.sign_message.side_effect = RuntimeError("Signing rejected")
        manager = AuthManager(mock_api_client, mock_signer)

        with pytest.raises(AuthenticationError):
            await manager.ensure_authenticated()

        mock_api_client.post.assert_not_called()
        assert manager.get_auth_token() is None

    @pytest.mark.anyio
    async def test_malformed_auth_response(self, mock_api_client, mock_signer):
        mock_api_client.post.return_value = {"unexpected": True}
        manager = AuthManager(mock_api_client, mock_signer)

        with pytest.raises(AuthenticationError):
            await manager.ensure_authenticated()

        assert manager.get_auth_token() is None

    @pytest.mark.anyio
    async def test_failed_refresh_discards_expired_credential(
        self, mock_api_client, mock_signer, clock
    ):
        manager = AuthManager(mock_api_client, mock_signer, clock=clock)
        await manager.ensure_authenticated()
        clock.advance(3600 * 1000)

        mock_api_client.post.side_effect = RuntimeError("API error")
        with pytest.raises(AuthenticationError):
            await manager.ensure_authenticated()

        assert manager.credential is None

    @pytest.mark.anyio
    async def test_clears_corrupt_persisted_auth_and_refreshes(
        self, mock_api_client, mock_signer, environment, storage
    ):
        storage.set_item(STORAGE_KEY, "invalid-data")
        manager = await AuthManager.create(mock_api_client, mock_signer, environment=environment)

        await manager.ensure_authenticated()

        storage.remove_item.assert_any_call(STORAGE_KEY)
        mock_api_client.post.assert_awaited_once()
        assert manager.get_auth_token() == "jwt-token"

    @pytest.mark.anyio
    async def test_persistence_failure_is_not_fatal(self, mock_api_client, mock_signer, storage):
        storage.set_item.side_effect = OSError("quota exceeded")
        environment = HostEnvironment(origin="https://testapp.com", storage=storage)
        manager = await AuthManager.create(mock_api_client, mock_signer, environment=environment)

        await manager.ensure_authenticated()

        assert manager.get_auth_token() == "jwt-token"

    @pytest.mark.anyio
    async def test_no_storage_outside_browser(self, mock_api_client, mock_signer):
        with patch("zkpay.auth.store.crypto") as crypto:
            manager = await AuthManager.create(mock_api_client, mock_signer)
            await manager.ensure_authenticated()

        crypto.derive_key.assert_not_called()
        crypto.encrypt.assert_not_called()
        crypto.decrypt.assert_not_called()
        assert manager.get_auth_token() == "jwt-token"
        body = mock_api_client.post.call_args.args[1]
        assert body["message"].startswith("zkpay.cc wants you to sign in")


class TestGetAuthToken:
    def test_none_without_auth(self, mock_api_client, mock_signer):
        manager = AuthManager(mock_api_client, mock_signer)
        assert manager.get_auth_token() is None

    @pytest.mark.anyio
    async def test_returns_persisted_token(
        self, mock_api_client, mock_signer, environment, storage, clock, persist
    ):
        persist("persisted-token", clock() + 1000)
        manager = await AuthManager.create(
            mock_api_client, mock_signer, environment=environment, clock=clock
        )

        assert manager.get_auth_token() == "persisted-token"
        mock_api_client.post.assert_not_called()

    @pytest.mark.anyio
    async def test_does_not_refresh_expired_token(self, mock_api_client, mock_signer, clock):
        manager = AuthManager(mock_api_client, mock_signer, clock=clock)
        await manager.ensure_authenticated()
        clock.advance(3600 * 1000)

        assert manager.get_auth_token() == "jwt-token"
        assert mock_api_client.post.await_count == 1
