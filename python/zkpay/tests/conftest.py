"""
Pytest configuration and fixtures
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

# 2025-03-28T03:03:03.333Z
FROZEN_NOW = 1743130983333

SIGNER_ADDRESS = "0xc375317f8403Cb633de95a0226210e3A1bAcb93a"
MERCHANT_ADDRESS = "0xd10a6ae6eba017fab5b29fa7f895a61da64a8f00"
TEST_PRIVATE_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


class FakeClock:
    """Controllable epoch-millisecond clock"""

    def __init__(self, now: int = FROZEN_NOW) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_signer():
    """Identity double returning a fixed address and signature"""
    signer = MagicMock(spec=["get_address", "sign_message"])
    signer.get_address.return_value = SIGNER_ADDRESS
    signer.sign_message = AsyncMock(return_value="mock-signature")
    return signer


@pytest.fixture
def mock_api_client():
    """ApiClient double answering the auth endpoint"""
    client = MagicMock()
    client.post = AsyncMock(return_value={"token": "jwt-token", "expiresIn": 3600})
    client.get = AsyncMock()
    client.aclose = AsyncMock()
    return client


@pytest.fixture(scope="session")
def frozen_now():
    return FROZEN_NOW


@pytest.fixture(scope="session")
def signer_address():
    return SIGNER_ADDRESS


@pytest.fixture(scope="session")
def merchant_address():
    return MERCHANT_ADDRESS


@pytest.fixture(scope="session")
def private_key():
    return TEST_PRIVATE_KEY
