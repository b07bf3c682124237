"""
Durable storage of the cached credential.

Persistence is active only inside a browser-like host, i.e. one providing an
origin and a key-value storage. Records are encrypted under a key derived
from the signer address, so a record written for another signer fails to
decrypt and is discarded.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from zkpay.auth import crypto
from zkpay.clock import Clock, now_ms
from zkpay.exceptions import DecryptionError
from zkpay.signers import Identity
from zkpay.types import Credential

logger = logging.getLogger(__name__)

STORAGE_KEY = "zkpay_auth"


class KeyValueStorage(Protocol):
    """localStorage-like string store"""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    """Process-local storage"""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileStorage:
    """
    Storage backed by a JSON object on disk.

    Every write rewrites the whole file; suited to the handful of keys an SDK
    keeps, not to general use.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _read(self) -> dict[str, str]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable storage file {self._path}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self._path)

    def get_item(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


@dataclass(frozen=True)
class HostEnvironment:
    """Browser-like host: page origin plus durable key-value storage"""

    origin: str
    storage: KeyValueStorage


class CredentialStore:
    """
    Encrypted persistence of a single credential.

    All operations are no-ops without a host environment or an identity.
    """

    def __init__(
        self,
        environment: HostEnvironment | None,
        identity: Identity | None,
        clock: Clock | None = None,
    ) -> None:
        self._environment = environment
        self._identity = identity
        self._clock = clock or now_ms
        self._keys: dict[str, bytes] = {}

    @property
    def enabled(self) -> bool:
        return self._environment is not None and self._identity is not None

    async def _key(self) -> bytes:
        address = self._identity.get_address().lower()
        key = self._keys.get(address)
        if key is None:
            key = await asyncio.to_thread(crypto.derive_key, address)
            self._keys[address] = key
        return key

    async def load(self) -> Credential | None:
        """
        Read the persisted credential.

        Returns:
            The credential if present, decryptable and unexpired, else None.
            Unusable records are removed.
        """
        if not self.enabled:
            return None

        storage = self._environment.storage
        try:
            blob = storage.get_item(STORAGE_KEY)
            if not blob:
                return None
            credential = crypto.decrypt(blob, await self._key())
        except DecryptionError as e:
            logger.warning(f"Discarding unreadable persisted auth: {e}")
            await self.clear()
            return None
        except Exception as e:
            logger.warning(f"Failed to load persisted auth: {e}")
            await self.clear()
            return None

        if not credential.is_valid(self._clock()):
            logger.debug("Persisted auth expired, removing it")
            await self.clear()
            return None
        return credential

    async def save(self, credential: Credential) -> bool:
        """
        Encrypt and write ``credential``.

        Returns:
            True if the record was written. Failures are logged, never raised.
        """
        if not self.enabled:
            return False

        try:
            blob = crypto.encrypt(credential, await self._key())
            self._environment.storage.set_item(STORAGE_KEY, blob)
        except Exception as e:
            logger.warning(f"Failed to persist auth: {e}")
            return False
        return True

    async def clear(self) -> None:
        """Remove the persisted record"""
        if not self.enabled:
            return
        try:
            self._environment.storage.remove_item(STORAGE_KEY)
        except Exception as e:
            logger.warning(f"Failed to remove persisted auth: {e}")
