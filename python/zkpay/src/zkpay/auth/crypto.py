"""
At-rest encryption of cached credentials.

The key is derived from the signer's public address only. This keeps the
token out of plain sight in local storage; it does not protect against code
running on the same origin.
"""

import json
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import ValidationError as PydanticValidationError

from zkpay.exceptions import DecryptionError
from zkpay.types import Credential

KDF_ITERATIONS = 100_000
KEY_LENGTH = 32
IV_LENGTH = 12
DELIMITER = ":"

_SALT_PREFIX = b"zkpay_auth:"


def derive_key(address: str) -> bytes:
    """
    Derive a 256-bit AES key from a signer address.

    Args:
        address: Signer address (case-insensitive)

    Returns:
        32-byte key
    """
    material = address.strip().lower().encode("utf-8")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=_SALT_PREFIX + material,
        iterations=KDF_ITERATIONS,
    )
    return kdf.derive(material)


def _canonical_bytes(credential: Credential) -> bytes:
    data = credential.model_dump(by_alias=True)
    return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")


def encrypt(credential: Credential, key: bytes) -> str:
    """
    Encrypt a credential with AES-256-GCM.

    Returns:
        ``"<hex iv>:<hex ciphertext>"``
    """
    iv = secrets.token_bytes(IV_LENGTH)
    ciphertext = AESGCM(key).encrypt(iv, _canonical_bytes(credential), None)
    return f"{iv.hex()}{DELIMITER}{ciphertext.hex()}"


def decrypt(blob: str, key: bytes) -> Credential:
    """
    Decrypt and authenticate a persisted credential.

    Raises:
        DecryptionError: If the blob is malformed, was produced under another
            key, or does not contain a credential
    """
    iv_hex, sep, ciphertext_hex = blob.partition(DELIMITER)
    if not sep or not iv_hex or not ciphertext_hex:
        raise DecryptionError("Malformed credential record")

    try:
        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(ciphertext_hex)
    except ValueError as e:
        raise DecryptionError("Credential record is not hex encoded") from e

    if len(iv) != IV_LENGTH:
        raise DecryptionError(f"Invalid IV length: {len(iv)}")

    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext, None)
    except InvalidTag as e:
        raise DecryptionError("Credential record failed authentication") from e

    try:
        return Credential.model_validate_json(plaintext)
    except PydanticValidationError as e:
        raise DecryptionError("Decrypted record is not a credential") from e
