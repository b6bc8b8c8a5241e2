"""Cryptographic functions for freezer.

This module provides:
- Key derivation using Argon2id
- File name encryption using AES-256-GCM, encoded as base64 text
- Key fingerprints checked against the server's stored crypto hash
"""

import base64
import binascii
import hashlib
import os

from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from freezer.core.errors import DecryptionError

# Argon2id parameters (OWASP recommendations for password hashing)
ARGON2_TIME_COST = 3
ARGON2_MEMORY_COST = 65536  # 64 MiB
ARGON2_PARALLELISM = 4
ARGON2_HASH_LEN = 32  # 256 bits

# AES-GCM constants
NONCE_SIZE = 12  # 96 bits (recommended for AES-GCM)
TAG_SIZE = 16
SALT_SIZE = 16  # 128 bits


def user_salt(user: str) -> bytes:
    """Derive the per-user key derivation salt.

    The salt must be reproducible on every machine the user logs in
    from, so it is taken from the user name rather than stored.

    Args:
        user: Login name.

    Returns:
        16 bytes of salt.
    """
    return hashlib.sha256(user.encode("utf-8")).digest()[:SALT_SIZE]


def derive_key(password: str, salt: bytes) -> bytes:
    """Derive a 256-bit encryption key from a password using Argon2id.

    Args:
        password: The user's crypto password.
        salt: A 16-byte salt (see user_salt()).

    Returns:
        32 bytes (256 bits) derived key suitable for AES-256.
    """
    return hash_secret_raw(
        secret=password.encode("utf-8"),
        salt=salt,
        time_cost=ARGON2_TIME_COST,
        memory_cost=ARGON2_MEMORY_COST,
        parallelism=ARGON2_PARALLELISM,
        hash_len=ARGON2_HASH_LEN,
        type=Type.ID,
    )


def key_fingerprint(key: bytes) -> str:
    """SHA-256 hex digest identifying a key without revealing it."""
    return hashlib.sha256(key).hexdigest()


def encrypt_string(plaintext: str, key: bytes) -> str:
    """Encrypt text using AES-256-GCM with a random nonce.

    Args:
        plaintext: Text to encrypt.
        key: 32-byte encryption key.

    Returns:
        Base64 of: nonce (12 bytes) || ciphertext || auth_tag (16 bytes)
    """
    nonce = os.urandom(NONCE_SIZE)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt_string(encrypted: str, key: bytes) -> str:
    """Decrypt text produced by encrypt_string.

    Args:
        encrypted: Base64 text as returned by encrypt_string.
        key: 32-byte encryption key.

    Returns:
        Decrypted plaintext.

    Raises:
        DecryptionError: If the input is malformed, the key is wrong or
            the data was tampered with.
    """
    try:
        raw = base64.b64decode(encrypted, validate=True)
    except (binascii.Error, TypeError, ValueError) as e:
        raise DecryptionError(f"Encrypted name is not valid base64: {encrypted!r}") from e

    if len(raw) < NONCE_SIZE + TAG_SIZE:
        raise DecryptionError(f"Encrypted name is too short: {encrypted!r}")

    nonce = raw[:NONCE_SIZE]
    ciphertext = raw[NONCE_SIZE:]
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext, None)
    except (InvalidTag, ValueError) as e:
        raise DecryptionError(
            f"Failed to decrypt name {encrypted!r}: wrong key or corrupted data"
        ) from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError(f"Decrypted name {encrypted!r} is not valid UTF-8") from e
