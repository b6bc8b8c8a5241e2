"""Login handshake producing a freezer Session."""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from freezer.client.api import build_http_client, check_response, decode_json
from freezer.core.config import DEFAULT_TIMEOUT, ServerCapabilities, Session
from freezer.core.crypto import derive_key, key_fingerprint, user_salt
from freezer.core.errors import AuthenticationError, SerializationError, TransportError

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/users/login"


def authenticate(
    host_uri: str,
    user: str,
    password: str,
    crypto_password: str,
    tls_cert: Path | None = None,
    tls_key: Path | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Session:
    """Log in and build the session every other component uses.

    Args:
        host_uri: Base URL of the server.
        user: Login name.
        password: Login password.
        crypto_password: Password the file name encryption key is derived from.
        tls_cert: Optional client certificate (PEM).
        tls_key: Optional client private key (PEM).
        timeout: Default request timeout in seconds.

    Returns:
        Immutable Session.

    Raises:
        TLSConfigError: If the certificate or key cannot be loaded.
        TransportError: If the server cannot be reached.
        RemoteStatusError: If the login is refused.
        SerializationError: If the response is malformed.
        AuthenticationError: If the crypto password does not match the
            server's stored crypto hash.
    """
    host_uri = host_uri.rstrip("/")
    target = f"{host_uri}{LOGIN_PATH}"

    with build_http_client(tls_cert, tls_key, timeout) as client:
        try:
            response = client.post(target, data={"user": user, "password": password})
        except httpx.RequestError as e:
            raise TransportError("POST", target, str(e)) from e
        body = check_response("POST", target, response)

    data = decode_json(body, target)
    if not isinstance(data, dict) or not data.get("token"):
        raise SerializationError(f"Poorly formatted response to {target}: missing token")

    encryption_key = derive_key(crypto_password, user_salt(user))
    crypto_hash = data.get("cryptoHash")
    if crypto_hash and crypto_hash != key_fingerprint(encryption_key):
        raise AuthenticationError(
            f"The crypto password for {user} does not match the one registered on {host_uri}"
        )

    logger.info("Authenticated as %s on %s", user, host_uri)
    return Session(
        host_uri=host_uri,
        token=data["token"],
        encryption_key=encryption_key,
        capabilities=ServerCapabilities.from_dict(data.get("capabilities")),
        tls_cert=tls_cert,
        tls_key=tls_key,
        timeout=timeout,
    )
