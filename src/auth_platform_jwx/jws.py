"""Compact JWS signing and verification on top of PyJWT."""

from __future__ import annotations

from typing import Any

from jwt import PyJWS
from jwt.exceptions import DecodeError, InvalidSignatureError, PyJWTError

from .errors import (
    MalformedTokenError,
    SignatureVerificationError,
    SigningError,
    UnsupportedAlgorithmError,
)
from .jwk import Key

JWS_SEGMENTS = 3

_jws = PyJWS()


def sign(payload: bytes, key: Key, alg: str) -> str:
    """Sign payload bytes and return the compact serialization.

    The key id, when set, is embedded as the ``kid`` header.
    """
    headers = {"kid": key.id} if key.id else None
    try:
        return _jws.encode(payload, key.raw, algorithm=alg, headers=headers)
    except NotImplementedError as e:
        raise UnsupportedAlgorithmError(alg) from e
    except (PyJWTError, TypeError, ValueError) as e:
        raise SigningError(f"Failed to sign payload with {alg}: {e}") from e


def parse_header(token: str) -> dict[str, Any]:
    """Return the protected header of a compact JWS without verifying it.

    Raises:
        MalformedTokenError: If the token is not a single-signature compact JWS.
    """
    if token.count(".") != JWS_SEGMENTS - 1:
        raise MalformedTokenError(
            "invalid jwt/jwe token",
            details={"reason": "expected exactly one signature segment"},
        )
    try:
        header = _jws.get_unverified_header(token)
    except PyJWTError as e:
        raise MalformedTokenError(f"Invalid token format: {e}") from e
    return header


def verify(token: str, key: Key, alg: str) -> bytes:
    """Verify a compact JWS with ``key`` restricted to ``alg`` and return its payload.

    Raises:
        SignatureVerificationError: If the signature does not verify.
        MalformedTokenError: If the token cannot be decoded.
    """
    try:
        return _jws.decode(token, key.raw, algorithms=[alg])
    except InvalidSignatureError as e:
        raise SignatureVerificationError(kid=key.id or None) from e
    except DecodeError as e:
        raise MalformedTokenError(f"Invalid token format: {e}") from e
    except (PyJWTError, TypeError, ValueError) as e:
        raise SignatureVerificationError(
            f"Signature verification failed: {e}",
            kid=key.id or None,
        ) from e
