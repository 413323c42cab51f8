"""Token decoder: optional decrypt stage followed by optional verify stage.

Key resolution in both stages follows one rule: a ``kid`` in the token header
must be found verbatim in the key set, and only a header without ``kid`` falls
back to searching by ``alg``.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Collection
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from . import jwe, jws
from .errors import (
    DecryptionError,
    ErrorCode,
    InvalidAlgorithmError,
    MalformedPayloadError,
    MalformedTokenError,
    NoDecryptionKeyError,
    NoVerificationKeyError,
    SignatureVerificationError,
)
from .jwa import SIGNATURE_ALGORITHMS, Algs, is_none
from .jwk import Key
from .jwks import KeySet
from .telemetry import get_logger, trace_operation

T = TypeVar("T")

_EMPTY_KEY_SET = KeySet()


def _as_text(token: str | bytes) -> str:
    if isinstance(token, str):
        return token
    try:
        return bytes(token).decode("ascii")
    except UnicodeDecodeError as e:
        raise MalformedTokenError(details={"reason": "token is not ASCII"}) from e


def _header_field(header: dict[str, Any], name: str) -> str:
    value = header.get(name)
    return value if isinstance(value, str) else ""


def _header_kid(header: dict[str, Any]) -> str:
    kid = header.get("kid")
    if kid is not None and not isinstance(kid, str):
        raise MalformedTokenError(details={"reason": "kid header must be a string"})
    return kid or ""


def _resolve_decryption_key(header: dict[str, Any], jwks: KeySet) -> Key:
    kid = _header_kid(header)
    alg = _header_field(header, "alg")
    if kid:
        key = jwks.key_by_id(kid)
    elif alg:
        key = jwks.key_for_encryption(alg)
    else:
        key = None
    if key is None:
        get_logger().warning("decryption_key_unavailable", kid=kid or None, alg=alg or None)
        raise NoDecryptionKeyError(kid=kid or None, alg=alg or None)
    return key


def _resolve_verification_key(header: dict[str, Any], jwks: KeySet) -> Key:
    kid = _header_kid(header)
    alg = _header_field(header, "alg")
    if kid:
        key = jwks.key_by_id(kid)
    elif alg:
        key = jwks.key_for_signing(alg)
    else:
        key = None
    if key is None:
        get_logger().warning("verification_key_unavailable", kid=kid or None, alg=alg or None)
        raise NoVerificationKeyError(kid=kid or None, alg=alg or None)
    return key


def _decrypt(
    token: str,
    jwks: KeySet,
    allowed_key_algorithms: Collection[str] | None,
    allowed_content_encryptions: Collection[str] | None,
) -> bytes:
    header = jwe.parse_header(token)
    alg = _header_field(header, "alg")
    enc = _header_field(header, "enc")
    if allowed_key_algorithms is not None and alg not in allowed_key_algorithms:
        raise InvalidAlgorithmError(
            "encryption algorithm is not allowed",
            ErrorCode.INVALID_ENCRYPTION_ALG,
            alg=alg,
        )
    if allowed_content_encryptions is not None and enc not in allowed_content_encryptions:
        raise InvalidAlgorithmError(
            "encryption encoding is not allowed",
            ErrorCode.INVALID_ENCRYPTION_ENC,
            alg=enc,
        )

    key = _resolve_decryption_key(header, jwks)
    if key.alg and alg != key.alg:
        raise DecryptionError(
            f"token algorithm {alg!r} does not match key algorithm {key.alg!r}",
            kid=key.id or None,
        )
    return jwe.decrypt(token, key)


def _verify(
    token: str,
    jwks: KeySet,
    allowed_signature_algorithms: Collection[str] | None,
) -> bytes:
    header = jws.parse_header(token)
    alg = _header_field(header, "alg")
    if is_none(alg) or alg not in SIGNATURE_ALGORITHMS:
        raise InvalidAlgorithmError(
            "signature algorithm is invalid",
            ErrorCode.INVALID_SIGNATURE_ALG,
            alg=alg,
        )
    if allowed_signature_algorithms is not None and alg not in allowed_signature_algorithms:
        raise InvalidAlgorithmError(
            "signature algorithm is not allowed",
            ErrorCode.INVALID_SIGNATURE_ALG,
            alg=alg,
        )

    key = _resolve_verification_key(header, jwks)
    if key.alg and alg != key.alg:
        raise SignatureVerificationError(
            f"token algorithm {alg!r} does not match key algorithm {key.alg!r}",
            kid=key.id or None,
        )
    return jws.verify(token, key.to_public(), alg)


def _load(data: bytes, into: type[BaseModel] | Callable[[Any], T] | None) -> Any:
    if isinstance(into, type) and issubclass(into, BaseModel):
        try:
            return into.model_validate_json(data)
        except PydanticValidationError as e:
            raise MalformedPayloadError(f"Invalid token payload: {e}") from e

    try:
        value = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedPayloadError() from e
    if into is None:
        return value
    try:
        return into(value)
    except (TypeError, ValueError) as e:
        raise MalformedPayloadError(f"Invalid token payload: {e}") from e


def decode(
    token: str | bytes,
    verify_jwks: KeySet | None,
    decrypt_jwks: KeySet | None,
    hint: Algs,
    into: type[BaseModel] | Callable[[Any], T] | None = None,
    *,
    allowed_signature_algorithms: Collection[str] | None = None,
    allowed_key_algorithms: Collection[str] | None = None,
    allowed_content_encryptions: Collection[str] | None = None,
) -> Any:
    """Decrypt, verify and parse a token.

    Args:
        token: Compact JWE, compact JWS or plain JSON, as announced by ``hint``.
        verify_jwks: Keys for signature verification. Public projections are used.
        decrypt_jwks: Keys for decryption. Private material is used.
        hint: Which stages to expect. Any non-none value turns a stage on; the
            actual algorithm always comes from the token header.
        into: Optional pydantic model class or callable receiving the parsed JSON.
        allowed_signature_algorithms: Optional allow-list for the JWS ``alg``.
        allowed_key_algorithms: Optional allow-list for the JWE ``alg``.
        allowed_content_encryptions: Optional allow-list for the JWE ``enc``.

    Returns:
        The parsed payload, or the result of ``into``.

    Raises:
        NoDecryptionKeyError: If no decryption key matches the header.
        NoVerificationKeyError: If no verification key matches the header.
        MalformedTokenError: If the token structure is invalid.
        DecryptionError: If decryption fails.
        SignatureVerificationError: If the signature does not verify.
        InvalidAlgorithmError: If a header algorithm is refused.
        MalformedPayloadError: If the payload is not valid JSON for ``into``.
    """
    with trace_operation(
        "decode",
        attributes={"jwx.hint.sig": hint.sig, "jwx.hint.enc": hint.encode},
    ):
        data: bytes | str = _as_text(token)

        if hint.encrypts:
            data = _decrypt(
                data,
                decrypt_jwks if decrypt_jwks is not None else _EMPTY_KEY_SET,
                allowed_key_algorithms,
                allowed_content_encryptions,
            )

        if hint.signs:
            data = _verify(
                _as_text(data),
                verify_jwks if verify_jwks is not None else _EMPTY_KEY_SET,
                allowed_signature_algorithms,
            )

        if isinstance(data, str):
            data = data.encode("utf-8")
        return _load(data, into)
