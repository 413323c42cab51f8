"""Token encoder: optional sign stage followed by optional encrypt stage."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from . import jwe, jws
from .errors import NoEncryptionKeyError, NoSigningKeyError
from .keysource import SKIP_KEY_SOURCE, KeySource
from .telemetry import get_logger, trace_operation

NESTED_CONTENT_TYPE = "JWT"


def serialize_payload(payload: Any) -> bytes:
    """Turn a payload into the bytes that get signed/encrypted.

    Bytes and strings are taken as already serialized.
    """
    if isinstance(payload, bytes):
        return payload
    if isinstance(payload, bytearray | memoryview):
        return bytes(payload)
    if isinstance(payload, str):
        return payload.encode("utf-8")
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(exclude_none=True, by_alias=True).encode("utf-8")
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def encode(
    sig_source: KeySource | None,
    enc_source: KeySource | None,
    payload: Any,
) -> bytes:
    """Serialize, sign and encrypt a payload.

    Signing always happens before encryption. A ``None`` source skips its stage.

    Args:
        sig_source: Source of the signing key.
        enc_source: Source of the recipient encryption key.
        payload: Bytes, string, pydantic model or JSON-serializable value.

    Returns:
        Plain JSON when both stages are skipped, a compact JWS when only signing
        ran, or a compact JWE wrapping a JWS when both ran.

    Raises:
        NoSigningKeyError: If the signing source has no key.
        NoEncryptionKeyError: If the encryption source has no key.
    """
    logger = get_logger()
    if sig_source is None:
        sig_source = SKIP_KEY_SOURCE
    if enc_source is None:
        enc_source = SKIP_KEY_SOURCE

    with trace_operation("encode") as span:
        data = serialize_payload(payload)

        signing = sig_source.resolve()
        if signing is None or (signing.algs.signs and signing.key is None):
            logger.warning("signing_key_unavailable", source=repr(sig_source))
            raise NoSigningKeyError()

        signed = False
        if signing.algs.signs:
            span.set_attribute("jwx.sig.alg", signing.algs.sig)
            if signing.key.id:
                span.set_attribute("jwx.sig.kid", signing.key.id)
            data = jws.sign(data, signing.key, signing.algs.sig).encode("ascii")
            signed = True

        encryption = enc_source.resolve()
        if encryption is None or (encryption.algs.encrypts and encryption.key is None):
            logger.warning("encryption_key_unavailable", source=repr(enc_source))
            raise NoEncryptionKeyError()

        if encryption.algs.encrypts:
            span.set_attribute("jwx.enc.alg", encryption.algs.encrypt)
            span.set_attribute("jwx.enc.enc", encryption.algs.encode)
            if encryption.key.id:
                span.set_attribute("jwx.enc.kid", encryption.key.id)
            data = jwe.encrypt(
                data,
                encryption.key.to_public(),
                encryption.algs.encrypt,
                encryption.algs.encode,
                content_type=NESTED_CONTENT_TYPE if signed else None,
            ).encode("ascii")

        logger.debug(
            "token_encoded",
            sig_alg=signing.algs.sig or None,
            enc_alg=encryption.algs.encrypt or None,
        )
        return data


def encode_to_string(
    sig_source: KeySource | None,
    enc_source: KeySource | None,
    payload: Any,
) -> str:
    """Like ``encode`` but returns text."""
    return encode(sig_source, enc_source, payload).decode("utf-8")
