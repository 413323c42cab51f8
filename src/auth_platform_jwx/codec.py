"""Config-bound codec facade."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel

from .claims import Claims
from .config import JWXConfig
from .decoder import decode
from .encoder import encode, encode_to_string
from .errors import ErrorCode, InvalidAlgorithmError
from .expect import Expect, expect_time, validate_claims
from .jwa import Algs
from .jwks import KeySet
from .keysource import KeySource, Resolution
from .telemetry import configure_telemetry, get_logger

T = TypeVar("T")


class JWXCodec:
    """Encode and decode tokens under one configuration.

    Decoding enforces the configured algorithm allow-lists; encoding refuses
    algorithms outside them.
    """

    def __init__(self, config: JWXConfig | None = None) -> None:
        self.config = config or JWXConfig()
        configure_telemetry(self.config.telemetry)
        self._logger = get_logger()

    def _check_algs(self, algs: Algs) -> None:
        if algs.signs and algs.sig not in self.config.allowed_signature_algorithms:
            raise InvalidAlgorithmError(
                "signature algorithm is not allowed",
                ErrorCode.INVALID_SIGNATURE_ALG,
                alg=algs.sig,
            )
        if algs.encrypts:
            if algs.encrypt not in self.config.allowed_key_algorithms:
                raise InvalidAlgorithmError(
                    "encryption algorithm is not allowed",
                    ErrorCode.INVALID_ENCRYPTION_ALG,
                    alg=algs.encrypt,
                )
            if algs.encode not in self.config.allowed_content_encryptions:
                raise InvalidAlgorithmError(
                    "encryption encoding is not allowed",
                    ErrorCode.INVALID_ENCRYPTION_ENC,
                    alg=algs.encode,
                )

    def _checked(self, source: KeySource | None) -> KeySource | None:
        if source is None:
            return None
        return _CheckedKeySource(source, self._check_algs)

    def encode(
        self,
        sig_source: KeySource | None,
        enc_source: KeySource | None,
        payload: Any,
    ) -> bytes:
        """Encode a payload; see ``encoder.encode``."""
        return encode(self._checked(sig_source), self._checked(enc_source), payload)

    def encode_to_string(
        self,
        sig_source: KeySource | None,
        enc_source: KeySource | None,
        payload: Any,
    ) -> str:
        """Encode a payload to text; see ``encoder.encode_to_string``."""
        return encode_to_string(self._checked(sig_source), self._checked(enc_source), payload)

    def decode(
        self,
        token: str | bytes,
        verify_jwks: KeySet | None,
        decrypt_jwks: KeySet | None,
        hint: Algs,
        into: type[BaseModel] | Callable[[Any], T] | None = None,
    ) -> Any:
        """Decode a token under the configured allow-lists; see ``decoder.decode``."""
        self._logger.debug("codec_decode", hint_sig=hint.sig or None, hint_enc=hint.encode or None)
        return decode(
            token,
            verify_jwks,
            decrypt_jwks,
            hint,
            into,
            allowed_signature_algorithms=self.config.allowed_signature_algorithms,
            allowed_key_algorithms=self.config.allowed_key_algorithms,
            allowed_content_encryptions=self.config.allowed_content_encryptions,
        )

    def validate(self, claims: Claims, *rules: Expect) -> None:
        """Validate claims, applying the configured leeway time rule last."""
        validate_claims(claims, *rules, expect_time(self.config.default_leeway_seconds))


class _CheckedKeySource:
    """Wraps a key source and vets its algorithms before use."""

    def __init__(self, source: KeySource, check: Callable[[Algs], None]) -> None:
        self._source = source
        self._check = check

    def resolve(self) -> Resolution | None:
        resolution = self._source.resolve()
        if resolution is not None:
            self._check(resolution.algs)
        return resolution

    def __repr__(self) -> str:
        return repr(self._source)
