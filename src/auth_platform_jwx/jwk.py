"""Single JSON Web Key wrapper.

A ``Key`` pairs one cryptographic key (an HMAC secret or a ``cryptography``
asymmetric key object) with its identifier, declared use and declared algorithm.
Keys are immutable; deriving the public half produces a new ``Key``.
"""

from __future__ import annotations

from typing import Any

from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa, x448, x25519
from jwt import algorithms
from jwt.exceptions import InvalidKeyError as PyJWTInvalidKeyError
from pydantic import ValidationError as PydanticValidationError

from .errors import InvalidKeyError
from .models import JWKDocument

USE_SIG = "sig"
USE_ENC = "enc"

_PUBLIC_TYPES = (
    rsa.RSAPublicKey,
    ec.EllipticCurvePublicKey,
    ed25519.Ed25519PublicKey,
    ed448.Ed448PublicKey,
    x25519.X25519PublicKey,
    x448.X448PublicKey,
)

_PRIVATE_TYPES = (
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
    x25519.X25519PrivateKey,
    x448.X448PrivateKey,
)

_OKP_TYPES = (
    ed25519.Ed25519PrivateKey,
    ed25519.Ed25519PublicKey,
    ed448.Ed448PrivateKey,
    ed448.Ed448PublicKey,
    x25519.X25519PrivateKey,
    x25519.X25519PublicKey,
    x448.X448PrivateKey,
    x448.X448PublicKey,
)


class Key:
    """One cryptographic key plus its id, use and algorithm."""

    __slots__ = ("_raw", "_kid", "_use", "_alg")

    def __init__(
        self,
        raw: Any,
        *,
        kid: str | None = None,
        use: str | None = None,
        alg: str | None = None,
    ) -> None:
        """Initialize key.

        Args:
            raw: Symmetric secret bytes, or a ``cryptography`` key object.
            kid: Key ID (may be empty).
            use: Declared use, ``"sig"`` or ``"enc"``.
            alg: Declared JWA algorithm.
        """
        if isinstance(raw, (bytearray, memoryview)):
            raw = bytes(raw)
        self._raw = raw
        self._kid = kid or ""
        self._use = use or ""
        self._alg = alg or ""

    @property
    def id(self) -> str:
        """Key ID."""
        return self._kid

    @property
    def use(self) -> str:
        """Declared use of the key."""
        return self._use

    @property
    def alg(self) -> str:
        """Declared algorithm of the key."""
        return self._alg

    @property
    def raw(self) -> Any:
        """Underlying cryptographic key."""
        return self._raw

    @property
    def is_symmetric(self) -> bool:
        """True if the material is a raw secret (i.e. HS256, A256KW, dir)."""
        return isinstance(self._raw, bytes)

    @property
    def is_public(self) -> bool:
        """True if the asymmetric material holds only the public portion.

        Meaningless for symmetric keys.
        """
        return isinstance(self._raw, _PUBLIC_TYPES)

    @property
    def kty(self) -> str:
        """JWK key type derived from the material."""
        if self.is_symmetric:
            return "oct"
        if isinstance(self._raw, (rsa.RSAPrivateKey, rsa.RSAPublicKey)):
            return "RSA"
        if isinstance(self._raw, (ec.EllipticCurvePrivateKey, ec.EllipticCurvePublicKey)):
            return "EC"
        if isinstance(self._raw, _OKP_TYPES):
            return "OKP"
        return type(self._raw).__name__

    def to_public(self) -> Key:
        """Return a Key holding only the public portion of this key.

        Public and symmetric keys are returned as-is.

        Raises:
            TypeError: If the material has no public derivation.
        """
        if self.is_public or self.is_symmetric:
            return self
        if not isinstance(self._raw, _PRIVATE_TYPES):
            msg = f"public key conversion is not supported for {type(self._raw).__name__}"
            raise TypeError(msg)
        return Key(self._raw.public_key(), kid=self._kid, use=self._use, alg=self._alg)

    @classmethod
    def from_jwk(cls, jwk: dict[str, Any] | JWKDocument) -> Key:
        """Create a Key from a JWK dictionary.

        Raises:
            InvalidKeyError: If the JWK is malformed or of an unsupported type.
        """
        try:
            doc = jwk if isinstance(jwk, JWKDocument) else JWKDocument.model_validate(jwk)
        except PydanticValidationError as e:
            raise InvalidKeyError(f"Invalid JWK: {e}") from e

        data = doc.to_jwk_dict()
        try:
            if doc.kty == "RSA":
                raw = algorithms.RSAAlgorithm.from_jwk(data)
            elif doc.kty == "EC":
                raw = algorithms.ECAlgorithm.from_jwk(data)
            elif doc.kty == "OKP":
                raw = algorithms.OKPAlgorithm.from_jwk(data)
            else:
                raw = algorithms.HMACAlgorithm.from_jwk(data)
        except (PyJWTInvalidKeyError, ValueError, KeyError, TypeError) as e:
            raise InvalidKeyError(f"Invalid {doc.kty} key: {e}", kid=doc.kid) from e

        return cls(raw, kid=doc.kid, use=doc.use, alg=doc.alg)

    def to_jwk(self, *, include_private: bool = True) -> dict[str, Any]:
        """Serialize the key as a JWK dictionary.

        Args:
            include_private: When False, only the public portion is emitted.
                Symmetric keys are always emitted in full.
        """
        key = self if include_private else self.to_public()
        raw = key.raw
        try:
            if key.is_symmetric:
                data = algorithms.HMACAlgorithm.to_jwk(raw, as_dict=True)
            elif key.kty == "RSA":
                data = algorithms.RSAAlgorithm.to_jwk(raw, as_dict=True)
            elif key.kty == "EC":
                data = algorithms.ECAlgorithm.to_jwk(raw, as_dict=True)
            elif key.kty == "OKP":
                data = algorithms.OKPAlgorithm.to_jwk(raw, as_dict=True)
            else:
                raise InvalidKeyError(f"Cannot serialize key type {key.kty}", kid=key.id)
        except PyJWTInvalidKeyError as e:
            raise InvalidKeyError(f"Cannot serialize {key.kty} key: {e}", kid=key.id) from e

        # Declared use supersedes PyJWT's key_ops hint.
        data.pop("key_ops", None)
        if key.id:
            data["kid"] = key.id
        if key.use:
            data["use"] = key.use
        if key.alg:
            data["alg"] = key.alg
        return data

    def __repr__(self) -> str:
        return f"Key(kid={self._kid!r}, kty={self.kty!r}, use={self._use!r}, alg={self._alg!r})"
