"""Key sources for the encoder.

A key source is evaluated lazily at encode time and yields the key and the
algorithm triple for one stage (signing or encryption), ``None`` if no key is
available, or a resolution with a none ``Algs`` to say "skip this stage".
"""

from __future__ import annotations

from typing import NamedTuple, Protocol, runtime_checkable

from .jwa import NO_ALGS, Algs, is_none
from .jwk import USE_ENC, USE_SIG, Key
from .jwks import KeySet


class Resolution(NamedTuple):
    """Outcome of a successful key source evaluation."""

    key: Key | None
    algs: Algs


SKIP = Resolution(None, NO_ALGS)


@runtime_checkable
class KeySource(Protocol):
    """Produces a key and its algorithms, or ``None`` when unavailable."""

    def resolve(self) -> Resolution | None: ...


class SkipKeySource:
    """Always succeeds with a none ``Algs``; the stage is skipped."""

    def resolve(self) -> Resolution:
        return SKIP

    def __repr__(self) -> str:
        return "SkipKeySource()"


SKIP_KEY_SOURCE = SkipKeySource()


class SignatureKeyById:
    """Signing key looked up by exact id; algorithm is the key's own."""

    def __init__(self, kid: str, jwks: KeySet) -> None:
        self.kid = kid
        self.jwks = jwks

    def resolve(self) -> Resolution | None:
        key = self.jwks.key_by_id(self.kid)
        if key is None or key.use != USE_SIG or is_none(key.alg):
            return None
        return Resolution(key, Algs(sig=key.alg))

    def __repr__(self) -> str:
        return f"SignatureKeyById(kid={self.kid!r})"


class EncryptionKeyById:
    """Encryption key looked up by exact id.

    The key management algorithm is the key's own; the content encryption must
    be supplied since a JWK does not declare one.
    A key without a declared algorithm, or a none content encryption, is
    unavailable rather than a skipped stage.
    """

    def __init__(self, kid: str, encode_alg: str, jwks: KeySet) -> None:
        self.kid = kid
        self.encode_alg = encode_alg
        self.jwks = jwks

    def resolve(self) -> Resolution | None:
        if is_none(self.encode_alg):
            return None
        key = self.jwks.key_by_id(self.kid)
        if key is None or key.use != USE_ENC or is_none(key.alg):
            return None
        return Resolution(key, Algs(encrypt=key.alg, encode=self.encode_alg))

    def __repr__(self) -> str:
        return f"EncryptionKeyById(kid={self.kid!r}, enc={self.encode_alg!r})"


class SignatureKeyByAlg:
    """Signing key selected by algorithm with time-based rotation."""

    def __init__(self, alg: str, jwks: KeySet) -> None:
        self.alg = alg
        self.jwks = jwks

    def resolve(self) -> Resolution | None:
        key = self.jwks.key_for_signing(self.alg)
        if key is None:
            return None
        return Resolution(key, Algs(sig=self.alg))

    def __repr__(self) -> str:
        return f"SignatureKeyByAlg(alg={self.alg!r})"


class EncryptionKeyByAlg:
    """Encryption key selected by key management algorithm with time-based rotation."""

    def __init__(self, encrypt_alg: str, encode_alg: str, jwks: KeySet) -> None:
        self.encrypt_alg = encrypt_alg
        self.encode_alg = encode_alg
        self.jwks = jwks

    def resolve(self) -> Resolution | None:
        key = self.jwks.key_for_encryption(self.encrypt_alg)
        if key is None:
            return None
        return Resolution(key, Algs(encrypt=self.encrypt_alg, encode=self.encode_alg))

    def __repr__(self) -> str:
        return f"EncryptionKeyByAlg(alg={self.encrypt_alg!r}, enc={self.encode_alg!r})"


def signature_key_by_alg(alg: str, jwks: KeySet) -> KeySource:
    """Key source for signing with ``alg``; a none ``alg`` disables signing."""
    if is_none(alg):
        return SKIP_KEY_SOURCE
    return SignatureKeyByAlg(alg, jwks)


def encryption_key_by_alg(encrypt_alg: str, encode_alg: str, jwks: KeySet) -> KeySource:
    """Key source for encryption; a none ``alg`` or ``enc`` disables encryption."""
    if is_none(encrypt_alg) or is_none(encode_alg):
        return SKIP_KEY_SOURCE
    return EncryptionKeyByAlg(encrypt_alg, encode_alg, jwks)
