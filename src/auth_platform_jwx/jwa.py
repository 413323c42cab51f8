"""JSON Web Algorithms (RFC 7518) vocabulary.

Closed enumerations of the signature, key management and content encryption
algorithm names, the negotiated ``Algs`` triple, and validators for
configuration-supplied algorithm strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .errors import ErrorCode, InvalidAlgorithmError

NONE = "none"


class SignatureAlgorithm(StrEnum):
    """JWS signature algorithms."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"
    RS256 = "RS256"
    RS384 = "RS384"
    RS512 = "RS512"
    PS256 = "PS256"
    PS384 = "PS384"
    PS512 = "PS512"
    ES256 = "ES256"
    ES384 = "ES384"
    ES512 = "ES512"
    EDDSA = "EdDSA"


class KeyManagementAlgorithm(StrEnum):
    """JWE key management algorithms.

    Also known as the "encryption algorithm" in OpenID Connect metadata.
    """

    RSA1_5 = "RSA1_5"
    RSA_OAEP = "RSA-OAEP"
    RSA_OAEP_256 = "RSA-OAEP-256"
    A128KW = "A128KW"
    A192KW = "A192KW"
    A256KW = "A256KW"
    DIRECT = "dir"
    ECDH_ES = "ECDH-ES"
    ECDH_ES_A128KW = "ECDH-ES+A128KW"
    ECDH_ES_A192KW = "ECDH-ES+A192KW"
    ECDH_ES_A256KW = "ECDH-ES+A256KW"
    A128GCMKW = "A128GCMKW"
    A192GCMKW = "A192GCMKW"
    A256GCMKW = "A256GCMKW"
    PBES2_HS256_A128KW = "PBES2-HS256+A128KW"
    PBES2_HS384_A192KW = "PBES2-HS384+A192KW"
    PBES2_HS512_A256KW = "PBES2-HS512+A256KW"


class ContentEncryption(StrEnum):
    """JWE content encryption algorithms.

    Also known as the "encryption encoding" in OpenID Connect metadata.
    """

    A128CBC_HS256 = "A128CBC-HS256"
    A192CBC_HS384 = "A192CBC-HS384"
    A256CBC_HS512 = "A256CBC-HS512"
    A128GCM = "A128GCM"
    A192GCM = "A192GCM"
    A256GCM = "A256GCM"


SIGNATURE_ALGORITHMS: frozenset[str] = frozenset(a.value for a in SignatureAlgorithm)
KEY_MANAGEMENT_ALGORITHMS: frozenset[str] = frozenset(a.value for a in KeyManagementAlgorithm)
CONTENT_ENCRYPTIONS: frozenset[str] = frozenset(a.value for a in ContentEncryption)


def is_none(alg: str | None) -> bool:
    """Return True if the algorithm is empty or "none".

    Algorithms that are none are treated as absent: the stage they drive is skipped.
    """
    return not alg or alg == NONE


@dataclass(frozen=True)
class Algs:
    """Negotiated algorithm triple."""

    sig: str = ""
    """Signature algorithm."""
    encrypt: str = ""
    """Key management algorithm."""
    encode: str = ""
    """Content encryption algorithm."""

    @property
    def signs(self) -> bool:
        """Whether the signature stage applies."""
        return not is_none(self.sig)

    @property
    def encrypts(self) -> bool:
        """Whether the encryption stage applies (needs both alg and enc)."""
        return not is_none(self.encrypt) and not is_none(self.encode)


NO_ALGS = Algs()


def valid_signature_alg(alg: str) -> None:
    """Reject anything but a JWA signature algorithm, including empty and "none"."""
    if alg not in SIGNATURE_ALGORITHMS:
        raise InvalidAlgorithmError(
            "signature algorithm is invalid",
            ErrorCode.INVALID_SIGNATURE_ALG,
            alg=alg,
        )


def valid_optional_signature_alg(alg: str | None) -> None:
    """Like ``valid_signature_alg`` but accepts empty and "none"."""
    if is_none(alg):
        return
    valid_signature_alg(alg)  # type: ignore[arg-type]


def valid_encryption_alg(alg: str) -> None:
    """Reject anything but a JWA key management algorithm."""
    if alg not in KEY_MANAGEMENT_ALGORITHMS:
        raise InvalidAlgorithmError(
            "encryption algorithm is invalid",
            ErrorCode.INVALID_ENCRYPTION_ALG,
            alg=alg,
        )


def valid_optional_encryption_alg(alg: str | None) -> None:
    """Like ``valid_encryption_alg`` but accepts empty and "none"."""
    if is_none(alg):
        return
    valid_encryption_alg(alg)  # type: ignore[arg-type]


def valid_encryption_enc(enc: str) -> None:
    """Reject anything but a JWA content encryption algorithm."""
    if enc not in CONTENT_ENCRYPTIONS:
        raise InvalidAlgorithmError(
            "encryption encoding is invalid",
            ErrorCode.INVALID_ENCRYPTION_ENC,
            alg=enc,
        )


def valid_optional_encryption_enc(enc: str | None) -> None:
    """Like ``valid_encryption_enc`` but accepts empty and "none"."""
    if is_none(enc):
        return
    valid_encryption_enc(enc)  # type: ignore[arg-type]
