"""Error classes for Auth Platform JWX.

Implements a structured error hierarchy with error codes so callers can tell
key-resolution, malformed-token, cryptographic and claim-validation failures
apart without string matching.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for Auth Platform JWX."""

    # Key resolution errors (1xxx)
    NO_SIGNING_KEY = "KEY_1001"
    NO_ENCRYPTION_KEY = "KEY_1002"
    NO_VERIFICATION_KEY = "KEY_1003"
    NO_DECRYPTION_KEY = "KEY_1004"
    INVALID_KEY = "KEY_1005"

    # Token format errors (2xxx)
    MALFORMED_TOKEN = "TOK_2001"
    MALFORMED_PAYLOAD = "TOK_2002"

    # Cryptographic operation errors (3xxx)
    SIGNATURE_INVALID = "CRY_3001"
    DECRYPTION_FAILED = "CRY_3002"
    ENCRYPTION_FAILED = "CRY_3003"
    SIGNING_FAILED = "CRY_3004"

    # Claim validation errors (4xxx)
    CLAIMS_INVALID = "CLM_4000"
    ABSENT_JTI = "CLM_4001"
    INVALID_SUB = "CLM_4002"
    INVALID_AUD = "CLM_4003"
    INVALID_ISS = "CLM_4004"
    TOKEN_EXPIRED = "CLM_4005"
    ISSUED_IN_FUTURE = "CLM_4006"
    NOT_YET_VALID = "CLM_4007"
    INSUFFICIENT_SCOPE = "CLM_4008"

    # Algorithm and configuration errors (5xxx)
    INVALID_SIGNATURE_ALG = "ALG_5001"
    INVALID_ENCRYPTION_ALG = "ALG_5002"
    INVALID_ENCRYPTION_ENC = "ALG_5003"
    UNSUPPORTED_ALGORITHM = "ALG_5004"
    INVALID_CONFIG = "ALG_5005"


class JWXError(Exception):
    """Base error for Auth Platform JWX with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


# Key resolution


class KeyResolutionError(JWXError):
    """No key could be resolved for a signing or encryption stage."""

    default_message = "failed to resolve key"
    default_code = ErrorCode.INVALID_KEY

    def __init__(
        self,
        message: str | None = None,
        *,
        kid: str | None = None,
        alg: str | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if kid:
            details["kid"] = kid
        if alg:
            details["alg"] = alg
        super().__init__(
            message or self.default_message,
            self.default_code,
            details=details or None,
        )
        self.kid = kid
        self.alg = alg


class NoSigningKeyError(KeyResolutionError):
    """The signing key source reported no key."""

    default_message = "failed to resolve signing key"
    default_code = ErrorCode.NO_SIGNING_KEY


class NoEncryptionKeyError(KeyResolutionError):
    """The encryption key source reported no key."""

    default_message = "failed to resolve encryption key"
    default_code = ErrorCode.NO_ENCRYPTION_KEY


class NoVerificationKeyError(KeyResolutionError):
    """No key in the verification set matches the signed token header."""

    default_message = "failed to resolve key to verify signature"
    default_code = ErrorCode.NO_VERIFICATION_KEY


class NoDecryptionKeyError(KeyResolutionError):
    """No key in the decryption set matches the encrypted token header."""

    default_message = "failed to resolve decryption key"
    default_code = ErrorCode.NO_DECRYPTION_KEY


# Token format


class MalformedTokenError(JWXError):
    """Token cannot be parsed as compact JWS/JWE, or carries other than one signature."""

    def __init__(
        self,
        message: str = "invalid jwt/jwe token",
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.MALFORMED_TOKEN, details=details)


class MalformedPayloadError(JWXError):
    """Recovered payload is not valid JSON or does not fit the destination."""

    def __init__(self, message: str = "token payload is not valid JSON") -> None:
        super().__init__(message, ErrorCode.MALFORMED_PAYLOAD)


# Cryptographic operations


class CryptoOperationError(JWXError):
    """A cryptographic primitive failed."""


class SignatureVerificationError(CryptoOperationError):
    """Signature did not verify under the resolved key."""

    def __init__(
        self,
        message: str = "signature verification failed",
        *,
        kid: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.SIGNATURE_INVALID,
            details={"kid": kid} if kid else None,
        )


class SigningError(CryptoOperationError):
    """Payload could not be signed with the resolved key."""

    def __init__(self, message: str = "signing failed") -> None:
        super().__init__(message, ErrorCode.SIGNING_FAILED)


class DecryptionError(CryptoOperationError):
    """Wrong key, tampered ciphertext or corrupted padding."""

    def __init__(
        self,
        message: str = "decryption failed",
        *,
        kid: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.DECRYPTION_FAILED,
            details={"kid": kid} if kid else None,
        )


class EncryptionError(CryptoOperationError):
    """Payload could not be encrypted with the resolved key."""

    def __init__(self, message: str = "encryption failed") -> None:
        super().__init__(message, ErrorCode.ENCRYPTION_FAILED)


# Claim validation


class ClaimValidationError(JWXError):
    """A decoded claim set violated an Expect rule."""

    default_message = "claims are invalid"
    default_code = ErrorCode.CLAIMS_INVALID
    claim: str = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or self.default_message,
            self.default_code,
            details={"claim": self.claim},
        )


class AbsentJtiError(ClaimValidationError):
    default_message = "jti claim is absent"
    default_code = ErrorCode.ABSENT_JTI
    claim = "jti"


class InvalidSubError(ClaimValidationError):
    default_message = "sub claim is invalid"
    default_code = ErrorCode.INVALID_SUB
    claim = "sub"


class InvalidAudError(ClaimValidationError):
    default_message = "aud claim is invalid"
    default_code = ErrorCode.INVALID_AUD
    claim = "aud"


class InvalidIssError(ClaimValidationError):
    default_message = "iss claim is invalid"
    default_code = ErrorCode.INVALID_ISS
    claim = "iss"


class TokenExpiredError(ClaimValidationError):
    default_message = "exp claim is invalid because token has expired"
    default_code = ErrorCode.TOKEN_EXPIRED
    claim = "exp"


class IssuedInFutureError(ClaimValidationError):
    default_message = "iat claim is invalid because token is issued in future"
    default_code = ErrorCode.ISSUED_IN_FUTURE
    claim = "iat"


class NotYetValidError(ClaimValidationError):
    default_message = "nbf claim is invalid because token is used too soon"
    default_code = ErrorCode.NOT_YET_VALID
    claim = "nbf"


class InsufficientScopeError(ClaimValidationError):
    default_message = "scope claim does not grant the required scopes"
    default_code = ErrorCode.INSUFFICIENT_SCOPE
    claim = "scope"


# Keys, algorithms, configuration


class InvalidKeyError(JWXError):
    """Key material or key set document cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        kid: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_KEY,
            details={"kid": kid} if kid else None,
        )


class InvalidAlgorithmError(JWXError):
    """Algorithm name is not a member of the expected JWA vocabulary."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INVALID_SIGNATURE_ALG,
        *,
        alg: str | None = None,
    ) -> None:
        super().__init__(message, code, details={"alg": alg} if alg is not None else None)
        self.alg = alg


class UnsupportedAlgorithmError(JWXError):
    """Algorithm is valid JWA but this package does not implement it."""

    def __init__(self, alg: str) -> None:
        super().__init__(
            f"unsupported algorithm: {alg}",
            ErrorCode.UNSUPPORTED_ALGORITHM,
            details={"alg": alg},
        )
        self.alg = alg


class InvalidConfigError(JWXError):
    """Invalid package configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )
