"""Auth Platform JWX: sign-then-encrypt JWT encoding, decoding and claim validation."""

from .claims import (
    CLAIM_AUD,
    CLAIM_EXP,
    CLAIM_IAT,
    CLAIM_ISS,
    CLAIM_JTI,
    CLAIM_NBF,
    CLAIM_SUB,
    AccessTokenClaims,
    Claims,
    MapClaims,
    StandardClaims,
)
from .codec import JWXCodec
from .config import JWXConfig, TelemetryConfig
from .decoder import decode
from .encoder import encode, encode_to_string
from .errors import (
    AbsentJtiError,
    ClaimValidationError,
    CryptoOperationError,
    DecryptionError,
    EncryptionError,
    ErrorCode,
    InsufficientScopeError,
    InvalidAlgorithmError,
    InvalidAudError,
    InvalidConfigError,
    InvalidIssError,
    InvalidKeyError,
    InvalidSubError,
    IssuedInFutureError,
    JWXError,
    KeyResolutionError,
    MalformedPayloadError,
    MalformedTokenError,
    NoDecryptionKeyError,
    NoEncryptionKeyError,
    NoSigningKeyError,
    NotYetValidError,
    NoVerificationKeyError,
    SignatureVerificationError,
    SigningError,
    TokenExpiredError,
    UnsupportedAlgorithmError,
)
from .expect import (
    Expect,
    expect_aud,
    expect_iss,
    expect_jti,
    expect_scope,
    expect_sub,
    expect_time,
    validate_claims,
)
from .jwa import (
    NO_ALGS,
    Algs,
    ContentEncryption,
    KeyManagementAlgorithm,
    SignatureAlgorithm,
    is_none,
)
from .jwk import USE_ENC, USE_SIG, Key
from .jwks import KeySet, read_key_set
from .keysource import (
    SKIP_KEY_SOURCE,
    EncryptionKeyById,
    KeySource,
    Resolution,
    SignatureKeyById,
    encryption_key_by_alg,
    signature_key_by_alg,
)

__all__ = [
    # Codec
    "encode",
    "encode_to_string",
    "decode",
    "JWXCodec",
    # Config
    "JWXConfig",
    "TelemetryConfig",
    # Algorithms
    "Algs",
    "NO_ALGS",
    "is_none",
    "SignatureAlgorithm",
    "KeyManagementAlgorithm",
    "ContentEncryption",
    # Keys
    "Key",
    "KeySet",
    "read_key_set",
    "USE_SIG",
    "USE_ENC",
    "KeySource",
    "Resolution",
    "SignatureKeyById",
    "EncryptionKeyById",
    "signature_key_by_alg",
    "encryption_key_by_alg",
    "SKIP_KEY_SOURCE",
    # Claims
    "Claims",
    "MapClaims",
    "StandardClaims",
    "AccessTokenClaims",
    "CLAIM_JTI",
    "CLAIM_SUB",
    "CLAIM_AUD",
    "CLAIM_EXP",
    "CLAIM_NBF",
    "CLAIM_IAT",
    "CLAIM_ISS",
    "Expect",
    "validate_claims",
    "expect_jti",
    "expect_sub",
    "expect_aud",
    "expect_iss",
    "expect_scope",
    "expect_time",
    # Errors
    "ErrorCode",
    "JWXError",
    "KeyResolutionError",
    "NoSigningKeyError",
    "NoEncryptionKeyError",
    "NoVerificationKeyError",
    "NoDecryptionKeyError",
    "MalformedTokenError",
    "MalformedPayloadError",
    "CryptoOperationError",
    "SignatureVerificationError",
    "SigningError",
    "DecryptionError",
    "EncryptionError",
    "ClaimValidationError",
    "AbsentJtiError",
    "InvalidSubError",
    "InvalidAudError",
    "InvalidIssError",
    "TokenExpiredError",
    "IssuedInFutureError",
    "NotYetValidError",
    "InsufficientScopeError",
    "InvalidKeyError",
    "InvalidAlgorithmError",
    "UnsupportedAlgorithmError",
    "InvalidConfigError",
]

__version__ = "0.1.0"
