"""Pydantic models for JSON Web Key documents.

Frozen models validate the shape of externally supplied key material before it
is turned into cryptographic keys.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JWKDocument(BaseModel):
    """JSON Web Key representation (RFC 7517 section 4)."""

    model_config = ConfigDict(frozen=True, extra="allow")

    kty: str = Field(..., min_length=1, description="Key type")
    kid: str | None = Field(default=None, description="Key ID")
    use: str | None = Field(default=None, description="Key use")
    alg: str | None = Field(default=None, description="Algorithm")

    # RSA keys
    n: str | None = None
    e: str | None = None

    # EC and OKP keys
    crv: str | None = None
    x: str | None = None
    y: str | None = None

    # Private exponent / private scalar
    d: str | None = None

    # Symmetric keys
    k: str | None = None

    @field_validator("kty")
    @classmethod
    def validate_kty(cls, v: str) -> str:
        """Validate key type is one of the registered values."""
        if v not in {"RSA", "EC", "OKP", "oct"}:
            msg = f"Unsupported key type: {v}"
            raise ValueError(msg)
        return v

    def to_jwk_dict(self) -> dict[str, Any]:
        """Return the key as a plain JWK dictionary, without unset members."""
        return self.model_dump(exclude_none=True)


class JWKSDocument(BaseModel):
    """JSON Web Key Set."""

    model_config = ConfigDict(frozen=True, extra="allow")

    keys: list[JWKDocument] = Field(default_factory=list)
