"""Configuration for Auth Platform JWX.

Uses Pydantic v2 frozen models with validated algorithm allow-lists and
sensible defaults.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import InvalidConfigError
from .jwa import CONTENT_ENCRYPTIONS, KEY_MANAGEMENT_ALGORITHMS, SIGNATURE_ALGORITHMS

DEFAULT_SIGNATURE_ALGORITHMS = [
    "ES256",
    "ES384",
    "ES512",
    "RS256",
    "RS384",
    "RS512",
    "PS256",
    "PS384",
    "PS512",
    "EdDSA",
    "HS256",
    "HS384",
    "HS512",
]


class TelemetryConfig(BaseModel):
    """OpenTelemetry and structlog configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "auth-platform-jwx"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard level name."""
        if v.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unsupported log level: {v}"
            raise ValueError(msg)
        return v.upper()


class JWXConfig(BaseModel):
    """Main configuration for the token codec."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    allowed_signature_algorithms: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SIGNATURE_ALGORITHMS)
    )
    allowed_key_algorithms: list[str] = Field(
        default_factory=lambda: sorted(
            a for a in KEY_MANAGEMENT_ALGORITHMS if not a.startswith("PBES2")
        )
    )
    allowed_content_encryptions: list[str] = Field(
        default_factory=lambda: sorted(CONTENT_ENCRYPTIONS)
    )
    default_leeway_seconds: Annotated[float, Field(ge=0, le=3600)] = 0.0

    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @field_validator("allowed_signature_algorithms")
    @classmethod
    def validate_signature_algorithms(cls, v: list[str]) -> list[str]:
        """Validate every entry is a JWA signature algorithm."""
        unknown = [a for a in v if a not in SIGNATURE_ALGORITHMS]
        if unknown:
            msg = f"Unsupported signature algorithms: {unknown}"
            raise ValueError(msg)
        return v

    @field_validator("allowed_key_algorithms")
    @classmethod
    def validate_key_algorithms(cls, v: list[str]) -> list[str]:
        """Validate every entry is a JWA key management algorithm."""
        unknown = [a for a in v if a not in KEY_MANAGEMENT_ALGORITHMS]
        if unknown:
            msg = f"Unsupported key management algorithms: {unknown}"
            raise ValueError(msg)
        return v

    @field_validator("allowed_content_encryptions")
    @classmethod
    def validate_content_encryptions(cls, v: list[str]) -> list[str]:
        """Validate every entry is a JWA content encryption algorithm."""
        unknown = [a for a in v if a not in CONTENT_ENCRYPTIONS]
        if unknown:
            msg = f"Unsupported content encryptions: {unknown}"
            raise ValueError(msg)
        return v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Self:
        """Build a config from a plain mapping, e.g. one parsed from a file.

        Raises:
            InvalidConfigError: If any field fails validation.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise InvalidConfigError(f"Invalid configuration: {first['msg']}", field=field) from e

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)
