"""JWT claims access.

``Claims.get(name)`` returns ``(value, present)``. For the standard claim names
the value is coerced to a fixed type so that the same ``expect`` rules work
over a free-form map and a typed model alike:

    jti, sub, iss: str
    aud: list[str]
    exp, nbf, iat: timezone-aware UTC datetime

A standard claim whose value cannot be coerced, or is null, is reported as not
present. Any other claim is returned as decoded.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, field_validator

CLAIM_JTI = "jti"
CLAIM_SUB = "sub"
CLAIM_AUD = "aud"
CLAIM_EXP = "exp"
CLAIM_NBF = "nbf"
CLAIM_IAT = "iat"
CLAIM_ISS = "iss"

_STRING_CLAIMS = frozenset({CLAIM_JTI, CLAIM_SUB, CLAIM_ISS})
_TIME_CLAIMS = frozenset({CLAIM_EXP, CLAIM_NBF, CLAIM_IAT})

_ABSENT: tuple[Any, bool] = (None, False)


@runtime_checkable
class Claims(Protocol):
    """Read-only, name-indexed view over a decoded payload."""

    def get(self, name: str) -> tuple[Any, bool]: ...


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    try:
        return datetime.fromtimestamp(value, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _to_audience(value: Any) -> list[str] | None:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list | tuple) and all(isinstance(each, str) for each in value):
        return list(value)
    return None


def coerce_claim(name: str, value: Any) -> tuple[Any, bool]:
    """Coerce a raw claim value according to its name.

    Returns ``(None, False)`` for null values and failed coercions of standard
    claims.
    """
    if value is None:
        return _ABSENT
    if name in _STRING_CLAIMS:
        return (value, True) if isinstance(value, str) else _ABSENT
    if name == CLAIM_AUD:
        aud = _to_audience(value)
        return (aud, True) if aud is not None else _ABSENT
    if name in _TIME_CLAIMS:
        ts = _to_datetime(value)
        return (ts, True) if ts is not None else _ABSENT
    return value, True


class MapClaims:
    """Claims backed by a plain mapping, for dynamic payloads."""

    __slots__ = ("_claims",)

    def __init__(self, claims: Mapping[str, Any] | None = None) -> None:
        self._claims: dict[str, Any] = dict(claims or {})

    @classmethod
    def from_json(cls, data: str | bytes) -> MapClaims:
        """Parse claims from a JSON object."""
        parsed = json.loads(data)
        if not isinstance(parsed, dict):
            msg = "claims must be a JSON object"
            raise ValueError(msg)
        return cls(parsed)

    def get(self, name: str) -> tuple[Any, bool]:
        if name not in self._claims:
            return _ABSENT
        return coerce_claim(name, self._claims[name])

    def raw(self, name: str, default: Any = None) -> Any:
        """Return a claim without coercion."""
        return self._claims.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self._claims[name]

    def __contains__(self, name: object) -> bool:
        return name in self._claims

    def __iter__(self) -> Iterator[str]:
        return iter(self._claims)

    def __len__(self) -> int:
        return len(self._claims)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MapClaims):
            return self._claims == other._claims
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow copy of the claims."""
        return dict(self._claims)

    def to_json(self) -> str:
        """Serialize claims as a JSON object."""
        return json.dumps(self._claims, separators=(",", ":"))

    def __repr__(self) -> str:
        return f"MapClaims({self._claims!r})"


class StandardClaims(BaseModel):
    """Registered JWT claims (RFC 7519 section 4.1) as a typed model.

    Timestamps are kept as seconds since the epoch, as on the wire; ``get``
    returns them as datetimes. Unknown claims are kept as extras.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    jti: str | None = Field(default=None, description="JWT ID")
    iss: str | None = Field(default=None, description="Issuer")
    sub: str | None = Field(default=None, description="Subject identifier")
    aud: list[str] | None = Field(default=None, description="Audience")
    exp: int | float | None = Field(default=None, description="Expiration time")
    nbf: int | float | None = Field(default=None, description="Not before time")
    iat: int | float | None = Field(default=None, description="Issued at time")

    @field_validator("aud", mode="before")
    @classmethod
    def validate_aud(cls, v: Any) -> Any:
        """Accept a single audience string."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("exp", "nbf", "iat", mode="before")
    @classmethod
    def validate_timestamp(cls, v: Any) -> Any:
        """Treat anything but a JSON number as unset, as ``MapClaims`` does."""
        if isinstance(v, bool) or not isinstance(v, int | float):
            return None
        return v

    def get(self, name: str) -> tuple[Any, bool]:
        """Return a claim by name, coerced for standard names."""
        if name in type(self).model_fields:
            return coerce_claim(name, getattr(self, name))
        extra = self.model_extra or {}
        if name not in extra:
            return _ABSENT
        return coerce_claim(name, extra[name])

    @property
    def expires_at(self) -> datetime | None:
        """Get expiration as datetime."""
        return _to_datetime(self.exp)

    @property
    def issued_at(self) -> datetime | None:
        """Get issued at as datetime."""
        return _to_datetime(self.iat)

    @property
    def not_before(self) -> datetime | None:
        """Get not before as datetime."""
        return _to_datetime(self.nbf)


class AccessTokenClaims(StandardClaims):
    """Payload of a JWT-encoded access token."""

    client: str | None = None
    scope: str | None = None
    userinfo: dict[str, Any] | None = None

    @property
    def scopes(self) -> list[str]:
        """Get scopes as list."""
        if self.scope is None:
            return []
        return self.scope.split()
