"""Unit tests for claims accessors."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from auth_platform_jwx.claims import (
    CLAIM_AUD,
    CLAIM_EXP,
    CLAIM_IAT,
    CLAIM_JTI,
    CLAIM_SUB,
    AccessTokenClaims,
    Claims,
    MapClaims,
    StandardClaims,
)
from auth_platform_jwx.expect import expect_time

EPOCH_2023 = 1_700_000_000


class TestMapClaims:
    """Tests for the map-backed claims."""

    def test_absent(self) -> None:
        """Unknown names are not present."""
        assert MapClaims({}).get(CLAIM_JTI) == (None, False)

    def test_null_standard_claim_is_absent(self) -> None:
        """A null standard claim is treated as absent."""
        assert MapClaims({"sub": None}).get(CLAIM_SUB) == (None, False)

    @pytest.mark.parametrize("value", [123, ["a"], {"a": 1}, True])
    def test_string_claims_reject_non_strings(self, value: object) -> None:
        """jti and sub must be strings."""
        claims = MapClaims({"jti": value, "sub": value})

        assert claims.get(CLAIM_JTI) == (None, False)
        assert claims.get(CLAIM_SUB) == (None, False)

    def test_audience_string_becomes_list(self) -> None:
        """A bare audience string is a one-element list."""
        assert MapClaims({"aud": "api"}).get(CLAIM_AUD) == (["api"], True)

    def test_audience_list(self) -> None:
        """An audience list of strings passes through."""
        assert MapClaims({"aud": ["a", "b"]}).get(CLAIM_AUD) == (["a", "b"], True)

    def test_audience_mixed_list_rejected(self) -> None:
        """Non-string audience members make the claim invalid."""
        assert MapClaims({"aud": ["a", 1]}).get(CLAIM_AUD) == (None, False)

    @pytest.mark.parametrize("value", [EPOCH_2023, float(EPOCH_2023)])
    def test_time_claims_become_datetimes(self, value: float) -> None:
        """Numeric timestamps become aware UTC datetimes."""
        ts, ok = MapClaims({"exp": value}).get(CLAIM_EXP)

        assert ok is True
        assert ts == datetime.fromtimestamp(EPOCH_2023, tz=UTC)
        assert ts.tzinfo is not None

    @pytest.mark.parametrize("value", ["1700000000", True, [1], 10**20])
    def test_time_claims_reject_non_numbers(self, value: object) -> None:
        """Strings, booleans and out-of-range numbers are not timestamps."""
        assert MapClaims({"iat": value}).get(CLAIM_IAT) == (None, False)

    def test_custom_claims_pass_through(self) -> None:
        """Other claims are returned as decoded."""
        claims = MapClaims({"roles": ["admin"], "n": None})

        assert claims.get("roles") == (["admin"], True)
        assert claims.get("n") == (None, False)

    def test_mapping_behaviour(self) -> None:
        """Raw access and JSON serialization keep the original values."""
        claims = MapClaims.from_json('{"sub":"alice","exp":1700000000}')

        assert claims["exp"] == EPOCH_2023
        assert "sub" in claims
        assert len(claims) == 2
        assert claims.raw("missing", "default") == "default"
        assert MapClaims.from_json(claims.to_json()) == claims

    def test_from_json_requires_object(self) -> None:
        """Claims must be a JSON object."""
        with pytest.raises(ValueError):
            MapClaims.from_json("[1, 2]")

    def test_satisfies_protocol(self) -> None:
        """MapClaims is a Claims implementation."""
        assert isinstance(MapClaims(), Claims)


class TestStandardClaims:
    """Tests for the typed claims model."""

    def test_get_coerces_like_map(self) -> None:
        """Typed claims answer get() with the same coercions."""
        claims = StandardClaims(jti="id-1", sub="alice", aud="api", exp=EPOCH_2023)

        assert claims.get(CLAIM_JTI) == ("id-1", True)
        assert claims.get(CLAIM_AUD) == (["api"], True)
        assert claims.get(CLAIM_EXP) == (datetime.fromtimestamp(EPOCH_2023, tz=UTC), True)
        assert claims.expires_at == datetime.fromtimestamp(EPOCH_2023, tz=UTC)

    def test_unset_claims_are_absent(self) -> None:
        """Unset optional claims report not present."""
        claims = StandardClaims()

        assert claims.get(CLAIM_SUB) == (None, False)
        assert claims.get(CLAIM_IAT) == (None, False)
        assert claims.issued_at is None

    def test_extra_claims(self) -> None:
        """Unknown claims are kept and reachable through get()."""
        claims = StandardClaims.model_validate({"sub": "alice", "tenant": "acme"})

        assert claims.get("tenant") == ("acme", True)
        assert claims.get("missing") == (None, False)

    def test_frozen(self) -> None:
        """Claims models are immutable."""
        claims = StandardClaims(sub="alice")

        with pytest.raises(ValidationError):
            claims.sub = "bob"  # type: ignore[misc]

    def test_rejects_wrong_types(self) -> None:
        """Typed claims validate their members."""
        with pytest.raises(ValidationError):
            StandardClaims.model_validate({"sub": 42})


class TestAccessTokenClaims:
    """Tests for access token claims."""

    def test_scopes(self) -> None:
        """The scope string splits into a list."""
        claims = AccessTokenClaims(scope="openid profile")

        assert claims.scopes == ["openid", "profile"]
        assert AccessTokenClaims().scopes == []

    def test_get_extension_claims(self) -> None:
        """Client, scope and userinfo are reachable through get()."""
        claims = AccessTokenClaims(client="app", scope="read", userinfo={"email": "a@example.com"})

        assert claims.get("client") == ("app", True)
        assert claims.get("scope") == ("read", True)
        assert claims.get("userinfo") == ({"email": "a@example.com"}, True)
        assert isinstance(claims, Claims)


class TestRepresentationsAgree:
    """Map-backed and typed claims answer get() the same way."""

    @pytest.mark.parametrize("payload", ['{"exp": "1"}', '{"exp": true}', '{"exp": [1]}', '{"exp": 1}'])
    def test_time_claim_coercion(self, payload: str) -> None:
        """Non-numeric and boolean timestamps are absent in both forms."""
        mapped = MapClaims.from_json(payload)
        typed = StandardClaims.model_validate_json(payload)

        assert typed.get(CLAIM_EXP) == mapped.get(CLAIM_EXP)

    @pytest.mark.parametrize("payload", ['{"exp": "1"}', '{"exp": true}'])
    def test_time_rule_agrees(self, payload: str) -> None:
        """The time rule skips an uncoercible exp in both forms."""
        rule = expect_time(0)

        rule(MapClaims.from_json(payload))
        rule(StandardClaims.model_validate_json(payload))
