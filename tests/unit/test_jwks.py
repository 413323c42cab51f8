"""Unit tests for KeySet."""

import io
import json
import os
from unittest.mock import patch

import pytest

from auth_platform_jwx.errors import InvalidKeyError
from auth_platform_jwx.jwk import USE_ENC, USE_SIG, Key
from auth_platform_jwx.jwks import KeySet, read_key_set

EC_SAMPLE_KID = "772c06ee-c745-4c20-b9ba-99c36937311c"
RSA_SAMPLE_KID = "b64e1881-07b9-4ff1-b040-1ae75c537785"


def _hmac_key(kid: str, alg: str = "HS256", use: str = USE_SIG) -> Key:
    return Key(os.urandom(32), kid=kid, use=use, alg=alg)


class TestReadKeySet:
    """Tests for reading key set documents."""

    def test_read_key_set(self, sample_jwks_json: str) -> None:
        """The sample document yields both keys and an ES256 signing key."""
        key_set = read_key_set(io.StringIO(sample_jwks_json))

        assert key_set.count() == 2
        assert len(key_set) == 2
        key = key_set.key_for_signing("ES256")
        assert key is not None
        assert key.id == EC_SAMPLE_KID

    def test_read_key_set_from_bytes(self, sample_jwks_json: str) -> None:
        """Binary readers are accepted."""
        key_set = read_key_set(io.BytesIO(sample_jwks_json.encode()))

        assert RSA_SAMPLE_KID in key_set

    def test_from_dict_keeps_each_key(self, sample_key_set: KeySet) -> None:
        """Every parsed element becomes its own key."""
        ec_key = sample_key_set.key_by_id(EC_SAMPLE_KID)
        rsa_key = sample_key_set.key_by_id(RSA_SAMPLE_KID)

        assert ec_key is not None and ec_key.kty == "EC"
        assert rsa_key is not None and rsa_key.kty == "RSA"
        assert ec_key is not rsa_key

    def test_missing_keys_member_is_empty(self) -> None:
        """A document without keys is an empty set."""
        assert len(KeySet.from_dict({})) == 0

    @pytest.mark.parametrize("data", ["not json", "[]", '{"keys": "nope"}', '{"keys": [{"kty": "EC"}]}'])
    def test_invalid_documents(self, data: str) -> None:
        """Malformed documents raise InvalidKeyError."""
        with pytest.raises(InvalidKeyError):
            KeySet.from_json(data)

    def test_to_json_publishes_public_keys(self, sample_key_set: KeySet) -> None:
        """Serializing without private material drops private members."""
        document = json.loads(sample_key_set.to_json(include_private=False))

        assert [k["kid"] for k in document["keys"]] == [EC_SAMPLE_KID, RSA_SAMPLE_KID]
        assert all("d" not in k for k in document["keys"])

    def test_to_dict_parses_back(self, sample_key_set: KeySet) -> None:
        """A serialized private set can be read again."""
        restored = KeySet.from_dict(sample_key_set.to_dict())

        assert list(restored) and [k.id for k in restored] == [k.id for k in sample_key_set]
        assert all(not k.is_public for k in restored)


class TestKeyById:
    """Tests for exact id lookup."""

    def test_found(self, sample_key_set: KeySet) -> None:
        """An existing id is found."""
        key = sample_key_set.key_by_id(RSA_SAMPLE_KID)

        assert key is not None
        assert key.alg == "RS256"

    def test_not_found(self, sample_key_set: KeySet) -> None:
        """An unknown id is not found."""
        assert sample_key_set.key_by_id("unknown") is None
        assert "unknown" not in sample_key_set

    def test_empty_id_is_never_found(self) -> None:
        """A key without id is only reachable by algorithm."""
        key_set = KeySet(_hmac_key(""))

        assert key_set.key_by_id("") is None
        assert "" not in key_set
        assert key_set.key_for_signing("HS256") is not None

    def test_duplicate_id_replaces(self) -> None:
        """A later key with the same id overwrites the earlier one."""
        first = _hmac_key("dup")
        second = _hmac_key("dup", alg="HS512")

        key_set = KeySet(first, second)

        assert len(key_set) == 1
        assert key_set.key_by_id("dup") is second


class TestKeySelection:
    """Tests for algorithm-based key selection."""

    def test_no_candidates(self, sample_key_set: KeySet) -> None:
        """No key with the algorithm means not found."""
        assert sample_key_set.key_for_signing("HS256") is None
        assert sample_key_set.key_for_encryption("RSA-OAEP") is None

    def test_single_candidate(self, sample_key_set: KeySet) -> None:
        """A single candidate is always returned."""
        for now in (0.0, 1.0, 1_700_000_001.5):
            with patch("auth_platform_jwx.jwks.time.time", return_value=now):
                key = sample_key_set.key_for_signing("RS256")
            assert key is not None
            assert key.id == RSA_SAMPLE_KID

    def test_use_is_respected(self) -> None:
        """Signing selection ignores encryption keys and vice versa."""
        enc = _hmac_key("enc", alg="A256KW", use=USE_ENC)
        sig = _hmac_key("sig", alg="A256KW", use=USE_SIG)
        key_set = KeySet(enc, sig)

        assert key_set.key_for_encryption("A256KW") is enc
        assert key_set.key_for_signing("A256KW") is sig

    def test_rotation_index(self) -> None:
        """Among N candidates the one at floor(now) mod N is picked."""
        keys = [_hmac_key(f"k{i}") for i in range(3)]
        key_set = KeySet(*keys, _hmac_key("other", alg="HS512"))

        for now, expected in ((300.0, 0), (301.9, 1), (302.2, 2), (303.0, 0)):
            with patch("auth_platform_jwx.jwks.time.time", return_value=now):
                assert key_set.key_for_signing("HS256") is keys[expected]

    def test_same_second_is_stable(self) -> None:
        """Repeated calls within one second pick the same key."""
        key_set = KeySet(_hmac_key("a"), _hmac_key("b"))

        with patch("auth_platform_jwx.jwks.time.time", return_value=1_700_000_000.25):
            first = key_set.key_for_signing("HS256")
            second = key_set.key_for_signing("HS256")

        assert first is second


class TestToPublic:
    """Tests for KeySet.to_public."""

    def test_drops_symmetric_and_private(self, sample_key_set: KeySet) -> None:
        """Only public projections of asymmetric keys remain."""
        key_set = KeySet(*sample_key_set, _hmac_key("secret"))

        public = key_set.to_public()

        assert len(public) == 2
        assert "secret" not in public
        assert all(k.is_public for k in public)

    def test_original_is_untouched(self, sample_key_set: KeySet) -> None:
        """The source set still holds private keys."""
        sample_key_set.to_public()

        assert all(not k.is_public for k in sample_key_set)
