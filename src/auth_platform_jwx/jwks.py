"""JSON Web Key Set.

A ``KeySet`` maps key ids to ``Key`` objects and answers the two questions the
codec asks of it: "which key has this id?" and "which key should sign/encrypt
with this algorithm right now?".

Key sets are read-only once built. To rotate keys, build a new set and swap
the reference; never mutate a set that may be in use by a concurrent decode.
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterator
from typing import IO, Any

from pydantic import ValidationError as PydanticValidationError

from .errors import InvalidKeyError
from .jwk import USE_ENC, USE_SIG, Key
from .models import JWKSDocument


class KeySet:
    """Unordered collection of keys indexed by key id."""

    __slots__ = ("_keys",)

    def __init__(self, *keys: Key) -> None:
        """Create a key set.

        A later key with the same id as an earlier one replaces it.
        """
        self._keys: dict[str, Key] = {}
        for key in keys:
            self._keys[key.id] = key

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KeySet:
        """Create a key set from a parsed JWKS document.

        Raises:
            InvalidKeyError: If the document or any key in it is malformed.
        """
        try:
            document = JWKSDocument.model_validate(data)
        except PydanticValidationError as e:
            raise InvalidKeyError(f"Invalid JWKS document: {e}") from e
        return cls(*(Key.from_jwk(each) for each in document.keys))

    @classmethod
    def from_json(cls, data: str | bytes) -> KeySet:
        """Create a key set from a JWKS JSON document."""
        try:
            parsed = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidKeyError(f"Invalid JWKS JSON: {e}") from e
        if not isinstance(parsed, dict):
            raise InvalidKeyError("JWKS document must be a JSON object")
        return cls.from_dict(parsed)

    def to_dict(self, *, include_private: bool = True) -> dict[str, Any]:
        """Serialize as a JWKS document."""
        return {
            "keys": [key.to_jwk(include_private=include_private) for key in self._keys.values()]
        }

    def to_json(self, *, include_private: bool = True) -> str:
        """Serialize as a JWKS JSON document."""
        return json.dumps(self.to_dict(include_private=include_private))

    def count(self) -> int:
        """Number of keys in the set."""
        return len(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[Key]:
        return iter(self._keys.values())

    def __contains__(self, kid: object) -> bool:
        return isinstance(kid, str) and bool(kid) and kid in self._keys

    def key_by_id(self, kid: str) -> Key | None:
        """Find a key by exact id.

        Keys with an empty id are never returned here; they are reachable only
        through algorithm search.
        """
        if not kid:
            return None
        return self._keys.get(kid)

    def key_for_signing(self, alg: str) -> Key | None:
        """Find a signing key for the given algorithm.

        When several signing keys share the algorithm, one is picked by
        ``floor(now) mod count`` so newly added keys are phased in over time.
        """
        return self._select(USE_SIG, alg)

    def key_for_encryption(self, alg: str) -> Key | None:
        """Find an encryption key for the given key management algorithm.

        The returned key may hold private material; callers that encrypt must
        use ``Key.to_public()``. Same rotation policy as ``key_for_signing``.
        """
        return self._select(USE_ENC, alg)

    def _select(self, use: str, alg: str) -> Key | None:
        candidates = [k for k in self._keys.values() if k.use == use and k.alg == alg]
        if not candidates:
            return None
        if len(candidates) == 1:
            return candidates[0]
        return candidates[int(time.time()) % len(candidates)]

    def to_public(self) -> KeySet:
        """Return a new set with the public projection of every asymmetric key.

        Symmetric keys are omitted so the result is safe to publish.
        """
        return KeySet(*(key.to_public() for key in self._keys.values() if not key.is_symmetric))

    def __repr__(self) -> str:
        return f"KeySet(kids={list(self._keys)!r})"


def read_key_set(reader: IO[str] | IO[bytes]) -> KeySet:
    """Read a JWKS JSON document from a file-like object."""
    return KeySet.from_json(reader.read())
