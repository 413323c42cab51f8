"""Claim validation rules.

An ``Expect`` rule is a callable that inspects a ``Claims`` object and raises a
``ClaimValidationError`` subclass when the claims do not conform. Rules are run
in order by ``validate_claims``; the first failure propagates.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from .claims import CLAIM_AUD, CLAIM_EXP, CLAIM_IAT, CLAIM_ISS, CLAIM_JTI, CLAIM_NBF, CLAIM_SUB, Claims
from .errors import (
    AbsentJtiError,
    InsufficientScopeError,
    InvalidAudError,
    InvalidIssError,
    InvalidSubError,
    IssuedInFutureError,
    NotYetValidError,
    TokenExpiredError,
)

Expect = Callable[[Claims], None]


def validate_claims(claims: Claims, *rules: Expect) -> None:
    """Run claims through the rules, stopping at the first failure."""
    for rule in rules:
        rule(claims)


def expect_jti(claims: Claims) -> None:
    """Require a non-empty ``jti``."""
    jti, ok = claims.get(CLAIM_JTI)
    if not ok or not isinstance(jti, str) or not jti:
        raise AbsentJtiError()


def expect_sub(*subjects: str) -> Expect:
    """Require ``sub`` to be one of ``subjects``."""
    allowed = frozenset(subjects)

    def rule(claims: Claims) -> None:
        sub, ok = claims.get(CLAIM_SUB)
        if not ok or not isinstance(sub, str) or sub not in allowed:
            raise InvalidSubError()

    return rule


def expect_aud(*audiences: str) -> Expect:
    """Require every one of ``audiences`` to appear in ``aud``.

    Extra audiences in the token are tolerated.
    """
    expected = frozenset(audiences)

    def rule(claims: Claims) -> None:
        aud, ok = claims.get(CLAIM_AUD)
        if not ok or not isinstance(aud, list) or not expected.issubset(aud):
            raise InvalidAudError()

    return rule


def expect_iss(issuer: str) -> Expect:
    """Require ``iss`` to equal ``issuer``."""

    def rule(claims: Claims) -> None:
        iss, ok = claims.get(CLAIM_ISS)
        if not ok or iss != issuer:
            raise InvalidIssError()

    return rule


def expect_scope(*scopes: str) -> Expect:
    """Require the space-delimited ``scope`` claim to grant all of ``scopes``."""
    required = frozenset(scopes)

    def rule(claims: Claims) -> None:
        scope, ok = claims.get("scope")
        if not ok or not isinstance(scope, str) or not required.issubset(scope.split()):
            raise InsufficientScopeError()

    return rule


def expect_time(
    leeway: timedelta | float = 0,
    *,
    clock: Callable[[], datetime] | None = None,
) -> Expect:
    """Check ``exp``, ``iat`` and ``nbf`` against the current time.

    The sign of ``leeway`` is ignored. A missing or non-timestamp claim is
    skipped, not failed.

    Args:
        leeway: Allowed clock skew, as a ``timedelta`` or seconds.
        clock: Returns the current time; read once per evaluation.
    """
    if not isinstance(leeway, timedelta):
        leeway = timedelta(seconds=leeway)
    leeway = abs(leeway)
    now_fn = clock or (lambda: datetime.now(UTC))

    def rule(claims: Claims) -> None:
        now = now_fn()

        exp, ok = claims.get(CLAIM_EXP)
        if ok and isinstance(exp, datetime) and now > exp + leeway:
            raise TokenExpiredError()

        iat, ok = claims.get(CLAIM_IAT)
        if ok and isinstance(iat, datetime) and iat > now + leeway:
            raise IssuedInFutureError()

        nbf, ok = claims.get(CLAIM_NBF)
        if ok and isinstance(nbf, datetime) and nbf > now + leeway:
            raise NotYetValidError()

    return rule
