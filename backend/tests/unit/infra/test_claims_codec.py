# tests/unit/infra/test_claims_codec.py
"""
Unit tests for JWTClaimsCodec.

Covers round-trip signing, the structure -> signature -> expiry verification
order, expiry peeking on expired tokens and clock-skew leeway.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from auth_service.infra.jwt.pyjwt_claims_codec import JWTClaimsCodec
from auth_service.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    MalformedTokenError,
    SignatureMismatchError,
)
from freezegun import freeze_time

SECRET = "unit-test-secret-key-of-at-least-32-bytes"
OTHER_SECRET = "another-secret-key-also-at-least-32-bytes"


@pytest.fixture
def codec() -> JWTClaimsCodec:
    return JWTClaimsCodec(secret=SECRET)


def test_sign_then_verify_round_trips_subject(codec):
    token = codec.sign("a@b.com", timedelta(minutes=15))

    claims = codec.verify(token)

    assert claims.subject == "a@b.com"
    assert claims.lifetime == timedelta(minutes=15)
    assert claims.token_id


def test_sign_embeds_issued_at_and_expiry():
    with freeze_time("2024-01-01T00:00:00Z"):
        codec = JWTClaimsCodec(secret=SECRET)
        token = codec.sign("a@b.com", timedelta(days=7))
        claims = codec.verify(token)

    assert claims.issued_at == datetime(2024, 1, 1, tzinfo=UTC)
    assert claims.expires_at == datetime(2024, 1, 8, tzinfo=UTC)


def test_tokens_for_same_subject_and_instant_differ(codec):
    with freeze_time("2024-01-01T00:00:00Z"):
        first = codec.sign("a@b.com", timedelta(minutes=15))
        second = codec.sign("a@b.com", timedelta(minutes=15))

    assert first != second


def test_sign_is_deterministic_with_fixed_token_id():
    codec = JWTClaimsCodec(secret=SECRET, token_id_factory=lambda: "fixed")
    with freeze_time("2024-01-01T00:00:00Z"):
        assert codec.sign("a@b.com", timedelta(hours=1)) == codec.sign(
            "a@b.com", timedelta(hours=1)
        )


def test_sign_rejects_sub_second_ttl(codec):
    with pytest.raises(ValueError):
        codec.sign("a@b.com", timedelta(milliseconds=500))


def test_verify_fails_once_expiry_is_reached(codec):
    with freeze_time("2024-01-01T00:00:00Z") as frozen:
        token = codec.sign("a@b.com", timedelta(minutes=15))

        frozen.tick(timedelta(minutes=14, seconds=59))
        assert codec.verify(token).subject == "a@b.com"

        # expiry <= now counts as expired
        frozen.tick(timedelta(seconds=1))
        with pytest.raises(ExpiredTokenError):
            codec.verify(token)


def test_verify_rejects_foreign_signature(codec):
    token = JWTClaimsCodec(secret=OTHER_SECRET).sign("a@b.com", timedelta(minutes=5))

    with pytest.raises(SignatureMismatchError):
        codec.verify(token)


def test_signature_is_checked_before_expiry(codec):
    with freeze_time("2024-01-01T00:00:00Z") as frozen:
        forged = JWTClaimsCodec(secret=OTHER_SECRET).sign("a@b.com", timedelta(minutes=5))
        frozen.tick(timedelta(hours=1))

        with pytest.raises(SignatureMismatchError):
            codec.verify(forged)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c", "....."])
def test_verify_rejects_malformed_tokens(codec, token):
    with pytest.raises(MalformedTokenError):
        codec.verify(token)


def test_verify_rejects_token_missing_required_claims(codec):
    token = jwt.encode({"sub": "a@b.com"}, SECRET, algorithm="HS256")

    with pytest.raises(MalformedTokenError):
        codec.verify(token)


def test_all_failures_share_invalid_token_base(codec):
    with pytest.raises(InvalidTokenError):
        codec.verify("garbage")


def test_peek_expiration_reads_expired_token():
    with freeze_time("2024-01-01T00:00:00Z") as frozen:
        codec = JWTClaimsCodec(secret=SECRET)
        token = codec.sign("a@b.com", timedelta(minutes=15))
        frozen.tick(timedelta(hours=2))

        expiry_ms = codec.peek_expiration(token)

    assert expiry_ms == int(datetime(2024, 1, 1, 0, 15, tzinfo=UTC).timestamp() * 1000)


def test_peek_expiration_still_checks_signature(codec):
    token = JWTClaimsCodec(secret=OTHER_SECRET).sign("a@b.com", timedelta(minutes=5))

    with pytest.raises(SignatureMismatchError):
        codec.peek_expiration(token)


def test_verify_allow_expired_returns_claims():
    with freeze_time("2024-01-01T00:00:00Z") as frozen:
        codec = JWTClaimsCodec(secret=SECRET)
        token = codec.sign("a@b.com", timedelta(minutes=1))
        frozen.tick(timedelta(minutes=5))

        assert codec.verify(token, allow_expired=True).subject == "a@b.com"


def test_leeway_tolerates_small_clock_skew():
    with freeze_time("2024-01-01T00:00:00Z") as frozen:
        strict = JWTClaimsCodec(secret=SECRET)
        lenient = JWTClaimsCodec(secret=SECRET, leeway=timedelta(seconds=30))
        token = strict.sign("a@b.com", timedelta(minutes=1))
        frozen.tick(timedelta(minutes=1, seconds=10))

        with pytest.raises(ExpiredTokenError):
            strict.verify(token)
        assert lenient.verify(token).subject == "a@b.com"
