"""Tests for TokenIssuer (configuration checks, issued claims, verification)."""

from datetime import timedelta

import pytest
from jose import jwt

from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.domain.exceptions import ConfigurationException
from gatekeeper.domain.value_objects import ClaimSet
from gatekeeper.infrastructure.security.token_issuer import TokenIssuer
from gatekeeper.shared.utils.datetime import utc_now

KEY = "unit-test-signing-key-0123456789abcdef"
ISSUER = "https://issuer.test"
AUDIENCE = "unit-tests"


def _tenant(tenant_id: str = "acme") -> TenantResult:
    return TenantResult(
        id=tenant_id, name="Acme", is_active=True, valid_upto=utc_now() + timedelta(days=1)
    )


def _claims(subject: str = "user-1", tenant_id: str = "acme") -> ClaimSet:
    return ClaimSet(
        subject=subject,
        email="alice@example.com",
        display_name="Alice",
        tenant_id=tenant_id,
        roles=("admin", "viewer"),
        jti="jti-1",
    )


def _issuer(**kwargs) -> TokenIssuer:
    return TokenIssuer(KEY, ISSUER, AUDIENCE, **kwargs)


class TestConfiguration:
    def test_short_key_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            TokenIssuer("too-short", ISSUER, AUDIENCE)

    def test_missing_issuer_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            TokenIssuer(KEY, "", AUDIENCE)

    def test_missing_audience_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            TokenIssuer(KEY, ISSUER, "")

    def test_asymmetric_algorithm_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            _issuer(algorithm="RS256")

    def test_non_positive_lifetime_rejected(self) -> None:
        with pytest.raises(ConfigurationException):
            _issuer(access_token_lifetime=timedelta(0))


class TestIssue:
    def test_access_token_claims(self) -> None:
        now = utc_now().replace(microsecond=0)
        issuer = _issuer(clock=lambda: now)
        pair = issuer.issue("user-1", _claims(), _tenant())

        payload = jwt.get_unverified_claims(pair.access_token)
        assert payload["sub"] == "user-1"
        assert payload["jti"] == "jti-1"
        assert payload["email"] == "alice@example.com"
        assert payload["name"] == "Alice"
        assert payload["tenant"] == "acme"
        assert payload["roles"] == ["admin", "viewer"]
        assert payload["iss"] == ISSUER
        assert payload["aud"] == AUDIENCE
        assert payload["iat"] == payload["nbf"] == int(now.timestamp())
        assert payload["exp"] == int((now + timedelta(minutes=30)).timestamp())
        assert jwt.get_unverified_header(pair.access_token)["alg"] == "HS256"

    def test_expiry_timestamps(self) -> None:
        now = utc_now()
        pair = _issuer(clock=lambda: now).issue("user-1", _claims(), _tenant())
        assert pair.access_token_expires_at == now + timedelta(minutes=30)
        assert pair.refresh_token_expires_at == now + timedelta(days=7)

    def test_refresh_tokens_are_unique(self) -> None:
        issuer = _issuer()
        a = issuer.issue("user-1", _claims(), _tenant())
        b = issuer.issue("user-1", _claims(), _tenant())
        assert a.refresh_token != b.refresh_token

    def test_subject_mismatch_rejected(self) -> None:
        with pytest.raises(ValueError):
            _issuer().issue("user-2", _claims("user-1"), _tenant())

    def test_tenant_mismatch_rejected(self) -> None:
        with pytest.raises(ValueError):
            _issuer().issue("user-1", _claims(tenant_id="acme"), _tenant("globex"))


class TestDecode:
    def test_decode_round_trips_claims(self) -> None:
        issuer = _issuer()
        claims = _claims()
        pair = issuer.issue("user-1", claims, _tenant())
        assert issuer.decode_access_token(pair.access_token) == claims

    def test_expired_token_rejected_beyond_clock_skew(self) -> None:
        past = utc_now() - timedelta(hours=1)
        issuer = _issuer(clock=lambda: past)
        pair = issuer.issue("user-1", _claims(), _tenant())
        with pytest.raises(ValueError):
            _issuer().decode_access_token(pair.access_token)

    def test_token_expired_within_clock_skew_accepted(self) -> None:
        issued_at = utc_now() - timedelta(minutes=31)
        pair = _issuer(clock=lambda: issued_at).issue("user-1", _claims(), _tenant())
        assert _issuer().decode_access_token(pair.access_token).subject == "user-1"

    def test_wrong_audience_rejected(self) -> None:
        pair = _issuer().issue("user-1", _claims(), _tenant())
        other = TokenIssuer(KEY, ISSUER, "someone-else")
        with pytest.raises(ValueError):
            other.decode_access_token(pair.access_token)

    def test_wrong_key_rejected(self) -> None:
        pair = _issuer().issue("user-1", _claims(), _tenant())
        other = TokenIssuer("another-signing-key-0123456789abcdef", ISSUER, AUDIENCE)
        with pytest.raises(ValueError):
            other.decode_access_token(pair.access_token)

    def test_subject_hint_ignores_expiry(self) -> None:
        past = utc_now() - timedelta(hours=2)
        pair = _issuer(clock=lambda: past).issue("user-1", _claims(), _tenant())
        assert _issuer().read_subject_hint(pair.access_token) == "user-1"

    def test_subject_hint_rejects_forged_token(self) -> None:
        forged = jwt.encode(
            {"sub": "user-1", "jti": "x", "iss": ISSUER, "aud": AUDIENCE},
            "attacker-key-0123456789abcdef0123456789",
            algorithm="HS256",
        )
        with pytest.raises(ValueError):
            _issuer().read_subject_hint(forged)

    def test_subject_hint_rejects_garbage(self) -> None:
        with pytest.raises(ValueError):
            _issuer().read_subject_hint("not-a-jwt")
