"""Tests for SecurityAuditService envelope construction and fire-and-forget emission."""

from datetime import timedelta

from gatekeeper.application.services.security_audit import SecurityAuditService
from gatekeeper.application.services.token_digest import token_fingerprint
from gatekeeper.domain.enums import AuditEventType, AuditSeverity, AuditTag
from gatekeeper.domain.value_objects import AuditEnvelope, ClaimSet, TokenPair
from gatekeeper.shared.context import RequestContext
from gatekeeper.shared.utils.datetime import utc_now


class RecordingPublisher:
    def __init__(self) -> None:
        self.envelopes: list[AuditEnvelope] = []

    def publish(self, envelope: AuditEnvelope) -> bool:
        self.envelopes.append(envelope)
        return True

    @property
    def dropped_count(self) -> int:
        return 0


class BrokenPublisher:
    def publish(self, envelope: AuditEnvelope) -> bool:
        raise RuntimeError("channel closed")

    @property
    def dropped_count(self) -> int:
        return 0


CTX = RequestContext(
    tenant_id="acme",
    correlation_id="corr-1",
    trace_id="a" * 32,
    span_id="b" * 16,
    request_id="req-1",
    ip_address="10.0.0.1",
    user_agent="pytest",
)
CLAIMS = ClaimSet(
    subject="user-1",
    email="alice@example.com",
    display_name="Alice",
    tenant_id="acme",
    roles=("admin",),
    jti="jti-1",
)


def _pair() -> TokenPair:
    now = utc_now()
    return TokenPair(
        access_token="header.payload.signature",
        refresh_token="refresh-plaintext",
        access_token_expires_at=now + timedelta(minutes=30),
        refresh_token_expires_at=now + timedelta(days=7),
        jti="jti-1",
    )


def test_envelope_carries_request_context() -> None:
    publisher = RecordingPublisher()
    SecurityAuditService(publisher).login_succeeded(CTX, CLAIMS)
    [envelope] = publisher.envelopes
    assert envelope.event_type == AuditEventType.LOGIN_SUCCEEDED
    assert envelope.severity == AuditSeverity.INFORMATION
    assert envelope.tenant_id == "acme"
    assert envelope.user_id == "user-1"
    assert envelope.user_name == "Alice"
    assert envelope.correlation_id == "corr-1"
    assert envelope.trace_id == "a" * 32
    assert envelope.span_id == "b" * 16
    assert envelope.request_id == "req-1"
    assert envelope.source == "api"
    assert envelope.payload["ip_address"] == "10.0.0.1"
    assert envelope.payload["user_agent"] == "pytest"


def test_token_issued_records_fingerprint_not_tokens() -> None:
    publisher = RecordingPublisher()
    pair = _pair()
    SecurityAuditService(publisher).token_issued(CTX, CLAIMS, pair, grant="refresh_token")
    [envelope] = publisher.envelopes
    assert envelope.event_type == AuditEventType.TOKEN_ISSUED
    assert envelope.tags == AuditTag.TOKEN
    assert envelope.payload["token_fingerprint"] == token_fingerprint(pair.access_token)
    assert envelope.payload["grant"] == "refresh_token"
    assert envelope.payload["jti"] == "jti-1"
    serialized = repr(envelope.payload)
    assert pair.access_token not in serialized
    assert pair.refresh_token not in serialized


def test_login_failed_is_warning_with_reason() -> None:
    publisher = RecordingPublisher()
    SecurityAuditService(publisher).login_failed(
        CTX, reason="password_mismatch", email="alice@example.com"
    )
    [envelope] = publisher.envelopes
    assert envelope.event_type == AuditEventType.LOGIN_FAILED
    assert envelope.severity == AuditSeverity.WARNING
    assert envelope.payload["reason"] == "password_mismatch"
    assert envelope.user_id is None


def test_subject_mismatch_is_critical_anomaly() -> None:
    publisher = RecordingPublisher()
    SecurityAuditService(publisher).refresh_subject_mismatch(
        CTX,
        "user-1",
        hinted_subject="user-2",
        reason="subject_mismatch",
        access_token="header.payload.signature",
    )
    [envelope] = publisher.envelopes
    assert envelope.event_type == AuditEventType.REFRESH_TOKEN_SUBJECT_MISMATCH
    assert envelope.severity == AuditSeverity.CRITICAL
    assert AuditTag.SECURITY_ANOMALY in envelope.tags
    assert AuditTag.RETAIN_LONG in envelope.tags
    assert envelope.user_id == "user-1"
    assert envelope.payload["hinted_subject"] == "user-2"


def test_token_revoked() -> None:
    publisher = RecordingPublisher()
    SecurityAuditService(publisher).token_revoked(CTX, "user-1", reason="user_revoked")
    [envelope] = publisher.envelopes
    assert envelope.event_type == AuditEventType.TOKEN_REVOKED
    assert envelope.payload["reason"] == "user_revoked"
    assert "token_fingerprint" not in envelope.payload


def test_publisher_failure_never_raises() -> None:
    """Audit emission must not fail the request it describes."""
    assert SecurityAuditService(BrokenPublisher()).login_succeeded(CTX, CLAIMS) is False


def test_fixed_clock() -> None:
    now = utc_now()
    publisher = RecordingPublisher()
    SecurityAuditService(publisher, clock=lambda: now).token_revoked(
        CTX, "user-1", reason="user_revoked"
    )
    assert publisher.envelopes[0].occurred_at == now
