"""Tests for audit pipeline stages (enrich, mask) and row serialization."""

import json

from gatekeeper.domain.enums import AuditEventType, AuditSeverity, AuditTag
from gatekeeper.domain.value_objects import AuditEnvelope
from gatekeeper.infrastructure.services.audit_pipeline import (
    REDACTED,
    AuditPipeline,
    EnrichStage,
    MaskStage,
    mask_email,
    serialize_envelope,
)
from gatekeeper.shared.utils.datetime import utc_now


def _envelope(**overrides) -> AuditEnvelope:
    now = utc_now()
    values = {
        "id": "env-1",
        "occurred_at": now,
        "received_at": now,
        "event_type": AuditEventType.LOGIN_FAILED,
        "severity": AuditSeverity.WARNING,
        "tenant_id": "acme",
        "tags": AuditTag.AUTHENTICATION,
        "payload": {"reason": "password_mismatch"},
    }
    values.update(overrides)
    return AuditEnvelope(**values)


class RecordingSink:
    def __init__(self) -> None:
        self.rows: list[dict] = []

    async def write(self, rows) -> None:
        self.rows.extend(rows)


def test_mask_email() -> None:
    assert mask_email("alice@example.com") == "a***@example.com"
    assert mask_email("not-an-email") == REDACTED


def test_mask_stage_redacts_secrets_and_masks_pii() -> None:
    envelope = _envelope(
        payload={
            "email": "alice@example.com",
            "password": "hunter2",
            "nested": {"refresh_token": "abc", "ok": 1},
            "reason": "x",
        }
    )
    [masked] = MaskStage()([envelope])
    assert masked.payload["email"] == "a***@example.com"
    assert masked.payload["password"] == REDACTED
    assert masked.payload["nested"] == {"refresh_token": REDACTED, "ok": 1}
    assert masked.payload["reason"] == "x"
    assert AuditTag.PII_MASKED in masked.tags
    assert AuditTag.AUTHENTICATION in masked.tags
    # The input envelope is untouched.
    assert envelope.payload["password"] == "hunter2"


def test_mask_stage_leaves_clean_envelopes_untagged() -> None:
    [out] = MaskStage()([_envelope()])
    assert AuditTag.PII_MASKED not in out.tags


def test_enrich_stage_sets_received_at_and_source() -> None:
    later = utc_now()
    [out] = EnrichStage(default_source="api", clock=lambda: later)([_envelope(source=None)])
    assert out.received_at == later
    assert out.source == "api"
    [kept] = EnrichStage()([_envelope(source="admin")])
    assert kept.source == "admin"


def test_serialize_envelope_row() -> None:
    row = serialize_envelope(_envelope(payload={"b": 1, "a": "x"}))
    assert row["event_type"] == "login_failed"
    assert row["severity"] == int(AuditSeverity.WARNING)
    assert row["tags"] == int(AuditTag.AUTHENTICATION)
    assert row["payload_json"] == '{"a":"x","b":1}'


async def test_pipeline_masks_before_sink() -> None:
    sink = RecordingSink()
    pipeline = AuditPipeline.default(sink)
    written = await pipeline.process([_envelope(payload={"email": "bob@example.com"})])
    assert written == 1
    [row] = sink.rows
    assert json.loads(row["payload_json"]) == {"email": "b***@example.com"}
    assert row["tags"] & int(AuditTag.PII_MASKED)


async def test_pipeline_skips_sink_for_empty_batch() -> None:
    sink = RecordingSink()
    assert await AuditPipeline.default(sink).process([]) == 0
    assert sink.rows == []
