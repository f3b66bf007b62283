"""Audit pipeline: enrich -> mask -> serialize -> sink.

Stages are plain callables over a batch of envelopes, composed explicitly
when the pipeline is built. Stages return new envelopes; AuditEnvelope is
frozen.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from gatekeeper.application.interfaces.services import IAuditSink
from gatekeeper.domain.enums import AuditTag
from gatekeeper.domain.value_objects import AuditEnvelope
from gatekeeper.shared.utils.datetime import utc_now

AuditStage = Callable[[list[AuditEnvelope]], list[AuditEnvelope]]

REDACTED = "[REDACTED]"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "hashed_password",
        "current_password",
        "new_password",
        "secret",
        "api_key",
        "token",
        "access_token",
        "refresh_token",
        "refresh_token_hash",
        "credentials",
        "client_secret",
        "connection_string",
    }
)

# Values kept but partially hidden (PII).
PII_KEYS = frozenset({"email", "admin_email"})


def mask_email(value: str) -> str:
    """Keep the first character of the local part and the domain: j***@example.com."""
    local, sep, domain = value.partition("@")
    if not sep:
        return REDACTED
    return f"{local[:1]}***@{domain}"


def _mask_value(key: str, value: Any) -> tuple[Any, bool]:
    lowered = key.lower()
    if lowered in SENSITIVE_KEYS:
        return REDACTED, True
    if lowered in PII_KEYS and isinstance(value, str):
        return mask_email(value), True
    if isinstance(value, dict):
        return _mask_mapping(value)
    return value, False


def _mask_mapping(data: dict[str, Any]) -> tuple[dict[str, Any], bool]:
    out: dict[str, Any] = {}
    changed = False
    for key, value in data.items():
        out[key], masked = _mask_value(key, value)
        changed = changed or masked
    return out, changed


class EnrichStage:
    """Stamps received_at and fills a default source."""

    def __init__(
        self,
        default_source: str = "api",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.default_source = default_source
        self._clock = clock

    def __call__(self, batch: list[AuditEnvelope]) -> list[AuditEnvelope]:
        now = self._clock()
        return [
            e.with_changes(received_at=now, source=e.source or self.default_source)
            for e in batch
        ]


class MaskStage:
    """Redacts secrets and masks PII in payloads; tags masked envelopes."""

    def __call__(self, batch: list[AuditEnvelope]) -> list[AuditEnvelope]:
        out = []
        for e in batch:
            payload, changed = _mask_mapping(e.payload)
            if changed:
                e = e.with_changes(payload=payload, tags=e.tags | AuditTag.PII_MASKED)
            out.append(e)
        return out


def serialize_envelope(e: AuditEnvelope) -> dict[str, Any]:
    """Row for audit_record. Payload becomes compact JSON (other values via str)."""
    return {
        "id": e.id,
        "occurred_at": e.occurred_at,
        "received_at": e.received_at,
        "event_type": e.event_type.value,
        "severity": int(e.severity),
        "tenant_id": e.tenant_id,
        "user_id": e.user_id,
        "user_name": e.user_name,
        "trace_id": e.trace_id,
        "span_id": e.span_id,
        "correlation_id": e.correlation_id,
        "request_id": e.request_id,
        "source": e.source,
        "tags": int(e.tags),
        "payload_json": json.dumps(e.payload, default=str, separators=(",", ":"), sort_keys=True),
    }


class AuditPipeline:
    """Runs the stages in order, serializes, and hands rows to the sink."""

    def __init__(self, stages: Sequence[AuditStage], sink: IAuditSink) -> None:
        self.stages = list(stages)
        self.sink = sink

    @classmethod
    def default(cls, sink: IAuditSink) -> AuditPipeline:
        return cls([EnrichStage(), MaskStage()], sink)

    async def process(self, batch: list[AuditEnvelope]) -> int:
        """Process one batch; sink errors propagate to the caller."""
        for stage in self.stages:
            batch = stage(batch)
        rows = [serialize_envelope(e) for e in batch]
        if rows:
            await self.sink.write(rows)
        return len(rows)
