"""Infrastructure implementations of application service interfaces."""

from gatekeeper.infrastructure.services.audit_pipeline import (
    AuditPipeline,
    EnrichStage,
    MaskStage,
    serialize_envelope,
)
from gatekeeper.infrastructure.services.audit_publisher import ChannelAuditPublisher
from gatekeeper.infrastructure.services.periodic import PeriodicTask
from gatekeeper.infrastructure.services.sql_audit_sink import SqlAuditSink

__all__ = [
    "AuditPipeline",
    "ChannelAuditPublisher",
    "EnrichStage",
    "MaskStage",
    "PeriodicTask",
    "SqlAuditSink",
    "serialize_envelope",
]
