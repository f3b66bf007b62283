"""Application DTOs (no dependency on ORM)."""

from gatekeeper.application.dtos.audit import (
    AuditRecordResult,
    AuditSummary,
)
from gatekeeper.application.dtos.principal import (
    AuthenticatedPrincipal,
    PrincipalResult,
)
from gatekeeper.application.dtos.tenant import TenantCreationResult, TenantResult

__all__ = [
    "AuditRecordResult",
    "AuditSummary",
    "AuthenticatedPrincipal",
    "PrincipalResult",
    "TenantCreationResult",
    "TenantResult",
]
