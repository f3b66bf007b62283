"""Application services (use cases)."""

from gatekeeper.application.services.auth_service import AuthService
from gatekeeper.application.services.credential_validator import (
    CredentialValidator,
    build_claims,
    normalize_email,
)
from gatekeeper.application.services.security_audit import SecurityAuditService
from gatekeeper.application.services.tenant_gate import ensure_tenant_usable
from gatekeeper.application.services.tenant_service import TenantService

__all__ = [
    "AuthService",
    "CredentialValidator",
    "SecurityAuditService",
    "TenantService",
    "build_claims",
    "ensure_tenant_usable",
    "normalize_email",
]
