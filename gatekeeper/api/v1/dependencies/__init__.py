"""API v1 dependencies (composition root). Routes import from here."""

from gatekeeper.api.v1.dependencies.context import get_request_context, get_tenant_id
from gatekeeper.api.v1.dependencies.security import (
    get_bearer_token,
    get_current_claims,
    get_token_issuer,
    require_admin_role,
    require_admin_secret,
    require_role,
)
from gatekeeper.api.v1.dependencies.services import (
    get_audit_publisher,
    get_audit_record_repo,
    get_auth_service,
    get_security_audit,
    get_tenant_service,
)

__all__ = [
    "get_audit_publisher",
    "get_audit_record_repo",
    "get_auth_service",
    "get_bearer_token",
    "get_current_claims",
    "get_request_context",
    "get_security_audit",
    "get_tenant_id",
    "get_tenant_service",
    "get_token_issuer",
    "require_admin_role",
    "require_admin_secret",
    "require_role",
]
