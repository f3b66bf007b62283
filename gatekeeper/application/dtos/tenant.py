"""DTOs for tenant use cases (no dependency on ORM)."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TenantResult:
    """Tenant read-model (result of get_by_id, create_tenant, activate, ...)."""

    id: str
    name: str
    is_active: bool
    valid_upto: datetime
    connection_string: str | None = None
    admin_email: str | None = None
    issuer: str | None = None


@dataclass(frozen=True)
class TenantCreationResult:
    """Result of tenant creation (tenant + admin principal). Admin password is never included."""

    tenant: TenantResult
    admin_user_id: str
    admin_email: str
