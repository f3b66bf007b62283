"""Tenant status gate.

Runs before any principal lookup or password comparison on every entry
point that can produce tokens. The reason differs per condition for logs
and audits; the client always sees the same generic failure.
"""

from datetime import datetime

from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.domain.exceptions import TenantInvalidException
from gatekeeper.shared.utils.datetime import ensure_utc


def ensure_tenant_usable(tenant: TenantResult | None, now: datetime) -> TenantResult:
    """Return tenant if it may authenticate principals at now.

    Raises:
        TenantInvalidException: If tenant is missing, inactive, or now is
            past valid_upto.
    """
    if tenant is None:
        raise TenantInvalidException("tenant_not_found")
    if not tenant.is_active:
        raise TenantInvalidException("tenant_inactive")
    valid_upto = ensure_utc(tenant.valid_upto)
    if valid_upto is None or ensure_utc(now) > valid_upto:
        raise TenantInvalidException("tenant_expired")
    return tenant
