"""Request context dependencies: tenant header and the explicit RequestContext."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from gatekeeper.core.config import get_settings
from gatekeeper.core.tenant_validation import is_valid_tenant_id_format
from gatekeeper.domain.exceptions import TenantInvalidException
from gatekeeper.shared.context import RequestContext

USER_AGENT_MAX_LENGTH = 256


def get_tenant_id(request: Request) -> str:
    """Tenant identifier from the tenant header.

    A missing or malformed header fails like any other tenant gate rejection
    (generic 401), before any lookup.
    """
    value = request.headers.get(get_settings().tenant_header_name)
    if not value:
        raise TenantInvalidException("tenant_header_missing")
    value = value.strip()
    if not is_valid_tenant_id_format(value):
        raise TenantInvalidException("tenant_header_malformed")
    return value


def get_request_context(
    request: Request,
    tenant_id: Annotated[str, Depends(get_tenant_id)],
) -> RequestContext:
    """Build the RequestContext handed to services (ids set by middleware)."""
    state = request.state
    user_agent = request.headers.get("user-agent")
    return RequestContext(
        tenant_id=tenant_id,
        correlation_id=getattr(state, "correlation_id", None),
        trace_id=getattr(state, "trace_id", None),
        span_id=getattr(state, "span_id", None),
        request_id=getattr(state, "request_id", None),
        ip_address=request.client.host if request.client else None,
        user_agent=user_agent[:USER_AGENT_MAX_LENGTH] if user_agent else None,
        source="api",
    )
