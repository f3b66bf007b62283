"""Tenant administration API (X-Admin-Secret)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from gatekeeper.api.v1.dependencies import get_tenant_service, require_admin_secret
from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.application.services import TenantService
from gatekeeper.core.limiter import limit_admin
from gatekeeper.schemas.tenant import (
    TenantCreateRequest,
    TenantCreateResponse,
    TenantResponse,
)
from gatekeeper.shared.context import RequestContext

router = APIRouter(dependencies=[Depends(require_admin_secret)])


def _to_response(tenant: TenantResult) -> TenantResponse:
    return TenantResponse.model_validate(tenant)


@router.post("", response_model=TenantCreateResponse, status_code=status.HTTP_201_CREATED)
@limit_admin
async def create_tenant(
    request: Request,
    body: TenantCreateRequest,
    tenant_service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantCreateResponse:
    """Create tenant and its admin principal (one transaction, with TenantCreated event)."""
    ctx = RequestContext(
        tenant_id=body.id,
        correlation_id=getattr(request.state, "correlation_id", None),
        request_id=getattr(request.state, "request_id", None),
        source="admin",
    )
    result = await tenant_service.create_tenant(
        ctx,
        body.id,
        body.name,
        body.valid_upto,
        body.admin_email,
        body.admin_password.get_secret_value(),
        admin_display_name=body.admin_display_name,
        connection_string=(
            body.connection_string.get_secret_value() if body.connection_string else None
        ),
        issuer=body.issuer,
    )
    return TenantCreateResponse(
        tenant=_to_response(result.tenant),
        admin_user_id=result.admin_user_id,
        admin_email=result.admin_email,
    )


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: str,
    tenant_service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    return _to_response(await tenant_service.get_tenant(tenant_id))


@router.post("/{tenant_id}/activate", response_model=TenantResponse)
async def activate_tenant(
    tenant_id: str,
    tenant_service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    return _to_response(await tenant_service.activate(tenant_id))


@router.post("/{tenant_id}/deactivate", response_model=TenantResponse)
async def deactivate_tenant(
    tenant_id: str,
    tenant_service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Deactivate tenant: its principals can no longer log in or refresh."""
    return _to_response(await tenant_service.deactivate(tenant_id))
