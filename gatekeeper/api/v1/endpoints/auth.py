"""Auth API: token issuance, refresh rotation, revocation, registration, password change."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from gatekeeper.api.v1.dependencies import (
    get_auth_service,
    get_bearer_token,
    get_current_claims,
    get_request_context,
)
from gatekeeper.application.services import AuthService
from gatekeeper.core.limiter import limit_refresh, limit_register, limit_token
from gatekeeper.domain.value_objects import ClaimSet
from gatekeeper.schemas.auth import (
    ChangePasswordRequest,
    ClaimsResponse,
    LoginRequest,
    PrincipalResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from gatekeeper.shared.context import RequestContext

router = APIRouter()


@router.post("/token", response_model=TokenResponse)
@limit_token
async def issue_token(
    request: Request,
    body: LoginRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Exchange email/password for an access/refresh token pair."""
    pair = await auth_service.login(ctx, body.email, body.password)
    return TokenResponse.from_pair(pair)


@router.post("/refresh", response_model=TokenResponse)
@limit_refresh
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> TokenResponse:
    """Exchange a refresh token for a new pair. The presented refresh token stops working."""
    pair = await auth_service.refresh(ctx, body.refresh_token, body.access_token)
    return TokenResponse.from_pair(pair)


@router.post("/revoke", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_token(
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    claims: Annotated[ClaimSet, Depends(get_current_claims)],
    token: Annotated[str, Depends(get_bearer_token)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Response:
    """Revoke the caller's refresh token. The access token stays valid until it expires."""
    await auth_service.revoke(
        ctx.with_user(claims.subject, claims.display_name), claims.subject, token
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/register", response_model=PrincipalResponse, status_code=status.HTTP_201_CREATED)
@limit_register
async def register(
    request: Request,
    body: RegisterRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> PrincipalResponse:
    """Create a principal in the tenant from the tenant header."""
    principal = await auth_service.register(ctx, body.email, body.password, body.display_name)
    return PrincipalResponse(
        id=principal.id,
        tenant_id=principal.tenant_id,
        email=principal.email,
        display_name=principal.display_name,
        is_active=principal.is_active,
        email_confirmed=principal.email_confirmed,
        roles=list(principal.roles),
    )


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    body: ChangePasswordRequest,
    ctx: Annotated[RequestContext, Depends(get_request_context)],
    claims: Annotated[ClaimSet, Depends(get_current_claims)],
    token: Annotated[str, Depends(get_bearer_token)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Response:
    """Change the caller's password; the refresh token is revoked."""
    await auth_service.change_password(
        ctx.with_user(claims.subject, claims.display_name),
        claims.subject,
        body.current_password,
        body.new_password,
        access_token=token,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=ClaimsResponse)
async def me(claims: Annotated[ClaimSet, Depends(get_current_claims)]) -> ClaimsResponse:
    """Claims of the presented access token."""
    return ClaimsResponse(
        subject=claims.subject,
        email=claims.email,
        display_name=claims.display_name,
        tenant_id=claims.tenant_id,
        roles=list(claims.roles),
        jti=claims.jti,
    )
