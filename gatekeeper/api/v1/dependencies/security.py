"""Bearer token, role and admin-secret dependencies."""

from __future__ import annotations

import secrets
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from gatekeeper.api.v1.dependencies.context import get_tenant_id
from gatekeeper.core.config import get_settings
from gatekeeper.domain.exceptions import AuthorizationException, InvalidCredentialsException
from gatekeeper.domain.value_objects import ClaimSet
from gatekeeper.infrastructure.security.token_issuer import TokenIssuer

bearer_scheme = HTTPBearer(auto_error=False)


def get_token_issuer(request: Request) -> TokenIssuer:
    """TokenIssuer built once at startup (lifespan) and kept on app.state."""
    return request.app.state.token_issuer


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    if credentials is None or not credentials.credentials:
        raise InvalidCredentialsException("bearer_missing")
    return credentials.credentials


def get_current_claims(
    token: Annotated[str, Depends(get_bearer_token)],
    tenant_id: Annotated[str, Depends(get_tenant_id)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> ClaimSet:
    """Validate the bearer access token and bind it to the tenant header."""
    try:
        claims = issuer.decode_access_token(token)
    except ValueError:
        raise InvalidCredentialsException("bearer_invalid")
    if claims.tenant_id != tenant_id:
        raise InvalidCredentialsException("bearer_tenant_mismatch")
    return claims


def require_role(role: str) -> Callable[..., ClaimSet]:
    """Dependency factory: 403 unless the access token carries role."""

    def _check(claims: Annotated[ClaimSet, Depends(get_current_claims)]) -> ClaimSet:
        if role not in claims.roles:
            raise AuthorizationException(role=role)
        return claims

    return _check


def require_admin_role(claims: Annotated[ClaimSet, Depends(get_current_claims)]) -> ClaimSet:
    """Role check against the configured admin role."""
    return require_role(get_settings().admin_role)(claims)


def require_admin_secret(
    x_admin_secret: Annotated[str | None, Header(alias="X-Admin-Secret")] = None,
) -> None:
    """Guard for tenant administration. Disabled (403) when no secret is configured."""
    expected = get_settings().admin_secret.get_secret_value()
    if not expected or not x_admin_secret:
        raise AuthorizationException(message="Admin access denied")
    if not secrets.compare_digest(x_admin_secret.encode(), expected.encode()):
        raise AuthorizationException(message="Admin access denied")
