"""Credential and refresh-token validation.

Both entry points resolve the tenant through the tenant gate first, then
the principal, then build the claim set through the same routine so a
token minted on login and one minted on refresh are indistinguishable
apart from jti. Rotation of the stored refresh token is the caller's job.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from gatekeeper.application.dtos.principal import AuthenticatedPrincipal, PrincipalResult
from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.application.interfaces.repositories import (
    IPrincipalRepository,
    ITenantRepository,
)
from gatekeeper.application.interfaces.services import IPasswordHasher, ITokenIssuer
from gatekeeper.application.services.tenant_gate import ensure_tenant_usable
from gatekeeper.application.services.token_digest import hash_refresh_token
from gatekeeper.domain.exceptions import (
    AccountNotUsableException,
    InvalidCredentialsException,
    SubjectMismatchException,
)
from gatekeeper.domain.value_objects import ClaimSet
from gatekeeper.shared.utils.datetime import ensure_utc, utc_now
from gatekeeper.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Canonical form used for per-tenant uniqueness and lookup."""
    return email.strip().lower()


def build_claims(principal: PrincipalResult, tenant: TenantResult) -> ClaimSet:
    """Claim set for principal; the only place claims are assembled."""
    return ClaimSet(
        subject=principal.id,
        email=principal.email,
        display_name=principal.display_name,
        tenant_id=tenant.id,
        roles=tuple(sorted(set(principal.roles))),
        jti=generate_cuid(),
    )


def _ensure_account_usable(principal: PrincipalResult) -> None:
    if not principal.is_active:
        raise AccountNotUsableException("account_disabled")
    if not principal.email_confirmed:
        raise AccountNotUsableException("email_unconfirmed")


class CredentialValidator:
    """Validates email/password and refresh tokens for a tenant."""

    def __init__(
        self,
        tenant_repo: ITenantRepository,
        principal_repo: IPrincipalRepository,
        password_hasher: IPasswordHasher,
        token_issuer: ITokenIssuer,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.principal_repo = principal_repo
        self.password_hasher = password_hasher
        self.token_issuer = token_issuer
        self._clock = clock

    async def _usable_tenant(self, tenant_id: str) -> TenantResult:
        tenant = await self.tenant_repo.get_by_id(tenant_id) if tenant_id else None
        return ensure_tenant_usable(tenant, self._clock())

    async def validate_credentials(
        self, tenant_id: str, email: str, password: str
    ) -> AuthenticatedPrincipal:
        """Authenticate email/password within tenant.

        Raises:
            TenantInvalidException: Tenant gate rejected the tenant.
            InvalidCredentialsException: Unknown email or wrong password.
            AccountNotUsableException: Password correct but account disabled or unconfirmed.
        """
        tenant = await self._usable_tenant(tenant_id)
        principal = await self.principal_repo.get_by_normalized_email(
            tenant.id, normalize_email(email)
        )
        if principal is None:
            # Same bcrypt cost as a real comparison so unknown emails are not
            # distinguishable by response time.
            await self.password_hasher.burn_dummy(password)
            raise InvalidCredentialsException("unknown_principal")
        if not await self.password_hasher.verify(password, principal.hashed_password):
            raise InvalidCredentialsException("password_mismatch")
        _ensure_account_usable(principal)
        return AuthenticatedPrincipal(
            subject_id=principal.id,
            claims=build_claims(principal, tenant),
            tenant=tenant,
        )

    async def validate_refresh_token(
        self,
        tenant_id: str,
        refresh_token: str,
        access_token: str | None = None,
    ) -> AuthenticatedPrincipal:
        """Authenticate a presented refresh token within tenant.

        access_token, when given, is the access token the client paired with
        this refresh token. Its subject must match the refresh token's owner.

        Raises:
            TenantInvalidException: Tenant gate rejected the tenant.
            InvalidCredentialsException: Unknown or expired refresh token.
            AccountNotUsableException: Owner disabled or unconfirmed.
            SubjectMismatchException: access_token belongs to another subject
                or was not issued by this service.
        """
        tenant = await self._usable_tenant(tenant_id)
        if not refresh_token:
            raise InvalidCredentialsException("refresh_token_missing")
        presented_hash = hash_refresh_token(refresh_token)
        principal = await self.principal_repo.get_by_refresh_hash(tenant.id, presented_hash)
        if principal is None:
            raise InvalidCredentialsException("refresh_token_unknown")
        expires_at = ensure_utc(principal.refresh_token_expires_at)
        if expires_at is None or expires_at <= ensure_utc(self._clock()):
            raise InvalidCredentialsException("refresh_token_expired")
        _ensure_account_usable(principal)
        if access_token:
            try:
                hinted_subject = self.token_issuer.read_subject_hint(access_token)
            except ValueError as e:
                logger.warning(
                    "Unverifiable access token presented with refresh token for %s: %s",
                    principal.id,
                    e,
                )
                raise SubjectMismatchException(
                    "access_token_unverifiable", subject_id=principal.id
                ) from e
            if hinted_subject != principal.id:
                raise SubjectMismatchException(
                    "subject_mismatch",
                    subject_id=principal.id,
                    hinted_subject=hinted_subject,
                )
        return AuthenticatedPrincipal(
            subject_id=principal.id,
            claims=build_claims(principal, tenant),
            tenant=tenant,
            presented_refresh_hash=presented_hash,
        )
