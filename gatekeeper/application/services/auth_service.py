"""Authentication use cases: login, refresh (rotating), revoke, register, change password.

Each method runs inside the caller's request transaction and, when a unit
of work is given, commits it before returning. Success audits (issued,
revoked) are published only after that commit, so the audit trail never
records a token the database did not keep. Failure audits are published
where the failure happens. Integration events are staged in the outbox in
the same transaction as the state change they describe.
"""

from __future__ import annotations

import logging

from gatekeeper.application.dtos.principal import PrincipalResult
from gatekeeper.application.events.integration_events import (
    PasswordChangedIntegrationEvent,
    UserRegisteredIntegrationEvent,
)
from gatekeeper.application.interfaces.repositories import (
    IOutboxRepository,
    IPrincipalRepository,
    ITenantRepository,
    IUnitOfWork,
)
from gatekeeper.application.interfaces.services import IPasswordHasher, ITokenIssuer
from gatekeeper.application.services.credential_validator import (
    CredentialValidator,
    normalize_email,
)
from gatekeeper.application.services.security_audit import SecurityAuditService
from gatekeeper.application.services.tenant_gate import ensure_tenant_usable
from gatekeeper.application.services.token_digest import hash_refresh_token
from gatekeeper.domain.exceptions import (
    AuthenticationException,
    InvalidCredentialsException,
    SubjectMismatchException,
    UserAlreadyExistsException,
)
from gatekeeper.domain.value_objects import TokenPair
from gatekeeper.shared.context import RequestContext
from gatekeeper.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class AuthService:
    """Token lifecycle for principals of one tenant per call."""

    def __init__(
        self,
        validator: CredentialValidator,
        token_issuer: ITokenIssuer,
        tenant_repo: ITenantRepository,
        principal_repo: IPrincipalRepository,
        password_hasher: IPasswordHasher,
        outbox: IOutboxRepository,
        audit: SecurityAuditService,
        *,
        auto_confirm_registrations: bool = False,
        unit_of_work: IUnitOfWork | None = None,
    ) -> None:
        """unit_of_work=None leaves committing to the caller (scripts, tests)."""
        self.validator = validator
        self.token_issuer = token_issuer
        self.tenant_repo = tenant_repo
        self.principal_repo = principal_repo
        self.password_hasher = password_hasher
        self.outbox = outbox
        self.audit = audit
        self.auto_confirm_registrations = auto_confirm_registrations
        self.unit_of_work = unit_of_work

    async def _commit(self) -> None:
        if self.unit_of_work is not None:
            await self.unit_of_work.commit()

    async def login(self, ctx: RequestContext, email: str, password: str) -> TokenPair:
        """Exchange email/password for a token pair.

        Replaces any stored refresh token (one active refresh token per principal).
        """
        try:
            principal = await self.validator.validate_credentials(
                ctx.tenant_id, email, password
            )
        except AuthenticationException as e:
            logger.info(
                "Login failed for tenant %s: %s", ctx.tenant_id, e.reason
            )
            self.audit.login_failed(ctx, reason=e.reason, email=email)
            raise

        pair = self.token_issuer.issue(principal.subject_id, principal.claims, principal.tenant)
        await self.principal_repo.set_refresh_token(
            principal.subject_id,
            hash_refresh_token(pair.refresh_token),
            pair.refresh_token_expires_at,
        )
        await self._commit()
        user_ctx = ctx.with_user(principal.subject_id, principal.claims.display_name)
        self.audit.login_succeeded(user_ctx, principal.claims)
        self.audit.token_issued(user_ctx, principal.claims, pair, grant="password")
        return pair

    async def refresh(
        self,
        ctx: RequestContext,
        refresh_token: str,
        access_token: str | None = None,
    ) -> TokenPair:
        """Exchange a refresh token for a new pair, rotating the stored refresh token.

        Of several concurrent refreshes with the same token exactly one
        succeeds; the others see InvalidCredentialsException.
        """
        try:
            principal = await self.validator.validate_refresh_token(
                ctx.tenant_id, refresh_token, access_token
            )
        except SubjectMismatchException as e:
            logger.warning(
                "Refresh token subject mismatch in tenant %s (subject %s, hint %s): %s",
                ctx.tenant_id,
                e.subject_id,
                e.hinted_subject,
                e.reason,
            )
            self.audit.refresh_subject_mismatch(
                ctx,
                e.subject_id,
                hinted_subject=e.hinted_subject,
                reason=e.reason,
                access_token=access_token,
            )
            raise
        except AuthenticationException as e:
            logger.info("Refresh failed for tenant %s: %s", ctx.tenant_id, e.reason)
            self.audit.login_failed(ctx, reason=e.reason, method="refresh_token")
            raise

        pair = self.token_issuer.issue(principal.subject_id, principal.claims, principal.tenant)
        assert principal.presented_refresh_hash is not None
        rotated = await self.principal_repo.rotate_refresh_token(
            principal.subject_id,
            principal.presented_refresh_hash,
            hash_refresh_token(pair.refresh_token),
            pair.refresh_token_expires_at,
        )
        if not rotated:
            reason = "refresh_token_already_rotated"
            logger.info("Refresh lost rotation race for %s", principal.subject_id)
            self.audit.login_failed(
                ctx, reason=reason, method="refresh_token", user_id=principal.subject_id
            )
            raise InvalidCredentialsException(reason)

        await self._commit()
        user_ctx = ctx.with_user(principal.subject_id, principal.claims.display_name)
        self.audit.token_issued(user_ctx, principal.claims, pair, grant="refresh_token")
        return pair

    async def revoke(
        self, ctx: RequestContext, subject_id: str, access_token: str | None = None
    ) -> None:
        """Clear the principal's refresh token. Idempotent."""
        had_token = await self.principal_repo.clear_refresh_token(subject_id)
        await self._commit()
        logger.info("Refresh token revoked for %s (present=%s)", subject_id, had_token)
        self.audit.token_revoked(
            ctx, subject_id, reason="user_revoked", access_token=access_token
        )

    async def register(
        self,
        ctx: RequestContext,
        email: str,
        password: str,
        display_name: str = "",
    ) -> PrincipalResult:
        """Create a principal in the tenant and stage UserRegisteredIntegrationEvent."""
        tenant = ensure_tenant_usable(
            await self.tenant_repo.get_by_id(ctx.tenant_id), utc_now()
        )
        normalized = normalize_email(email)
        if await self.principal_repo.get_by_normalized_email(tenant.id, normalized):
            raise UserAlreadyExistsException()
        hashed = await self.password_hasher.hash(password)
        principal = await self.principal_repo.create_principal(
            tenant.id,
            email.strip(),
            normalized,
            display_name.strip(),
            hashed,
            email_confirmed=self.auto_confirm_registrations,
        )
        await self.outbox.add(
            UserRegisteredIntegrationEvent(
                tenant_id=tenant.id,
                correlation_id=ctx.correlation_id,
                user_id=principal.id,
                email=principal.email,
                display_name=principal.display_name,
            )
        )
        await self._commit()
        logger.info("Registered principal %s in tenant %s", principal.id, tenant.id)
        return principal

    async def change_password(
        self,
        ctx: RequestContext,
        subject_id: str,
        current_password: str,
        new_password: str,
        access_token: str | None = None,
    ) -> None:
        """Replace the password, revoke the refresh token, stage PasswordChangedIntegrationEvent."""
        principal = await self.principal_repo.get_by_id(subject_id)
        if principal is None or principal.tenant_id != ctx.tenant_id:
            raise InvalidCredentialsException("unknown_principal")
        if not await self.password_hasher.verify(current_password, principal.hashed_password):
            self.audit.login_failed(
                ctx, reason="password_mismatch", method="change_password", user_id=subject_id
            )
            raise InvalidCredentialsException("password_mismatch")
        await self.principal_repo.update_password(
            subject_id, await self.password_hasher.hash(new_password)
        )
        await self.principal_repo.clear_refresh_token(subject_id)
        await self.outbox.add(
            PasswordChangedIntegrationEvent(
                tenant_id=principal.tenant_id,
                correlation_id=ctx.correlation_id,
                user_id=subject_id,
            )
        )
        await self._commit()
        self.audit.token_revoked(
            ctx, subject_id, reason="password_changed", access_token=access_token
        )
