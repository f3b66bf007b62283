"""Service and repository dependencies (composition root).

Write paths share one session per request (get_db_transactional), passed
to the services as their unit of work so they commit before the response
is built; reads use get_db.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.api.v1.dependencies.security import get_token_issuer
from gatekeeper.application.services import (
    AuthService,
    CredentialValidator,
    SecurityAuditService,
    TenantService,
)
from gatekeeper.core.config import get_settings
from gatekeeper.infrastructure.persistence.database import get_db, get_db_transactional
from gatekeeper.infrastructure.persistence.repositories import (
    AuditRecordRepository,
    OutboxRepository,
    TenantRepository,
    UserRepository,
)
from gatekeeper.infrastructure.security.password import BcryptPasswordHasher
from gatekeeper.infrastructure.security.token_issuer import TokenIssuer
from gatekeeper.infrastructure.services.audit_publisher import ChannelAuditPublisher


def get_audit_publisher(request: Request) -> ChannelAuditPublisher:
    return request.app.state.audit_publisher


def get_security_audit(
    publisher: Annotated[ChannelAuditPublisher, Depends(get_audit_publisher)],
) -> SecurityAuditService:
    return SecurityAuditService(publisher)


async def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
    audit: Annotated[SecurityAuditService, Depends(get_security_audit)],
) -> AuthService:
    """AuthService over the request's transactional session."""
    tenant_repo = TenantRepository(db)
    user_repo = UserRepository(db)
    hasher = BcryptPasswordHasher()
    validator = CredentialValidator(tenant_repo, user_repo, hasher, issuer)
    return AuthService(
        validator,
        issuer,
        tenant_repo,
        user_repo,
        hasher,
        OutboxRepository(db),
        audit,
        auto_confirm_registrations=get_settings().registration_auto_confirm,
        unit_of_work=db,
    )


async def get_tenant_service(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> TenantService:
    return TenantService(
        TenantRepository(db),
        UserRepository(db),
        BcryptPasswordHasher(),
        OutboxRepository(db),
        admin_role=get_settings().admin_role,
        unit_of_work=db,
    )


async def get_audit_record_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditRecordRepository:
    """Audit repository for reads (list, summary)."""
    return AuditRecordRepository(db)
