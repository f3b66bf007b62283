"""Tenant administration: create (with admin principal), get, activate, deactivate."""

from __future__ import annotations

import logging
from datetime import datetime

from gatekeeper.application.dtos.tenant import TenantCreationResult, TenantResult
from gatekeeper.application.events.integration_events import TenantCreatedIntegrationEvent
from gatekeeper.application.interfaces.repositories import (
    IOutboxRepository,
    IPrincipalRepository,
    ITenantRepository,
    IUnitOfWork,
)
from gatekeeper.application.interfaces.services import IPasswordHasher
from gatekeeper.application.services.credential_validator import normalize_email
from gatekeeper.core.tenant_validation import is_valid_tenant_id_format
from gatekeeper.domain.entities import TenantEntity
from gatekeeper.domain.exceptions import (
    ResourceNotFoundException,
    TenantAlreadyExistsException,
    ValidationException,
)
from gatekeeper.shared.context import RequestContext

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class TenantService:
    """Creates tenants and flips their activation (the gate's read contract)."""

    def __init__(
        self,
        tenant_repo: ITenantRepository,
        principal_repo: IPrincipalRepository,
        password_hasher: IPasswordHasher,
        outbox: IOutboxRepository,
        *,
        admin_role: str = ADMIN_ROLE,
        unit_of_work: IUnitOfWork | None = None,
    ) -> None:
        self.tenant_repo = tenant_repo
        self.principal_repo = principal_repo
        self.password_hasher = password_hasher
        self.outbox = outbox
        self.admin_role = admin_role
        self.unit_of_work = unit_of_work

    async def _commit(self) -> None:
        if self.unit_of_work is not None:
            await self.unit_of_work.commit()

    async def create_tenant(
        self,
        ctx: RequestContext,
        tenant_id: str,
        name: str,
        valid_upto: datetime,
        admin_email: str,
        admin_password: str,
        *,
        admin_display_name: str = "Administrator",
        connection_string: str | None = None,
        issuer: str | None = None,
    ) -> TenantCreationResult:
        """Create tenant, its admin principal, and stage TenantCreatedIntegrationEvent.

        Tenant, admin principal and outbox row share one transaction; with a
        unit of work it is committed here, otherwise by the caller.
        """
        if not is_valid_tenant_id_format(tenant_id):
            raise ValidationException("Invalid tenant identifier", field="id")
        entity = TenantEntity(
            id=tenant_id,
            name=name.strip(),
            is_active=True,
            valid_upto=valid_upto,
            connection_string=connection_string,
            admin_email=admin_email,
            issuer=issuer,
        )
        if await self.tenant_repo.get_by_id(entity.id):
            raise TenantAlreadyExistsException(entity.id)

        tenant = await self.tenant_repo.create_tenant(
            entity.id,
            entity.name,
            entity.valid_upto,
            is_active=entity.is_active,
            connection_string=entity.connection_string,
            admin_email=entity.admin_email,
            issuer=entity.issuer,
        )
        admin = await self.principal_repo.create_principal(
            tenant.id,
            admin_email.strip(),
            normalize_email(admin_email),
            admin_display_name,
            await self.password_hasher.hash(admin_password),
            is_active=True,
            email_confirmed=True,
            roles=(self.admin_role,),
        )
        await self.outbox.add(
            TenantCreatedIntegrationEvent(
                tenant_id=tenant.id,
                correlation_id=ctx.correlation_id,
                name=tenant.name,
                admin_user_id=admin.id,
                admin_email=admin.email,
            )
        )
        await self._commit()
        logger.info("Created tenant %s with admin %s", tenant.id, admin.id)
        return TenantCreationResult(tenant=tenant, admin_user_id=admin.id, admin_email=admin.email)

    async def get_tenant(self, tenant_id: str) -> TenantResult:
        tenant = await self.tenant_repo.get_by_id(tenant_id)
        if tenant is None:
            raise ResourceNotFoundException("tenant", tenant_id)
        return tenant

    async def activate(self, tenant_id: str) -> TenantResult:
        return await self._set_active(tenant_id, True)

    async def deactivate(self, tenant_id: str) -> TenantResult:
        """Deactivate tenant; its principals fail the tenant gate from the next request."""
        return await self._set_active(tenant_id, False)

    async def _set_active(self, tenant_id: str, is_active: bool) -> TenantResult:
        current = await self.get_tenant(tenant_id)
        entity = TenantEntity(
            id=current.id,
            name=current.name,
            is_active=current.is_active,
            valid_upto=current.valid_upto,
        )
        if is_active:
            entity.activate()
        else:
            entity.deactivate()
        updated = await self.tenant_repo.set_active(entity.id, entity.is_active)
        if updated is None:
            raise ResourceNotFoundException("tenant", tenant_id)
        await self._commit()
        logger.info("Tenant %s is_active=%s", tenant_id, updated.is_active)
        return updated
