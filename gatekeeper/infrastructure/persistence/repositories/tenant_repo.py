"""Tenant repository. Returns application DTOs."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.domain.exceptions import TenantAlreadyExistsException
from gatekeeper.infrastructure.persistence.models.tenant import Tenant
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.shared.utils.datetime import ensure_utc


def _tenant_to_result(t: Tenant) -> TenantResult:
    """Map ORM Tenant to application TenantResult."""
    valid_upto = ensure_utc(t.valid_upto)
    assert valid_upto is not None
    return TenantResult(
        id=t.id,
        name=t.name,
        is_active=bool(t.is_active),
        valid_upto=valid_upto,
        connection_string=t.connection_string,
        admin_email=t.admin_email,
        issuer=t.issuer,
    )


class TenantRepository(BaseRepository[Tenant]):
    """Tenant persistence (ITenantRepository)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Tenant)

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:
        """Get tenant by identifier."""
        tenant = await self.get_entity_by_id(tenant_id)
        return _tenant_to_result(tenant) if tenant else None

    async def create_tenant(
        self,
        tenant_id: str,
        name: str,
        valid_upto: datetime,
        *,
        is_active: bool = True,
        connection_string: str | None = None,
        admin_email: str | None = None,
        issuer: str | None = None,
    ) -> TenantResult:
        """Create tenant; raises TenantAlreadyExistsException on duplicate id."""
        tenant = Tenant(
            id=tenant_id,
            name=name,
            is_active=is_active,
            valid_upto=valid_upto,
            connection_string=connection_string,
            admin_email=admin_email,
            issuer=issuer,
        )
        try:
            created = await self.create(tenant)
        except IntegrityError:
            raise TenantAlreadyExistsException(tenant_id)
        return _tenant_to_result(created)

    async def set_active(self, tenant_id: str, is_active: bool) -> TenantResult | None:
        """Set the activation flag; return the updated tenant or None."""
        result = await self.db.execute(
            update(Tenant)
            .where(Tenant.id == tenant_id)
            .values(is_active=is_active)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            return None
        tenant = await self.get_entity_by_id(tenant_id)
        if tenant is None:
            return None
        await self.db.refresh(tenant)
        return _tenant_to_result(tenant)
