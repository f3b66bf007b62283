"""Principal repository (app_user + user_role). Returns application DTOs.

Refresh rotation is a single conditional UPDATE keyed on the previously
stored hash; the affected row count tells the caller whether it won. The
updates bypass the identity map, so reads refresh already-loaded rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from gatekeeper.application.dtos.principal import PrincipalResult
from gatekeeper.domain.exceptions import UserAlreadyExistsException
from gatekeeper.infrastructure.persistence.models.user import User, UserRole
from gatekeeper.infrastructure.persistence.repositories.base import BaseRepository
from gatekeeper.shared.utils.datetime import ensure_utc


def _user_to_result(u: User, roles: Sequence[str]) -> PrincipalResult:
    """Map ORM User (+ role names) to application PrincipalResult."""
    return PrincipalResult(
        id=u.id,
        tenant_id=u.tenant_id,
        email=u.email,
        normalized_email=u.normalized_email,
        display_name=u.display_name or "",
        hashed_password=u.hashed_password,
        is_active=bool(u.is_active),
        email_confirmed=bool(u.email_confirmed),
        refresh_token_hash=u.refresh_token_hash,
        refresh_token_expires_at=ensure_utc(u.refresh_token_expires_at),
        external_id=u.external_id,
        roles=tuple(sorted(roles)),
    )


class UserRepository(BaseRepository[User]):
    """Principal persistence (IPrincipalRepository)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get_roles(self, user_id: str) -> list[str]:
        """Return role names assigned to user."""
        result = await self.db.execute(
            select(UserRole.role).where(UserRole.user_id == user_id).order_by(UserRole.role)
        )
        return list(result.scalars().all())

    async def _with_roles(self, user: User | None) -> PrincipalResult | None:
        if user is None:
            return None
        return _user_to_result(user, await self.get_roles(user.id))

    async def get_by_id(self, user_id: str) -> PrincipalResult | None:
        result = await self.db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        return await self._with_roles(result.scalar_one_or_none())

    async def get_by_normalized_email(
        self, tenant_id: str, normalized_email: str
    ) -> PrincipalResult | None:
        """Get principal by normalized email within tenant."""
        result = await self.db.execute(
            select(User).where(
                and_(User.tenant_id == tenant_id, User.normalized_email == normalized_email)
            ).execution_options(populate_existing=True)
        )
        return await self._with_roles(result.scalar_one_or_none())

    async def get_by_refresh_hash(
        self, tenant_id: str, refresh_token_hash: str
    ) -> PrincipalResult | None:
        """Get principal whose stored refresh hash equals refresh_token_hash (tenant-scoped)."""
        result = await self.db.execute(
            select(User).where(
                and_(
                    User.tenant_id == tenant_id,
                    User.refresh_token_hash == refresh_token_hash,
                )
            ).execution_options(populate_existing=True)
        )
        return await self._with_roles(result.scalar_one_or_none())

    async def set_refresh_token(
        self, user_id: str, refresh_token_hash: str, expires_at: datetime
    ) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(refresh_token_hash=refresh_token_hash, refresh_token_expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )

    async def rotate_refresh_token(
        self,
        user_id: str,
        expected_hash: str,
        new_hash: str,
        new_expires_at: datetime,
    ) -> bool:
        """Compare-and-swap the stored refresh hash. True only for the winning caller."""
        result = await self.db.execute(
            update(User)
            .where(and_(User.id == user_id, User.refresh_token_hash == expected_hash))
            .values(refresh_token_hash=new_hash, refresh_token_expires_at=new_expires_at)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def clear_refresh_token(self, user_id: str) -> bool:
        result = await self.db.execute(
            update(User)
            .where(and_(User.id == user_id, User.refresh_token_hash.is_not(None)))
            .values(refresh_token_hash=None, refresh_token_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def create_principal(
        self,
        tenant_id: str,
        email: str,
        normalized_email: str,
        display_name: str,
        hashed_password: str,
        *,
        is_active: bool = True,
        email_confirmed: bool = False,
        roles: Sequence[str] = (),
    ) -> PrincipalResult:
        """Create principal and role rows; raises UserAlreadyExistsException on duplicate email."""
        user = User(
            tenant_id=tenant_id,
            email=email,
            normalized_email=normalized_email,
            display_name=display_name,
            hashed_password=hashed_password,
            is_active=is_active,
            email_confirmed=email_confirmed,
        )
        try:
            created = await self.create(user)
        except IntegrityError:
            raise UserAlreadyExistsException()
        unique_roles = sorted(set(roles))
        for role in unique_roles:
            self.db.add(UserRole(tenant_id=tenant_id, user_id=created.id, role=role))
        if unique_roles:
            await self.db.flush()
        return _user_to_result(created, unique_roles)

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(hashed_password=hashed_password)
            .execution_options(synchronize_session=False)
        )
