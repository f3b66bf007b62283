"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs or domain value objects only.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from gatekeeper.application.dtos.audit import AuditRecordResult, AuditSummary
    from gatekeeper.application.dtos.principal import PrincipalResult
    from gatekeeper.application.dtos.tenant import TenantResult
    from gatekeeper.application.events.integration_events import IntegrationEvent


class ITenantRepository(Protocol):
    """Protocol for tenant repository (read contract used by the tenant gate)."""

    async def get_by_id(self, tenant_id: str) -> TenantResult | None:
        """Return tenant by identifier, or None."""

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
        """Create tenant. Raises TenantAlreadyExistsException on duplicate id."""

    async def set_active(self, tenant_id: str, is_active: bool) -> TenantResult | None:
        """Update activation flag; return the updated tenant or None if missing."""


class IPrincipalRepository(Protocol):
    """Protocol for principal (user) repository."""

    async def get_by_id(self, user_id: str) -> PrincipalResult | None:
        """Return principal with roles, or None."""

    async def get_by_normalized_email(
        self, tenant_id: str, normalized_email: str
    ) -> PrincipalResult | None:
        """Return principal in tenant by normalized email, or None."""

    async def get_by_refresh_hash(
        self, tenant_id: str, refresh_token_hash: str
    ) -> PrincipalResult | None:
        """Return principal in tenant whose stored refresh hash matches exactly, or None."""

    async def set_refresh_token(
        self, user_id: str, refresh_token_hash: str, expires_at: datetime
    ) -> None:
        """Unconditionally replace the stored refresh token (login)."""

    async def rotate_refresh_token(
        self,
        user_id: str,
        expected_hash: str,
        new_hash: str,
        new_expires_at: datetime,
    ) -> bool:
        """Replace the stored hash only if it still equals expected_hash.

        Returns False when another request rotated first.
        """

    async def clear_refresh_token(self, user_id: str) -> bool:
        """Remove the stored refresh token. Returns True if one was present."""

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
        """Create principal with roles. Raises UserAlreadyExistsException on duplicate email."""

    async def update_password(self, user_id: str, hashed_password: str) -> None:
        """Replace the password hash."""


class IOutboxRepository(Protocol):
    """Protocol for the producer side of the outbox."""

    async def add(self, event: IntegrationEvent) -> str:
        """Stage event in the caller's transaction; return the outbox message id."""


class IAuditRecordRepository(Protocol):
    """Protocol for append-only audit storage and queries."""

    async def add_batch(self, rows: Sequence[Mapping[str, Any]]) -> int:
        """Insert serialized audit rows; return the number written."""

    async def list(
        self,
        *,
        tenant_id: str | None = None,
        event_type: str | None = None,
        user_id: str | None = None,
        min_severity: int | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditRecordResult]:
        """Return records newest first."""

    async def summarize(
        self,
        *,
        tenant_id: str | None = None,
        from_timestamp: datetime | None = None,
        to_timestamp: datetime | None = None,
    ) -> AuditSummary:
        """Return counts grouped by event type, severity, source and tenant."""


class IUnitOfWork(Protocol):
    """Commit point of the request transaction (an AsyncSession satisfies it)."""

    async def commit(self) -> None:
        """Make staged changes durable; raises if the database rejects them."""
