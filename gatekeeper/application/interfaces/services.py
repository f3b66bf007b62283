"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from gatekeeper.application.dtos.tenant import TenantResult
    from gatekeeper.domain.value_objects import AuditEnvelope, ClaimSet, TokenPair


class ITokenIssuer(Protocol):
    """Protocol for access/refresh token issuance and verification."""

    def issue(
        self, subject_id: str, claims: ClaimSet, tenant_context: TenantResult
    ) -> TokenPair:
        """Return a signed access token and a fresh refresh token."""

    def decode_access_token(self, token: str) -> ClaimSet:
        """Fully validate token; raise ValueError if invalid."""

    def read_subject_hint(self, token: str) -> str:
        """Return sub of a token signed by this issuer, expiry ignored; raise ValueError otherwise."""


class IPasswordHasher(Protocol):
    """Protocol for password hashing (slow hash off the event loop)."""

    async def hash(self, password: str) -> str: ...

    async def verify(self, plain_password: str, hashed_password: str) -> bool: ...

    async def burn_dummy(self, plain_password: str) -> None:
        """Spend the cost of one verification when no principal exists."""


class IAuditPublisher(Protocol):
    """Protocol for the non-blocking audit channel."""

    def publish(self, envelope: AuditEnvelope) -> bool:
        """Enqueue without blocking. Never raises.

        Returns False when an older envelope was shed to make room or the
        publisher is closed.
        """

    @property
    def dropped_count(self) -> int: ...


class IAuditSink(Protocol):
    """Protocol for the terminal stage of the audit pipeline (serialized rows)."""

    async def write(self, rows: Sequence[Mapping[str, Any]]) -> None: ...
