"""DTOs for principals and authentication results."""

from dataclasses import dataclass
from datetime import datetime

from gatekeeper.application.dtos.tenant import TenantResult
from gatekeeper.domain.value_objects import ClaimSet


@dataclass(frozen=True)
class PrincipalResult:
    """Principal read-model. Carries the password hash for verification only;
    never serialized to API responses.
    """

    id: str
    tenant_id: str
    email: str
    normalized_email: str
    display_name: str
    hashed_password: str
    is_active: bool
    email_confirmed: bool
    refresh_token_hash: str | None = None
    refresh_token_expires_at: datetime | None = None
    external_id: str | None = None
    roles: tuple[str, ...] = ()

    @property
    def is_usable(self) -> bool:
        """True when the account may receive tokens."""
        return self.is_active and self.email_confirmed


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """Outcome of a successful credential or refresh validation."""

    subject_id: str
    claims: ClaimSet
    tenant: TenantResult
    # Hash of the refresh token that was presented (refresh path only); the
    # caller rotates on it.
    presented_refresh_hash: str | None = None
