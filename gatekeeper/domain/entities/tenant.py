"""Tenant domain entity.

Represents the business concept of a tenant, independent of persistence.
The auth path only reads tenants; activation is changed by tenant
administration.
"""

from dataclasses import dataclass
from datetime import datetime

from gatekeeper.domain.exceptions import ValidationException


@dataclass
class TenantEntity:
    """Domain entity for tenant activation and validity.

    A tenant is usable only while active and before its validity cutoff.
    """

    id: str
    name: str
    is_active: bool
    valid_upto: datetime
    connection_string: str | None = None
    admin_email: str | None = None
    issuer: str | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate tenant business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Tenant ID is required", field="id")
        if not self.name or not self.name.strip():
            raise ValidationException("Tenant name is required", field="name")

    def is_expired(self, now: datetime) -> bool:
        """Return True when now is past the validity cutoff."""
        return now > self.valid_upto

    def is_usable(self, now: datetime) -> bool:
        """Return True when the tenant may authenticate principals."""
        return self.is_active and not self.is_expired(now)

    def activate(self) -> None:
        """Set tenant active. Idempotent."""
        self.is_active = True

    def deactivate(self) -> None:
        """Set tenant inactive. Idempotent."""
        self.is_active = False
