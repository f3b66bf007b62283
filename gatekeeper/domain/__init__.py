"""Domain layer: entities, value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from gatekeeper.domain.entities import TenantEntity
from gatekeeper.domain.enums import AuditEventType, AuditSeverity, AuditTag, OutboxStatus
from gatekeeper.domain.exceptions import (
    AccountNotUsableException,
    AuthenticationException,
    AuthorizationException,
    ConfigurationException,
    DeliveryFailedException,
    GatekeeperException,
    InvalidCredentialsException,
    ResourceNotFoundException,
    SubjectMismatchException,
    TenantInvalidException,
    ValidationException,
)
from gatekeeper.domain.value_objects import AuditEnvelope, ClaimSet, TokenPair

__all__ = [
    # Entities
    "TenantEntity",
    # Enums
    "AuditEventType",
    "AuditSeverity",
    "AuditTag",
    "OutboxStatus",
    # Exceptions
    "AccountNotUsableException",
    "AuthenticationException",
    "AuthorizationException",
    "ConfigurationException",
    "DeliveryFailedException",
    "GatekeeperException",
    "InvalidCredentialsException",
    "ResourceNotFoundException",
    "SubjectMismatchException",
    "TenantInvalidException",
    "ValidationException",
    # Value objects
    "AuditEnvelope",
    "ClaimSet",
    "TokenPair",
]
