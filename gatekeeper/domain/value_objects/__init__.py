"""Domain value objects and shared value types."""

from gatekeeper.domain.value_objects.audit import AuditEnvelope
from gatekeeper.domain.value_objects.tokens import ClaimSet, TokenPair

__all__ = [
    "AuditEnvelope",
    "ClaimSet",
    "TokenPair",
]
