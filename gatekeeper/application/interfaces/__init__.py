"""Application ports (Protocols).

No runtime imports from gatekeeper.infrastructure or gatekeeper.api.
"""

from gatekeeper.application.interfaces.repositories import (
    IAuditRecordRepository,
    IOutboxRepository,
    IPrincipalRepository,
    ITenantRepository,
    IUnitOfWork,
)
from gatekeeper.application.interfaces.services import (
    IAuditPublisher,
    IAuditSink,
    IPasswordHasher,
    ITokenIssuer,
)

__all__ = [
    "IAuditPublisher",
    "IAuditRecordRepository",
    "IAuditSink",
    "IOutboxRepository",
    "IPasswordHasher",
    "IPrincipalRepository",
    "ITenantRepository",
    "ITokenIssuer",
    "IUnitOfWork",
]
