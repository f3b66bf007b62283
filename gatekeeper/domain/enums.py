"""Domain enumerations for the Gatekeeper application.

Enums represent fixed sets of domain values (audit event types, severities,
tags, outbox status).
"""

from enum import Enum, IntEnum, IntFlag


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class AuditEventType(_ValuesMixin, str, Enum):
    """Security audit event types emitted on the auth path."""

    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    TOKEN_ISSUED = "token_issued"
    TOKEN_REVOKED = "token_revoked"
    REFRESH_TOKEN_SUBJECT_MISMATCH = "refresh_token_subject_mismatch"


class AuditSeverity(IntEnum):
    """Audit severity, ordered so that comparisons select 'at least' levels."""

    TRACE = 0
    DEBUG = 1
    INFORMATION = 2
    WARNING = 3
    ERROR = 4
    CRITICAL = 5


class AuditTag(IntFlag):
    """Bit flags attached to audit envelopes (stored as a bigint mask)."""

    NONE = 0
    PII_MASKED = 1
    AUTHENTICATION = 2
    TOKEN = 4
    SECURITY_ANOMALY = 8
    RETAIN_LONG = 16


class OutboxStatus(_ValuesMixin, str, Enum):
    """Derived lifecycle state of an outbox message."""

    PENDING = "pending"
    PROCESSED = "processed"
    DEAD = "dead"
