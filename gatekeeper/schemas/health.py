"""Health check schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness: database reachable plus background worker state."""

    status: str
    database: str
    audit_pending: int = 0
    audit_dropped: int = 0
    outbox_dispatcher: str = "disabled"
