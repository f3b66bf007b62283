"""Explicit request context passed through every auth and audit call.

Replaces ambient accessors (context variables, framework globals): the HTTP
layer builds one RequestContext per request and hands it down, so services
and tests never look up the current tenant or correlation id implicitly.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class RequestContext:
    """Immutable snapshot of who/where a request came from."""

    tenant_id: str
    correlation_id: str | None = None
    trace_id: str | None = None
    span_id: str | None = None
    request_id: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    source: str = "api"
    user_id: str | None = None
    user_name: str | None = None

    def with_user(self, user_id: str, user_name: str | None = None) -> "RequestContext":
        """Return a copy bound to an authenticated principal."""
        return replace(self, user_id=user_id, user_name=user_name)

    @classmethod
    def system(cls, tenant_id: str, source: str = "system") -> "RequestContext":
        """Context for background jobs and scripts (no client)."""
        return cls(tenant_id=tenant_id, source=source)
