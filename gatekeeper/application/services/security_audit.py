"""Security audit emission for the authentication path.

Every method builds an AuditEnvelope from the explicit RequestContext and
hands it to the audit publisher. Emission is fire-and-forget: it never
blocks the request and never raises into it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from gatekeeper.application.interfaces.services import IAuditPublisher
from gatekeeper.application.services.token_digest import token_fingerprint
from gatekeeper.domain.enums import AuditEventType, AuditSeverity, AuditTag
from gatekeeper.domain.value_objects import AuditEnvelope, ClaimSet, TokenPair
from gatekeeper.shared.context import RequestContext
from gatekeeper.shared.utils.datetime import utc_now
from gatekeeper.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class SecurityAuditService:
    """Builds security audit envelopes and publishes them without blocking."""

    def __init__(
        self,
        publisher: IAuditPublisher,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.publisher = publisher
        self._clock = clock

    def login_succeeded(
        self, ctx: RequestContext, claims: ClaimSet, *, method: str = "password"
    ) -> bool:
        return self._emit(
            ctx,
            AuditEventType.LOGIN_SUCCEEDED,
            AuditSeverity.INFORMATION,
            AuditTag.AUTHENTICATION,
            {"method": method, "email": claims.email, "roles": list(claims.roles)},
            user_id=claims.subject,
            user_name=claims.display_name or claims.email,
        )

    def login_failed(
        self,
        ctx: RequestContext,
        *,
        reason: str,
        email: str | None = None,
        method: str = "password",
        user_id: str | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"method": method, "reason": reason}
        if email:
            payload["email"] = email
        return self._emit(
            ctx,
            AuditEventType.LOGIN_FAILED,
            AuditSeverity.WARNING,
            AuditTag.AUTHENTICATION,
            payload,
            user_id=user_id,
        )

    def token_issued(
        self,
        ctx: RequestContext,
        claims: ClaimSet,
        pair: TokenPair,
        *,
        grant: str = "password",
    ) -> bool:
        return self._emit(
            ctx,
            AuditEventType.TOKEN_ISSUED,
            AuditSeverity.INFORMATION,
            AuditTag.TOKEN,
            {
                "grant": grant,
                "jti": pair.jti or claims.jti,
                "token_fingerprint": token_fingerprint(pair.access_token),
                "access_token_expires_at": pair.access_token_expires_at.isoformat(),
                "refresh_token_expires_at": pair.refresh_token_expires_at.isoformat(),
            },
            user_id=claims.subject,
            user_name=claims.display_name or claims.email,
        )

    def token_revoked(
        self,
        ctx: RequestContext,
        subject_id: str,
        *,
        reason: str,
        access_token: str | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"reason": reason}
        if access_token:
            payload["token_fingerprint"] = token_fingerprint(access_token)
        return self._emit(
            ctx,
            AuditEventType.TOKEN_REVOKED,
            AuditSeverity.INFORMATION,
            AuditTag.TOKEN,
            payload,
            user_id=subject_id,
        )

    def refresh_subject_mismatch(
        self,
        ctx: RequestContext,
        subject_id: str | None,
        *,
        hinted_subject: str | None,
        reason: str,
        access_token: str | None = None,
    ) -> bool:
        payload: dict[str, Any] = {"reason": reason, "hinted_subject": hinted_subject}
        if access_token:
            payload["token_fingerprint"] = token_fingerprint(access_token)
        return self._emit(
            ctx,
            AuditEventType.REFRESH_TOKEN_SUBJECT_MISMATCH,
            AuditSeverity.CRITICAL,
            AuditTag.TOKEN | AuditTag.SECURITY_ANOMALY | AuditTag.RETAIN_LONG,
            payload,
            user_id=subject_id,
        )

    def _emit(
        self,
        ctx: RequestContext,
        event_type: AuditEventType,
        severity: AuditSeverity,
        tags: AuditTag,
        payload: dict[str, Any],
        *,
        user_id: str | None = None,
        user_name: str | None = None,
    ) -> bool:
        try:
            now = self._clock()
            envelope = AuditEnvelope(
                id=generate_cuid(),
                occurred_at=now,
                received_at=now,
                event_type=event_type,
                severity=severity,
                tenant_id=ctx.tenant_id or None,
                user_id=user_id or ctx.user_id,
                user_name=user_name or ctx.user_name,
                trace_id=ctx.trace_id,
                span_id=ctx.span_id,
                correlation_id=ctx.correlation_id,
                request_id=ctx.request_id,
                source=ctx.source,
                tags=tags,
                payload={**payload, **_client_fields(ctx)},
            )
            return self.publisher.publish(envelope)
        except Exception:
            # Audit must never fail the request it describes.
            logger.exception("Failed to emit security audit event %s", event_type.value)
            return False


def _client_fields(ctx: RequestContext) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    if ctx.ip_address:
        fields["ip_address"] = ctx.ip_address
    if ctx.user_agent:
        fields["user_agent"] = ctx.user_agent
    return fields
