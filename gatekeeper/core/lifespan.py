"""Application lifespan: startup and shutdown.

Startup validates the JWT configuration (a ConfigurationException aborts
startup), builds the process-wide components kept on app.state, then
starts the audit consumer and the outbox dispatcher. Shutdown stops them
in reverse order and disposes the database engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from gatekeeper.core.config import Settings, get_settings, validate_jwt_settings
from gatekeeper.infrastructure.messaging import OutboxDispatcher, build_event_registry
from gatekeeper.infrastructure.persistence.database import dispose_engine, get_session_factory
from gatekeeper.infrastructure.security.token_issuer import TokenIssuer
from gatekeeper.infrastructure.services import (
    AuditPipeline,
    ChannelAuditPublisher,
    PeriodicTask,
    SqlAuditSink,
)
from gatekeeper.shared.telemetry.logging import setup_logging

logger = logging.getLogger(__name__)


def init_app_state(app: FastAPI, settings: Settings) -> None:
    """Build token issuer, audit publisher, event registry and outbox task on app.state.

    Nothing is started here; tests call this directly (the ASGI test
    transport does not run the lifespan) and drive the workers by hand.
    """
    validate_jwt_settings(settings)
    app.state.token_issuer = TokenIssuer.from_settings(settings)

    session_factory = get_session_factory()
    app.state.audit_publisher = ChannelAuditPublisher(
        AuditPipeline.default(SqlAuditSink(session_factory)),
        capacity=settings.audit_queue_capacity,
        batch_size=settings.audit_batch_size,
        flush_interval_seconds=settings.audit_flush_interval_seconds,
    )

    app.state.event_registry = build_event_registry()
    app.state.outbox_dispatcher = OutboxDispatcher(
        session_factory,
        app.state.event_registry,
        batch_size=settings.outbox_batch_size,
        max_retries=settings.outbox_max_retries,
        lease_seconds=settings.outbox_lease_seconds,
    )
    app.state.outbox_task = (
        PeriodicTask(
            "outbox-dispatcher",
            settings.outbox_dispatch_interval_seconds,
            app.state.outbox_dispatcher.dispatch_once,
        )
        if settings.outbox_enabled
        else None
    )


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown."""
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    init_app_state(app, settings)
    app.state.audit_publisher.start()
    if app.state.outbox_task is not None:
        app.state.outbox_task.start()
    logger.info("%s %s started", settings.app_name, settings.app_version)

    yield

    # ---- Shutdown ----
    if app.state.outbox_task is not None:
        await app.state.outbox_task.stop()
    await app.state.audit_publisher.stop()
    await dispose_engine()
    logger.info("%s stopped", settings.app_name)
