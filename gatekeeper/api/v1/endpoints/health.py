"""Health check endpoints: liveness and readiness."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from gatekeeper.core.config import get_settings
from gatekeeper.infrastructure.persistence.database import get_session_factory
from gatekeeper.schemas.health import HealthResponse, ReadinessResponse
from gatekeeper.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return simple ok status for liveness."""
    settings = get_settings()
    return HealthResponse(status="ok", service=settings.app_name, version=settings.app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable", "model": ReadinessResponse}},
)
async def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """200 when the database answers; 503 otherwise. Reports audit/outbox worker state."""
    publisher = getattr(request.app.state, "audit_publisher", None)
    outbox_task = getattr(request.app.state, "outbox_task", None)
    dispatcher_state = "disabled"
    if outbox_task is not None:
        dispatcher_state = "running" if outbox_task.running else "stopped"
    response = ReadinessResponse(
        status="ready",
        database="ok",
        audit_pending=publisher.pending if publisher else 0,
        audit_dropped=publisher.dropped_count if publisher else 0,
        outbox_dispatcher=dispatcher_state,
    )
    try:
        async with get_session_factory()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        return JSONResponse(
            status_code=503,
            content=response.model_copy(
                update={"status": "not_ready", "database": "unavailable"}
            ).model_dump(),
        )
    return response
