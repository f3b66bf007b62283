"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Maps domain and framework
exceptions to HTTP responses. Authentication failures of every kind share
one 401 body; the internal reason is logged here and never sent.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gatekeeper.core.config import get_settings
from gatekeeper.domain.exceptions import AuthenticationException, GatekeeperException

logger = logging.getLogger(__name__)

# Map domain error_code to HTTP status when applicable
_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "TENANT_ALREADY_EXISTS": 409,
    "USER_ALREADY_EXISTS": 409,
    "PERMISSION_DENIED": 403,
    "VALIDATION_ERROR": 400,
    "CONFIGURATION_ERROR": 500,
    "DELIVERY_FAILED": 500,
}

GENERIC_AUTH_BODY = {
    "error": "AUTHENTICATION_FAILED",
    "message": "Invalid credentials",
    "details": {},
}


def _authentication_exception_handler(
    request: Request, exc: AuthenticationException
) -> JSONResponse:
    """401 with a body that does not reveal which check failed."""
    logger.info(
        "Authentication rejected (%s: %s) %s %s request_id=%s",
        exc.error_code,
        exc.reason,
        request.method,
        request.url.path,
        getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=401,
        content=GENERIC_AUTH_BODY,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _gatekeeper_exception_handler(
    request: Request, exc: GatekeeperException
) -> JSONResponse:
    """Return JSON from GatekeeperException.to_dict() with the mapped status code."""
    status = _ERROR_CODE_STATUS.get(exc.error_code, 400)
    if status >= 500:
        logger.error("%s on %s %s: %s", exc.error_code, request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=status,
            content={"error": exc.error_code, "message": "Internal server error", "details": {}},
        )
    return JSONResponse(status_code=status, content=exc.to_dict())


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with validation error details (input values omitted)."""
    errors = [
        {k: v for k, v in err.items() if k not in ("input", "ctx", "url")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": jsonable_encoder(errors),
        },
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Return JSON for Starlette HTTP exceptions (status + detail)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "HTTP_ERROR", "message": exc.detail, "details": {}},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception: %s", exc)
    detail: Any = str(exc) if get_settings().debug else "Internal server error"
    return JSONResponse(
        status_code=500,
        content={"error": "INTERNAL_ERROR", "message": detail, "details": {}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    AuthenticationException is registered before its GatekeeperException
    base; Starlette resolves handlers by walking the exception's MRO.
    """
    app.add_exception_handler(AuthenticationException, _authentication_exception_handler)
    app.add_exception_handler(GatekeeperException, _gatekeeper_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
