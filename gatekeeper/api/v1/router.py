"""API v1 router aggregation."""

from fastapi import APIRouter

from gatekeeper.api.v1.endpoints import audits, auth, health, tenants

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(tenants.router, prefix="/tenants", tags=["tenants"])
api_router.include_router(audits.router, prefix="/audits", tags=["audits"])
