"""Pydantic request/response schemas for the API."""

from gatekeeper.schemas.auth import (
    ChangePasswordRequest,
    ClaimsResponse,
    LoginRequest,
    PrincipalResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)

__all__ = [
    "ChangePasswordRequest",
    "ClaimsResponse",
    "LoginRequest",
    "PrincipalResponse",
    "RefreshRequest",
    "RegisterRequest",
    "TokenResponse",
]
