"""Auth API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from gatekeeper.domain.value_objects import TokenPair

PASSWORD_MIN_LENGTH = 8


class LoginRequest(BaseModel):
    """Request body for POST /auth/token. Tenant comes from the tenant header."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)


class RefreshRequest(BaseModel):
    """Request body for POST /auth/refresh.

    access_token is optional: when present it must be an access token issued
    by this service (expired is fine) for the same subject as the refresh token.
    """

    refresh_token: str = Field(..., min_length=1, max_length=512)
    access_token: str | None = Field(default=None, max_length=8192)


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    email: EmailStr
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=1024,
        description=f"Password (min {PASSWORD_MIN_LENGTH} characters)",
    )
    display_name: str = Field(default="", max_length=200)


class ChangePasswordRequest(BaseModel):
    """Request body for POST /auth/change-password."""

    current_password: str = Field(..., min_length=1, max_length=1024)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=1024)

    @model_validator(mode="after")
    def passwords_differ(self) -> "ChangePasswordRequest":
        if self.current_password == self.new_password:
            raise ValueError("new_password must differ from current_password")
        return self


class TokenResponse(BaseModel):
    """Issued token pair."""

    access_token: str
    refresh_token: str
    access_token_expires_at: datetime
    refresh_token_expires_at: datetime
    token_type: str = "bearer"

    @classmethod
    def from_pair(cls, pair: TokenPair) -> "TokenResponse":
        return cls(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            access_token_expires_at=pair.access_token_expires_at,
            refresh_token_expires_at=pair.refresh_token_expires_at,
        )


class PrincipalResponse(BaseModel):
    """Public view of a principal (no password or token material)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    email: str
    display_name: str
    is_active: bool
    email_confirmed: bool
    roles: list[str] = Field(default_factory=list)


class ClaimsResponse(BaseModel):
    """Claims of the presented access token (GET /auth/me)."""

    subject: str
    email: str
    display_name: str
    tenant_id: str
    roles: list[str]
    jti: str
