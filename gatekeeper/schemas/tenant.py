"""Tenant API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, field_validator

from gatekeeper.core.tenant_validation import TENANT_ID_MAX_LENGTH
from gatekeeper.schemas.auth import PASSWORD_MIN_LENGTH


class TenantCreateRequest(BaseModel):
    """Request body for POST /tenants. The identifier is chosen by the caller."""

    id: str = Field(
        ...,
        min_length=1,
        max_length=TENANT_ID_MAX_LENGTH,
        pattern=r"^[A-Za-z0-9_-]+$",
        description="Tenant identifier sent later in the tenant header",
    )
    name: str = Field(..., min_length=1, max_length=255)
    valid_upto: datetime = Field(..., description="Validity cutoff (ISO8601, timezone-aware)")
    admin_email: EmailStr
    admin_password: SecretStr
    admin_display_name: str = Field(default="Administrator", max_length=200)
    connection_string: SecretStr | None = None
    issuer: str | None = Field(default=None, max_length=255)

    @field_validator("admin_password")
    @classmethod
    def validate_admin_password_length(cls, v: SecretStr) -> SecretStr:
        if len(v.get_secret_value()) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"admin_password must be at least {PASSWORD_MIN_LENGTH} characters")
        return v

    @field_validator("valid_upto")
    @classmethod
    def require_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("valid_upto must include a timezone offset")
        return v


class TenantResponse(BaseModel):
    """Tenant read model. Connection string is never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    is_active: bool
    valid_upto: datetime
    admin_email: str | None = None
    issuer: str | None = None


class TenantCreateResponse(BaseModel):
    """Response after tenant creation. Admin password is never returned."""

    tenant: TenantResponse
    admin_user_id: str
    admin_email: str
