"""Tenant ORM model. Root entity for multi-tenant hierarchy (no tenant_id)."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from gatekeeper.infrastructure.persistence.database import Base
from gatekeeper.infrastructure.persistence.models.mixins import TimestampMixin


class Tenant(TimestampMixin, Base):
    """Root tenant entity. Table: tenant. Id is the caller-chosen identifier (slug)."""

    __tablename__ = "tenant"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true"), index=True
    )
    valid_upto: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    connection_string: Mapped[str | None] = mapped_column(String, nullable=True)
    admin_email: Mapped[str | None] = mapped_column(String, nullable=True)
    issuer: Mapped[str | None] = mapped_column(String, nullable=True)
