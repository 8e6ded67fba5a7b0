"""Company (tenant) model."""

from typing import Any, Dict, Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


DEFAULT_PRIMARY_COLOR = "#3B82F6"


def default_company_settings() -> Dict[str, Any]:
    return {
        "allow_user_registration": True,
        "require_email_verification": True,
        "default_user_role": "user",
    }


class Company(BaseModel):
    """Tenant: owns users and exactly one active account."""

    __tablename__ = "companies"

    # Unique among non-deleted rows, enforced on create/update
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    branding: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    settings: Mapped[Dict[str, Any]] = mapped_column(
        JSON, default=default_company_settings, nullable=False
    )
