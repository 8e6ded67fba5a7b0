"""User model."""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel, CompanyScopedMixin


USER_ROLES = ("admin", "user", "manager")


def default_preferences() -> Dict[str, Any]:
    return {
        "theme": "light",
        "language": "en",
        "notifications": {"email": True, "push": True},
    }


class User(BaseModel, CompanyScopedMixin):
    """Company user able to log in."""

    __tablename__ = "users"

    # Stored lower-cased; unique among non-deleted rows, enforced on create/update
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    role: Mapped[str] = mapped_column(String(20), default="user", nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    preferences: Mapped[Dict[str, Any]] = mapped_column(
        JSON, default=default_preferences, nullable=False
    )

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user', 'manager')", name="role"),
        Index(
            "uq_users_email_live",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
