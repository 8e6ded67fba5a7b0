"""Account model: binds a company to its subscription plan."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel, CompanyScopedMixin

if TYPE_CHECKING:
    from app.models.subscription import Subscription


class Account(BaseModel, CompanyScopedMixin):
    """One non-deleted account per company, backed by a partial unique index."""

    __tablename__ = "accounts"

    subscription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("subscriptions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # Relationships
    subscription: Mapped["Subscription"] = relationship("Subscription", lazy="raise")

    __table_args__ = (
        Index(
            "uq_accounts_company_id_live",
            "company_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )
