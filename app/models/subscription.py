"""Subscription plan model."""

from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import BaseModel


class Subscription(BaseModel):
    """Plan with ordered per-entity create limits.

    ``settings`` is a list of ``{"entity": str, "create_limit_registry": int}``.
    Duplicate entity names are allowed; the first entry wins.
    """

    __tablename__ = "subscriptions"

    # Unique among non-deleted rows, enforced on create/update
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    settings: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)

    def limit_for(self, entity: str) -> Optional[int]:
        """Create limit configured for ``entity``, or None when unlimited."""
        for setting in self.settings or []:
            if setting.get("entity") == entity:
                return int(setting["create_limit_registry"])
        return None
