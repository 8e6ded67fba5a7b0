"""Database models module."""

from app.models.base import BaseModel, TimestampMixin, SoftDeleteMixin, CompanyScopedMixin
from app.models.user import User
from app.models.company import Company
from app.models.subscription import Subscription
from app.models.account import Account

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "SoftDeleteMixin",
    "CompanyScopedMixin",
    "User",
    "Company",
    "Subscription",
    "Account",
]
