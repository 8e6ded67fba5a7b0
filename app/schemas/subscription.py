"""Subscription schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.session import SubscriptionSetting


class SubscriptionBase(BaseModel):
    """Subscription base schema."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    settings: List[SubscriptionSetting] = []


class SubscriptionCreate(SubscriptionBase):
    """Subscription create schema."""

    pass


class SubscriptionUpdate(BaseModel):
    """Subscription update schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    settings: Optional[List[SubscriptionSetting]] = None


class SubscriptionSettingsUpdate(BaseModel):
    """Replace the ordered settings list."""

    settings: List[SubscriptionSetting]


class SubscriptionResponse(SubscriptionBase):
    """Subscription response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
