"""Account schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AccountCreate(BaseModel):
    """Account create schema."""

    company_id: UUID
    subscription_id: UUID


class AccountUpdate(BaseModel):
    """Account update schema."""

    company_id: Optional[UUID] = None
    subscription_id: Optional[UUID] = None


class AccountResponse(BaseModel):
    """Account response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    subscription_id: UUID
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
