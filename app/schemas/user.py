"""User schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.session import UserPreferences


class UserBase(BaseModel):
    """User base schema."""

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    role: str = Field("user", pattern=r"^(admin|user|manager)$")


class UserCreate(UserBase):
    """User create schema."""

    password: str = Field(..., min_length=6)
    preferences: Optional[UserPreferences] = None


class UserUpdate(BaseModel):
    """User update schema."""

    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, pattern=r"^(admin|user|manager)$")
    is_active: Optional[bool] = None
    preferences: Optional[UserPreferences] = None


class UserResponse(UserBase):
    """User response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID
    is_active: bool
    email_verified: bool
    last_login_at: Optional[datetime] = None
    preferences: UserPreferences
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
