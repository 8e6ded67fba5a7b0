"""Company schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.session import CompanyBranding, CompanySettings


class CompanyBase(BaseModel):
    """Company base schema."""

    name: str = Field(..., min_length=1, max_length=100)
    logo: Optional[str] = Field(None, max_length=500)


class CompanyCreate(CompanyBase):
    """Company create schema.

    Without ``branding`` the company gets ``app_name`` (or its name) and
    ``primary_color`` (or the default blue).
    """

    app_name: Optional[str] = Field(None, max_length=100)
    primary_color: Optional[str] = Field(None, max_length=20)
    branding: Optional[CompanyBranding] = None
    settings: Optional[CompanySettings] = None


class CompanyUpdate(BaseModel):
    """Company update schema."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    logo: Optional[str] = Field(None, max_length=500)
    branding: Optional[CompanyBranding] = None
    settings: Optional[CompanySettings] = None


class CompanyResponse(CompanyBase):
    """Company response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    branding: CompanyBranding
    settings: CompanySettings
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
