"""Session projection schemas."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class NotificationPreferences(BaseModel):
    email: bool = True
    push: bool = True


class UserPreferences(BaseModel):
    theme: str = "light"
    language: str = "en"
    notifications: NotificationPreferences = NotificationPreferences()


class CompanyBranding(BaseModel):
    app_name: str
    logo: Optional[str] = None
    primary_color: str
    secondary_color: Optional[str] = None
    accent_color: Optional[str] = None


class CompanySettings(BaseModel):
    allow_user_registration: bool = True
    require_email_verification: bool = True
    default_user_role: str = "user"


class SubscriptionSetting(BaseModel):
    entity: str
    create_limit_registry: int


class UserSession(BaseModel):
    """User part of the session; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    role: str
    company_id: UUID
    preferences: UserPreferences


class CompanySession(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    logo: Optional[str] = None
    branding: CompanyBranding
    settings: CompanySettings


class SubscriptionSession(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    settings: List[SubscriptionSetting] = []


class Session(BaseModel):
    """Read-only projection of user, company and subscription."""

    user: UserSession
    company: CompanySession
    subscription: SubscriptionSession


class EntityLimit(BaseModel):
    """Quota check result; ``limit == -1`` means unlimited."""

    entity: str
    allowed: bool
    limit: int
    current: int
