"""Authentication schemas."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.schemas.session import Session


class Identity(BaseModel):
    """Resolved caller identity, as returned by the token authority."""

    model_config = ConfigDict(populate_by_name=True)

    sub: str
    username: Optional[str] = None
    email: Optional[str] = None
    roles: List[str] = []
    permissions: List[str] = []
    company_id: Optional[str] = Field(None, alias="companyId")


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=6)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "password123"
            }
        }
    )


class RegisterRequest(BaseModel):
    """User registration request schema."""

    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)
    role: Optional[str] = Field(None, pattern=r"^(admin|user|manager)$")
    company_id: str


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""

    refresh_token: str


class AuthResponse(BaseModel):
    """Token pair plus the freshly built session."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    session: Session


class ChangePasswordRequest(BaseModel):
    """Password change schema."""

    current_password: str = Field(..., min_length=6)
    new_password: str = Field(..., min_length=6)


class VerifyTokenRequest(BaseModel):
    token: str


class VerifyTokenResponse(BaseModel):
    valid: bool
    user: Optional[Identity] = None
    message: str
    error: Optional[str] = None
