"""User lifecycle operations shared by auth and user endpoints."""

from typing import Any, Dict, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    QuotaExceededException,
    UnauthorizedException,
)
from app.core.security import get_password_hash, verify_password
from app.models.base import utcnow
from app.models.user import User, default_preferences
from app.services.quota import QuotaChecker
from app.services.session import IdLike, find_active_company, parse_uuid

logger = structlog.get_logger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(User.email == email.lower(), User.not_deleted())
    )
    return result.scalar_one_or_none()


async def email_taken(db: AsyncSession, email: str, exclude_id: Optional[IdLike] = None) -> bool:
    query = select(User.id).where(User.email == email.lower(), User.not_deleted())
    if exclude_id is not None:
        query = query.where(User.id != parse_uuid(exclude_id))
    result = await db.execute(query)
    return result.first() is not None


async def create_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str,
    company_id: IdLike,
    role: Optional[str] = None,
    preferences: Optional[Dict[str, Any]] = None,
) -> User:
    """Create a user after the uniqueness and ``users`` quota checks."""
    if await email_taken(db, email):
        raise ConflictException(detail="User with this email already exists")

    company = await find_active_company(db, company_id)
    if company is None:
        raise NotFoundException(detail="Company not found")
    company_uuid = company.id

    limit = await QuotaChecker(db).check_entity_limit(company_uuid, "users")
    if not limit.allowed:
        raise QuotaExceededException("users", limit.limit)

    user = User(
        email=email.lower(),
        password_hash=get_password_hash(password),
        name=name,
        role=role or "user",
        company_id=company_uuid,
        preferences=preferences or default_preferences(),
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictException(detail="User with this email already exists") from exc
    await db.refresh(user)

    logger.info("user_created", user_id=str(user.id), company_id=str(company_uuid))
    return user


async def register_user(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    name: str,
    company_id: IdLike,
    role: Optional[str] = None,
) -> User:
    """Self-service sign-up governed by the company's registration settings.

    Registration must be allowed by the company, the role defaults to its
    ``default_user_role`` and ``admin`` can never be self-assigned.
    """
    company = await find_active_company(db, company_id)
    if company is None:
        raise NotFoundException(detail="Company not found")

    settings = company.settings or {}
    if not settings.get("allow_user_registration", True):
        raise ForbiddenException(detail="Registration is disabled for this company")

    role = role or settings.get("default_user_role") or "user"
    if role == "admin":
        raise ForbiddenException(detail="Admin accounts cannot be self-registered")

    return await create_user(
        db,
        email=email,
        password=password,
        name=name,
        company_id=company.id,
        role=role,
    )


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Check credentials and stamp the login time."""
    user = await get_user_by_email(db, email)

    if not user or not verify_password(password, user.password_hash):
        raise UnauthorizedException(detail="Invalid credentials")

    if not user.is_active:
        raise UnauthorizedException(detail="Account is deactivated")

    user.last_login_at = utcnow()
    await db.flush()
    await db.refresh(user)
    return user


async def change_password(
    db: AsyncSession,
    user_id: IdLike,
    current_password: str,
    new_password: str,
) -> None:
    result = await db.execute(
        select(User).where(User.id == parse_uuid(user_id), User.not_deleted())
    )
    user = result.scalar_one_or_none()

    if not user:
        raise NotFoundException(detail="User not found")

    if not verify_password(current_password, user.password_hash):
        raise UnauthorizedException(detail="Current password is incorrect")

    user.password_hash = get_password_hash(new_password)
    await db.flush()
    logger.info("password_changed", user_id=str(user.id))
