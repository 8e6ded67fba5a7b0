"""User management endpoints."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.database import get_db
from app.core.exceptions import ConflictException, NotFoundException
from app.models.user import User
from app.schemas.common import PaginatedResponse
from app.schemas.user import UserCreate, UserResponse, UserUpdate
from app.services import users as user_service
from app.api.deps import company_scope

router = APIRouter()


async def _get_user(db: AsyncSession, user_id: uuid.UUID, company_id: uuid.UUID) -> User:
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.company_id == company_id,
            User.not_deleted(),
        )
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundException(detail="User not found")
    return user


@router.get("", response_model=PaginatedResponse[UserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    role: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    email_verified: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(permissions=["users:read"])),
):
    """List the company's users with pagination."""
    query = select(User).where(User.company_id == company_id, User.not_deleted())

    if role:
        query = query.where(User.role == role)
    if is_active is not None:
        query = query.where(User.is_active == is_active)
    if email_verified is not None:
        query = query.where(User.email_verified == email_verified)

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    # Paginate
    query = query.order_by(User.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)
    users = result.scalars().all()

    return PaginatedResponse[UserResponse].build(
        [UserResponse.model_validate(u) for u in users], total, page, page_size
    )


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    data: UserCreate,
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(
        company_scope(roles=["admin"], permissions=["users:create"])
    ),
):
    """Create a user in the caller's company (checks the users quota)."""
    user = await user_service.create_user(
        db,
        email=data.email,
        password=data.password,
        name=data.name,
        role=data.role,
        company_id=company_id,
        preferences=data.preferences.model_dump() if data.preferences else None,
    )
    return UserResponse.model_validate(user)


@router.get("/deleted", response_model=List[UserResponse])
async def list_deleted_users(
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(roles=["admin"])),
):
    """List soft-deleted users, most recently deleted first."""
    result = await db.execute(
        select(User)
        .where(User.company_id == company_id, User.only_deleted())
        .order_by(User.deleted_at.desc())
    )
    return [UserResponse.model_validate(u) for u in result.scalars().all()]


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(permissions=["users:read"])),
):
    """Get user by ID."""
    user = await _get_user(db, user_id, company_id)
    return UserResponse.model_validate(user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(permissions=["users:update"])),
):
    """Partially update a user."""
    user = await _get_user(db, user_id, company_id)

    if data.email and await user_service.email_taken(db, data.email, exclude_id=user.id):
        raise ConflictException(detail="User with this email already exists")

    update_data = data.model_dump(exclude_unset=True)
    if "email" in update_data and update_data["email"]:
        update_data["email"] = update_data["email"].lower()
    for field, value in update_data.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)

    return UserResponse.model_validate(user)


@router.post("/{user_id}/verify-email", response_model=UserResponse)
async def verify_user_email(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(permissions=["users:update"])),
):
    """Mark a user's email as verified."""
    user = await _get_user(db, user_id, company_id)
    user.email_verified = True

    await db.flush()
    await db.refresh(user)

    return UserResponse.model_validate(user)


@router.delete("/{user_id}", response_model=UserResponse)
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(roles=["admin"])),
):
    """Soft delete a user."""
    user = await _get_user(db, user_id, company_id)
    user.soft_delete()

    await db.flush()
    await db.refresh(user)

    return UserResponse.model_validate(user)


@router.post("/{user_id}/restore", response_model=UserResponse)
async def restore_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    company_id: uuid.UUID = Depends(company_scope(roles=["admin"])),
):
    """Restore a soft-deleted user."""
    result = await db.execute(
        select(User).where(
            User.id == user_id,
            User.company_id == company_id,
            User.only_deleted(),
        )
    )
    user = result.scalar_one_or_none()

    if not user:
        raise NotFoundException(detail="User not found or not deleted")

    if await user_service.email_taken(db, user.email, exclude_id=user.id):
        raise ConflictException(detail="User with this email already exists")

    user.restore()

    await db.flush()
    await db.refresh(user)

    return UserResponse.model_validate(user)
