"""Subscription plan endpoints."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.database import get_db
from app.core.exceptions import ConflictException, NotFoundException
from app.models.subscription import Subscription
from app.schemas.auth import Identity
from app.schemas.common import PaginatedResponse
from app.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    SubscriptionSettingsUpdate,
    SubscriptionUpdate,
)
from app.api.deps import get_current_identity, require_admin

router = APIRouter()


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Subscription.id).where(Subscription.name == name, Subscription.not_deleted())
    if exclude_id is not None:
        query = query.where(Subscription.id != exclude_id)
    return (await db.execute(query)).first() is not None


async def _get_subscription(db: AsyncSession, subscription_id: uuid.UUID) -> Subscription:
    result = await db.execute(
        select(Subscription).where(
            Subscription.id == subscription_id, Subscription.not_deleted()
        )
    )
    subscription = result.scalar_one_or_none()
    if not subscription:
        raise NotFoundException(detail="Subscription not found")
    return subscription


@router.get("", response_model=PaginatedResponse[SubscriptionResponse])
async def list_subscriptions(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(get_current_identity),
):
    """List subscription plans."""
    query = select(Subscription).where(Subscription.not_deleted())

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    query = query.order_by(Subscription.name).offset((page - 1) * page_size).limit(page_size)
    subscriptions = (await db.execute(query)).scalars().all()

    return PaginatedResponse[SubscriptionResponse].build(
        [SubscriptionResponse.model_validate(s) for s in subscriptions], total, page, page_size
    )


@router.post("", response_model=SubscriptionResponse, status_code=201)
async def create_subscription(
    data: SubscriptionCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Create a subscription plan."""
    if await _name_taken(db, data.name):
        raise ConflictException(detail="Subscription with this name already exists")

    subscription = Subscription(**data.model_dump())
    db.add(subscription)
    await db.flush()
    await db.refresh(subscription)

    return SubscriptionResponse.model_validate(subscription)


@router.get("/deleted", response_model=List[SubscriptionResponse])
async def list_deleted_subscriptions(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """List soft-deleted subscription plans."""
    result = await db.execute(
        select(Subscription)
        .where(Subscription.only_deleted())
        .order_by(Subscription.deleted_at.desc())
    )
    return [SubscriptionResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription(
    subscription_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(get_current_identity),
):
    """Get subscription by ID."""
    return SubscriptionResponse.model_validate(await _get_subscription(db, subscription_id))


@router.patch("/{subscription_id}", response_model=SubscriptionResponse)
async def update_subscription(
    subscription_id: uuid.UUID,
    data: SubscriptionUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Partially update a subscription plan."""
    subscription = await _get_subscription(db, subscription_id)

    if data.name and await _name_taken(db, data.name, exclude_id=subscription.id):
        raise ConflictException(detail="Subscription with this name already exists")

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(subscription, field, value)

    await db.flush()
    await db.refresh(subscription)

    return SubscriptionResponse.model_validate(subscription)


@router.put("/{subscription_id}/settings", response_model=SubscriptionResponse)
async def replace_subscription_settings(
    subscription_id: uuid.UUID,
    data: SubscriptionSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Replace the ordered per-entity limit list."""
    subscription = await _get_subscription(db, subscription_id)
    subscription.settings = [s.model_dump() for s in data.settings]

    await db.flush()
    await db.refresh(subscription)

    return SubscriptionResponse.model_validate(subscription)


@router.delete("/{subscription_id}", response_model=SubscriptionResponse)
async def delete_subscription(
    subscription_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Soft delete a subscription plan."""
    subscription = await _get_subscription(db, subscription_id)
    subscription.soft_delete()

    await db.flush()
    await db.refresh(subscription)

    return SubscriptionResponse.model_validate(subscription)


@router.post("/{subscription_id}/restore", response_model=SubscriptionResponse)
async def restore_subscription(
    subscription_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Restore a soft-deleted subscription plan."""
    result = await db.execute(
        select(Subscription).where(
            Subscription.id == subscription_id, Subscription.only_deleted()
        )
    )
    subscription = result.scalar_one_or_none()

    if not subscription:
        raise NotFoundException(detail="Subscription not found or not deleted")

    if await _name_taken(db, subscription.name, exclude_id=subscription.id):
        raise ConflictException(detail="Subscription with this name already exists")

    subscription.restore()

    await db.flush()
    await db.refresh(subscription)

    return SubscriptionResponse.model_validate(subscription)
