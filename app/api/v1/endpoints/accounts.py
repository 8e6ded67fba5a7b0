"""Account management endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.database import get_db
from app.core.exceptions import NotFoundException, ConflictException
from app.models.account import Account
from app.schemas.account import AccountCreate, AccountUpdate, AccountResponse
from app.schemas.auth import Identity
from app.schemas.common import PaginatedResponse
from app.services.session import find_active_company, find_active_subscription
from app.api.deps import require_admin

router = APIRouter()


async def _company_has_account(
    db: AsyncSession, company_id: UUID, exclude_id: Optional[UUID] = None
) -> bool:
    query = select(Account.id).where(Account.company_id == company_id, Account.not_deleted())
    if exclude_id is not None:
        query = query.where(Account.id != exclude_id)
    return (await db.execute(query)).first() is not None


async def _flush_account(db: AsyncSession) -> None:
    # The live-account index also rejects concurrent duplicates
    try:
        await db.flush()
    except IntegrityError as exc:
        raise ConflictException(detail="Account already exists for this company") from exc


async def _ensure_references(
    db: AsyncSession, company_id: Optional[UUID], subscription_id: Optional[UUID]
) -> None:
    if company_id is not None and not await find_active_company(db, company_id):
        raise NotFoundException(detail="Company not found")
    if subscription_id is not None and not await find_active_subscription(db, subscription_id):
        raise NotFoundException(detail="Subscription not found")


async def _get_account(db: AsyncSession, account_id: UUID) -> Account:
    result = await db.execute(
        select(Account).where(Account.id == account_id, Account.not_deleted())
    )
    account = result.scalar_one_or_none()
    if not account:
        raise NotFoundException(detail="Account not found")
    return account


@router.get("", response_model=PaginatedResponse[AccountResponse])
async def list_accounts(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    company_id: Optional[UUID] = Query(None),
    subscription_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """List all accounts with pagination."""
    query = select(Account).where(Account.not_deleted())

    if company_id:
        query = query.where(Account.company_id == company_id)
    if subscription_id:
        query = query.where(Account.subscription_id == subscription_id)

    # Count total
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar()

    # Paginate
    query = query.order_by(Account.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    result = await db.execute(query)
    accounts = result.scalars().all()

    return PaginatedResponse[AccountResponse].build(
        [AccountResponse.model_validate(a) for a in accounts], total, page, page_size
    )


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    data: AccountCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Attach a subscription plan to a company."""
    await _ensure_references(db, data.company_id, data.subscription_id)

    if await _company_has_account(db, data.company_id):
        raise ConflictException(detail="Account already exists for this company")

    account = Account(company_id=data.company_id, subscription_id=data.subscription_id)
    db.add(account)
    await _flush_account(db)
    await db.refresh(account)

    return AccountResponse.model_validate(account)


@router.get("/deleted", response_model=List[AccountResponse])
async def list_deleted_accounts(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """List soft-deleted accounts."""
    result = await db.execute(
        select(Account).where(Account.only_deleted()).order_by(Account.deleted_at.desc())
    )
    return [AccountResponse.model_validate(a) for a in result.scalars().all()]


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Get account by ID."""
    return AccountResponse.model_validate(await _get_account(db, account_id))


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: UUID,
    data: AccountUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Change an account's plan or move it to another company."""
    account = await _get_account(db, account_id)

    await _ensure_references(db, data.company_id, data.subscription_id)

    if (
        data.company_id is not None
        and data.company_id != account.company_id
        and await _company_has_account(db, data.company_id, exclude_id=account.id)
    ):
        raise ConflictException(detail="Account already exists for this company")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(account, field, value)

    await _flush_account(db)
    await db.refresh(account)

    return AccountResponse.model_validate(account)


@router.delete("/{account_id}", response_model=AccountResponse)
async def delete_account(
    account_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Soft delete an account."""
    account = await _get_account(db, account_id)
    account.soft_delete()

    await db.flush()
    await db.refresh(account)

    return AccountResponse.model_validate(account)


@router.post("/{account_id}/restore", response_model=AccountResponse)
async def restore_account(
    account_id: UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Restore a soft-deleted account unless the company already has another one."""
    result = await db.execute(
        select(Account).where(Account.id == account_id, Account.only_deleted())
    )
    account = result.scalar_one_or_none()

    if not account:
        raise NotFoundException(detail="Account not found or not deleted")

    if await _company_has_account(db, account.company_id, exclude_id=account.id):
        raise ConflictException(detail="Account already exists for this company")

    account.restore()

    await _flush_account(db)
    await db.refresh(account)

    return AccountResponse.model_validate(account)
