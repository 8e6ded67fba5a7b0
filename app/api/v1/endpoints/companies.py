"""Company management endpoints."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.database import get_db
from app.core.exceptions import ConflictException, NotFoundException
from app.models.company import DEFAULT_PRIMARY_COLOR, Company, default_company_settings
from app.schemas.auth import Identity
from app.schemas.common import PaginatedResponse
from app.schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from app.api.deps import require_admin

router = APIRouter()


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
    query = select(Company.id).where(Company.name == name, Company.not_deleted())
    if exclude_id is not None:
        query = query.where(Company.id != exclude_id)
    return (await db.execute(query)).first() is not None


async def _get_company(db: AsyncSession, company_id: uuid.UUID) -> Company:
    result = await db.execute(
        select(Company).where(Company.id == company_id, Company.not_deleted())
    )
    company = result.scalar_one_or_none()
    if not company:
        raise NotFoundException(detail="Company not found")
    return company


@router.get("", response_model=PaginatedResponse[CompanyResponse])
async def list_companies(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """List companies with pagination."""
    query = select(Company).where(Company.not_deleted())

    total = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar()

    query = query.order_by(Company.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
    companies = (await db.execute(query)).scalars().all()

    return PaginatedResponse[CompanyResponse].build(
        [CompanyResponse.model_validate(c) for c in companies], total, page, page_size
    )


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(
    data: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Create a company; branding defaults from app name and primary color."""
    if await _name_taken(db, data.name):
        raise ConflictException(detail="Company with this name already exists")

    if data.branding:
        branding = data.branding.model_dump()
    else:
        branding = {
            "app_name": data.app_name or data.name,
            "primary_color": data.primary_color or DEFAULT_PRIMARY_COLOR,
        }

    company = Company(
        name=data.name,
        logo=data.logo,
        branding=branding,
        settings=data.settings.model_dump() if data.settings else default_company_settings(),
    )
    db.add(company)
    await db.flush()
    await db.refresh(company)

    return CompanyResponse.model_validate(company)


@router.get("/deleted", response_model=List[CompanyResponse])
async def list_deleted_companies(
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """List soft-deleted companies."""
    result = await db.execute(
        select(Company).where(Company.only_deleted()).order_by(Company.deleted_at.desc())
    )
    return [CompanyResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Get company by ID."""
    return CompanyResponse.model_validate(await _get_company(db, company_id))


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: uuid.UUID,
    data: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Partially update a company."""
    company = await _get_company(db, company_id)

    if data.name and await _name_taken(db, data.name, exclude_id=company.id):
        raise ConflictException(detail="Company with this name already exists")

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(company, field, value)

    await db.flush()
    await db.refresh(company)

    return CompanyResponse.model_validate(company)


@router.delete("/{company_id}", response_model=CompanyResponse)
async def delete_company(
    company_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Soft delete a company."""
    company = await _get_company(db, company_id)
    company.soft_delete()

    await db.flush()
    await db.refresh(company)

    return CompanyResponse.model_validate(company)


@router.post("/{company_id}/restore", response_model=CompanyResponse)
async def restore_company(
    company_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    _: Identity = Depends(require_admin),
):
    """Restore a soft-deleted company."""
    result = await db.execute(
        select(Company).where(Company.id == company_id, Company.only_deleted())
    )
    company = result.scalar_one_or_none()

    if not company:
        raise NotFoundException(detail="Company not found or not deleted")

    if await _name_taken(db, company.name, exclude_id=company.id):
        raise ConflictException(detail="Company with this name already exists")

    company.restore()

    await db.flush()
    await db.refresh(company)

    return CompanyResponse.model_validate(company)
