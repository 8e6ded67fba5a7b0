"""Row factories and token helpers shared by the tests."""

from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import create_access_token, get_password_hash
from app.models import Account, Company, Subscription, User

TEST_PASSWORD = "secret123"


async def _save(db: AsyncSession, obj):
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return obj


async def make_subscription(
    db: AsyncSession,
    name: str = "Basic",
    settings: Optional[List[Dict]] = None,
) -> Subscription:
    return await _save(db, Subscription(
        name=name,
        description=f"{name} plan",
        settings=settings if settings is not None else [],
    ))


async def make_company(
    db: AsyncSession,
    name: str = "Acme",
    settings: Optional[Dict] = None,
) -> Company:
    company = Company(
        name=name,
        branding={"app_name": name, "primary_color": "#3B82F6"},
    )
    if settings is not None:
        company.settings = settings
    return await _save(db, company)


async def make_account(db: AsyncSession, company: Company, subscription: Subscription) -> Account:
    return await _save(db, Account(company_id=company.id, subscription_id=subscription.id))


async def make_user(
    db: AsyncSession,
    company: Company,
    email: str = "user@example.com",
    role: str = "user",
    is_active: bool = True,
) -> User:
    return await _save(db, User(
        email=email,
        password_hash=get_password_hash(TEST_PASSWORD),
        name=email.split("@")[0],
        role=role,
        company_id=company.id,
        is_active=is_active,
    ))


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(
        subject=str(user.id),
        email=user.email,
        company_id=str(user.company_id),
        role=user.role,
    )
    return {"Authorization": f"Bearer {token}"}
