"""Session builder: user + company + account + subscription."""

import uuid
from typing import List, Optional, Union

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from app.core.exceptions import NotFoundException
from app.core.permissions import permissions_for_role
from app.models.account import Account
from app.models.company import Company
from app.models.subscription import Subscription
from app.models.user import User
from app.schemas.session import (
    CompanySession,
    Session,
    SubscriptionSession,
    UserSession,
)

logger = structlog.get_logger(__name__)

IdLike = Union[str, uuid.UUID]


def parse_uuid(value: Optional[IdLike]) -> Optional[uuid.UUID]:
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


async def find_active_user(db: AsyncSession, user_id: IdLike) -> Optional[User]:
    user_uuid = parse_uuid(user_id)
    if user_uuid is None:
        return None
    result = await db.execute(
        select(User)
        .options(defer(User.password_hash))
        .where(User.id == user_uuid, User.not_deleted())
    )
    return result.scalar_one_or_none()


async def find_active_company(db: AsyncSession, company_id: IdLike) -> Optional[Company]:
    company_uuid = parse_uuid(company_id)
    if company_uuid is None:
        return None
    result = await db.execute(
        select(Company).where(Company.id == company_uuid, Company.not_deleted())
    )
    return result.scalar_one_or_none()


async def find_active_account(db: AsyncSession, company_id: IdLike) -> Optional[Account]:
    """The company's single non-deleted account."""
    company_uuid = parse_uuid(company_id)
    if company_uuid is None:
        return None
    result = await db.execute(
        select(Account)
        .where(Account.company_id == company_uuid, Account.not_deleted())
        .order_by(Account.created_at)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def find_active_subscription(db: AsyncSession, subscription_id: IdLike) -> Optional[Subscription]:
    subscription_uuid = parse_uuid(subscription_id)
    if subscription_uuid is None:
        return None
    result = await db.execute(
        select(Subscription).where(
            Subscription.id == subscription_uuid, Subscription.not_deleted()
        )
    )
    return result.scalar_one_or_none()


class SessionBuilder:
    """Assemble a fresh :class:`Session` on every call; nothing is cached."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def build_session(self, user_id: IdLike) -> Session:
        # Each link is checked in order; the first missing one aborts the build
        user = await find_active_user(self.db, user_id)
        if not user:
            raise NotFoundException(detail="User not found")

        company = await find_active_company(self.db, user.company_id)
        if not company:
            logger.warning("session_missing_company", user_id=str(user.id), company_id=str(user.company_id))
            raise NotFoundException(detail="Company not found")

        account = await find_active_account(self.db, company.id)
        if not account:
            logger.warning("session_missing_account", company_id=str(company.id))
            raise NotFoundException(detail="Account not found")

        subscription = await find_active_subscription(self.db, account.subscription_id)
        if not subscription:
            logger.warning(
                "session_missing_subscription",
                account_id=str(account.id),
                subscription_id=str(account.subscription_id),
            )
            raise NotFoundException(detail="Subscription not found")

        return Session(
            user=UserSession.model_validate(user),
            company=CompanySession.model_validate(company),
            subscription=SubscriptionSession.model_validate(subscription),
        )

    async def validate_user_access(self, user_id: IdLike, company_id: IdLike) -> bool:
        """True iff the user exists, is not deleted and belongs to the company."""
        user = await find_active_user(self.db, user_id)
        return user is not None and user.company_id == parse_uuid(company_id)

    async def get_user_permissions(self, user_id: IdLike) -> List[str]:
        user = await find_active_user(self.db, user_id)
        if not user:
            return []
        return sorted(permissions_for_role(user.role))
