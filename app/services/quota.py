"""Per-entity create limits defined by the company's subscription."""

import uuid
from typing import Awaitable, Callable, Dict, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.schemas.session import EntityLimit
from app.services.session import IdLike, find_active_account, find_active_subscription, parse_uuid

logger = structlog.get_logger(__name__)

UNLIMITED = -1

EntityCounter = Callable[[AsyncSession, uuid.UUID], Awaitable[int]]


async def count_users(db: AsyncSession, company_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(User)
        .where(User.company_id == company_id, User.not_deleted())
    )
    return result.scalar_one()


DEFAULT_COUNTERS: Dict[str, EntityCounter] = {
    "users": count_users,
}


class QuotaChecker:
    """Evaluate a subscription limit against a supplied or counted total."""

    def __init__(self, db: AsyncSession, counters: Optional[Dict[str, EntityCounter]] = None):
        self.db = db
        self.counters = dict(DEFAULT_COUNTERS)
        if counters:
            self.counters.update(counters)

    async def check_entity_limit(
        self,
        company_id: IdLike,
        entity: str,
        current: Optional[int] = None,
    ) -> EntityLimit:
        account = await find_active_account(self.db, company_id)
        if not account:
            return EntityLimit(entity=entity, allowed=False, limit=0, current=0)

        subscription = await find_active_subscription(self.db, account.subscription_id)
        if not subscription:
            return EntityLimit(entity=entity, allowed=False, limit=0, current=0)

        limit = subscription.limit_for(entity)
        if limit is None:
            return EntityLimit(
                entity=entity,
                allowed=True,
                limit=UNLIMITED,
                current=current if current is not None else 0,
            )

        if current is None:
            current = await self._count(entity, parse_uuid(company_id))

        allowed = current < limit
        if not allowed:
            logger.info("entity_limit_reached", entity=entity, limit=limit, current=current)
        return EntityLimit(entity=entity, allowed=allowed, limit=limit, current=current)

    async def _count(self, entity: str, company_id: uuid.UUID) -> int:
        counter = self.counters.get(entity)
        if counter is None:
            logger.debug("entity_counter_missing", entity=entity)
            return 0
        return await counter(self.db, company_id)
