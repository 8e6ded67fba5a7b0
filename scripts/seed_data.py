"""Seed a demo subscription, company, account and admin user."""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog
from sqlalchemy import select

from app.config.database import AsyncSessionLocal
from app.config.settings import settings
from app.core.logging_config import configure_logging
from app.core.security import get_password_hash
from app.models.account import Account
from app.models.company import Company, default_company_settings
from app.models.subscription import Subscription
from app.models.user import User

logger = structlog.get_logger("seed_data")

DEMO_COMPANY = "Demo Company"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"

PLANS = [
    {
        "name": "Free",
        "description": "Starter plan",
        "settings": [
            {"entity": "users", "create_limit_registry": 5},
            {"entity": "vehicles", "create_limit_registry": 10},
        ],
    },
    {
        "name": "Pro",
        "description": "Larger limits",
        "settings": [
            {"entity": "users", "create_limit_registry": 50},
        ],
    },
]


async def seed_subscriptions():
    """Create the plan catalog."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Subscription).limit(1))
        if result.scalar_one_or_none():
            logger.info("subscriptions_exist_skipping")
            return

        db.add_all([Subscription(**plan) for plan in PLANS])
        await db.commit()
        logger.info("subscriptions_created", count=len(PLANS))


async def seed_company():
    """Create the demo company and its account on the Free plan."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Company).where(Company.name == DEMO_COMPANY))
        if result.scalar_one_or_none():
            logger.info("company_exists_skipping", name=DEMO_COMPANY)
            return

        result = await db.execute(select(Subscription).where(Subscription.name == "Free"))
        plan = result.scalar_one_or_none()
        if not plan:
            logger.warning("plan_missing", name="Free", hint="run seed_subscriptions first")
            return

        company = Company(
            name=DEMO_COMPANY,
            branding={"app_name": DEMO_COMPANY, "primary_color": "#3B82F6"},
            settings=default_company_settings(),
        )
        db.add(company)
        await db.flush()

        db.add(Account(company_id=company.id, subscription_id=plan.id))
        await db.commit()
        logger.info("company_created", company_id=str(company.id))


async def seed_admin():
    """Create the admin user of the demo company."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(User).where(User.email == ADMIN_EMAIL))
        if result.scalar_one_or_none():
            logger.info("admin_exists_skipping", email=ADMIN_EMAIL)
            return

        result = await db.execute(select(Company).where(Company.name == DEMO_COMPANY))
        company = result.scalar_one_or_none()
        if not company:
            logger.warning("company_missing", hint="run seed_company first")
            return

        db.add(User(
            email=ADMIN_EMAIL,
            password_hash=get_password_hash(ADMIN_PASSWORD),
            name="Administrator",
            role="admin",
            company_id=company.id,
            email_verified=True,
        ))
        await db.commit()

        logger.info("admin_created", email=ADMIN_EMAIL, password=ADMIN_PASSWORD)


async def main():
    """Run all seed functions."""
    configure_logging(settings.log_level, json_logs=False)

    await seed_subscriptions()
    await seed_company()
    await seed_admin()

    logger.info("seed_completed")


if __name__ == "__main__":
    asyncio.run(main())
