"""Pytest configuration and shared fixtures."""

import os
from typing import AsyncGenerator, Dict, List, Optional

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DATABASE_SCHEMA"] = ""
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["AUTH_STRATEGY"] = "local"
os.environ["LOG_JSON"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from app.config.database import get_db, init_db  # noqa: E402
from app.config.settings import get_settings  # noqa: E402
from app.core.exceptions import UnauthorizedException  # noqa: E402
from app.core.token_validator import TokenValidator  # noqa: E402
from app.main import create_app  # noqa: E402
from app.schemas.auth import Identity  # noqa: E402
from tests.factories import make_account, make_company, make_subscription, make_user  # noqa: E402


# --- Database Fixtures ---


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed sqlite so every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def tenant(db_session):
    """Company with an account on a plan allowing five users, plus an admin."""
    subscription = await make_subscription(
        db_session, settings=[{"entity": "users", "create_limit_registry": 5}]
    )
    company = await make_company(db_session)
    account = await make_account(db_session, company, subscription)
    admin = await make_user(db_session, company, email="admin@example.com", role="admin")
    return {
        "subscription": subscription,
        "company": company,
        "account": account,
        "admin": admin,
    }


# --- Token validator doubles ---


class StaticTokenValidator(TokenValidator):
    """Maps known tokens to identities and records every call."""

    def __init__(self, identities: Optional[Dict[str, Identity]] = None):
        self.identities = identities or {}
        self.calls: List[str] = []

    async def validate(self, token: str) -> Identity:
        self.calls.append("validate")
        try:
            return self.identities[token]
        except KeyError:
            raise UnauthorizedException(detail="Invalid token")

    async def check_roles(self, token: str, required: List[str]) -> bool:
        self.calls.append("check_roles")
        return await super().check_roles(token, required)

    async def check_permissions(self, token: str, required: List[str]) -> bool:
        self.calls.append("check_permissions")
        return await super().check_permissions(token, required)


@pytest.fixture
def static_validator():
    return StaticTokenValidator()


# --- App Fixtures ---


@pytest.fixture
def app(session_factory):
    application = create_app(get_settings())

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
