"""Database connection and session management."""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import MetaData, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config.settings import settings


# Define naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Create metadata with schema
metadata = MetaData(naming_convention=convention, schema=settings.database_schema)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base class with schema support."""
    metadata = metadata


def _engine_options(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        return {}
    # PgBouncer in front of Postgres doesn't support prepared statements
    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
        "connect_args": {"statement_cache_size": 0},
    }


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
    **_engine_options(settings.database_url),
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create the schema (Postgres only) and every mapped table."""
    import app.models  # noqa: F401  registers the tables on Base.metadata

    async with bind.begin() as conn:
        if metadata.schema and bind.dialect.name == "postgresql":
            await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {metadata.schema}"))
        await conn.run_sync(metadata.create_all)
