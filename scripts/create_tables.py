#!/usr/bin/env python3
"""
Create the database tables directly from the SQLAlchemy models.
Useful for local development without running migrations.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import structlog

from app.config.database import Base, engine, init_db
from app.config.settings import settings
from app.core.logging_config import configure_logging

logger = structlog.get_logger("create_tables")


async def create_tables():
    """Create the schema and all tables."""
    configure_logging(settings.log_level, json_logs=False)
    logger.info(
        "connecting",
        database=settings.database_url.split("@")[-1],
        schema=settings.database_schema,
    )

    await init_db(engine)
    await engine.dispose()

    logger.info("tables_created", tables=sorted(Base.metadata.tables))


if __name__ == "__main__":
    asyncio.run(create_tables())
