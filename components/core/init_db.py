"""Database wiring for the application and the operator scripts."""

import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from components.core.database import DatabaseManager
# Import all models to ensure they're registered
import components.user.models
import components.client.models
import components.worker.models
import components.report.models

logger = logging.getLogger(__name__)

# Create a single instance of DatabaseManager
db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with db_manager.get_db() as session:
        yield session


async def create_schema() -> None:
    """Create any missing tables."""
    await db_manager.create_tables()
    logger.info("Database schema ready on %s", db_manager.engine.url.render_as_string(hide_password=True))
