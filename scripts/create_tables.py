"""Script to initialize database tables."""

import asyncio

from fleet_manager.infrastructure.database.connection import DatabaseManager
from fleet_manager.infrastructure.logging import get_logger, setup_logging
from fleet_manager.presentation.api.config import get_settings

logger = get_logger("scripts.create_tables")


async def create_tables() -> None:
    """Create all database tables."""
    settings = get_settings()
    database_manager = DatabaseManager(settings.database_url, echo=settings.db_echo)
    await database_manager.connect()
    try:
        await database_manager.create_tables()
        logger.info("Database tables created successfully")
    finally:
        await database_manager.disconnect()


if __name__ == "__main__":
    setup_logging(log_level=get_settings().log_level)
    asyncio.run(create_tables())
