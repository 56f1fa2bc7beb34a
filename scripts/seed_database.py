"""Script to create tables and load the development dataset."""

import asyncio

from fleet_manager.infrastructure.database.connection import DatabaseManager
from fleet_manager.infrastructure.database.seed import ADMIN_EMAIL, seed_database
from fleet_manager.infrastructure.logging import get_logger, setup_logging
from fleet_manager.presentation.api.config import get_settings

logger = get_logger("scripts.seed_database")


async def main() -> None:
    settings = get_settings()
    database_manager = DatabaseManager(settings.database_url, echo=settings.db_echo)
    await database_manager.connect()
    try:
        await database_manager.create_tables()
        async with database_manager.get_session() as session:
            summary = await seed_database(session)
        logger.info(f"Seeded {summary.vehicles} vehicles; log in as {ADMIN_EMAIL}")
    finally:
        await database_manager.disconnect()


if __name__ == "__main__":
    setup_logging(log_level=get_settings().log_level)
    asyncio.run(main())
