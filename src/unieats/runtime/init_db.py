"""Database initialization script."""

from loguru import logger

from src.unieats.core.services.database.db_session import DbSessionService
from src.unieats.runtime.context import get_config


def init_db() -> None:
    """Create all database tables."""
    logger.info("Creating tables for {} database", get_config().app.environment)
    db_service = DbSessionService()
    try:
        db_service.create_all()
    finally:
        db_service.dispose()


if __name__ == "__main__":
    init_db()
