"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, create_engine

from src.unieats.runtime.config.config_data import DatabaseConfig
from src.unieats.runtime.context import get_config


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Own the shared engine; build one from configuration unless given."""
        self._engine = engine or self._create_engine(get_config().database)

    @staticmethod
    def _create_engine(db_config: DatabaseConfig) -> Engine:
        environment = get_config().app.environment
        engine_kwargs: dict[str, Any] = {
            "echo": False,
            "connect_args": DbSessionService._get_connect_args(db_config, environment),
        }

        if db_config.is_sqlite:
            if environment == "production":
                logger.warning(
                    "SQLite is not recommended for production use. "
                    "Consider PostgreSQL for better performance and reliability."
                )
        else:
            engine_kwargs.update(
                {
                    "pool_size": db_config.pool_size,
                    "max_overflow": db_config.max_overflow,
                    "pool_timeout": db_config.pool_timeout,
                    "pool_recycle": db_config.pool_recycle,
                    "pool_pre_ping": True,
                }
            )

        logger.info(
            "Initializing database engine ({}) for environment {}",
            db_config.connection_string.split(":", 1)[0],
            environment,
        )
        return create_engine(db_config.connection_string, **engine_kwargs)

    @staticmethod
    def _get_connect_args(db_config: DatabaseConfig, environment: str) -> dict:
        """Get driver-specific connection arguments."""
        if db_config.is_sqlite:
            return {"check_same_thread": False, "timeout": 20}

        connect_args: dict[str, Any] = {
            "application_name": f"unieats_{environment}",
            "connect_timeout": 30,
        }
        if db_config.sslmode:
            connect_args["sslmode"] = db_config.sslmode
        return connect_args

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Run a unit of work: commit on success, roll back on any error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.bind(error_type=type(e).__name__).error(
                "Database transaction failed: {}", e
            )
            raise
        finally:
            db.close()

    def create_all(self) -> None:
        """Create all database tables."""
        import src.unieats.entities  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.bind(error_type=type(e).__name__).error(
                "Database health check failed: {}", e
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
