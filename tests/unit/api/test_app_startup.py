"""Tests for application wiring, runtime checks and logging setup."""

import logging

import pytest
from loguru import logger
from sqlalchemy import inspect

from src.unieats.api.http.app import build_dependencies, validate_runtime_config
from src.unieats.api.utils.app_startup import configure_logging
from src.unieats.core.storage.session_storage import InMemorySessionStorage
from src.unieats.runtime.config.config_data import (
    AppConfig,
    ConfigData,
    CORSConfig,
    DatabaseConfig,
    LoggingConfig,
    OIDCConfig,
    OIDCProviderConfig,
    RedisConfig,
)
from src.unieats.runtime.context import with_context


class TestValidateRuntimeConfig:
    """Test the production safety checks run at startup."""

    def test_development_defaults_are_accepted(self):
        with with_context(ConfigData(app=AppConfig(environment="development"))):
            validate_runtime_config()

    def test_production_requires_session_secret(self):
        config = ConfigData(
            app=AppConfig(
                environment="production", session_secret="a-default-secret-for-dev"
            )
        )

        with with_context(config):
            with pytest.raises(RuntimeError, match="SESSION_SECRET"):
                validate_runtime_config()

    def test_production_rejects_wildcard_cors(self):
        config = ConfigData(
            app=AppConfig(
                environment="production",
                session_secret="a-real-production-secret",
                cors=CORSConfig(origins=["*"]),
            )
        )

        with with_context(config):
            with pytest.raises(RuntimeError, match="CORS"):
                validate_runtime_config()

    def _production(self, provider: OIDCProviderConfig) -> ConfigData:
        return ConfigData(
            app=AppConfig(
                environment="production",
                session_secret="a-real-production-secret",
                cors=CORSConfig(origins=["https://eats.campus.edu"]),
            ),
            oidc=OIDCConfig(providers={"azuread": provider}),
        )

    def test_production_rejects_multi_tenant_alias(self, oidc_provider_config):
        provider = oidc_provider_config.model_copy(update={"tenant_id": "common"})

        with with_context(self._production(provider)):
            with pytest.raises(RuntimeError, match="TENANT_ID"):
                validate_runtime_config()

    def test_development_warns_on_multi_tenant_alias(self, oidc_provider_config):
        provider = oidc_provider_config.model_copy(update={"tenant_id": "common"})
        config = ConfigData(
            app=AppConfig(environment="development"),
            oidc=OIDCConfig(providers={"azuread": provider}),
        )
        messages = []
        sink_id = logger.add(messages.append, level="WARNING", format="{message}")

        try:
            with with_context(config):
                validate_runtime_config()
        finally:
            logger.remove(sink_id)

        assert any("TENANT_ID" in message for message in messages)

    def test_production_with_real_settings(self, oidc_provider_config):
        config = self._production(oidc_provider_config)

        with with_context(config):
            validate_runtime_config()


class TestBuildDependencies:
    """Test wiring the service graph."""

    async def test_builds_services_and_tables(self, tmp_path):
        config = ConfigData(
            database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'unieats.db'}"),
            redis=RedisConfig(enabled=False),
        )

        with with_context(config):
            deps = await build_dependencies()

        try:
            assert isinstance(deps.session_storage, InMemorySessionStorage)
            tables = set(inspect(deps.database_service.engine).get_table_names())
            assert {"users", "restaurants", "orders"} <= tables
            assert deps.authorization_gate is not None
        finally:
            deps.database_service.dispose()


class TestConfigureLogging:
    """Test the loguru setup."""

    def test_stdlib_records_reach_file_sink(self, tmp_path):
        log_file = tmp_path / "logs" / "unieats.log"
        config = ConfigData(logging=LoggingConfig(level="INFO", file=str(log_file)))

        try:
            with with_context(config):
                configure_logging()
            logging.getLogger("unieats.test").warning("stdlib warning routed")
            logger.complete()
        finally:
            configure_logging()

        assert "stdlib warning routed" in log_file.read_text()


class TestInitDb:
    """Test the table bootstrap command."""

    def test_creates_tables(self, tmp_path):
        from sqlalchemy import create_engine

        from src.unieats.runtime.init_db import init_db

        url = f"sqlite:///{tmp_path / 'bootstrap.db'}"
        with with_context(ConfigData(database=DatabaseConfig(url=url))):
            init_db()

        engine = create_engine(url)
        try:
            assert "users" in inspect(engine).get_table_names()
        finally:
            engine.dispose()
