"""Tests for pending login handshakes."""

import asyncio
import time
from unittest.mock import AsyncMock, patch

from src.unieats.core.models.session import AuthSession
from src.unieats.core.services import AuthSessionService
from src.unieats.core.storage.session_storage import RedisSessionStorage
from src.unieats.runtime.config.config_data import ConfigData, SecurityConfig
from src.unieats.runtime.context import with_context


class TestAuthSessionService:
    """Test creation and single-use consumption of handshakes."""

    async def test_create_stores_under_state(
        self, auth_session_service: AuthSessionService, session_storage
    ):
        created = await auth_session_service.create_auth_session(
            state="state-1",
            nonce="nonce-1",
            pkce_verifier="verifier-1",
            provider="azuread",
            return_to="/orders",
        )

        stored = await session_storage.get("auth:state-1", AuthSession)
        assert stored == created
        assert stored.return_to == "/orders"

    async def test_ttl_comes_from_configuration(
        self, auth_session_service: AuthSessionService
    ):
        config = ConfigData(security=SecurityConfig(auth_session_ttl_seconds=30))

        with with_context(config_override=config):
            created = await auth_session_service.create_auth_session(
                state="state-1", nonce="n", pkce_verifier="v", provider="azuread"
            )

        assert created.expires_at - created.created_at == 30

    async def test_unsafe_return_to_is_not_stored(
        self, auth_session_service: AuthSessionService
    ):
        created = await auth_session_service.create_auth_session(
            state="state-1",
            nonce="n",
            pkce_verifier="v",
            provider="azuread",
            return_to="//evil.example.com",
        )

        assert created.return_to is None

    async def test_consume_is_single_use(self, auth_session_service: AuthSessionService):
        created = await auth_session_service.create_auth_session(
            state="state-1", nonce="n", pkce_verifier="v", provider="azuread"
        )

        assert await auth_session_service.consume_auth_session("state-1") == created
        assert await auth_session_service.consume_auth_session("state-1") is None

    async def test_concurrent_consumes_succeed_once(
        self, auth_session_service: AuthSessionService
    ):
        await auth_session_service.create_auth_session(
            state="state-1", nonce="n", pkce_verifier="v", provider="azuread"
        )

        results = await asyncio.gather(
            *(auth_session_service.consume_auth_session("state-1") for _ in range(5))
        )

        assert sum(result is not None for result in results) == 1

    async def test_consume_reads_and_deletes_in_one_redis_call(
        self, test_auth_session: AuthSession
    ):
        client = AsyncMock()
        client.getdel.return_value = test_auth_session.model_dump_json()
        service = AuthSessionService(RedisSessionStorage(client))

        consumed = await service.consume_auth_session(test_auth_session.state)

        assert consumed == test_auth_session
        client.getdel.assert_awaited_once_with(f"auth:{test_auth_session.state}")
        client.get.assert_not_awaited()
        client.delete.assert_not_awaited()

    async def test_consume_unknown_or_empty_state(
        self, auth_session_service: AuthSessionService
    ):
        assert await auth_session_service.consume_auth_session(None) is None
        assert await auth_session_service.consume_auth_session("") is None
        assert await auth_session_service.consume_auth_session("unknown") is None

    async def test_expired_handshake_is_rejected(
        self, auth_session_service: AuthSessionService
    ):
        await auth_session_service.create_auth_session(
            state="state-1", nonce="n", pkce_verifier="v", provider="azuread"
        )

        later = time.time() + 3600
        with patch("time.time", return_value=later):
            assert await auth_session_service.consume_auth_session("state-1") is None
