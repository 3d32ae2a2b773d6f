from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from src.unieats.core.models.identity import ExternalIdentity
from src.unieats.core.models.session import AuthSession


@pytest.fixture
def azure_claims(issuer: str, client_id: str) -> dict[str, Any]:
    """Claims as Azure AD issues them for a work account."""
    return {
        "iss": issuer,
        "aud": client_id,
        "sub": "azure-subject-123",
        "oid": "00000000-0000-0000-0000-000000000123",
        "upn": "jane.doe@campus.edu",
        "name": "Jane Doe",
        "given_name": "Jane",
        "family_name": "Doe",
    }


@pytest.fixture
def external_identity(issuer: str) -> ExternalIdentity:
    return ExternalIdentity(
        issuer=issuer,
        subject_id="azure-subject-123",
        email="jane.doe@campus.edu",
        display_name="Jane Doe",
    )


@pytest.fixture
def identity_factory(issuer: str) -> Callable[..., ExternalIdentity]:
    def _make_identity(
        subject_id: str = "azure-subject-123",
        email: str = "jane.doe@campus.edu",
        display_name: str = "Jane Doe",
    ) -> ExternalIdentity:
        return ExternalIdentity(
            issuer=issuer,
            subject_id=subject_id,
            email=email,
            display_name=display_name,
        )

    return _make_identity


@pytest.fixture
def test_auth_session() -> AuthSession:
    return AuthSession.create(
        state="test-state-123",
        nonce="test-nonce-456",
        pkce_verifier="test-verifier-789",
        provider="azuread",
        return_to="/orders",
    )


@pytest.fixture
def mock_http_response() -> Callable[..., MagicMock]:
    """Build a response double for patched httpx clients."""

    def _make_response(
        json_data: dict[str, Any] | None = None, status_code: int = 200
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = json_data or {}
        if status_code >= 400:
            request = httpx.Request("POST", "https://issuer.test")
            response.raise_for_status.side_effect = httpx.HTTPStatusError(
                f"HTTP {status_code}",
                request=request,
                response=httpx.Response(status_code, request=request),
            )
        else:
            response.raise_for_status.return_value = None
        return response

    return _make_response
