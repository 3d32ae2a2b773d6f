"""OIDC client service for the authorization code flow with PKCE."""

from typing import Any
from urllib.parse import urlencode

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from src.unieats.core.errors import IssuerRejected, MissingIdentifier
from src.unieats.core.models.identity import ExternalIdentity
from src.unieats.core.security import generate_nonce, generate_pkce_pair, generate_state
from src.unieats.core.services.jwt.jwt_verify import IdTokenVerifier
from src.unieats.core.services.session.auth_session import AuthSessionService
from src.unieats.runtime.config.config_data import OIDCProviderConfig
from src.unieats.runtime.context import get_config


class TokenResponse(BaseModel):
    """OIDC token response model."""

    token_type: str = "Bearer"
    id_token: str | None = None
    access_token: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None


class CallbackPayload(BaseModel):
    """Parameters the issuer returns to the callback, from the form body or query."""

    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None


def extract_external_identity(claims: dict[str, Any], issuer: str) -> ExternalIdentity:
    """Build an ExternalIdentity from verified ID token claims.

    The email is taken from ``upn``, then ``email``, then the first entry of
    ``emails``. The display name falls back to given/family name, then to the
    local part of the email.

    Raises:
        MissingIdentifier: If no subject id or no email can be found
    """
    subject = claims.get("sub") or claims.get("oid")
    if not subject:
        raise MissingIdentifier("Identity provider did not return a subject id")

    emails = claims.get("emails") or []
    email = claims.get("upn") or claims.get("email") or (emails[0] if emails else None)
    if not email:
        raise MissingIdentifier("Identity provider did not return an email address")

    display_name = claims.get("name")
    if not display_name:
        parts = [claims.get("given_name"), claims.get("family_name")]
        display_name = " ".join(p for p in parts if p) or email.split("@", 1)[0]

    return ExternalIdentity(
        issuer=issuer,
        subject_id=str(subject),
        email=email,
        display_name=display_name,
    )


class OidcClientService:
    def __init__(
        self,
        auth_session_service: AuthSessionService,
        id_token_verifier: IdTokenVerifier,
    ) -> None:
        self._auth_sessions = auth_session_service
        self._verifier = id_token_verifier

    @staticmethod
    def get_provider(provider: str | None = None) -> tuple[str, OIDCProviderConfig]:
        oidc = get_config().oidc
        name = provider or oidc.default_provider
        provider_cfg = oidc.providers.get(name)
        if provider_cfg is None:
            raise IssuerRejected(f"Unknown OIDC provider: {name}")
        return name, provider_cfg

    async def begin_authentication(
        self, provider: str | None = None, return_to: str | None = None
    ) -> str:
        """Start a login and return the issuer URL the browser must visit."""
        name, provider_cfg = self.get_provider(provider)
        pkce_verifier, code_challenge = generate_pkce_pair()
        auth_session = await self._auth_sessions.create_auth_session(
            state=generate_state(),
            nonce=generate_nonce(),
            pkce_verifier=pkce_verifier,
            provider=name,
            return_to=return_to,
        )

        params = {
            "client_id": provider_cfg.client_id,
            "response_type": "code",
            "response_mode": provider_cfg.response_mode,
            "redirect_uri": provider_cfg.redirect_uri,
            "scope": " ".join(provider_cfg.scopes),
            "state": auth_session.state,
            "nonce": auth_session.nonce,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
        }
        logger.debug("Starting {} login", name)
        return f"{provider_cfg.authorization_endpoint}?{urlencode(params)}"

    async def complete_authentication(
        self, payload: CallbackPayload
    ) -> tuple[ExternalIdentity, str | None]:
        """Finish a login from the issuer's callback.

        Returns:
            The verified identity and the sanitized return path requested at login

        Raises:
            IssuerRejected: If the issuer reported an error or any handshake step fails
            MissingIdentifier: If the verified profile lacks a subject id or email
        """
        if payload.error:
            raise IssuerRejected(
                f"Issuer returned {payload.error}: {payload.error_description or ''}".strip()
            )

        auth_session = await self._auth_sessions.consume_auth_session(payload.state)
        if auth_session is None:
            raise IssuerRejected("Unknown, expired or replayed login state")
        if not payload.code:
            raise IssuerRejected("Callback carried no authorization code")

        _, provider_cfg = self.get_provider(auth_session.provider)
        tokens = await self.exchange_code_for_tokens(
            payload.code, auth_session.pkce_verifier, provider_cfg
        )
        if not tokens.id_token:
            raise IssuerRejected("Token response carried no ID token")

        claims = await self._verifier.verify(
            tokens.id_token, provider_cfg, expected_nonce=auth_session.nonce
        )
        identity = extract_external_identity(claims, issuer=provider_cfg.issuer)
        logger.info("Handshake completed for subject {}", identity.subject_id)
        return identity, auth_session.return_to

    async def exchange_code_for_tokens(
        self, code: str, pkce_verifier: str, provider_cfg: OIDCProviderConfig
    ) -> TokenResponse:
        """Exchange the authorization code for tokens using PKCE.

        Raises:
            IssuerRejected: If the token endpoint cannot be reached or refuses the code
        """
        token_data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": provider_cfg.redirect_uri,
            "client_id": provider_cfg.client_id,
            "code_verifier": pkce_verifier,
        }
        if provider_cfg.client_secret:
            token_data["client_secret"] = provider_cfg.client_secret

        headers = {"Content-Type": "application/x-www-form-urlencoded"}

        try:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(
                    provider_cfg.token_endpoint, data=token_data, headers=headers
                )
                response.raise_for_status()
                return TokenResponse(**response.json())
        except httpx.HTTPError as exc:
            logger.warning("Token exchange failed: {}", exc)
            raise IssuerRejected("Authorization code exchange failed") from exc
        except ValidationError as exc:
            raise IssuerRejected("Malformed token response") from exc
