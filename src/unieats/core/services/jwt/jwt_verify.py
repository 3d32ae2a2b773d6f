"""ID token verification."""

import time
from typing import Any

from authlib.jose import JoseError, JsonWebKey, JsonWebToken
from loguru import logger

from src.unieats.core.errors import IssuerRejected
from src.unieats.core.services.jwt.jwks import JwksService
from src.unieats.runtime.config.config_data import OIDCProviderConfig
from src.unieats.runtime.context import get_config


def _as_list(v):
    return [v] if isinstance(v, str) else list(v or ())


class IdTokenVerifier:
    def __init__(self, jwks_service: JwksService):
        self._jwks_service = jwks_service

    async def verify(
        self,
        id_token: str,
        provider: OIDCProviderConfig,
        *,
        expected_nonce: str,
    ) -> dict[str, Any]:
        """Verify an ID token issued to this client and return its claims.

        Checks the signature against the issuer's JWKS, the algorithm
        allow-list, ``iss``, ``aud``, the validity window and the nonce. An
        unknown ``kid`` triggers one JWKS refresh to follow key rotation.

        Raises:
            IssuerRejected: If any check fails
        """
        cfg = get_config().jwt
        claims_options = {
            "iss": {"essential": True, "values": [provider.issuer.rstrip("/")]},
            "aud": {"essential": True, "values": [provider.client_id]},
            "exp": {"essential": True},
        }
        decoder = JsonWebToken(cfg.allowed_algorithms)

        jwks = await self._jwks_service.fetch_jwks(provider)
        try:
            claims = self._decode(decoder, id_token, jwks, claims_options)
        except ValueError:
            # authlib raises ValueError when no key matches the token's kid
            logger.info("Unknown signing key, refreshing JWKS for {}", provider.issuer)
            jwks = await self._jwks_service.fetch_jwks(provider, force_refresh=True)
            try:
                claims = self._decode(decoder, id_token, jwks, claims_options)
            except ValueError as exc:
                raise IssuerRejected("ID token signed with an unknown key") from exc

        try:
            claims.validate(now=int(time.time()), leeway=cfg.clock_skew)
        except JoseError as exc:
            raise IssuerRejected(f"ID token rejected: {exc}") from exc

        if claims.get("nonce") != expected_nonce:
            raise IssuerRejected("ID token nonce mismatch")

        azp = claims.get("azp")
        if azp and azp != provider.client_id:
            raise IssuerRejected("ID token was issued to another client")
        if not azp and len(_as_list(claims.get("aud"))) > 1:
            raise IssuerRejected("Missing azp for multi-audience ID token")

        return dict(claims)

    @staticmethod
    def _decode(decoder: JsonWebToken, token: str, jwks: dict, claims_options: dict):
        try:
            return decoder.decode(
                token, JsonWebKey.import_key_set(jwks), claims_options=claims_options
            )
        except JoseError as exc:
            raise IssuerRejected(f"ID token rejected: {exc}") from exc
