from abc import ABC, abstractmethod
from typing import Any

import httpx
from cachetools import TTLCache
from loguru import logger

from src.unieats.core.errors import IssuerRejected
from src.unieats.runtime.config.config_data import OIDCProviderConfig


class JWKSCache(ABC):
    @abstractmethod
    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        """Return the cached key set for jwks_uri, or an empty dict."""
        raise NotImplementedError

    @abstractmethod
    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear_jwks_cache(self) -> None:
        """Clear the JWKS cache."""
        raise NotImplementedError


class JWKSCacheInMemory(JWKSCache):
    def __init__(self, ttl_seconds: int = 3600, maxsize: int = 10) -> None:
        self._cache: TTLCache[str, dict[str, Any]] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds
        )

    def get_jwks(self, jwks_uri: str) -> dict[str, Any]:
        return self._cache.get(jwks_uri, {})

    def set_jwks(self, jwks_uri: str, jwks: dict[str, Any]) -> None:
        self._cache[jwks_uri] = jwks

    def clear_jwks_cache(self) -> None:
        self._cache.clear()


class JwksService:
    """Fetches issuer signing keys, reusing them until the cache entry expires."""

    def __init__(self, cache: JWKSCache) -> None:
        self._cache = cache

    async def fetch_jwks(
        self, provider: OIDCProviderConfig, force_refresh: bool = False
    ) -> dict[str, Any]:
        """Return the provider's JWKS document.

        Args:
            provider: Provider whose ``jwks_uri`` is fetched
            force_refresh: Bypass the cache, e.g. after the issuer rotated keys

        Raises:
            IssuerRejected: If the key set cannot be retrieved
        """
        jwks_url = provider.jwks_uri

        if not force_refresh:
            jwks = self._cache.get_jwks(jwks_url)
            if jwks:
                return jwks

        try:
            async with httpx.AsyncClient(timeout=5) as client:
                resp = await client.get(jwks_url)
                resp.raise_for_status()
                jwks = resp.json()
        except httpx.HTTPError as exc:
            logger.warning("Failed to fetch JWKS from {}: {}", jwks_url, exc)
            raise IssuerRejected("Unable to retrieve issuer signing keys") from exc

        self._cache.set_jwks(jwks_url, jwks)
        return jwks
