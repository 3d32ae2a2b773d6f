from .jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt_verify import IdTokenVerifier

__all__ = ["IdTokenVerifier", "JWKSCache", "JWKSCacheInMemory", "JwksService"]
