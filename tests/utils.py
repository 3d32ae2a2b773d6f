import base64
import time
from typing import Any

from authlib.jose import JsonWebToken


def oct_jwk(key: bytes, kid: str) -> dict[str, str]:
    return {
        "kty": "oct",
        "k": base64.urlsafe_b64encode(key).rstrip(b"=").decode("ascii"),
        "alg": "HS256",
        "kid": kid,
    }


def sign_id_token(claims: dict[str, Any], key: bytes, kid: str) -> str:
    """Sign claims as an HS256 ID token carrying kid in its header."""
    token = JsonWebToken(["HS256"]).encode({"alg": "HS256", "kid": kid}, claims, key)
    return token.decode("ascii") if isinstance(token, bytes) else token


def id_token_claims(
    issuer: str,
    audience: str,
    nonce: str,
    *,
    subject: str = "azure-subject-123",
    lifetime: int = 300,
    **extra: Any,
) -> dict[str, Any]:
    now = int(time.time())
    claims = {
        "iss": issuer,
        "aud": audience,
        "sub": subject,
        "nonce": nonce,
        "iat": now,
        "exp": now + lifetime,
    }
    claims.update(extra)
    return claims
