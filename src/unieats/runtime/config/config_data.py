"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field

DEV_SESSION_SECRET = "a-default-secret-for-dev"


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(default=["http://localhost:3000"])
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class RedisConfig(BaseModel):
    """Redis configuration model."""

    enabled: bool = Field(default=False, description="Use Redis for session storage")
    url: str = Field(default="", description="Redis connection URL")
    password: str | None = Field(
        default=None, description="Password for Redis authentication"
    )
    decode_responses: bool = Field(
        default=True, description="Decode Redis responses to strings"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Construct the Redis connection string with password if provided."""
        if self.password and "@" not in self.url:
            parts = self.url.split("://", 1)
            if len(parts) == 2:
                scheme, rest = parts
                return f"{scheme}://:{self.password}@{rest}"
        return self.url


class OIDCProviderConfig(BaseModel):
    """OIDC provider configuration model."""

    tenant_id: str | None = Field(
        default=None, description="Directory (tenant) identifier at the issuer"
    )
    authorization_endpoint: str = Field(description="OIDC authorization endpoint URL")
    token_endpoint: str = Field(description="OIDC token endpoint URL")
    end_session_endpoint: str | None = Field(
        default=None, description="OIDC end session endpoint URL"
    )
    issuer: str = Field(description="OIDC issuer URL")
    jwks_uri: str = Field(description="JWKS endpoint for JWT validation")
    scopes: list[str] = Field(
        default_factory=lambda: ["openid", "profile", "email"],
        description="OIDC scopes to request during authentication",
    )
    response_mode: Literal["form_post", "query"] = Field(
        default="form_post", description="How the issuer delivers the callback"
    )
    client_id: str = Field(description="Client ID for the OIDC provider")
    client_secret: str = Field(default="", description="Client secret for the OIDC provider")
    redirect_uri: str = Field(description="Redirect URI for this provider")
    enabled: bool = Field(default=True, description="Enable OIDC authentication")


class OIDCConfig(BaseModel):
    """OIDC configuration model."""

    providers: dict[str, OIDCProviderConfig] = Field(
        default_factory=dict, description="OIDC provider configurations"
    )
    default_provider: str = Field(
        default="azuread", description="Default OIDC provider to use"
    )
    allowed_redirect_hosts: list[str] = Field(
        default_factory=list,
        description="Allowed hosts for absolute redirect URLs (empty = relative only)",
    )


class JWTConfig(BaseModel):
    """ID token validation configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["RS256"], description="Accepted signing algorithms"
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    jwks_cache_seconds: int = Field(
        default=3600, description="How long a fetched JWKS document is reused"
    )


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log file format")
    file: str | None = Field(default=None, description="Log file path (unset = stderr only)")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of rotated log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./unieats.db", description="Database connection URL"
    )
    sslmode: str | None = Field(
        default=None, description="psycopg2 sslmode (e.g. 'require' for hosted Postgres)"
    )
    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    auto_create: bool = Field(
        default=True, description="Create missing tables at application startup"
    )

    @computed_field
    @property
    def connection_string(self) -> str:
        """Normalize the configured URL into one SQLAlchemy accepts.

        Hosting platforms hand out ``postgres://`` URLs, which SQLAlchemy no
        longer recognises as a dialect name.
        """
        if self.url.startswith("postgres://"):
            return "postgresql://" + self.url[len("postgres://") :]
        return self.url

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=5000, description="Application port")
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Where the browser is sent after login and logout",
    )
    post_login_path: str = Field(
        default="/dashboard", description="Frontend path used when no return_to was given"
    )
    append_session_to_redirect: bool = Field(
        default=False,
        description="Append the signed session id to the post-login redirect",
    )
    session_max_age: int = Field(
        default=86400, description="Session maximum age in seconds"
    )
    session_secret: str = Field(
        default=DEV_SESSION_SECRET, description="Secret for signing session cookies"
    )
    session_cookie_name: str = Field(
        default="unieats_session", description="Name of the session cookie"
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def base_url(self) -> str:
        """Construct the base URL from host and port."""
        scheme = "https" if self.environment == "production" else "http"
        return f"{scheme}://{self.host}:{self.port}"


class SecurityConfig(BaseModel):
    """Security configuration for authentication and sessions."""

    secure_cookies: bool = Field(
        default=True, description="Force secure cookies in production"
    )
    cookie_samesite: Literal["lax", "strict", "none"] = Field(
        default="lax", description="SameSite cookie attribute"
    )
    auth_session_ttl_seconds: int = Field(
        default=600, description="Lifetime of a pending login handshake"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    redis: RedisConfig = Field(
        default_factory=RedisConfig, description="Redis configuration"
    )
    oidc: OIDCConfig = Field(
        default_factory=OIDCConfig, description="OIDC configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="ID token validation configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )
