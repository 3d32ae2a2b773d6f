"""FastAPI application and lifecycle wiring."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.unieats.api.http.app_data import ApplicationDependencies
from src.unieats.api.http.routers.admin import router as admin_router
from src.unieats.api.http.routers.auth import router as auth_router
from src.unieats.api.http.routers.health import router as health_router
from src.unieats.api.http.routers.service.order import router as order_router
from src.unieats.api.http.routers.service.restaurant import router as restaurant_router
from src.unieats.api.http.routers.user import router as user_router
from src.unieats.api.utils.app_startup import configure_logging
from src.unieats.core.errors import DirectoryUnavailable
from src.unieats.core.services import (
    AuthorizationGate,
    AuthSessionService,
    DbSessionService,
    IdTokenVerifier,
    JWKSCacheInMemory,
    JwksService,
    OidcClientService,
    SessionAuthority,
    UserDirectory,
)
from src.unieats.core.storage.session_storage import (
    RedisSessionStorage,
    create_session_storage,
)
from src.unieats.runtime.config.config_data import DEV_SESSION_SECRET
from src.unieats.runtime.context import get_config

configure_logging()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


_MULTI_TENANT_ALIASES = {"common", "organizations", "consumers"}


def validate_runtime_config() -> None:
    """Refuse to serve production traffic with development-only settings."""
    config = get_config()
    production = config.app.environment == "production"

    if production and config.app.session_secret == DEV_SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET must be set in production")
    if production and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    for name, provider in config.oidc.providers.items():
        if provider.tenant_id not in _MULTI_TENANT_ALIASES:
            continue
        # ID tokens carry the real tenant in iss, so the configured issuer never matches
        message = (
            f"OIDC provider '{name}' uses tenant '{provider.tenant_id}'; "
            "set TENANT_ID to the directory id or every login will be rejected"
        )
        if production:
            raise RuntimeError(message)
        logger.warning(message)


async def build_dependencies() -> ApplicationDependencies:
    """Construct every service once for the lifetime of the process."""
    config = get_config()

    jwks_cache = JWKSCacheInMemory(ttl_seconds=config.jwt.jwks_cache_seconds)
    jwks_service = JwksService(jwks_cache)
    id_token_verifier = IdTokenVerifier(jwks_service)

    session_storage = await create_session_storage(config.redis)
    auth_session_service = AuthSessionService(session_storage)
    oidc_client_service = OidcClientService(auth_session_service, id_token_verifier)

    database_service = DbSessionService()
    if config.database.auto_create:
        await run_in_threadpool(database_service.create_all)

    user_directory = UserDirectory(database_service)
    session_authority = SessionAuthority(session_storage, user_directory)

    return ApplicationDependencies(
        jwks_cache=jwks_cache,
        jwks_service=jwks_service,
        id_token_verifier=id_token_verifier,
        session_storage=session_storage,
        auth_session_service=auth_session_service,
        oidc_client_service=oidc_client_service,
        database_service=database_service,
        user_directory=user_directory,
        session_authority=session_authority,
        authorization_gate=AuthorizationGate(session_authority),
    )


async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)
    validate_runtime_config()
    app.state.app_dependencies = await build_dependencies()


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies = app.state.app_dependencies
    await app_dependencies.auth_session_service.purge_expired()
    await app_dependencies.session_authority.purge_expired()
    if isinstance(app_dependencies.session_storage, RedisSessionStorage):
        await app_dependencies.session_storage.close()
    app_dependencies.database_service.dispose()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="UniEats API",
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.cors.origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)

__all__ = ["app", "startup", "shutdown"]


# --- Error rendering ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "message": "Invalid request",
            "errors": jsonable_errors(exc),
        },
    )


@app.exception_handler(DirectoryUnavailable)
async def directory_unavailable_handler(request: Request, exc: DirectoryUnavailable):
    logger.error("Directory unavailable while serving {}: {}", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": exc.message},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    # Query strings are not logged: the callback carries authorization codes
    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "message": "Internal Server Error",
                    "request_id": request_id,
                },
                headers={"X-Request-ID": request_id},
            )


# --- Router registration ---
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(restaurant_router)
app.include_router(order_router)
app.include_router(admin_router)


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(app, host=config.app.host, port=config.app.port, access_log=False)


if __name__ == "__main__":
    run()
