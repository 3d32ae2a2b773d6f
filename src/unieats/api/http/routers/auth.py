"""Browser login flow: issuer redirect, callback, logout and failure page."""

from typing import Any
from urllib.parse import urlencode, urlparse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from loguru import logger

from src.unieats.api.http.deps import (
    get_oidc_client_service,
    get_session_authority,
    get_user_directory,
)
from src.unieats.core.errors import AuthenticationError, DirectoryUnavailable
from src.unieats.core.security import sign_session_id
from src.unieats.core.services import (
    AuthorizationGate,
    OidcClientService,
    SessionAuthority,
    UserDirectory,
)
from src.unieats.core.services.oidc_client_service import CallbackPayload
from src.unieats.runtime.context import get_config

router = APIRouter(tags=["auth"])

_FAILURE_MESSAGES = {
    "issuer_rejected": "Login was rejected by the identity provider",
    "missing_identifier": "Your account did not provide an email address",
    "directory_unavailable": "User directory unavailable, try again later",
}


def _session_cookie_settings() -> dict[str, Any]:
    config = get_config()
    return {
        "httponly": True,
        "secure": config.app.environment == "production"
        and config.security.secure_cookies,
        "samesite": config.security.cookie_samesite,
        "path": "/",
    }


def _login_failed(reason: str) -> RedirectResponse:
    return RedirectResponse(
        url=f"/login-failed?{urlencode({'reason': reason})}", status_code=302
    )


async def _callback_payload(request: Request) -> CallbackPayload:
    if request.method == "POST":
        form = await request.form()
        return CallbackPayload.model_validate(
            {key: value for key, value in form.items() if isinstance(value, str)}
        )
    return CallbackPayload.model_validate(dict(request.query_params))


@router.get("/login")
async def login(
    return_to: str | None = None,
    provider: str | None = None,
    oidc_client: OidcClientService = Depends(get_oidc_client_service),
) -> RedirectResponse:
    """Send the browser to the identity provider."""
    try:
        authorization_url = await oidc_client.begin_authentication(
            provider=provider, return_to=return_to
        )
    except AuthenticationError as exc:
        logger.warning("Cannot start login: {}", exc.message)
        return _login_failed(exc.code)
    return RedirectResponse(url=authorization_url, status_code=302)


@router.api_route("/auth/openid/return", methods=["GET", "POST"])
async def openid_return(
    request: Request,
    oidc_client: OidcClientService = Depends(get_oidc_client_service),
    user_directory: UserDirectory = Depends(get_user_directory),
    session_authority: SessionAuthority = Depends(get_session_authority),
) -> RedirectResponse:
    """Complete the handshake, link the local user and open a session."""
    config = get_config()
    payload = await _callback_payload(request)

    try:
        identity, return_to = await oidc_client.complete_authentication(payload)
        user = await user_directory.resolve(identity)
    except AuthenticationError as exc:
        logger.warning("Login failed ({}): {}", exc.code, exc.message)
        return _login_failed(exc.code)
    except DirectoryUnavailable as exc:
        logger.error("Login aborted: {}", exc.message)
        return _login_failed(exc.code)

    session_id = await session_authority.establish(user)
    signed = sign_session_id(session_id)

    target = return_to or config.app.post_login_path
    # Absolute targets were already checked against the allowed hosts.
    if not urlparse(target).scheme:
        target = f"{config.app.frontend_url.rstrip('/')}{target}"
    if config.app.append_session_to_redirect:
        separator = "&" if "?" in target else "?"
        target = f"{target}{separator}{urlencode({'session': signed})}"

    response = RedirectResponse(url=target, status_code=302)
    response.set_cookie(
        config.app.session_cookie_name,
        signed,
        max_age=session_authority.session_max_age,
        **_session_cookie_settings(),
    )
    logger.info("User {} logged in", user.id)
    return response


@router.get("/login-failed")
async def login_failed(reason: str = "issuer_rejected") -> JSONResponse:
    """Failure page the login flow redirects to."""
    message = _FAILURE_MESSAGES.get(reason, "Login failed")
    status_code = 500 if reason == "directory_unavailable" else 401
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "reason": reason},
    )


@router.get("/logout")
async def logout(
    request: Request,
    session_authority: SessionAuthority = Depends(get_session_authority),
) -> RedirectResponse:
    """Destroy the current session and return to the frontend."""
    config = get_config()
    await session_authority.destroy(AuthorizationGate.extract_session_id(request))

    response = RedirectResponse(url=config.app.frontend_url, status_code=302)
    response.delete_cookie(config.app.session_cookie_name, **_session_cookie_settings())
    return response
