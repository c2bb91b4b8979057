"""Login and logout routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from starlette.responses import Response

from photolibrary.adapters.auth import AuthorizedClientService, LoginError, LoginProvider
from photolibrary.core.logging_safety import safe_log_identifier
from photolibrary.errors import ApiError
from photolibrary.routes.dependencies import (
    SESSION_ID_TOKEN_KEY,
    SESSION_PRINCIPAL_KEY,
    SESSION_REGISTRATION_KEY,
    SessionLogin,
    get_authorized_clients,
    get_bridge,
    get_default_login_provider,
    get_login_provider,
    get_session_login,
)
from photolibrary.services.photo_library import AuthorizedApiBridge

router = APIRouter(tags=["Auth"])
logger = logging.getLogger(__name__)


@router.get("/login", name="login")
async def login(
    request: Request,
    provider: Annotated[LoginProvider, Depends(get_default_login_provider)],
) -> Response:
    redirect_uri = request.url_for("login_callback", registration_id=provider.registration_id)
    return await provider.authorize_redirect(request, str(redirect_uri))


@router.get("/login/oauth2/code/{registration_id}", name="login_callback")
async def login_callback(
    request: Request,
    provider: Annotated[LoginProvider, Depends(get_login_provider)],
    clients: Annotated[AuthorizedClientService, Depends(get_authorized_clients)],
) -> RedirectResponse:
    try:
        result = await provider.complete_login(request)
    except LoginError as exc:
        logger.warning(
            "auth.login_rejected registration_id=%s reason=%s",
            provider.registration_id,
            exc,
        )
        raise ApiError(status_code=401, code="UNAUTHORIZED", message=str(exc) or "Login failed") from exc

    clients.save_authorized_client(result.authorized_client)

    session = request.session
    session.clear()
    session[SESSION_PRINCIPAL_KEY] = result.principal.model_dump(mode="json")
    session[SESSION_REGISTRATION_KEY] = provider.registration_id
    session[SESSION_ID_TOKEN_KEY] = result.id_token

    logger.info(
        "auth.login_completed registration_id=%s principal_id=%s",
        provider.registration_id,
        safe_log_identifier(result.principal.name, prefix="pid"),
    )
    return RedirectResponse(str(request.url_for("welcome")), status_code=status.HTTP_302_FOUND)


@router.get("/photolibrary/logout", name="logout")
async def logout(
    request: Request,
    session_login: Annotated[SessionLogin, Depends(get_session_login)],
    clients: Annotated[AuthorizedClientService, Depends(get_authorized_clients)],
    bridge: Annotated[AuthorizedApiBridge, Depends(get_bridge)],
) -> RedirectResponse:
    clients.remove_authorized_client(session_login.registration_id, session_login.principal.name)
    target = bridge.terminate_session_and_get_redirect(request.session, session_login.id_token)
    logger.info(
        "auth.logout registration_id=%s principal_id=%s",
        session_login.registration_id,
        safe_log_identifier(session_login.principal.name, prefix="pid"),
    )
    return RedirectResponse(target, status_code=status.HTTP_302_FOUND)
