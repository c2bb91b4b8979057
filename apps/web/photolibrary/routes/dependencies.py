"""Dependency wiring for routes."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Annotated

from fastapi import Depends, Path, Request
import httpx
from pydantic import ValidationError

from photolibrary.adapters.auth import (
    AuthorizedClientService,
    GoogleOidcLoginProvider,
    LoginProvider,
    MockLoginProvider,
)
from photolibrary.core.config import Settings, get_settings
from photolibrary.errors import ApiError, LoginRequiredError
from photolibrary.schemas.auth import Principal
from photolibrary.services.photo_library import AuthorizedApiBridge, BridgeConfig

SESSION_PRINCIPAL_KEY = "principal"
SESSION_REGISTRATION_KEY = "registration_id"
SESSION_ID_TOKEN_KEY = "id_token"

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionLogin:
    principal: Principal
    registration_id: str
    id_token: str


def build_login_provider(settings: Settings) -> LoginProvider:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "google":
        return GoogleOidcLoginProvider(
            registration_id=settings.registration_id,
            client_id=settings.google_client_id,
            client_secret=settings.google_client_secret,
            server_metadata_url=settings.google_server_metadata_url,
            scopes=settings.google_scopes,
        )
    return MockLoginProvider(settings.registration_id)


def get_login_provider(
    request: Request,
    registration_id: Annotated[str, Path()],
) -> LoginProvider:
    providers: dict[str, LoginProvider] = request.app.state.login_providers
    provider = providers.get(registration_id)
    if provider is None:
        raise ApiError(status_code=404, code="RESOURCE_NOT_FOUND", message="Resource not found")
    return provider


def get_default_login_provider(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> LoginProvider:
    return request.app.state.login_providers[settings.registration_id]


def get_authorized_clients(request: Request) -> AuthorizedClientService:
    return request.app.state.authorized_clients


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_bridge(
    clients: Annotated[AuthorizedClientService, Depends(get_authorized_clients)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthorizedApiBridge:
    return AuthorizedApiBridge(
        clients=clients,
        http_client=http_client,
        config=BridgeConfig.from_settings(settings),
    )


def get_session_login(request: Request) -> SessionLogin:
    """Read the logged-in principal bound to the session by the login callback."""
    session = request.session
    raw_principal = session.get(SESSION_PRINCIPAL_KEY)
    registration_id = session.get(SESSION_REGISTRATION_KEY)
    if not raw_principal or not registration_id:
        raise LoginRequiredError()

    try:
        principal = Principal.model_validate(raw_principal)
    except ValidationError as exc:
        logger.warning("session.rejected path=%s reason=invalid_principal", request.url.path)
        session.clear()
        raise LoginRequiredError() from exc

    request.state.principal = principal
    return SessionLogin(
        principal=principal,
        registration_id=registration_id,
        id_token=session.get(SESSION_ID_TOKEN_KEY) or "",
    )
