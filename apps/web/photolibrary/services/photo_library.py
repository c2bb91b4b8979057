"""Authorized calls from a logged-in session to the Photos Library API."""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from photolibrary.adapters.auth.base import AuthorizedClientService
from photolibrary.core.config import Settings
from photolibrary.core.logging_safety import safe_log_identifier, truncate_body
from photolibrary.domain.authorization_state import AuthorizationState, ensure_transition
from photolibrary.errors import TransportError, UnauthorizedError, UpstreamFailureError
from photolibrary.schemas.auth import AuthorizedClient, Principal
from photolibrary.schemas.view import ViewModel

logger = logging.getLogger(__name__)

DEFAULT_PICTURE = "/images/person.svg"


@dataclass(frozen=True, slots=True)
class BridgeConfig:
    albums_uri: str
    photos_uri: str
    logout_uri: str
    authorizer: str
    default_picture: str = DEFAULT_PICTURE

    @classmethod
    def from_settings(cls, settings: Settings) -> BridgeConfig:
        return cls(
            albums_uri=settings.albums_uri,
            photos_uri=settings.photos_uri,
            logout_uri=settings.logout_uri,
            authorizer=settings.authorizer,
            default_picture=settings.default_picture,
        )


class AuthorizedApiBridge:
    """Resolves the caller's bearer token and calls the resource server with it.

    Every listing call performs at most one outbound request. A principal
    without a live authorized client gets ``UnauthorizedError`` before any
    request is made; the caller is expected to drop the session and send the
    user back through login rather than retry.
    """

    def __init__(
        self,
        *,
        clients: AuthorizedClientService,
        http_client: httpx.AsyncClient,
        config: BridgeConfig,
    ) -> None:
        self._clients = clients
        self._http = http_client
        self._config = config

    async def list_albums(self, principal: Principal, registration_id: str) -> list[Any]:
        client = self._resolve_client(principal, registration_id, operation="albums")
        return await self._fetch_items(
            operation="albums",
            client=client,
            method="GET",
            url=self._config.albums_uri,
            field="albums",
        )

    async def list_photos(self, principal: Principal, registration_id: str, album_id: str) -> list[Any]:
        logger.info("bridge.photos.requested album_id=%r", album_id)
        client = self._resolve_client(principal, registration_id, operation="photos")
        return await self._fetch_items(
            operation="photos",
            client=client,
            method="POST",
            url=self._config.photos_uri,
            field="mediaItems",
            body={"albumId": album_id},
        )

    def build_view_model(self, principal: Principal) -> ViewModel:
        return ViewModel(
            authorizer=self._config.authorizer,
            first=principal.given_name,
            last=principal.family_name,
            email=principal.email,
            picture=principal.picture or self._config.default_picture,
        )

    def terminate_session_and_get_redirect(self, session: MutableMapping[str, Any], id_token: str) -> str:
        """Clear the local session and return the provider's global logout URL."""
        if session:
            session.clear()
            logger.info("session.invalidated")

        separator = "&" if "?" in self._config.logout_uri else "?"
        return f"{self._config.logout_uri}{separator}{urlencode({'id_token_hint': id_token})}"

    def _resolve_client(self, principal: Principal, registration_id: str, *, operation: str) -> AuthorizedClient:
        client = self._clients.find_authorized_client(registration_id, principal.name)
        state = AuthorizationState.NO_CLIENT if client is None else AuthorizationState.AUTHORIZED
        logger.info(
            "bridge.%s.lookup registration_id=%s principal_id=%s state=%s",
            operation,
            registration_id,
            safe_log_identifier(principal.name, prefix="pid"),
            state.value,
        )
        if client is None:
            raise UnauthorizedError(registration_id)
        return client

    async def _fetch_items(
        self,
        *,
        operation: str,
        client: AuthorizedClient,
        method: str,
        url: str,
        field: str,
        body: dict[str, str] | None = None,
    ) -> list[Any]:
        state = AuthorizationState.AUTHORIZED
        headers = {"Authorization": f"Bearer {client.access_token}"}
        if body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = await self._http.request(method, url, headers=headers, json=body)
        except httpx.HTTPError as exc:
            state = ensure_transition(state, AuthorizationState.UPSTREAM_FAILED)
            logger.warning(
                "bridge.%s.transport_failed registration_id=%s state=%s reason=%s",
                operation,
                client.registration_id,
                state.value,
                type(exc).__name__,
            )
            raise TransportError(f"Could not reach resource server for {operation}") from exc

        if not response.is_success:
            state = ensure_transition(state, AuthorizationState.UPSTREAM_FAILED)
            raise self._upstream_failure(operation, state, response, reason="status")

        try:
            payload = response.json()
        except ValueError as exc:
            state = ensure_transition(state, AuthorizationState.UPSTREAM_FAILED)
            raise self._upstream_failure(operation, state, response, reason="invalid_json") from exc

        # The Photos Library API omits empty arrays altogether.
        items = payload.get(field, []) if isinstance(payload, dict) else None
        if not isinstance(items, list):
            state = ensure_transition(state, AuthorizationState.UPSTREAM_FAILED)
            raise self._upstream_failure(operation, state, response, reason=f"missing_{field}")

        state = ensure_transition(state, AuthorizationState.UPSTREAM_CALLED)
        logger.info(
            "bridge.%s.completed registration_id=%s status=%s count=%d state=%s",
            operation,
            client.registration_id,
            response.status_code,
            len(items),
            state.value,
        )
        return items

    @staticmethod
    def _upstream_failure(
        operation: str,
        state: AuthorizationState,
        response: httpx.Response,
        *,
        reason: str,
    ) -> UpstreamFailureError:
        logger.warning(
            "bridge.%s.upstream_failed status=%s reason=%s state=%s body=%s",
            operation,
            response.status_code,
            reason,
            state.value,
            truncate_body(response.text),
        )
        return UpstreamFailureError(
            f"Resource server rejected {operation} request",
            status_code=response.status_code,
            body=response.text,
        )


__all__ = ["AuthorizedApiBridge", "BridgeConfig", "DEFAULT_PICTURE"]
