"""Google OpenID Connect login adapter backed by Authlib."""

from __future__ import annotations

from datetime import UTC, datetime

from authlib.integrations.starlette_client import OAuth, OAuthError
from starlette.requests import Request
from starlette.responses import Response

from photolibrary.adapters.auth.base import LoginError, LoginProvider
from photolibrary.schemas.auth import AuthorizedClient, LoginResult, Principal


class GoogleOidcLoginProvider(LoginProvider):
    """Registers Google with Authlib and normalizes its token response.

    Code exchange and ID-token validation happen inside Authlib; this adapter
    only maps the validated claims and access token onto our schemas.
    """

    def __init__(
        self,
        *,
        registration_id: str,
        client_id: str | None,
        client_secret: str | None,
        server_metadata_url: str,
        scopes: str,
    ) -> None:
        if not client_id or not client_secret:
            raise ValueError("Google login requires a client id and client secret")

        self.registration_id = registration_id
        self._oauth = OAuth()
        self._oauth.register(
            name=registration_id,
            client_id=client_id,
            client_secret=client_secret,
            server_metadata_url=server_metadata_url,
            client_kwargs={"scope": scopes},
        )

    @property
    def _client(self):
        return self._oauth.create_client(self.registration_id)

    async def authorize_redirect(self, request: Request, redirect_uri: str) -> Response:
        return await self._client.authorize_redirect(request, redirect_uri)

    async def complete_login(self, request: Request) -> LoginResult:
        try:
            token = await self._client.authorize_access_token(request)
        except OAuthError as exc:
            raise LoginError("Authorization response was rejected") from exc

        userinfo = token.get("userinfo") or {}
        subject = str(userinfo.get("sub") or "").strip()
        if not subject:
            raise LoginError("ID token missing subject")

        access_token = token.get("access_token")
        id_token = token.get("id_token")
        if not access_token or not id_token:
            raise LoginError("Token response missing access or ID token")

        expires_at = token.get("expires_at")
        return LoginResult(
            principal=Principal(
                name=subject,
                given_name=userinfo.get("given_name"),
                family_name=userinfo.get("family_name"),
                email=userinfo.get("email"),
                picture=userinfo.get("picture"),
            ),
            authorized_client=AuthorizedClient(
                registration_id=self.registration_id,
                principal_name=subject,
                access_token=access_token,
                expires_at=datetime.fromtimestamp(expires_at, UTC) if expires_at else None,
            ),
            id_token=id_token,
        )


__all__ = ["GoogleOidcLoginProvider"]
