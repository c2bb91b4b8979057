"""Mock login provider for local development and tests."""

from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode

from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from photolibrary.adapters.auth.base import LoginError, LoginProvider
from photolibrary.schemas.auth import AuthorizedClient, LoginResult, Principal

_TOKEN_LIFETIME = timedelta(hours=1)


class MockLoginProvider(LoginProvider):
    """Accepts deterministic test authorization codes only.

    Expected code format:
    - ``test:<name>``
    - ``test:<name>:<email>``
    """

    def __init__(self, registration_id: str) -> None:
        self.registration_id = registration_id

    async def authorize_redirect(self, request: Request, redirect_uri: str) -> Response:
        name = request.query_params.get("login_hint") or "dev-user"
        query = urlencode({"code": f"test:{name}"})
        return RedirectResponse(f"{redirect_uri}?{query}", status_code=302)

    async def complete_login(self, request: Request) -> LoginResult:
        parts = (request.query_params.get("code") or "").split(":")
        if len(parts) not in (2, 3) or parts[0] != "test":
            raise LoginError("Invalid authorization code")

        name = parts[1].strip()
        email = parts[2].strip() if len(parts) == 3 else None
        if not name:
            raise LoginError("Authorization code missing user identity")

        return LoginResult(
            principal=Principal(name=name, given_name=name.title(), email=email or None),
            authorized_client=AuthorizedClient(
                registration_id=self.registration_id,
                principal_name=name,
                access_token=f"mock-access-{name}",
                expires_at=datetime.now(UTC) + _TOKEN_LIFETIME,
            ),
            id_token=f"mock-id-token-{name}",
        )


__all__ = ["MockLoginProvider"]
