"""Authentication provider interfaces."""

from abc import ABC, abstractmethod

from starlette.requests import Request
from starlette.responses import Response

from photolibrary.schemas.auth import AuthorizedClient, LoginResult


class LoginError(Exception):
    """Raised when an authorization response cannot be turned into a login."""


class AuthorizedClientService(ABC):
    """Provider-neutral store of authorized clients."""

    @abstractmethod
    def find_authorized_client(self, registration_id: str, principal_name: str) -> AuthorizedClient | None:
        """Return the live authorized client for the pair, or ``None``."""

    @abstractmethod
    def save_authorized_client(self, client: AuthorizedClient) -> None:
        """Bind a freshly granted client to its registration and principal."""

    @abstractmethod
    def remove_authorized_client(self, registration_id: str, principal_name: str) -> None:
        """Forget the client for the pair. No-op when absent."""


class LoginProvider(ABC):
    """Authorization-code login against one provider registration."""

    registration_id: str

    @abstractmethod
    async def authorize_redirect(self, request: Request, redirect_uri: str) -> Response:
        """Send the user agent to the provider's authorization endpoint."""

    @abstractmethod
    async def complete_login(self, request: Request) -> LoginResult:
        """Exchange the callback's authorization response for a login."""


__all__ = ["AuthorizedClientService", "LoginError", "LoginProvider"]
