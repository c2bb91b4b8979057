"""Authentication adapters."""

from .base import AuthorizedClientService, LoginError, LoginProvider
from .google_oidc import GoogleOidcLoginProvider
from .mock_auth import MockLoginProvider

__all__ = [
    "AuthorizedClientService",
    "LoginError",
    "LoginProvider",
    "GoogleOidcLoginProvider",
    "MockLoginProvider",
]
