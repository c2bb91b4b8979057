"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

GOOGLE_DISCOVERY_URL = "https://accounts.google.com/.well-known/openid-configuration"
PHOTOS_READONLY_SCOPE = "https://www.googleapis.com/auth/photoslibrary.readonly"


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    auth_provider: Literal["mock", "google"] = "google"
    registration_id: str = Field(default="google", min_length=1)
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_server_metadata_url: str = GOOGLE_DISCOVERY_URL
    google_scopes: str = f"openid email profile {PHOTOS_READONLY_SCOPE}"
    session_secret: str

    albums_uri: str = "https://photoslibrary.googleapis.com/v1/albums"
    photos_uri: str = "https://photoslibrary.googleapis.com/v1/mediaItems:search"
    logout_uri: str = "https://accounts.google.com/Logout"
    authorizer: str = "Google"
    default_picture: str = "/images/person.svg"
    http_timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="PHOTOLIBRARY_", extra="ignore")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
