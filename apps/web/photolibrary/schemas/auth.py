"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class Principal(BaseModel):
    """Authenticated identity bound to the current session."""

    name: str = Field(min_length=1)
    given_name: str | None = None
    family_name: str | None = None
    email: str | None = None
    picture: str | None = None


class AuthorizedClient(BaseModel):
    """Bearer token granted to a principal under one provider registration."""

    registration_id: str = Field(min_length=1)
    principal_name: str = Field(min_length=1)
    access_token: str = Field(min_length=1, repr=False)
    expires_at: datetime | None = None


class LoginResult(BaseModel):
    """Outcome of a completed authorization-code callback."""

    principal: Principal
    authorized_client: AuthorizedClient
    id_token: str = Field(repr=False)
