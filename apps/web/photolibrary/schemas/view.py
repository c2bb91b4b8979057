"""Template model schemas."""

from pydantic import BaseModel


class ViewModel(BaseModel):
    """User and setup fields every page receives."""

    authorizer: str
    first: str | None = None
    last: str | None = None
    email: str | None = None
    picture: str
