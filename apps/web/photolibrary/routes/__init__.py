"""Route modules."""

from .auth import router as auth_router
from .photos import router as photos_router

__all__ = ["auth_router", "photos_router"]
