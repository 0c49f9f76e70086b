"""Route modules."""

from .auth import router as auth_router
from .vendors import router as vendors_router

__all__ = ["auth_router", "vendors_router"]
