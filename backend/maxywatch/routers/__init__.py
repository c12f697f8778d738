"""API routers."""
from .status import router as status_router
from .settings import router as settings_router
from .checks import router as checks_router

__all__ = ["status_router", "settings_router", "checks_router"]
