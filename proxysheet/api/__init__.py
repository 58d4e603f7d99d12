from proxysheet.api.health import router as health_router
from proxysheet.api.sheets import router as sheets_router

__all__ = [
    "health_router",
    "sheets_router",
]
