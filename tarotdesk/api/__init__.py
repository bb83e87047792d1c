from tarotdesk.api.fortune import router as fortune_router
from tarotdesk.api.health import router as health_router

__all__ = [
    "fortune_router",
    "health_router",
]
