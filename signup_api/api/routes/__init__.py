from __future__ import annotations

from signup_api.api.routes.health import router as health_router
from signup_api.api.routes.subscribe import router as subscribe_router

__all__ = ["health_router", "subscribe_router"]
