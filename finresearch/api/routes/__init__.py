"""
API Routes - FastAPI route modules.
"""

from finresearch.api.routes.health import router as health_router
from finresearch.api.routes.chat import router as chat_router

__all__ = [
    "health_router",
    "chat_router",
]
