"""
API Layer - FastAPI routes and middleware.
"""

from finresearch.api.routes import health_router, chat_router

__all__ = [
    "health_router",
    "chat_router",
]
