"""
API Layer - FastAPI routes and middleware.
"""

from chatflow.api.routes import health_router, agent_router

__all__ = [
    "health_router",
    "agent_router",
]
