"""
API Routes - FastAPI route modules.
"""

from chatflow.api.routes.health import router as health_router
from chatflow.api.routes.agent import router as agent_router

__all__ = [
    "health_router",
    "agent_router",
]
