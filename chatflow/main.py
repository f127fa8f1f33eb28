"""
Chatflow - FastAPI Application Entry Point

Usage:
    uvicorn chatflow.main:app --reload

Or:
    python -m chatflow.main
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatflow.core.config import get_settings
from chatflow.api.routes import health_router, agent_router
from chatflow.api.middleware import register_exception_handlers

logger = logging.getLogger(__name__)


API_DESCRIPTION = """
## Chatflow Agent API

Route a message through specialized agents and get a single answer.

### Workflows
- **chat**: query analysis, then optional search, voice and summary, then the answer
- **search**: web search first, optional summary of the results, then the answer
- **voice**: speech-to-text in, answer, text-to-speech out

### Quick Start
1. POST `/api/v1/agent/query` with a message and optional flags
2. Pass the returned `conversation_id` to continue the conversation
"""


def configure_logging(debug: bool = False) -> None:
    """Log to stderr in a single line format."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )
    # LiteLLM and httpx are chatty at INFO
    logging.getLogger("LiteLLM").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup; providers are built per request."""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.environment})")
    logger.info(f"LLM provider: {settings.llm_provider} ({settings.default_model})")
    if not settings.tavily_api_key:
        logger.warning("TAVILY_API_KEY not set: search workflows will fail")
    if not settings.deepgram_api_key:
        logger.warning("DEEPGRAM_API_KEY not set: speech synthesis will fail")

    yield

    logger.info("Shutting down application...")


def create_app() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()
    configure_logging(settings.debug)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=API_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(agent_router, prefix=settings.api_prefix)

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": f"{settings.api_prefix}/health",
            "endpoints": [
                f"{settings.api_prefix}/agent/query",
                f"{settings.api_prefix}/agent/voice",
                f"{settings.api_prefix}/agent/summary",
            ]
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "chatflow.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info"
    )
