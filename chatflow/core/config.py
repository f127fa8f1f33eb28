"""
Application Configuration - Environment settings and constants.

Loads configuration from environment variables with sensible defaults.
Uses Pydantic Settings for validation and type safety.

Provider credentials (LLM, Tavily, Deepgram) are read here and copied
into each workflow's ExecutionContext by the API layer.
"""

from typing import List, Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Usage:
        from chatflow.core.config import get_settings
        settings = get_settings()
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Chatflow Agent Service"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    api_prefix: str = "/api/v1"
    allowed_origins: List[str] = ["*"]

    # HTTP Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    # LLM Configuration
    llm_provider: Literal["openai", "ollama"] = "openai"
    llm_api_key: Optional[str] = None
    default_model: str = "gpt-4o-mini"
    ollama_base_url: str = "http://localhost:11434"
    llm_max_tokens: Optional[int] = None

    # Agent temperatures
    query_temperature: float = 0.3
    summary_temperature: float = 0.6
    response_temperature: float = 0.7

    # Search Configuration (Tavily)
    tavily_api_key: Optional[str] = None
    tavily_base_url: str = "https://api.tavily.com"
    search_timeout_seconds: float = 30.0

    # Voice Configuration (Deepgram)
    deepgram_api_key: Optional[str] = None
    stt_model: str = "nova-2"
    stt_language: str = "en-US"
    tts_model: str = "aura-asteria-en"

    # Conversations
    conversation_ttl_hours: int = 24
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB

    # Workflow
    workflow_max_steps: Optional[int] = None


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
