"""
Application Configuration - Environment settings and constants.

Loads configuration from environment variables with sensible defaults.
Uses Pydantic Settings for validation and type safety.

Agent loop constants (retry counts, backoff curve, iteration cap) live here
rather than inline so that tests can run with deterministic values.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Usage:
        from finresearch.core.config import get_settings
        settings = get_settings()
    """

    # Application
    app_name: str = "Financial Research Agent"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"
    api_prefix: str = "/api/v1"
    allowed_origins: List[str] = ["*"]
    log_level: str = "INFO"

    # HTTP Server Configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8000

    # Model Configuration
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    default_model: str = "gpt-4.1"
    llm_timeout_seconds: float = 120.0

    # Financial data provider
    financial_datasets_api_key: Optional[str] = None
    financial_datasets_base_url: str = "https://api.financialdatasets.ai"
    financial_datasets_timeout_seconds: float = 30.0

    # Agent loop
    planner_max_retries: int = 3
    executor_max_iterations: int = 5
    tool_selection_retries: int = 1
    tool_max_attempts: int = 3
    tool_backoff_base_ms: int = 200  # 200ms, then 800ms
    tool_backoff_multiplier: float = 4.0
    context_result_max_chars: int = 8000

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Convenience access
settings = get_settings()
