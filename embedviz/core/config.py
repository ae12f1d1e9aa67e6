# embedviz/core/config.py
"""
Configuration for embedviz.

Values come from the environment (or a local .env file). The global
`settings` instance only supplies constructor defaults; components keep
their own copies of the values they were built with.
"""

from __future__ import annotations
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Basic
    API_TITLE: str = "embedviz API"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Storage (cache .dat files and rendered charts)
    DATA_DIR: str = "./data"

    # Embedding provider
    EMBEDDING_PROVIDER: str = "openai"
    EMBEDDING_MODEL: str = "text-embedding-ada-002"
    EMBEDDING_SIZE: int = 1536
    MAX_TOKENS: int = 8191
    PROVIDER_TIMEOUT: float = 60.0

    OPENAI_API_KEY: Optional[str] = None
    OLLAMA_BASE_URL: str = "http://localhost:11434"

    # Cache keys derived from text are cut to this many characters
    CACHE_KEY_LENGTH: int = 20

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",
    }


# global instance
settings = Settings()
