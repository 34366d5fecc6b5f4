"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Optional environment variables:
        - WEAVIATE_URL: Weaviate base URL (default: http://localhost:8080)
        - WEAVIATE_API_KEY: Bearer key for Weaviate
        - TEI_URL: Text Embeddings Inference base URL (default: http://localhost:8081)
        - RELEVANCE_THRESHOLD: Minimum hybrid score shown by default (default: 0.7)
        - ENVIRONMENT: Environment name (development, staging, production)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # ==========================================================================
    # Weaviate (Search Backend)
    # ==========================================================================
    weaviate_url: str = Field(
        default="http://localhost:8080",
        description="Weaviate base URL"
    )
    weaviate_api_key: str = Field(default="", description="Weaviate API key (Bearer)")
    weaviate_class: str = Field(default="Product", description="Weaviate class to query")

    @field_validator("weaviate_url", "tei_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v):
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    # ==========================================================================
    # Embeddings (Text Embeddings Inference)
    # ==========================================================================
    tei_url: str = Field(
        default="http://localhost:8081",
        description="Text Embeddings Inference base URL"
    )

    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for embedding and Weaviate HTTP calls (seconds)"
    )

    # ==========================================================================
    # Search Behaviour
    # ==========================================================================
    relevance_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Hybrid score below which results are hidden by default"
    )
    default_limit: int = Field(default=12, ge=1, description="Default number of results requested")
    hybrid_alpha: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Hybrid blend weight (0 = pure keyword, 1 = pure vector). Backend default when unset."
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance

    Raises:
        ValidationError: If an environment variable has an invalid value
    """
    # Try to find .env file in project root
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.

    Args:
        **overrides: Setting values to override

    Returns:
        Settings: A new settings instance with overrides applied
    """
    test_defaults = {
        "weaviate_url": "http://weaviate.test",
        "weaviate_api_key": "test-key",
        "tei_url": "http://tei.test",
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(_env_file=None, **test_defaults)
