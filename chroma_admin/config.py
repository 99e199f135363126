"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
The Chroma server address is only ever read from the process environment;
nothing is persisted server-side.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EmbeddingTransportKind(str, Enum):
    """Where embeddings are computed."""

    LOCAL = "local"
    HTTP = "http"


class ChromaSettings(BaseSettings):
    """Chroma vector database server configuration."""

    model_config = SettingsConfigDict(env_prefix="CHROMA_")

    url: str = Field(
        default="http://localhost:8000",
        description="Chroma server base address",
    )
    tenant: str = Field(
        default="default_tenant",
        description="Chroma tenant",
    )
    database: str = Field(
        default="default_database",
        description="Chroma database",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Per-call timeout in seconds",
    )
    connect_attempts: int = Field(
        default=3,
        ge=1,
        description="Connection attempts before giving up on first use",
    )
    connect_backoff: float = Field(
        default=0.5,
        ge=0,
        description="Initial backoff between connection attempts in seconds",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration.

    The default transport computes the deterministic fallback embeddings
    in-process. The HTTP transport posts to an ``/embeddings`` endpoint,
    normally the one this service exposes.
    """

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    transport: EmbeddingTransportKind = Field(
        default=EmbeddingTransportKind.LOCAL,
        description="Embedding transport (local or http)",
    )
    base_url: str = Field(
        default="http://localhost:3000",
        description="Base address used to resolve a relative endpoint",
    )
    endpoint: str = Field(
        default="/embeddings",
        description="Embedding endpoint, relative or absolute",
    )
    dimension: int = Field(
        default=384,
        ge=1,
        description="Embedding vector dimension",
    )
    batch_size: int = Field(
        default=32,
        ge=1,
        description="Batch size for embedding requests",
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds",
    )


class SearchSettings(BaseSettings):
    """Multi-collection search configuration."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    default_n_results: int = Field(
        default=5,
        ge=1,
        description="Matches requested per collection when the caller omits it",
    )
    max_distance: float | None = Field(
        default=None,
        ge=0,
        description="Drop results farther than this distance (unset disables)",
    )
    max_concurrency: int = Field(
        default=4,
        ge=1,
        description="Collections queried at the same time",
    )
    query_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Per-collection query timeout in seconds",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=3000,
        description="API server port",
    )
    collection_created_by: str = Field(
        default="chroma-admin",
        description="Value recorded as created_by on new collections",
    )

    # Nested settings
    chroma: ChromaSettings = Field(default_factory=ChromaSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
