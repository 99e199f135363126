"""Tests for application configuration."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from chroma_admin.config import (
    ChromaSettings,
    EmbeddingSettings,
    EmbeddingTransportKind,
    Environment,
    SearchSettings,
    Settings,
    get_settings,
)


class TestChromaSettings:
    """Tests for Chroma configuration."""

    def test_default_values(self) -> None:
        """Default values point to a local Chroma server."""
        settings = ChromaSettings()
        assert settings.url == "http://localhost:8000"
        assert settings.tenant == "default_tenant"
        assert settings.database == "default_database"
        assert settings.connect_attempts == 3

    def test_env_override(self) -> None:
        """The server address is read from the environment."""
        with patch.dict(os.environ, {"CHROMA_URL": "https://chroma.internal:9000"}):
            settings = ChromaSettings()
            assert settings.url == "https://chroma.internal:9000"

    def test_timeout_must_be_positive(self) -> None:
        """A zero timeout is rejected."""
        with pytest.raises(ValidationError):
            ChromaSettings(timeout=0)


class TestEmbeddingSettings:
    """Tests for embedding configuration."""

    def test_default_values(self) -> None:
        """Defaults compute embeddings in-process."""
        settings = EmbeddingSettings()
        assert settings.transport == EmbeddingTransportKind.LOCAL
        assert settings.endpoint == "/embeddings"
        assert settings.dimension == 384
        assert settings.batch_size == 32

    def test_env_override(self) -> None:
        """Environment variables override defaults."""
        with patch.dict(
            os.environ,
            {"EMBEDDING_TRANSPORT": "http", "EMBEDDING_BATCH_SIZE": "64"},
        ):
            settings = EmbeddingSettings()
            assert settings.transport == EmbeddingTransportKind.HTTP
            assert settings.batch_size == 64

    def test_dimension_must_be_positive(self) -> None:
        """Dimension below 1 is rejected."""
        with pytest.raises(ValidationError):
            EmbeddingSettings(dimension=0)


class TestSearchSettings:
    """Tests for search configuration."""

    def test_default_values(self) -> None:
        """The distance threshold is off by default."""
        settings = SearchSettings()
        assert settings.default_n_results == 5
        assert settings.max_distance is None
        assert settings.max_concurrency == 4

    def test_env_override(self) -> None:
        """The distance threshold can be set from the environment."""
        with patch.dict(os.environ, {"SEARCH_MAX_DISTANCE": "1.5"}):
            settings = SearchSettings()
            assert settings.max_distance == 1.5


class TestSettings:
    """Tests for main application settings."""

    def test_default_environment(self) -> None:
        """Default environment is development."""
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT

    def test_default_api_settings(self) -> None:
        """Default API host and port."""
        settings = Settings()
        assert settings.api_host == "0.0.0.0"
        assert settings.api_port == 3000

    def test_nested_settings_loaded(self) -> None:
        """Nested settings are initialized."""
        settings = Settings()
        assert isinstance(settings.chroma, ChromaSettings)
        assert isinstance(settings.embedding, EmbeddingSettings)
        assert isinstance(settings.search, SearchSettings)

    def test_environment_enum(self) -> None:
        """Environment can be set via string."""
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            settings = Settings()
            assert settings.environment == Environment.PRODUCTION


class TestGetSettings:
    """Tests for settings singleton."""

    def test_returns_settings_instance(self) -> None:
        """get_settings returns a Settings instance."""
        get_settings.cache_clear()
        settings = get_settings()
        assert isinstance(settings, Settings)

    def test_caching(self) -> None:
        """Settings are cached."""
        get_settings.cache_clear()
        settings1 = get_settings()
        settings2 = get_settings()
        assert settings1 is settings2
