"""Tests for logging configuration."""

import json
import logging
import sys
from unittest.mock import patch

import pytest

from chroma_admin.config import Environment, Settings
from chroma_admin.logging_config import (
    DevFormatter,
    JSONFormatter,
    get_logger,
    setup_logging,
)


def _record(
    msg: str,
    level: int = logging.INFO,
    name: str = "chroma_admin.vectorstore.gateway",
    **extra: object,
) -> logging.LogRecord:
    record = logging.LogRecord(
        name=name,
        level=level,
        pathname="/app/chroma_admin/vectorstore/gateway.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSON log formatter."""

    def test_core_fields(self) -> None:
        """Level, logger, message and timestamp are always present."""
        data = json.loads(JSONFormatter().format(_record("Created collection: docs")))

        assert data["level"] == "INFO"
        assert data["logger"] == "chroma_admin.vectorstore.gateway"
        assert data["message"] == "Created collection: docs"
        assert data["file"] == "/app/chroma_admin/vectorstore/gateway.py:42"
        assert "timestamp" in data

    def test_extra_fields_are_grouped(self) -> None:
        """Fields passed through extra= appear under "extra"."""
        record = _record(
            'Skipping collection "ghost"',
            level=logging.WARNING,
            collection="ghost",
            reason="not_found",
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"] == {"collection": "ghost", "reason": "not_found"}

    def test_no_extra_key_without_extras(self) -> None:
        """Plain records carry no "extra" key."""
        data = json.loads(JSONFormatter().format(_record("Connected to Chroma")))
        assert "extra" not in data

    def test_non_serializable_extra_is_stringified(self) -> None:
        """Extras that JSON cannot encode fall back to str()."""
        record = _record("Search returned 0 results", skipped={"ghost"})

        data = json.loads(JSONFormatter().format(record))

        assert data["extra"]["skipped"] == "{'ghost'}"

    def test_exception_is_included(self) -> None:
        """Exception tracebacks are rendered into the output."""
        try:
            raise ConnectionError("Connection refused")
        except ConnectionError:
            record = _record("Failed to connect to Chroma", level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "ConnectionError: Connection refused" in data["exception"]


class TestDevFormatter:
    """Tests for development formatter."""

    def test_plain_record(self) -> None:
        """Level, logger name and message are shown."""
        output = DevFormatter().format(_record("Deleted collection: docs", logging.WARNING))

        assert "WARNING" in output
        assert "chroma_admin.vectorstore.gateway" in output
        assert output.endswith("Deleted collection: docs")

    def test_extra_pairs_are_appended(self) -> None:
        """Extra fields are appended as key=value pairs."""
        record = _record("Added 2 documents", collection="docs")

        output = DevFormatter().format(record)

        assert output.endswith("Added 2 documents | collection=docs")


class TestSetupLogging:
    """Tests for logging setup."""

    @pytest.mark.parametrize(
        ("environment", "formatter"),
        [
            (Environment.DEVELOPMENT, DevFormatter),
            (Environment.STAGING, JSONFormatter),
            (Environment.PRODUCTION, JSONFormatter),
        ],
    )
    def test_formatter_follows_environment(
        self,
        environment: Environment,
        formatter: type[logging.Formatter],
    ) -> None:
        """Only development gets human-readable output."""
        with patch(
            "chroma_admin.logging_config.get_settings",
            return_value=Settings(environment=environment),
        ):
            root = setup_logging()

        assert root is logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, formatter)

    def test_explicit_arguments_win(self) -> None:
        """Level and output format can be forced."""
        with patch(
            "chroma_admin.logging_config.get_settings",
            return_value=Settings(environment=Environment.DEVELOPMENT, log_level="ERROR"),
        ):
            root = setup_logging(level="debug", json_output=True)

        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_unknown_level_falls_back_to_info(self) -> None:
        """Unrecognized level names mean INFO."""
        root = setup_logging(level="chatty", json_output=False)
        assert root.level == logging.INFO

    def test_quiets_client_libraries(self) -> None:
        """HTTP and Chroma client loggers are raised to WARNING."""
        setup_logging(level="DEBUG", json_output=False)

        for name in ("chromadb", "httpx", "httpcore", "uvicorn.access"):
            assert logging.getLogger(name).level == logging.WARNING


class TestGetLogger:
    """Tests for named logger retrieval."""

    def test_returns_named_logger(self) -> None:
        """get_logger returns a logger with the given name."""
        assert get_logger("chroma_admin.search").name == "chroma_admin.search"

    def test_inherits_root_level(self) -> None:
        """Module loggers follow the configured root level."""
        setup_logging(level="WARNING", json_output=False)
        assert get_logger("chroma_admin.search.aggregator").getEffectiveLevel() == logging.WARNING
