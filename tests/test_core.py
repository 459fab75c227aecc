"""Tests for settings, error handling and logging setup."""

import logging

import pytest
import structlog

from crosstag.config.settings import Settings, get_settings
from crosstag.core.errors import (
    BackendUnavailable,
    ConfigurationError,
    CrosstagError,
    ExitCode,
    InvalidPattern,
    ProviderError,
    ResourceConflict,
    ResourceNotFound,
    format_error_message,
    main_with_error_handling,
)
from crosstag.logging import bind_context, configure_logging


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings()

        assert settings.match_threshold == 0.30
        assert settings.network_confidence == 0.90
        assert settings.network_index_ttl_seconds == 1800
        assert settings.reconcile_interval_seconds == 300
        assert settings.mock_backend is False

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("CROSSTAG_MATCH_THRESHOLD", "0.5")
        monkeypatch.setenv("CROSSTAG_MOCK_BACKEND", "true")

        settings = Settings()

        assert settings.match_threshold == 0.5
        assert settings.mock_backend is True

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()


class TestErrorHierarchy:
    """Tests for error classes and exit codes."""

    def test_exit_codes(self):
        assert ConfigurationError("x").exit_code == ExitCode.CONFIG_ERROR
        assert InvalidPattern("x").exit_code == ExitCode.CONFIG_ERROR
        assert ProviderError("x").exit_code == ExitCode.PROVIDER_ERROR
        assert CrosstagError("x").exit_code == ExitCode.UNKNOWN_ERROR

    def test_provider_subclasses(self):
        for cls in (BackendUnavailable, ResourceNotFound, ResourceConflict):
            assert issubclass(cls, ProviderError)

    def test_format_with_details(self):
        error = ResourceNotFound("Bucket/data not found", {"target": "Bucket/data"})

        assert format_error_message(error) == "Bucket/data not found (target=Bucket/data)"

    def test_format_without_details(self):
        assert format_error_message(ConfigurationError("bad")) == "bad"


class TestMainWithErrorHandling:
    """Tests for the CLI error handling decorator."""

    def test_success_passthrough(self):
        @main_with_error_handling()
        def command():
            return 0

        assert command() == 0

    def test_crosstag_error_exit_code(self):
        @main_with_error_handling(log_errors=False)
        def command():
            raise InvalidPattern("bad pattern")

        assert command() == ExitCode.CONFIG_ERROR

    def test_unexpected_error(self):
        @main_with_error_handling(log_errors=False)
        def command():
            raise RuntimeError("boom")

        assert command() == ExitCode.UNKNOWN_ERROR

    def test_keyboard_interrupt(self):
        @main_with_error_handling(log_errors=False)
        def command():
            raise KeyboardInterrupt

        assert command() == 130


class TestLogging:
    """Tests for logging configuration."""

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        root = logging.getLogger()
        level = root.level
        config = structlog.get_config()
        yield
        root.setLevel(level)
        structlog.configure(**config)

    def test_configure_with_level_name(self):
        configure_logging("debug")

        logger = bind_context(labeller="billing")
        assert logger is not None

    def test_configure_with_int(self):
        configure_logging(logging.WARNING)

    def test_console_format(self):
        configure_logging("INFO", log_format="console")

    def test_unknown_format(self):
        with pytest.raises(ValueError, match="log_format"):
            configure_logging("INFO", log_format="xml")
