"""Core modules for crosstag - centralized definitions and utilities."""

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

__all__ = [
    "ExitCode",
    "CrosstagError",
    "ConfigurationError",
    "InvalidPattern",
    "ProviderError",
    "BackendUnavailable",
    "ResourceNotFound",
    "ResourceConflict",
    "main_with_error_handling",
    "format_error_message",
]
