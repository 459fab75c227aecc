"""
Unified error handling for crosstag.

Resolution and labelling failures are raised as CrosstagError subclasses so
callers can decide per error type whether to skip and continue or abort the
pass. CLI commands convert them to exit codes.

Exit Codes:
- 0: Success
- 1: Warning (no matches, or the pass finished with labelling errors)
- 10: Configuration error (bad labeller file, invalid selector pattern)
- 11: Provider error (Kubernetes API unreachable, resource missing, conflict)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    UNKNOWN_ERROR = 127


class CrosstagError(Exception):
    """Base exception for crosstag errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CrosstagError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class InvalidPattern(ConfigurationError):
    """Raised when a namespace or pod selector is not a valid regex."""


class ProviderError(CrosstagError):
    """Raised when the resource store or Kubernetes API fails."""

    exit_code = ExitCode.PROVIDER_ERROR


class BackendUnavailable(ProviderError):
    """The resource store could not be reached for a type or a call."""


class ResourceNotFound(ProviderError):
    """The resource disappeared between resolution and use."""


class ResourceConflict(ProviderError):
    """A write was rejected, usually because the resource changed underneath us."""


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that provides unified error handling.

    Exit codes:
        - CrosstagError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except CrosstagError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: CrosstagError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
