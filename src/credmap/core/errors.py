"""
Exit codes and the error hierarchy for credmap commands.

The catalog core never raises. Every error here comes from a collaborator:
reading a detector tree or rules file, writing the export, or CLI usage.

Exit Codes:
- 0: Success
- 1: No match (keyword resolve found nothing)
- 10: Configuration or usage error
- 11: Extraction error (unreadable or malformed source)
- 12: Validation error (warnings under --strict)
- 13: Output error (refused or failed write)
- 127: Unknown/internal error
- 130: Interrupted
"""

from __future__ import annotations

import functools
import logging
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Exit codes returned by CLI commands."""

    SUCCESS = 0
    NO_MATCH = 1
    CONFIG_ERROR = 10
    EXTRACTION_ERROR = 11
    VALIDATION_ERROR = 12
    OUTPUT_ERROR = 13
    UNKNOWN_ERROR = 127
    INTERRUPTED = 130


class CredmapError(Exception):
    """Base error carrying an exit code and structured details."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CredmapError):
    """Bad usage: no source given, unknown mode or format."""

    exit_code = ExitCode.CONFIG_ERROR


class ExtractionError(CredmapError):
    """A detector tree or rules file is missing or malformed."""

    exit_code = ExitCode.EXTRACTION_ERROR


class ValidationError(CredmapError):
    """Extraction warnings promoted to an error by --strict."""

    exit_code = ExitCode.VALIDATION_ERROR


class OutputError(CredmapError):
    """The export could not be written, or would overwrite a file."""

    exit_code = ExitCode.OUTPUT_ERROR


F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling() -> Callable[[F], F]:
    """
    Decorate a CLI command so that it always returns an exit code.

    CredmapError subclasses print a one-line message and return their own
    exit code. Anything else returns UNKNOWN_ERROR. Tracebacks are printed
    only when logging is at DEBUG.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except CredmapError as e:
                logger.error(
                    "command_error",
                    error_type=type(e).__name__,
                    message=e.message,
                    exit_code=int(e.exit_code),
                    **e.details,
                )
                _report(format_error_message(e))
                return e.exit_code
            except KeyboardInterrupt:
                logger.info("command_interrupted")
                return ExitCode.INTERRUPTED
            except Exception as e:
                logger.error(
                    "unexpected_error",
                    error_type=type(e).__name__,
                    message=str(e),
                    exit_code=int(ExitCode.UNKNOWN_ERROR),
                )
                _report(f"unexpected {type(e).__name__}: {e}")
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def _report(message: str) -> None:
    print(f"error: {message}", file=sys.stderr)
    if logging.getLogger().isEnabledFor(logging.DEBUG):
        traceback.print_exc(file=sys.stderr)


def format_error_message(error: CredmapError) -> str:
    """Render an error and its details as one line."""
    if not error.details:
        return error.message
    detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
    return f"{error.message} ({detail_str})"
