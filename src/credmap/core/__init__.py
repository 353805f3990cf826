"""Core modules for credmap - centralized definitions and utilities."""

from credmap.core.errors import (
    ConfigurationError,
    CredmapError,
    ExitCode,
    ExtractionError,
    OutputError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "CredmapError",
    "ConfigurationError",
    "ExtractionError",
    "ValidationError",
    "OutputError",
    "main_with_error_handling",
    "format_error_message",
]
