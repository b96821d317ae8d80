"""
Unified error handling for slorules.

Every failure raised by the rule generation engine derives from
``SLORulesError`` and carries an exit code so surrounding layers (CLI,
controller, HTTP backend) can map it without inspecting messages.

Exit Codes:
- 0: Success
- 10: Configuration error (window catalog, settings, plugin construction)
- 11: Not found (unknown SLO period, unknown plugin ID)
- 12: Validation error
- 13: Template rendering error
- 14: Plugin error
- 15: Generation error (pipeline stage failure)
- 127: Unknown/internal error
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    """Standardized exit codes for slorules errors."""

    SUCCESS = 0
    CONFIG_ERROR = 10
    NOT_FOUND = 11
    VALIDATION_ERROR = 12
    TEMPLATE_ERROR = 13
    PLUGIN_ERROR = 14
    GENERATION_ERROR = 15
    UNKNOWN_ERROR = 127


class SLORulesError(Exception):
    """Base exception for slorules errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SLORulesError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class CatalogConflictError(ConfigurationError):
    """Raised when two different window definitions share an SLO period."""


class NotFoundError(SLORulesError):
    """Raised when a requested resource is not registered."""

    exit_code = ExitCode.NOT_FOUND


class UnsupportedWindowError(NotFoundError):
    """Raised when an SLO time window has no window catalog entry."""


class ValidationError(SLORulesError):
    """Raised for validation failures.

    ``problems`` holds every individual failure found, so callers can
    report all of them at once instead of fixing one per run.
    """

    exit_code = ExitCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        problems: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.problems = problems or []
        if self.problems:
            message = f"{message}: {'; '.join(self.problems)}"
        super().__init__(message, details)


class TemplateRenderError(SLORulesError):
    """Raised when a query template can't be parsed or rendered."""

    exit_code = ExitCode.TEMPLATE_ERROR


class PluginError(SLORulesError):
    """Raised when a plugin can't be resolved, built or executed."""

    exit_code = ExitCode.PLUGIN_ERROR


class GenerationError(SLORulesError):
    """Raised when generating the rules of an SLO fails at some stage."""

    exit_code = ExitCode.GENERATION_ERROR


class NoRulesError(SLORulesError):
    """Raised when there are no rules left to render."""

    exit_code = ExitCode.GENERATION_ERROR


def format_error_message(error: SLORulesError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
