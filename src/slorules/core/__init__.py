"""Core modules for slorules - errors, Prometheus text helpers and templates."""

from slorules.core.errors import (
    CatalogConflictError,
    ConfigurationError,
    ExitCode,
    GenerationError,
    NoRulesError,
    NotFoundError,
    PluginError,
    SLORulesError,
    TemplateRenderError,
    UnsupportedWindowError,
    ValidationError,
    format_error_message,
)
from slorules.core.templating import Template, render_template

__all__ = [
    # Errors
    "ExitCode",
    "SLORulesError",
    "ConfigurationError",
    "CatalogConflictError",
    "NotFoundError",
    "UnsupportedWindowError",
    "ValidationError",
    "TemplateRenderError",
    "PluginError",
    "GenerationError",
    "NoRulesError",
    "format_error_message",
    # Templates
    "Template",
    "render_template",
]
