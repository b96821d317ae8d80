"""SLO period windows and multiwindow multi-burn rate alert generation."""

from slorules.alerts.generator import AlertGenerator
from slorules.alerts.windows import (
    Window,
    WindowCatalog,
    Windows,
    burn_rate_factor,
    load_windows_document,
)

__all__ = [
    "AlertGenerator",
    "Window",
    "Windows",
    "WindowCatalog",
    "burn_rate_factor",
    "load_windows_document",
]
