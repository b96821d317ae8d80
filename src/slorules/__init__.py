"""
slorules: SLO based Prometheus rule generation.

Turns SLO definitions into multiwindow multi-burn rate recording and
alerting rules.
"""

from slorules.generate import GenerateService, Request, Response, ServiceConfig, build_service
from slorules.models import SLI, SLO, AlertMeta, Info, SLIEvents, SLIRaw, SLOGroup
from slorules.rules import render_prometheus_rules

__version__ = "0.1.0"

__all__ = [
    "AlertMeta",
    "GenerateService",
    "Info",
    "Request",
    "Response",
    "SLI",
    "SLIEvents",
    "SLIRaw",
    "SLO",
    "SLOGroup",
    "ServiceConfig",
    "build_service",
    "render_prometheus_rules",
]
