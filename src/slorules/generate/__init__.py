"""SLO rules generation pipeline."""

from slorules.generate.service import (
    GenerateService,
    Request,
    Response,
    ServiceConfig,
    SLOResult,
    build_service,
    set_rule_group_defaults,
)

__all__ = [
    "GenerateService",
    "Request",
    "Response",
    "ServiceConfig",
    "SLOResult",
    "build_service",
    "set_rule_group_defaults",
]
