"""SLO validation."""

from slorules.validation.slo import (
    PROMETHEUS,
    VICTORIA_METRICS,
    Dialect,
    slo_problems,
    validate_query,
    validate_slo,
    validate_slo_group,
)

__all__ = [
    "Dialect",
    "PROMETHEUS",
    "VICTORIA_METRICS",
    "slo_problems",
    "validate_query",
    "validate_slo",
    "validate_slo_group",
]
