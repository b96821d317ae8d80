"""Optional SLO processors, enabled per SLO or application wide."""

from slorules.plugins.contrib import (
    denominator_corrected_rules,
    error_budget_exhausted_alert,
    info_labels,
    remove_labels,
    rule_intervals,
    sli_total_amount,
    validate_victoria_metrics,
)

PLUGINS = [
    info_labels,
    remove_labels,
    rule_intervals,
    error_budget_exhausted_alert,
    sli_total_amount,
    denominator_corrected_rules,
    validate_victoria_metrics,
]

__all__ = ["PLUGINS"]
