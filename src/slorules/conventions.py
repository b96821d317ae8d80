"""Prometheus naming conventions for generated SLO rules.

Metric and label names here are part of the output contract: dashboards
and alert routing depend on them, so they must not change.
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING

from slorules.core.promutils import duration_to_prom_str

if TYPE_CHECKING:
    from slorules.models import SLO

# SLI metrics.
SLI_ERROR_METRIC = "slo:sli_error:ratio_rate"
SLI_TOTAL_AMOUNT_METRIC = "slo:sli_total:amount"
NUMERATOR_CORRECTION_METRIC = "slo:numerator_correction:ratio"

# Metadata metrics.
META_OBJECTIVE_RATIO_METRIC = "slo:objective:ratio"
META_ERROR_BUDGET_RATIO_METRIC = "slo:error_budget:ratio"
META_TIME_PERIOD_DAYS_METRIC = "slo:time_period:days"
META_CURRENT_BURN_RATE_RATIO_METRIC = "slo:current_burn_rate:ratio"
META_PERIOD_BURN_RATE_RATIO_METRIC = "slo:period_burn_rate:ratio"
META_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC = "slo:period_error_budget_remaining:ratio"
META_INFO_METRIC = "sloth_slo_info"

# Labels.
SLO_NAME_LABEL = "sloth_slo"
SLO_ID_LABEL = "sloth_id"
SLO_SERVICE_LABEL = "sloth_service"
SLO_WINDOW_LABEL = "sloth_window"
SLO_SEVERITY_LABEL = "sloth_severity"
SLO_VERSION_LABEL = "sloth_version"
SLO_MODE_LABEL = "sloth_mode"
SLO_SPEC_LABEL = "sloth_spec"
SLO_OBJECTIVE_LABEL = "sloth_objective"

# Alert annotations owned by the generator.
ALERT_TITLE_ANNOTATION = "title"
ALERT_SUMMARY_ANNOTATION = "summary"

# Rule group names.
RULE_GROUP_SLI_PREFIX = "sloth-slo-sli-recordings-"
RULE_GROUP_METADATA_PREFIX = "sloth-slo-meta-recordings-"
RULE_GROUP_ALERTS_PREFIX = "sloth-slo-alerts-"
RULE_GROUP_EXTRA_PREFIX = "sloth-slo-extra-rules-"

# Query template variables.
QUERY_TPL_WINDOW_VAR = "window"


def sli_error_metric(window: timedelta) -> str:
    """Return the SLI error recording rule name for a window (``slo:sli_error:ratio_rate5m``)."""
    return f"{SLI_ERROR_METRIC}{duration_to_prom_str(window)}"


def slo_id_labels(slo: SLO) -> dict[str, str]:
    """Labels identifying the recorded metrics and alerts of an SLO."""
    return {
        SLO_ID_LABEL: slo.id,
        SLO_NAME_LABEL: slo.name,
        SLO_SERVICE_LABEL: slo.service,
    }
