"""
Metadata recording rules.

Expose the SLO objective, error budget, burn rates and remaining budget as
queryable metrics, plus an info metric carrying generator metadata. Rules are
always emitted in the same fixed order.
"""

from __future__ import annotations

from slorules import conventions
from slorules.core.promutils import (
    format_float,
    format_float_plain,
    labels_to_prom_filter,
    labels_to_prom_group,
    merge_labels,
)
from slorules.core.templating import Template
from slorules.models import SLO, Info, MWMBAlertGroup, Rule

_BURN_RATE_EXPR_TPL = Template(
    """{{ .SLIErrorMetric }}{{ .MetricFilter }}
/ on({{ .SLOGroup }}) group_left
{{ .ErrorBudgetRatioMetric }}{{ .MetricFilter }}
""",
    name="burnRateExpr",
)


def metadata_labels(slo: SLO) -> dict[str, str]:
    """Labels shared by every metadata rule; identity labels can't be overridden."""
    return merge_labels(slo.labels, conventions.slo_id_labels(slo))


def _burn_rate_expr(sli_metric: str, labels: dict[str, str]) -> str:
    return _BURN_RATE_EXPR_TPL.render(
        {
            "SLIErrorMetric": sli_metric,
            "MetricFilter": labels_to_prom_filter(labels),
            "SLOGroup": labels_to_prom_group(labels),
            "ErrorBudgetRatioMetric": conventions.META_ERROR_BUDGET_RATIO_METRIC,
        }
    )


def generate_metadata_recording_rules(
    info: Info, slo: SLO, alerts: MWMBAlertGroup
) -> list[Rule]:
    """Generate the metadata recording rules of an SLO.

    The current burn rate uses the page quick short window SLI metric, the
    quickest signal available; the period burn rate uses the SLO period one.
    """
    labels = metadata_labels(slo)
    metric_filter = labels_to_prom_filter(labels)
    objective_ratio = slo.objective / 100
    mode = info.mode.value if hasattr(info.mode, "value") else info.mode

    return [
        # SLO objective.
        Rule(
            record=conventions.META_OBJECTIVE_RATIO_METRIC,
            expr=f"vector({format_float(objective_ratio)})",
            labels=dict(labels),
        ),
        # Error budget.
        Rule(
            record=conventions.META_ERROR_BUDGET_RATIO_METRIC,
            expr=f"vector(1-{format_float(objective_ratio)})",
            labels=dict(labels),
        ),
        # Total period.
        Rule(
            record=conventions.META_TIME_PERIOD_DAYS_METRIC,
            expr=f"vector({format_float(slo.time_window.total_seconds() / 3600 / 24)})",
            labels=dict(labels),
        ),
        # Current burning speed.
        Rule(
            record=conventions.META_CURRENT_BURN_RATE_RATIO_METRIC,
            expr=_burn_rate_expr(
                conventions.sli_error_metric(alerts.page_quick.short_window), labels
            ),
            labels=dict(labels),
        ),
        # Total period burn rate.
        Rule(
            record=conventions.META_PERIOD_BURN_RATE_RATIO_METRIC,
            expr=_burn_rate_expr(conventions.sli_error_metric(slo.time_window), labels),
            labels=dict(labels),
        ),
        # Total error budget remaining in the period.
        Rule(
            record=conventions.META_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC,
            expr=f"1 - {conventions.META_PERIOD_BURN_RATE_RATIO_METRIC}{metric_filter}",
            labels=dict(labels),
        ),
        # Info.
        Rule(
            record=conventions.META_INFO_METRIC,
            expr="vector(1)",
            labels=merge_labels(
                labels,
                {
                    conventions.SLO_VERSION_LABEL: info.version,
                    conventions.SLO_MODE_LABEL: mode,
                    conventions.SLO_SPEC_LABEL: info.spec,
                    conventions.SLO_OBJECTIVE_LABEL: format_float_plain(slo.objective),
                },
            ),
        ),
    ]
