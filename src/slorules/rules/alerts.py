"""Multiwindow multi-burn rate alerting rules."""

from __future__ import annotations

from slorules import conventions
from slorules.core.errors import TemplateRenderError
from slorules.core.promutils import format_float, labels_to_prom_filter, merge_labels
from slorules.core.templating import Template
from slorules.models import SLO, AlertMeta, MWMBAlert, MWMBAlertGroup, Rule

# Fires when the quick or the slow detection trips; each one needs both its
# short and long windows over the threshold so the alert resets quickly once
# the burn stops.
_MWMB_ALERT_TPL = Template(
    """(
    max({{ .QuickShortMetric }}{{ .MetricFilter }} > ({{ .QuickShortBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
    and
    max({{ .QuickLongMetric }}{{ .MetricFilter }} > ({{ .QuickLongBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
)
or
(
    max({{ .SlowShortMetric }}{{ .MetricFilter }} > ({{ .SlowShortBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
    and
    max({{ .SlowLongMetric }}{{ .MetricFilter }} > ({{ .SlowLongBurnFactor }} * {{ .ErrorBudgetRatio }})) without ({{ .WindowLabel }})
)
""",
    name="mwmbAlertTpl",
)


def mwmb_alert_rule(slo: SLO, meta: AlertMeta, quick: MWMBAlert, slow: MWMBAlert) -> Rule:
    """Render one alerting rule from the quick and slow alerts of a severity.

    The severity label and the title/summary annotations always win over
    the ones set in ``meta``.
    """
    expr = _MWMB_ALERT_TPL.render(
        {
            "MetricFilter": labels_to_prom_filter(conventions.slo_id_labels(slo)),
            # Quick and slow share the same error budget.
            "ErrorBudgetRatio": format_float(quick.error_budget / 100),
            "QuickShortMetric": conventions.sli_error_metric(quick.short_window),
            "QuickShortBurnFactor": format_float(quick.burn_rate_factor),
            "QuickLongMetric": conventions.sli_error_metric(quick.long_window),
            "QuickLongBurnFactor": format_float(quick.burn_rate_factor),
            "SlowShortMetric": conventions.sli_error_metric(slow.short_window),
            "SlowShortBurnFactor": format_float(slow.burn_rate_factor),
            "SlowLongMetric": conventions.sli_error_metric(slow.long_window),
            "SlowLongBurnFactor": format_float(slow.burn_rate_factor),
            "WindowLabel": conventions.SLO_WINDOW_LABEL,
        }
    )

    severity = quick.severity.value
    service_var = f"{{{{$labels.{conventions.SLO_SERVICE_LABEL}}}}}"
    slo_var = f"{{{{$labels.{conventions.SLO_NAME_LABEL}}}}}"
    annotations = {
        conventions.ALERT_TITLE_ANNOTATION: (
            f"({severity}) {service_var} {slo_var} SLO error budget burn rate is too fast."
        ),
        conventions.ALERT_SUMMARY_ANNOTATION: (
            f"{service_var} {slo_var} SLO error budget burn rate is over expected."
        ),
    }

    # SLO labels are not added, the alert inherits them from the recorded series.
    labels = {conventions.SLO_SEVERITY_LABEL: severity}

    return Rule(
        alert=meta.name,
        expr=expr,
        labels=merge_labels(meta.labels, labels),
        annotations=merge_labels(meta.annotations, annotations),
    )


def generate_alert_rules(slo: SLO, alerts: MWMBAlertGroup) -> list[Rule]:
    """Generate the page and ticket alerting rules, skipping disabled ones."""
    rules = []
    for kind, meta, quick, slow in (
        ("page", slo.page_alert_meta, alerts.page_quick, alerts.page_slow),
        ("ticket", slo.ticket_alert_meta, alerts.ticket_quick, alerts.ticket_slow),
    ):
        if meta.disable:
            continue
        try:
            rules.append(mwmb_alert_rule(slo, meta, quick, slow))
        except TemplateRenderError as e:
            raise TemplateRenderError(
                f"could not create {kind} alert: {e.message}", details={"slo": slo.id}
            ) from e

    return rules
