"""SLI error ratio recording rules.

One recording rule per distinct time window used by the MWMB alerts, plus
the SLO period itself. Windows are deduplicated and sorted ascending so the
generated group is identical whatever order the alerts define them in.
"""

from __future__ import annotations

from datetime import timedelta

from slorules import conventions
from slorules.core.errors import SLORulesError, TemplateRenderError
from slorules.core.promutils import duration_to_prom_str, labels_to_prom_filter, merge_labels
from slorules.core.templating import Template
from slorules.models import SLO, MWMBAlertGroup, Rule

_EVENTS_EXPR_FMT = "({error_query})\n/\n({total_query})\n"
_RAW_EXPR_FMT = "({error_ratio_query})"

# Ratio of ratios: sum all the short window ratios in the period and divide by
# how many there are, averaging averages would be statistically wrong.
_OPTIMIZED_EXPR_TPL = Template(
    """sum_over_time({{.metric}}{{.filter}}[{{.window}}])
/ ignoring ({{.windowKey}})
count_over_time({{.metric}}{{.filter}}[{{.window}}])
""",
    name="optimizedSLIExpr",
)


def sli_rule_windows(slo: SLO, alerts: MWMBAlertGroup) -> list[timedelta]:
    """Distinct alert windows plus the SLO period, ascending."""
    return sorted(set(alerts.windows()) | {slo.time_window})


def sli_rule_labels(slo: SLO, window: timedelta) -> dict[str, str]:
    """SLO labels plus identity and window labels, identity labels win."""
    return merge_labels(
        slo.labels,
        conventions.slo_id_labels(slo),
        {conventions.SLO_WINDOW_LABEL: duration_to_prom_str(window)},
    )


def _sli_query_template(slo: SLO) -> str:
    if slo.sli.events is not None:
        return _EVENTS_EXPR_FMT.format(
            error_query=slo.sli.events.error_query,
            total_query=slo.sli.events.total_query,
        )
    if slo.sli.raw is not None:
        return _RAW_EXPR_FMT.format(error_ratio_query=slo.sli.raw.error_ratio_query)
    raise SLORulesError("invalid SLI type", details={"slo": slo.id})


def sli_record_rule(slo: SLO, window: timedelta) -> Rule:
    """Render the SLI error ratio recording rule of ``slo`` for ``window``."""
    str_window = duration_to_prom_str(window)
    try:
        expr = Template(_sli_query_template(slo), name="sliExpr").render(
            {conventions.QUERY_TPL_WINDOW_VAR: str_window}
        )
    except TemplateRenderError as e:
        raise TemplateRenderError(
            f"could not render SLI expression template: {e.message}",
            details={"slo": slo.id, "window": str_window},
        ) from e

    return Rule(
        record=conventions.sli_error_metric(window),
        expr=expr,
        labels=sli_rule_labels(slo, window),
    )


def optimized_sli_record_rule(slo: SLO, window: timedelta, short_window: timedelta) -> Rule:
    """Render the SLI rule of ``window`` from the ``short_window`` SLI rule.

    Cheaper for Prometheus than querying raw data over the whole period, at
    the cost of some accuracy. Meant for informative windows like the SLO
    period.
    """
    if window == short_window:
        raise SLORulesError(
            "can't optimize using the same short window as the window to optimize",
            details={"slo": slo.id, "window": duration_to_prom_str(window)},
        )

    expr = _OPTIMIZED_EXPR_TPL.render(
        {
            "metric": conventions.sli_error_metric(short_window),
            "filter": labels_to_prom_filter(conventions.slo_id_labels(slo)),
            "window": duration_to_prom_str(window),
            "windowKey": conventions.SLO_WINDOW_LABEL,
        }
    )

    return Rule(
        record=conventions.sli_error_metric(window),
        expr=expr,
        labels=sli_rule_labels(slo, window),
    )


def generate_sli_recording_rules(
    slo: SLO, alerts: MWMBAlertGroup, optimized: bool = False
) -> list[Rule]:
    """Generate the SLI error ratio recording rules of an SLO.

    Args:
        slo: SLO to generate the rules for
        alerts: MWMB alert group of the SLO
        optimized: Derive the SLO period rule from the page quick short
            window rule

    Returns:
        Recording rules sorted by window, ascending
    """
    short_window = alerts.page_quick.short_window
    rules = []
    for window in sli_rule_windows(slo, alerts):
        try:
            if optimized and window == slo.time_window:
                rule = optimized_sli_record_rule(slo, window, short_window)
            else:
                rule = sli_record_rule(slo, window)
        except SLORulesError as e:
            raise type(e)(
                f"could not create {slo.id!r} SLO rule for window "
                f"{duration_to_prom_str(window)}: {e.message}",
                details=e.details,
            ) from e
        rules.append(rule)

    return rules
