"""Corrects the SLI error ratio of short windows by their share of traffic.

Low traffic windows produce noisy error ratios. Every alert window SLI rule
is weighted by the ratio between the window traffic and the SLO period
traffic, recorded as ``slo:numerator_correction:ratio<window>`` metadata
rules. Only event based SLIs have a total query to weight with.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from slorules import conventions
from slorules.core.errors import PluginError, SLORulesError, TemplateRenderError
from slorules.core.promutils import duration_to_prom_str, labels_to_prom_filter, merge_labels
from slorules.core.templating import Template
from slorules.models import SLO, MWMBAlertGroup, Rule
from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config
from slorules.rules.sli import optimized_sli_record_rule, sli_record_rule, sli_rule_labels

PLUGIN_ID = "sloth.dev/contrib/denominator_corrected_rules/v1"

_CORRECTED_EXPR_FMT = """(
{metric}{{{{.window}}}}{{{{.filter}}}}
* on()
{error_query}
)
/
({total_query})
"""


class DenominatorCorrectedRulesConfig(BaseModel):
    """Render the SLO period SLI rule from raw data instead of the page quick rule."""

    model_config = ConfigDict(populate_by_name=True)

    disable_optimized: bool = Field(default=False, alias="disableOptimized")


def numerator_correction_metric(window: timedelta) -> str:
    return f"{conventions.NUMERATOR_CORRECTION_METRIC}{duration_to_prom_str(window)}"


def _corrected_windows(slo: SLO, alerts: MWMBAlertGroup) -> List[timedelta]:
    """Distinct alert windows, ascending, without the SLO period."""
    return sorted(set(alerts.windows()) - {slo.time_window})


def corrected_sli_record_rule(slo: SLO, window: timedelta) -> Rule:
    """Render the numerator corrected SLI error ratio rule for ``window``."""
    str_window = duration_to_prom_str(window)
    text = _CORRECTED_EXPR_FMT.format(
        metric=conventions.NUMERATOR_CORRECTION_METRIC,
        error_query=slo.sli.events.error_query,
        total_query=slo.sli.events.total_query,
    )
    try:
        expr = Template(text, name="sliExpr").render(
            {
                conventions.QUERY_TPL_WINDOW_VAR: str_window,
                "filter": labels_to_prom_filter(conventions.slo_id_labels(slo)),
            }
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


def numerator_correction_rule(slo: SLO, window: timedelta) -> Rule:
    """Ratio between the ``window`` traffic and the SLO period traffic."""
    record = numerator_correction_metric(window)
    try:
        template = Template(slo.sli.events.total_query, name="totalQuery")
        numerator = template.render({conventions.QUERY_TPL_WINDOW_VAR: duration_to_prom_str(window)})
        denominator = template.render(
            {conventions.QUERY_TPL_WINDOW_VAR: duration_to_prom_str(slo.time_window)}
        )
    except TemplateRenderError as e:
        raise TemplateRenderError(
            f"could not render total query for {record}: {e.message}",
            details={"slo": slo.id},
        ) from e

    return Rule(
        record=record,
        expr=f"({numerator})/({denominator})",
        labels=merge_labels(slo.labels, conventions.slo_id_labels(slo)),
    )


class DenominatorCorrectedRulesProcessor:
    def __init__(self, config: DenominatorCorrectedRulesConfig):
        self.config = config

    def _period_rule(self, slo: SLO, alerts: MWMBAlertGroup) -> Rule:
        if self.config.disable_optimized:
            return sli_record_rule(slo, slo.time_window)
        return optimized_sli_record_rule(slo, slo.time_window, alerts.page_quick.short_window)

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        slo = request.slo
        events = slo.sli.events
        if events is None or not events.error_query or not events.total_query:
            raise PluginError("denominator corrected SLI requires SLI event type")

        alerts = request.mwmb_alert_group
        windows = _corrected_windows(slo, alerts)

        sli_rules = []
        for window in windows + [slo.time_window]:
            try:
                if window == slo.time_window:
                    sli_rules.append(self._period_rule(slo, alerts))
                else:
                    sli_rules.append(corrected_sli_record_rule(slo, window))
            except SLORulesError as e:
                raise type(e)(
                    f"could not create {slo.id!r} SLO rule for window "
                    f"{duration_to_prom_str(window)}: {e.message}",
                    details=e.details,
                ) from e
        result.slo_rules.sli_error_rec_rules.rules = sli_rules

        for window in windows + [slo.time_window]:
            result.slo_rules.metadata_rec_rules.rules.append(numerator_correction_rule(slo, window))


def new_plugin(config: Any, app_utils: AppUtils) -> DenominatorCorrectedRulesProcessor:
    return DenominatorCorrectedRulesProcessor(parse_config(DenominatorCorrectedRulesConfig, config))
