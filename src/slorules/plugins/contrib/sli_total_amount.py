"""Records the SLI total events amount for every SLO window.

Adds an extra rule group so dashboards can show traffic next to the error
ratio. Only event based SLIs have a total query.
"""

from __future__ import annotations

from typing import Any, List

from slorules import conventions
from slorules.core.errors import PluginError, TemplateRenderError
from slorules.core.promutils import duration_to_prom_str, merge_labels
from slorules.core.templating import Template
from slorules.models import SLO, MWMBAlertGroup, Rule, RuleGroup
from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult
from slorules.rules.sli import sli_rule_windows

PLUGIN_ID = "sloth.dev/contrib/sli_total_amount/v1"

GROUP_NAME_PREFIX = "sloth-slo-sli-total-amount-"


def _total_amount_rules(slo: SLO, alerts: MWMBAlertGroup) -> List[Rule]:
    labels = merge_labels(slo.labels, conventions.slo_id_labels(slo))
    template = Template(slo.sli.events.total_query, name="totalQuery")

    rules = []
    for window in sli_rule_windows(slo, alerts):
        str_window = duration_to_prom_str(window)
        record = f"{conventions.SLI_TOTAL_AMOUNT_METRIC}{str_window}"
        try:
            expr = template.render({conventions.QUERY_TPL_WINDOW_VAR: str_window})
        except TemplateRenderError as e:
            raise TemplateRenderError(
                f"could not render total query for {record}: {e.message}",
                details={"slo": slo.id},
            ) from e
        rules.append(Rule(record=record, expr=expr, labels=dict(labels)))

    return rules


class SLITotalAmountProcessor:
    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        events = request.slo.sli.events
        if events is None or not events.total_query:
            raise PluginError("SLI event type with total query required")

        result.slo_rules.extra_rules.append(
            RuleGroup(
                name=GROUP_NAME_PREFIX + request.slo.id,
                rules=_total_amount_rules(request.slo, request.mwmb_alert_group),
            )
        )


def new_plugin(config: Any, app_utils: AppUtils) -> SLITotalAmountProcessor:
    return SLITotalAmountProcessor()
