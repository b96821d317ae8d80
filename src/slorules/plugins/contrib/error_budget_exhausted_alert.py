"""Adds an alert firing when the period error budget is exhausted.

The MWMB alerts catch fast burns; this one catches the budget running out
whatever the speed, e.g. a long sustained burn under the ticket threshold.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slorules import conventions
from slorules.core.promutils import format_float, labels_to_prom_filter, parse_duration
from slorules.models import Rule
from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config

PLUGIN_ID = "sloth.dev/contrib/error_budget_exhausted_alert/v1"

DEFAULT_ALERT_NAME = "ErrorBudgetExhausted"
DEFAULT_FOR = timedelta(minutes=5)


class ErrorBudgetExhaustedAlertConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Remaining budget ratio at or below which the alert fires, 0 is fully exhausted.
    threshold: float = 0
    for_: timedelta = Field(default=DEFAULT_FOR, alias="for")
    alert_name: str = DEFAULT_ALERT_NAME
    annotations: Dict[str, str] = Field(default_factory=dict)
    selector_labels: Dict[str, str] = Field(default_factory=dict)
    alert_labels: Dict[str, str] = Field(default_factory=dict)

    @field_validator("for_", mode="before")
    @classmethod
    def _parse_prom_duration(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("for_")
    @classmethod
    def _default_for(cls, v: timedelta) -> timedelta:
        return v or DEFAULT_FOR

    @field_validator("alert_name")
    @classmethod
    def _default_alert_name(cls, v: str) -> str:
        return v or DEFAULT_ALERT_NAME


class ErrorBudgetExhaustedAlertProcessor:
    def __init__(self, config: ErrorBudgetExhaustedAlertConfig):
        self.config = config

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        slo = request.slo

        labels = {
            conventions.SLO_NAME_LABEL: slo.name,
            conventions.SLO_SERVICE_LABEL: slo.service,
            conventions.SLO_ID_LABEL: f"{slo.service}-{slo.name}",
        }
        labels.update(slo.labels)
        labels.update(self.config.selector_labels)

        expr = (
            f"{conventions.META_PERIOD_ERROR_BUDGET_REMAINING_RATIO_METRIC}"
            f"{labels_to_prom_filter(labels)} <= {format_float(self.config.threshold)}"
        )

        result.slo_rules.alert_rules.rules.append(
            Rule(
                alert=self.config.alert_name,
                expr=expr,
                for_=self.config.for_,
                labels=dict(self.config.alert_labels),
                annotations=dict(self.config.annotations),
            )
        )


def new_plugin(config: Any, app_utils: AppUtils) -> ErrorBudgetExhaustedAlertProcessor:
    return ErrorBudgetExhaustedAlertProcessor(parse_config(ErrorBudgetExhaustedAlertConfig, config))
