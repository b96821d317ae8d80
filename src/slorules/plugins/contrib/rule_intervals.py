"""Sets the evaluation interval of the SLI, metadata and alert rule groups."""

from __future__ import annotations

from datetime import timedelta
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slorules.core.promutils import parse_duration
from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config

PLUGIN_ID = "sloth.dev/contrib/rule_intervals/v1"


class IntervalConfig(BaseModel):
    """Prometheus durations; unset group intervals fall back to ``default``."""

    model_config = ConfigDict(populate_by_name=True)

    default: timedelta
    sli_error: Optional[timedelta] = Field(default=None, alias="sliError")
    metadata: Optional[timedelta] = None
    alert: Optional[timedelta] = None

    @field_validator("default", "sli_error", "metadata", "alert", mode="before")
    @classmethod
    def _parse_prom_duration(cls, v: Any) -> Any:
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("default")
    @classmethod
    def _require_default(cls, v: timedelta) -> timedelta:
        if not v:
            raise ValueError("at least default interval is required")
        return v


class RuleIntervalsConfig(BaseModel):
    interval: IntervalConfig


class RuleIntervalsProcessor:
    def __init__(self, config: RuleIntervalsConfig):
        self.config = config

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        interval = self.config.interval
        rules = result.slo_rules
        rules.sli_error_rec_rules.interval = interval.sli_error or interval.default
        rules.metadata_rec_rules.interval = interval.metadata or interval.default
        rules.alert_rules.interval = interval.alert or interval.default


def new_plugin(config: Any, app_utils: AppUtils) -> RuleIntervalsProcessor:
    return RuleIntervalsProcessor(parse_config(RuleIntervalsConfig, config))
