"""Adds custom labels to an info metadata recording rule.

Useful to join extra static information (team, tier, owner...) to the SLO
through the info metric instead of labelling every series.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from slorules import conventions
from slorules.core.promutils import merge_labels
from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config

PLUGIN_ID = "sloth.dev/contrib/info_labels/v1"


class InfoLabelsConfig(BaseModel):
    labels: Dict[str, str]
    metric_name: str = Field(default=conventions.META_INFO_METRIC, alias="metricName")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("labels")
    @classmethod
    def _require_labels(cls, v: Dict[str, str]) -> Dict[str, str]:
        if not v:
            raise ValueError("at least one label is required")
        return v

    @field_validator("metric_name")
    @classmethod
    def _default_metric_name(cls, v: str) -> str:
        return v or conventions.META_INFO_METRIC


class InfoLabelsProcessor:
    def __init__(self, config: InfoLabelsConfig):
        self.config = config

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        for rule in result.slo_rules.metadata_rec_rules.rules:
            if rule.record == self.config.metric_name:
                rule.labels = merge_labels(rule.labels, self.config.labels)
                break


def new_plugin(config: Any, app_utils: AppUtils) -> InfoLabelsProcessor:
    return InfoLabelsProcessor(parse_config(InfoLabelsConfig, config))
