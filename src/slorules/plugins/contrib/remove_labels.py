"""Removes custom labels from the SLI and metadata recording rules.

Reduces series cardinality when SLO labels are only wanted on alerts. The SLO
identity labels (and the window label on SLI rules) are always preserved, and
the info metric is never touched.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from slorules import conventions
from slorules.models import Rule
from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config

PLUGIN_ID = "sloth.dev/contrib/remove_labels/v1"


class RemoveLabelsConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    preserve_labels: List[str] = Field(default_factory=list, alias="preserveLabels")
    skip_metrics: List[str] = Field(default_factory=list, alias="skipMetrics")


def _keep_labels(labels: Dict[str, str], preserve: set[str]) -> Dict[str, str]:
    return {k: v for k, v in labels.items() if k in preserve}


def _strip(rules: List[Rule], preserve: set[str], skip: set[str]) -> None:
    for rule in rules:
        if rule.record in skip:
            continue
        rule.labels = _keep_labels(rule.labels, preserve)


class RemoveLabelsProcessor:
    def __init__(self, config: RemoveLabelsConfig):
        self.config = config

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        preserve = set(conventions.slo_id_labels(request.slo)) | set(self.config.preserve_labels)
        skip = {conventions.META_INFO_METRIC} | set(self.config.skip_metrics)

        _strip(
            result.slo_rules.sli_error_rec_rules.rules,
            preserve | {conventions.SLO_WINDOW_LABEL},
            skip,
        )
        _strip(result.slo_rules.metadata_rec_rules.rules, preserve, skip)


def new_plugin(config: Any, app_utils: AppUtils) -> RemoveLabelsProcessor:
    return RemoveLabelsProcessor(parse_config(RemoveLabelsConfig, config))
