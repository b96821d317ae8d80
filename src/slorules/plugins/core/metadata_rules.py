"""Generates the SLO metadata recording rules."""

from __future__ import annotations

from typing import Any

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult
from slorules.rules.metadata import generate_metadata_recording_rules

PLUGIN_ID = "sloth.dev/core/metadata_rules/v1"


class MetadataRulesProcessor:
    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        result.slo_rules.metadata_rec_rules.rules = generate_metadata_recording_rules(
            request.info, request.slo, request.mwmb_alert_group
        )


def new_plugin(config: Any, app_utils: AppUtils) -> MetadataRulesProcessor:
    return MetadataRulesProcessor()
