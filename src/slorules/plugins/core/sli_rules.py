"""Generates the SLI error ratio recording rules."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config
from slorules.rules.sli import generate_sli_recording_rules

PLUGIN_ID = "sloth.dev/core/sli_rules/v1"


class SLIRulesConfig(BaseModel):
    """Derive the SLO period rule from the page quick short window rule."""

    optimized: bool = False


class SLIRulesProcessor:
    def __init__(self, config: SLIRulesConfig):
        self.config = config

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        result.slo_rules.sli_error_rec_rules.rules = generate_sli_recording_rules(
            request.slo, request.mwmb_alert_group, optimized=self.config.optimized
        )


def new_plugin(config: Any, app_utils: AppUtils) -> SLIRulesProcessor:
    return SLIRulesProcessor(parse_config(SLIRulesConfig, config))
