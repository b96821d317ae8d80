"""Generates the page and ticket MWMB alerting rules."""

from __future__ import annotations

from typing import Any

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult
from slorules.rules.alerts import generate_alert_rules

PLUGIN_ID = "sloth.dev/core/alert_rules/v1"


class AlertRulesProcessor:
    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        result.slo_rules.alert_rules.rules = generate_alert_rules(
            request.slo, request.mwmb_alert_group
        )


def new_plugin(config: Any, app_utils: AppUtils) -> AlertRulesProcessor:
    return AlertRulesProcessor()
