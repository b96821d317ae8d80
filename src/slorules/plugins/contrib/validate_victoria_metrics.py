"""Validates the SLO for rules evaluated by VictoriaMetrics.

Use it instead of the core validation when the rules are loaded in vmalert:
label and annotation names can be any UTF-8 string.
"""

from __future__ import annotations

from typing import Any

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult
from slorules.validation import VICTORIA_METRICS, validate_slo

PLUGIN_ID = "sloth.dev/contrib/validate_victoria_metrics/v1"


class ValidateVictoriaMetricsProcessor:
    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        validate_slo(request.slo, VICTORIA_METRICS)


def new_plugin(config: Any, app_utils: AppUtils) -> ValidateVictoriaMetricsProcessor:
    return ValidateVictoriaMetricsProcessor()
