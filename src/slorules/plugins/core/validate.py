"""Validates the SLO before any rule is generated."""

from __future__ import annotations

from typing import Any

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult
from slorules.validation import validate_slo

PLUGIN_ID = "sloth.dev/core/validate/v1"


class ValidateProcessor:
    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        validate_slo(request.slo)


def new_plugin(config: Any, app_utils: AppUtils) -> ValidateProcessor:
    return ValidateProcessor()
