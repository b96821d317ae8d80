"""Does nothing, handy as a placeholder or to disable a chain step."""

from __future__ import annotations

from typing import Any

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult

PLUGIN_ID = "sloth.dev/core/noop/v1"


class NoopProcessor:
    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        return None


def new_plugin(config: Any, app_utils: AppUtils) -> NoopProcessor:
    return NoopProcessor()
