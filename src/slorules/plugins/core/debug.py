"""Logs a message and optionally the request and result at debug level.

Place it anywhere in the chain to inspect what earlier processors produced.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from slorules.plugins.base import AppUtils, ProcessorRequest, ProcessorResult, parse_config

PLUGIN_ID = "sloth.dev/core/debug/v1"


class DebugConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    custom_msg: str = Field(default="", alias="msg")
    show_result: bool = Field(default=False, alias="result")
    show_request: bool = Field(default=False, alias="request")


class DebugProcessor:
    def __init__(self, config: DebugConfig, logger: Any):
        self.config = config
        self.logger = logger

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        if self.config.custom_msg:
            self.logger.debug(self.config.custom_msg)

        if self.config.show_request:
            self.logger.debug("slo_processor_request", request=repr(request))

        if self.config.show_result:
            self.logger.debug("slo_processor_result", result=repr(result))


def new_plugin(config: Any, app_utils: AppUtils) -> DebugProcessor:
    return DebugProcessor(parse_config(DebugConfig, config), app_utils.logger)
