"""SLO processor contract and plugin registry.

A processor receives the shared request (app info, SLO and MWMB alert group)
and a mutable result holding the SLO rules generated so far. It can read or
overwrite any rule group; processors run in sequence, so a later one sees the
writes of the earlier ones.

Plugins are registered by ID (``sloth.dev/core/sli_rules/v1``) as factories
building a processor from the per SLO configuration payload and the app
utilities.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Protocol, Type, TypeVar, runtime_checkable

import pydantic
import structlog

from slorules.core.errors import ConfigurationError, NotFoundError
from slorules.models import SLO, Info, MWMBAlertGroup, SLORules

ConfigT = TypeVar("ConfigT", bound=pydantic.BaseModel)


@dataclass
class ProcessorRequest:
    """Input shared by every processor of an SLO."""

    info: Info
    slo: SLO
    mwmb_alert_group: MWMBAlertGroup


@dataclass
class ProcessorResult:
    """Accumulated output of the processor chain."""

    slo_rules: SLORules = field(default_factory=SLORules)


@runtime_checkable
class SLOProcessor(Protocol):
    """Processes one SLO, mutating ``result``."""

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        ...


class ProcessorFunc:
    """Adapts a plain function to the processor contract."""

    def __init__(self, func: Callable[[ProcessorRequest, ProcessorResult], None]):
        self._func = func

    def process_slo(self, request: ProcessorRequest, result: ProcessorResult) -> None:
        self._func(request, result)


@dataclass
class AppUtils:
    """Application helpers handed to plugin factories."""

    logger: Any = field(default_factory=structlog.get_logger)


PluginFactory = Callable[[Any, AppUtils], SLOProcessor]


def parse_config(model: Type[ConfigT], config: Any) -> ConfigT:
    """Parse an opaque plugin config payload into ``model``.

    Accepts None (defaults), a mapping, a JSON document or an instance of
    ``model`` itself.

    Raises:
        ConfigurationError: If the payload doesn't match ``model``.
    """
    if isinstance(config, model):
        return config
    if config is None:
        config = {}
    try:
        if isinstance(config, (str, bytes, bytearray)):
            return model.model_validate_json(config or b"{}")
        return model.model_validate(config)
    except (pydantic.ValidationError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"invalid config: {e}") from e


@dataclass(frozen=True)
class PluginSpec:
    """Metadata describing a registered plugin."""

    id: str
    factory: PluginFactory
    description: str | None = None


class PluginRegistry:
    """In-memory registry of SLO plugins keyed by ID."""

    def __init__(self) -> None:
        self._plugins: Dict[str, PluginSpec] = {}

    def register(
        self, plugin_id: str, factory: PluginFactory, *, description: str | None = None
    ) -> None:
        if not plugin_id:
            raise ConfigurationError("plugin ID is required")
        if plugin_id in self._plugins:
            raise ConfigurationError(f"plugin {plugin_id!r} already registered")
        self._plugins[plugin_id] = PluginSpec(id=plugin_id, factory=factory, description=description)

    def get_processor(self, plugin_id: str) -> PluginFactory:
        """Return the factory of a plugin.

        Raises:
            NotFoundError: If no plugin is registered with ``plugin_id``.
        """
        spec = self._plugins.get(plugin_id)
        if spec is None:
            raise NotFoundError(f"plugin {plugin_id!r} not found", details={"plugin": plugin_id})
        return spec.factory

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._plugins

    def list(self) -> List[PluginSpec]:
        return sorted(self._plugins.values(), key=lambda p: p.id)
