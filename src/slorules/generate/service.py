"""
SLO rules generation service.

Runs every SLO of a group through the processor pipeline:

1. The whole group is validated first, one invalid SLO fails the request.
2. Request extra labels are merged into each SLO (SLO labels win).
3. The MWMB alert group is generated from the window catalog.
4. The processor chain is built: SLO plugins with priority < 0, the default
   processors (unless the SLO overrides them), then plugins with
   priority >= 0. Plugins are stably sorted by priority.
5. Processors run in order over a shared request and result.
6. Empty rule group names get their defaults.

SLOs are processed sequentially and results keep the input order.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

from slorules import conventions
from slorules.alerts.generator import AlertGenerator
from slorules.alerts.windows import WindowCatalog
from slorules.config.settings import Settings, get_settings
from slorules.core.errors import (
    ConfigurationError,
    GenerationError,
    NotFoundError,
    PluginError,
    SLORulesError,
)
from slorules.core.promutils import merge_labels, parse_duration
from slorules.logging import configure_logging, get_logger
from slorules.models import SLO, Info, PluginMetadata, SLOGroup, SLORules
from slorules.plugins import (
    AppUtils,
    PluginRegistry,
    ProcessorRequest,
    ProcessorResult,
    SLOProcessor,
    default_registry,
)
from slorules.plugins.core import DEFAULT_PLUGIN_IDS, sli_rules
from slorules.validation import validate_slo_group

# A processor and the plugin ID it was built from.
NamedProcessor = Tuple[str, SLOProcessor]


@dataclass
class Request:
    """Generation request for an SLO group."""

    info: Info
    slo_group: SLOGroup
    # Added to every SLO label set, SLO labels with the same key win.
    extra_labels: Dict[str, str] = field(default_factory=dict)


@dataclass
class SLOResult:
    """The label merged SLO and its generated rules."""

    slo: SLO
    rules: SLORules


@dataclass
class Response:
    prometheus_slos: List[SLOResult] = field(default_factory=list)


@dataclass
class ServiceConfig:
    """Generation service configuration.

    Attributes:
        alert_generator: MWMB alert generator (required)
        registry: Plugin registry used to resolve SLO plugins
        default_processors: Processors run for every SLO that doesn't override
            them; None builds the core chain, an empty list disables it
        extra_plugins: Application level plugins added to every SLO that
            doesn't override the default plugins
        optimized_sli_rules: Build the default SLI processor in optimized mode
        extra_labels: Application level labels, request and SLO labels win
        default_slo_period: Time window of SLOs that don't set one
        logger: structlog logger
    """

    alert_generator: Optional[AlertGenerator] = None
    registry: Optional[PluginRegistry] = None
    default_processors: Optional[List[NamedProcessor]] = None
    extra_plugins: List[PluginMetadata] = field(default_factory=list)
    optimized_sli_rules: bool = False
    extra_labels: Dict[str, str] = field(default_factory=dict)
    default_slo_period: Optional[timedelta] = None
    logger: Any = None

    def defaults(self) -> None:
        if self.alert_generator is None:
            raise ConfigurationError("alert generator is required")

        if self.registry is None:
            self.registry = default_registry()

        if self.logger is None:
            self.logger = get_logger("generate.Service")
        else:
            self.logger = self.logger.bind(svc="generate.Service")

        if self.default_processors is None:
            self.default_processors = []
            for plugin_id in DEFAULT_PLUGIN_IDS:
                config = None
                if plugin_id == sli_rules.PLUGIN_ID:
                    config = {"optimized": self.optimized_sli_rules}
                self.default_processors.append(
                    (plugin_id, _new_processor(self.registry, plugin_id, config, self.logger))
                )


def _new_processor(
    registry: PluginRegistry, plugin_id: str, config: Any, base_logger: Any
) -> SLOProcessor:
    """Resolve a plugin by ID and build its processor.

    Raises:
        PluginError: If the plugin is not registered or its config is invalid.
    """
    try:
        factory = registry.get_processor(plugin_id)
        return factory(config, AppUtils(logger=base_logger.bind(plugin=plugin_id)))
    except SLORulesError as e:
        raise PluginError(
            f"could not create SLO plugin {plugin_id!r}: {e.message}",
            details={"plugin": plugin_id, **e.details},
        ) from e


class GenerateService:
    """Application service generating Prometheus SLO rules."""

    def __init__(self, config: ServiceConfig):
        try:
            config.defaults()
        except SLORulesError as e:
            raise type(e)(f"invalid configuration: {e.message}", details=e.details) from e

        self.alert_generator: AlertGenerator = config.alert_generator
        self.registry: PluginRegistry = config.registry
        self.default_processors: List[NamedProcessor] = config.default_processors
        self.extra_plugins = list(config.extra_plugins)
        self.extra_labels = dict(config.extra_labels)
        self.default_slo_period = config.default_slo_period
        self.logger = config.logger

    def _with_defaults(self, slo: SLO) -> SLO:
        if slo.time_window or self.default_slo_period is None:
            return slo
        return replace(slo, time_window=self.default_slo_period)

    def generate(self, request: Request) -> Response:
        """Generate the rules of every SLO in the request group.

        Raises:
            ValidationError: If the SLO group is invalid; nothing is generated.
            GenerationError: If an SLO fails before running its processors.
            PluginError: If a plugin can't be resolved, built or fails.
        """
        slo_group = SLOGroup(slos=[self._with_defaults(slo) for slo in request.slo_group.slos])
        validate_slo_group(slo_group)

        results = []
        for slo in slo_group.slos:
            slo = replace(
                slo, labels=merge_labels(self.extra_labels, request.extra_labels, slo.labels)
            )
            rules = self._generate_slo(request.info, slo)
            set_rule_group_defaults(slo, rules)
            results.append(SLOResult(slo=slo, rules=rules))

        self.logger.info("slo_rules_generated", slos=len(results))
        return Response(prometheus_slos=results)

    def _processor_chain(self, slo: SLO, slo_logger: Any) -> List[NamedProcessor]:
        plugins: List[PluginMetadata] = []
        if not slo.plugins.override_default_plugins:
            plugins.extend(self.extra_plugins)
        plugins.extend(slo.plugins.plugins)
        plugins.sort(key=lambda p: p.priority)

        pre_default: List[NamedProcessor] = []
        post_default: List[NamedProcessor] = []
        for plugin in plugins:
            processor = _new_processor(self.registry, plugin.id, plugin.config, slo_logger)
            if plugin.priority < 0:
                pre_default.append((plugin.id, processor))
            else:
                post_default.append((plugin.id, processor))

        chain = pre_default
        if not slo.plugins.override_default_plugins:
            chain.extend(self.default_processors)
        chain.extend(post_default)
        return chain

    def _generate_slo(self, info: Info, slo: SLO) -> SLORules:
        slo_logger = self.logger.bind(slo=slo.id)

        try:
            alert_group = self.alert_generator.generate_mwmb_alerts(slo)
        except SLORulesError as e:
            raise GenerationError(
                f"could not generate {slo.id!r} slo: could not generate SLO alerts: {e.message}",
                details={**e.details, "slo": slo.id, "stage": "alert_generation"},
            ) from e
        slo_logger.debug("mwmb_alerts_generated")

        try:
            chain = self._processor_chain(slo, slo_logger)
        except PluginError as e:
            raise PluginError(
                f"could not generate {slo.id!r} slo: {e.message}",
                details={**e.details, "slo": slo.id, "stage": "plugin_resolution"},
            ) from e

        request = ProcessorRequest(info=info, slo=slo, mwmb_alert_group=alert_group)
        result = ProcessorResult()
        for plugin_id, processor in chain:
            try:
                processor.process_slo(request, result)
            except Exception as e:
                message = e.message if isinstance(e, SLORulesError) else str(e)
                raise PluginError(
                    f"could not generate {slo.id!r} slo: slo processor {plugin_id!r} failed: {message}",
                    details={"slo": slo.id, "stage": "processor", "plugin": plugin_id},
                ) from e

        return result.slo_rules


def set_rule_group_defaults(slo: SLO, rules: SLORules) -> None:
    """Name every unnamed rule group after the SLO."""
    if not rules.sli_error_rec_rules.name:
        rules.sli_error_rec_rules.name = conventions.RULE_GROUP_SLI_PREFIX + slo.id
    if not rules.metadata_rec_rules.name:
        rules.metadata_rec_rules.name = conventions.RULE_GROUP_METADATA_PREFIX + slo.id
    if not rules.alert_rules.name:
        rules.alert_rules.name = conventions.RULE_GROUP_ALERTS_PREFIX + slo.id
    for i, group in enumerate(rules.extra_rules):
        if not group.name:
            group.name = f"{conventions.RULE_GROUP_EXTRA_PREFIX}{i:03d}-{slo.id}"


def build_service(settings: Settings | None = None) -> GenerateService:
    """Compose the window catalog, alert generator and plugins from settings.

    Raises:
        ConfigurationError: If the catalog can't be loaded or doesn't support
            the default SLO period.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    catalog = WindowCatalog(settings.windows_path)
    default_period = parse_duration(settings.default_slo_period)
    try:
        catalog.get_windows(default_period)
    except NotFoundError as e:
        raise ConfigurationError(
            f"default slo period {settings.default_slo_period} is not supported by the windows catalog",
            details=e.details,
        ) from e

    return GenerateService(
        ServiceConfig(
            alert_generator=AlertGenerator(catalog),
            default_processors=[] if settings.disable_default_plugins else None,
            extra_plugins=settings.plugin_metadata(),
            optimized_sli_rules=settings.optimized_sli_rules,
            extra_labels=settings.extra_labels,
            default_slo_period=default_period,
        )
    )
