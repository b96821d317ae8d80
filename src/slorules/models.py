"""
SLO domain models.

Canonical, already parsed representation of SLOs consumed by the rule
generation engine, plus the Prometheus rule types it produces. Spec loaders
(native YAML, Kubernetes CRD, OpenSLO) map their formats into these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from typing import Any

from slorules.core.promutils import duration_to_prom_str


class AlertSeverity(str, Enum):
    """MWMB alert severity."""

    PAGE = "page"
    TICKET = "ticket"


class Mode(str, Enum):
    """How the generator was invoked, stamped into the SLO info metric."""

    TEST = "test"
    CLI_GEN_PROMETHEUS = "cli-gen-prom"
    API_GEN_PROMETHEUS = "api-gen-prom"
    CLI_GEN_KUBERNETES = "cli-gen-k8s"
    API_GEN_KUBERNETES = "api-gen-k8s"
    CONTROLLER_GEN_KUBERNETES = "ctrl-gen-k8s"
    CLI_GEN_OPENSLO = "cli-gen-openslo"
    API_GEN_OPENSLO = "api-gen-openslo"


@dataclass
class Info:
    """Application and request metadata."""

    version: str
    mode: Mode | str
    spec: str


@dataclass
class SLIEvents:
    """Event based SLI: bad events over total events."""

    error_query: str
    total_query: str


@dataclass
class SLIRaw:
    """Raw SLI: a query that already returns the error ratio."""

    error_ratio_query: str


@dataclass
class SLI:
    """Service level indicator, exactly one variant must be set."""

    events: SLIEvents | None = None
    raw: SLIRaw | None = None


@dataclass
class AlertMeta:
    """Alert settings for one severity."""

    disable: bool = False
    name: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass
class PluginMetadata:
    """Reference to a processor plugin and its per-SLO configuration."""

    id: str
    config: Any = None
    priority: int = 0


@dataclass
class SLOPlugins:
    """Plugin chain of an SLO."""

    override_default_plugins: bool = False
    plugins: list[PluginMetadata] = field(default_factory=list)


@dataclass
class SLO:
    """Service Level Objective."""

    id: str
    name: str
    service: str
    sli: SLI
    time_window: timedelta
    objective: float  # Percentage in (0, 100], e.g. 99.9
    description: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    page_alert_meta: AlertMeta = field(default_factory=AlertMeta)
    ticket_alert_meta: AlertMeta = field(default_factory=AlertMeta)
    plugins: SLOPlugins = field(default_factory=SLOPlugins)


@dataclass
class SLOGroup:
    """SLOs generated together in a single request."""

    slos: list[SLO] = field(default_factory=list)


@dataclass(frozen=True)
class MWMBAlert:
    """A multiwindow, multi-burn rate alert."""

    id: str
    short_window: timedelta
    long_window: timedelta
    burn_rate_factor: float
    error_budget: float
    severity: AlertSeverity


@dataclass(frozen=True)
class MWMBAlertGroup:
    """All the MWMB alerts of an SLO.

    - Page quick: critical, high burn rate over a short period.
    - Page slow: critical, high-normal burn rate over a medium period.
    - Ticket quick: warning, normal burn rate over a medium period.
    - Ticket slow: warning, slow burn rate over a long period.
    """

    page_quick: MWMBAlert
    page_slow: MWMBAlert
    ticket_quick: MWMBAlert
    ticket_slow: MWMBAlert

    def alerts(self) -> tuple[MWMBAlert, MWMBAlert, MWMBAlert, MWMBAlert]:
        return (self.page_quick, self.page_slow, self.ticket_quick, self.ticket_slow)

    def windows(self) -> list[timedelta]:
        """Distinct short and long windows of all the alerts, ascending."""
        windows = set()
        for alert in self.alerts():
            windows.add(alert.short_window)
            windows.add(alert.long_window)
        return sorted(windows)


@dataclass
class Rule:
    """A Prometheus rule, either a recording rule or an alerting rule."""

    expr: str
    record: str | None = None
    alert: str | None = None
    for_: timedelta | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to Prometheus rule format."""
        rule: dict[str, Any] = {}
        if self.record:
            rule["record"] = self.record
        if self.alert:
            rule["alert"] = self.alert
        rule["expr"] = self.expr
        if self.for_:
            rule["for"] = duration_to_prom_str(self.for_)
        if self.labels:
            rule["labels"] = dict(sorted(self.labels.items()))
        if self.annotations:
            rule["annotations"] = dict(sorted(self.annotations.items()))
        return rule


@dataclass
class RuleGroup:
    """A group of Prometheus rules evaluated together."""

    name: str = ""
    interval: timedelta | None = None
    rules: list[Rule] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to Prometheus rule group format."""
        group: dict[str, Any] = {"name": self.name}
        if self.interval:
            group["interval"] = duration_to_prom_str(self.interval)
        group["rules"] = [rule.to_dict() for rule in self.rules]
        return group


@dataclass
class SLORules:
    """The Prometheus rules generated for one SLO."""

    sli_error_rec_rules: RuleGroup = field(default_factory=RuleGroup)
    metadata_rec_rules: RuleGroup = field(default_factory=RuleGroup)
    alert_rules: RuleGroup = field(default_factory=RuleGroup)
    extra_rules: list[RuleGroup] = field(default_factory=list)
