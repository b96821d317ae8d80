"""Prometheus rule rendering: SLI, metadata and alert rules, and rule files."""

from slorules.rules.alerts import generate_alert_rules, mwmb_alert_rule
from slorules.rules.metadata import generate_metadata_recording_rules
from slorules.rules.sli import (
    generate_sli_recording_rules,
    optimized_sli_record_rule,
    sli_record_rule,
    sli_rule_labels,
    sli_rule_windows,
)
from slorules.rules.storage import (
    prometheus_rule_groups,
    render_prometheus_rules,
    write_prometheus_rules,
)

__all__ = [
    "generate_sli_recording_rules",
    "sli_record_rule",
    "optimized_sli_record_rule",
    "sli_rule_labels",
    "sli_rule_windows",
    "generate_metadata_recording_rules",
    "generate_alert_rules",
    "mwmb_alert_rule",
    "prometheus_rule_groups",
    "render_prometheus_rules",
    "write_prometheus_rules",
]
