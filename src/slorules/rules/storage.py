"""
Prometheus rule file rendering.

Writes the generated rules of a whole request as a standard Prometheus rules
file: one ``groups`` list with every non empty group of every SLO, in SLO
order (SLI recordings, metadata recordings, alerts, then extra groups).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

import structlog
import yaml

from slorules.core.errors import NoRulesError
from slorules.models import RuleGroup, SLORules

if TYPE_CHECKING:
    from slorules.generate.service import SLOResult

logger = structlog.get_logger()

FILE_HEADER = """# Code generated by slorules: SLO based Prometheus rules.
# DO NOT EDIT.

"""


class _RulesDumper(yaml.SafeDumper):
    """Dumps multiline expressions as literal blocks so they stay readable."""


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.Node:
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_RulesDumper.add_representer(str, _str_representer)


def _slo_rule_groups(rules: SLORules) -> list[RuleGroup]:
    groups = [rules.sli_error_rec_rules, rules.metadata_rec_rules, rules.alert_rules]
    groups.extend(rules.extra_rules)
    return [group for group in groups if group.rules]


def prometheus_rule_groups(results: Iterable[SLOResult]) -> dict[str, Any]:
    """Build the Prometheus rules file document.

    Raises:
        NoRulesError: If no group has any rule, most likely a misconfiguration
            (typos, every alert disabled...) rather than an intended output.
    """
    groups = []
    for result in results:
        groups.extend(group.to_dict() for group in _slo_rule_groups(result.rules))

    if not groups:
        raise NoRulesError("0 SLO Prometheus rules generated")

    return {"groups": groups}


def render_prometheus_rules(results: Iterable[SLOResult]) -> str:
    """Render the generated rules as Prometheus rules file YAML."""
    data = prometheus_rule_groups(results)
    body = yaml.dump(
        data, Dumper=_RulesDumper, default_flow_style=False, sort_keys=False, width=120
    )
    return FILE_HEADER + body


def write_prometheus_rules(results: Iterable[SLOResult], output_file: Path | str) -> Path:
    """Render and write the rules file, creating parent directories.

    Returns:
        Path of the written file
    """
    output_file = Path(output_file)
    content = render_prometheus_rules(results)

    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(content, encoding="utf-8")

    logger.info("prometheus_rules_written", path=str(output_file), bytes=len(content))
    return output_file
