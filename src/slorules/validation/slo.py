"""
Structural and semantic validation of SLOs.

All problems found are collected and reported together in a single
``ValidationError`` so a user can fix an SLO definition in one pass.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping

from slorules.conventions import QUERY_TPL_WINDOW_VAR
from slorules.core.errors import TemplateRenderError, ValidationError
from slorules.core.promutils import is_valid_label_name, is_valid_utf8_label_name
from slorules.core.templating import Template
from slorules.models import SLO, AlertMeta, SLOGroup

# Names must start and end with an alphanumeric and contain alphanumerics, `.`, `_` and `-`.
NAME_RE = re.compile(r"^[A-Za-z0-9][-A-Za-z0-9_.]*[A-Za-z0-9]$")

_WINDOW_PLACEHOLDER_RE = re.compile(r"\{\{ *\." + QUERY_TPL_WINDOW_VAR + r" *\}\}")

# Data used to render user queries before checking them.
_FAKE_TEMPLATE_DATA = {QUERY_TPL_WINDOW_VAR: "1m"}

_CLOSERS = {")": "(", "]": "[", "}": "{"}


@dataclass(frozen=True)
class Dialect:
    """Label and annotation naming rules of a rule evaluation backend."""

    name: str
    is_valid_label_name: Callable[[str], bool]


PROMETHEUS = Dialect("prometheus", is_valid_label_name)

# VictoriaMetrics accepts any UTF-8 label name.
VICTORIA_METRICS = Dialect("victoria-metrics", is_valid_utf8_label_name)


def _check_balanced(expr: str) -> str | None:
    """Return a problem description if brackets or quotes are unbalanced."""
    stack: list[str] = []
    quote: str | None = None
    escaped = False
    for char in expr:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in "\"'`":
            quote = char
        elif char in "([{":
            stack.append(char)
        elif char in _CLOSERS:
            if not stack or stack.pop() != _CLOSERS[char]:
                return f"unexpected {char!r}"
    if quote:
        return "unterminated string"
    if stack:
        return f"unclosed {stack[-1]!r}"
    return None


def validate_query(field_name: str, query: str) -> list[str]:
    """Validate a templated SLI query."""
    if not query.strip():
        return [f"{field_name}: is required"]

    problems = []
    if not _WINDOW_PLACEHOLDER_RE.search(query):
        problems.append(f"{field_name}: missing {{{{ .{QUERY_TPL_WINDOW_VAR} }}}} template variable")

    try:
        rendered = Template(query, name=field_name).render(_FAKE_TEMPLATE_DATA)
    except TemplateRenderError as e:
        problems.append(f"{field_name}: invalid template: {e.message}")
        return problems

    problem = _check_balanced(rendered)
    if problem:
        problems.append(f"{field_name}: invalid Prometheus expression: {problem}")

    return problems


def _validate_name(field_name: str, value: str) -> list[str]:
    if not value:
        return [f"{field_name}: is required"]
    if not NAME_RE.match(value):
        return [f"{field_name}: {value!r} must be alphanumeric, '.', '_' and '-'"]
    return []


def _validate_labels(field_name: str, labels: Mapping[str, str], dialect: Dialect) -> list[str]:
    problems = []
    for key, value in labels.items():
        if not dialect.is_valid_label_name(key) or key == "__name__":
            problems.append(f"{field_name}[{key}]: invalid label key")
        elif not value:
            problems.append(f"{field_name}[{key}]: value is required")
    return problems


def _validate_annotations(
    field_name: str, annotations: Mapping[str, str], dialect: Dialect
) -> list[str]:
    problems = []
    for key, value in annotations.items():
        if not dialect.is_valid_label_name(key):
            problems.append(f"{field_name}[{key}]: invalid annotation key")
        elif not value:
            problems.append(f"{field_name}[{key}]: value is required")
    return problems


def _validate_alert_meta(field_name: str, meta: AlertMeta, dialect: Dialect) -> list[str]:
    if meta.disable:
        return []
    problems = []
    if not meta.name:
        problems.append(f"{field_name}.name: is required when the alert is enabled")
    problems.extend(_validate_labels(f"{field_name}.labels", meta.labels, dialect))
    problems.extend(_validate_annotations(f"{field_name}.annotations", meta.annotations, dialect))
    return problems


def slo_problems(slo: SLO, dialect: Dialect = PROMETHEUS) -> list[str]:
    """Return every problem found in ``slo``; empty when valid."""
    problems: list[str] = []
    problems.extend(_validate_name("id", slo.id))
    problems.extend(_validate_name("name", slo.name))
    problems.extend(_validate_name("service", slo.service))

    if not slo.time_window or slo.time_window.total_seconds() <= 0:
        problems.append("time_window: is required")

    if not (0 < slo.objective <= 100):
        problems.append(f"objective: {slo.objective} must be greater than 0 and at most 100")

    sli = slo.sli
    if sli is None or (sli.events is None and sli.raw is None):
        problems.append("sli: one SLI type is required")
    elif sli.events is not None and sli.raw is not None:
        problems.append("sli: only one SLI type can be set")
    elif sli.events is not None:
        problems.extend(validate_query("sli.events.error_query", sli.events.error_query))
        problems.extend(validate_query("sli.events.total_query", sli.events.total_query))
        if sli.events.error_query and sli.events.error_query == sli.events.total_query:
            problems.append("sli.events: error and total queries must be different")
    else:
        problems.extend(validate_query("sli.raw.error_ratio_query", sli.raw.error_ratio_query))

    problems.extend(_validate_labels("labels", slo.labels, dialect))
    problems.extend(_validate_alert_meta("page_alert", slo.page_alert_meta, dialect))
    problems.extend(_validate_alert_meta("ticket_alert", slo.ticket_alert_meta, dialect))

    return problems


def validate_slo(slo: SLO, dialect: Dialect = PROMETHEUS) -> None:
    """Raise ``ValidationError`` if ``slo`` is invalid for ``dialect``."""
    problems = slo_problems(slo, dialect)
    if problems:
        raise ValidationError(f"invalid slo {slo.id!r}", problems=problems, details={"slo": slo.id})


def validate_slo_group(group: SLOGroup) -> None:
    """Validate a whole SLO group, failing if any SLO is invalid.

    Raises:
        ValidationError: With the problems of every invalid SLO.
    """
    if not group.slos:
        raise ValidationError("at least one SLO is required")

    problems: list[str] = []
    seen: set[str] = set()
    for slo in group.slos:
        if slo.id in seen:
            problems.append(f"SLO ID {slo.id!r} is repeated")
        seen.add(slo.id)
        problems.extend(f"slo {slo.id!r}: {problem}" for problem in slo_problems(slo))

    if problems:
        raise ValidationError("invalid SLO group", problems=problems)
