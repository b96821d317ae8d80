"""Prometheus text helpers.

Durations, label filters and number formatting used when rendering rules.
Everything here must be deterministic: the same input always renders the
same text, so generated rule files stay byte-stable between runs.
"""

from __future__ import annotations

import json
import math
import re
from datetime import timedelta
from decimal import Decimal
from typing import Mapping

_DURATION_RE = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)

_MS_PER_UNIT = [
    ("y", 1000 * 60 * 60 * 24 * 365, True),
    ("w", 1000 * 60 * 60 * 24 * 7, True),
    ("d", 1000 * 60 * 60 * 24, False),
    ("h", 1000 * 60 * 60, False),
    ("m", 1000 * 60, False),
    ("s", 1000, False),
    ("ms", 1, False),
]

_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def parse_duration(value: str) -> timedelta:
    """Parse a Prometheus duration string (e.g. ``5m``, ``1h30m``, ``4w``).

    Raises:
        ValueError: If the string is not a valid Prometheus duration.
    """
    if value == "0":
        return timedelta(0)
    if not value:
        raise ValueError("empty duration string")

    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"not a valid duration string: {value!r}")

    total_ms = 0
    for (_, mult, _), group in zip(_MS_PER_UNIT, match.groups()):
        if group is not None:
            total_ms += int(group) * mult

    return timedelta(milliseconds=total_ms)


def duration_to_prom_str(duration: timedelta) -> str:
    """Render a duration the way Prometheus does.

    Years and weeks are only used when they divide the duration exactly,
    so 7 days renders ``1w`` but 30 days renders ``30d``.
    """
    ms = duration // timedelta(milliseconds=1)
    if ms == 0:
        return "0s"

    result = ""
    for unit, mult, exact in _MS_PER_UNIT:
        if exact and ms % mult != 0:
            continue
        value = ms // mult
        if value > 0:
            result += f"{value}{unit}"
            ms -= value * mult

    return result


def format_float(value: float) -> str:
    """Format a float with the shortest round-trip digits, ``%g`` style.

    Exponent notation is used when the decimal exponent is below -4 or at
    least 6 (``1e+06``, ``1.5e-05``); otherwise positional notation.
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    dec = Decimal(repr(value)).normalize()
    exp = dec.adjusted()
    if exp < -4 or exp >= 6:
        sign, digits, _ = dec.as_tuple()
        mantissa = str(digits[0])
        if len(digits) > 1:
            mantissa += "." + "".join(str(d) for d in digits[1:])
        exp_sign = "-" if exp < 0 else "+"
        return f"{'-' if sign else ''}{mantissa}e{exp_sign}{abs(exp):02d}"

    return format(dec, "f")


def format_float_plain(value: float) -> str:
    """Format a float with the shortest round-trip digits, never exponent."""
    return format(Decimal(repr(float(value))).normalize(), "f")


def labels_to_prom_filter(labels: Mapping[str, str]) -> str:
    """Render labels as a PromQL selector: ``{a="1", b="2"}``."""
    pairs = (f"{k}={json.dumps(labels[k], ensure_ascii=False)}" for k in sorted(labels))
    return "{" + ", ".join(pairs) + "}"


def labels_to_prom_group(labels: Mapping[str, str]) -> str:
    """Render label names for ``on()``/``by()`` clauses: ``a, b``."""
    return ", ".join(sorted(labels))


def is_valid_label_name(name: str) -> bool:
    """Return True if ``name`` is a valid Prometheus label name."""
    return bool(_LABEL_NAME_RE.match(name))


def merge_labels(*label_sets: Mapping[str, str] | None) -> dict[str, str]:
    """Merge label maps, later maps overwrite earlier ones."""
    result: dict[str, str] = {}
    for labels in label_sets:
        if labels:
            result.update(labels)
    return result


def is_valid_utf8_label_name(name: str) -> bool:
    """Return True if ``name`` is a valid UTF-8 label name.

    Newer Prometheus versions and VictoriaMetrics accept any non-empty UTF-8
    string as a label name.
    """
    if not name:
        return False
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return True
