"""
SLO period window catalog.

Maps an SLO period (e.g. 30 days) to the four multiwindow multi-burn rate
window definitions (page/ticket x quick/slow). The catalog is the single
source of truth for which SLO periods are supported.

Window documents are YAML:

    apiVersion: sloth.slok.dev/v1
    kind: AlertWindows
    spec:
      sloPeriod: 30d
      page:
        quick: {errorBudgetPercent: 2, shortWindow: 5m, longWindow: 1h}
        slow: {errorBudgetPercent: 5, shortWindow: 30m, longWindow: 6h}
      ticket:
        quick: {errorBudgetPercent: 10, shortWindow: 2h, longWindow: 1d}
        slow: {errorBudgetPercent: 10, shortWindow: 6h, longWindow: 3d}
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import timedelta
from importlib import resources
from pathlib import Path
from typing import Any, Iterator, Mapping, Union

import yaml

from slorules.core.errors import CatalogConflictError, ConfigurationError, NotFoundError
from slorules.core.promutils import duration_to_prom_str, parse_duration
from slorules.logging import get_logger

API_VERSION = "sloth.slok.dev/v1"
KIND = "AlertWindows"

# A directory walked recursively, or an in-memory mapping of file name to content.
WindowsSource = Union[Path, str, Mapping[str, Union[str, bytes]]]


def _hours(duration: timedelta) -> float:
    return duration.total_seconds() / 3600


def burn_rate_factor(
    total_window: timedelta, error_budget_percent: float, consumption_window: timedelta
) -> float:
    """Speed needed to consume ``error_budget_percent`` of the budget in ``consumption_window``.

    Example: in a 30 day period, 2% of the budget equals 14.4 hours of full
    consumption; doing that within 1 hour requires burning 14.4 times faster
    than the sustainable rate.
    """
    hours_required = error_budget_percent * _hours(total_window) / 100
    return hours_required / _hours(consumption_window)


@dataclass(frozen=True)
class Window:
    """One alert window pair and the share of error budget it represents."""

    error_budget_percent: float
    short_window: timedelta
    long_window: timedelta

    def validate(self) -> None:
        if not self.long_window:
            raise ConfigurationError("long window is required")
        if not self.short_window:
            raise ConfigurationError("short window is required")
        if not self.error_budget_percent:
            raise ConfigurationError("error budget is required")


@dataclass(frozen=True)
class Windows:
    """MWMB windows matrix for a single SLO period."""

    slo_period: timedelta
    page_quick: Window
    page_slow: Window
    ticket_quick: Window
    ticket_slow: Window

    def validate(self) -> None:
        if not self.slo_period:
            raise ConfigurationError("slo period is required")

        for name, window in (
            ("page quick", self.page_quick),
            ("page slow", self.page_slow),
            ("ticket quick", self.ticket_quick),
            ("ticket slow", self.ticket_slow),
        ):
            try:
                window.validate()
            except ConfigurationError as e:
                raise ConfigurationError(f"invalid {name}: {e.message}") from e

    def _speed(self, window: Window) -> float:
        return burn_rate_factor(self.slo_period, window.error_budget_percent, window.long_window)

    def speed_page_quick(self) -> float:
        return self._speed(self.page_quick)

    def speed_page_slow(self) -> float:
        return self._speed(self.page_slow)

    def speed_ticket_quick(self) -> float:
        return self._speed(self.ticket_quick)

    def speed_ticket_slow(self) -> float:
        return self._speed(self.ticket_slow)


def _parse_window(data: Any, path: str) -> Window:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must be a mapping")

    try:
        return Window(
            error_budget_percent=float(data.get("errorBudgetPercent") or 0),
            short_window=parse_duration(str(data.get("shortWindow") or "0")),
            long_window=parse_duration(str(data.get("longWindow") or "0")),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid {path}: {e}") from e


def load_windows_document(data: str | bytes) -> Windows:
    """Parse and validate a single window document.

    Raises:
        ConfigurationError: If the document is empty, malformed, has the
            wrong apiVersion/kind or misses required window fields.
    """
    if not data:
        raise ConfigurationError("spec is required")

    try:
        doc = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"could not unmarshal YAML spec correctly: {e}") from e

    if not isinstance(doc, dict):
        raise ConfigurationError("could not unmarshal YAML spec correctly: not a mapping")

    if doc.get("apiVersion") != API_VERSION or doc.get("kind") != KIND:
        raise ConfigurationError("invalid spec version")

    spec = doc.get("spec") or {}
    if not isinstance(spec, dict):
        raise ConfigurationError("spec must be a mapping")
    page = spec.get("page") or {}
    ticket = spec.get("ticket") or {}

    try:
        slo_period = parse_duration(str(spec.get("sloPeriod") or "0"))
    except ValueError as e:
        raise ConfigurationError(f"invalid sloPeriod: {e}") from e

    windows = Windows(
        slo_period=slo_period,
        page_quick=_parse_window(page.get("quick"), "page.quick"),
        page_slow=_parse_window(page.get("slow"), "page.slow"),
        ticket_quick=_parse_window(ticket.get("quick"), "ticket.quick"),
        ticket_slow=_parse_window(ticket.get("slow"), "ticket.slow"),
    )

    try:
        windows.validate()
    except ConfigurationError as e:
        raise ConfigurationError(f"invalid alerting window: {e.message}") from e

    return windows


def _is_windows_file(name: str) -> bool:
    return name.endswith(".yaml") or name.endswith(".yml")


def _iter_documents(source: WindowsSource | None) -> Iterator[tuple[str, str | bytes]]:
    """Yield ``(name, content)`` window documents in lexical order."""
    if source is None:
        root = resources.files("slorules.alerts").joinpath("catalog")
        for entry in sorted(root.iterdir(), key=lambda e: e.name):
            # Files starting with `_` are ignored.
            if entry.is_file() and _is_windows_file(entry.name) and not entry.name.startswith("_"):
                yield entry.name, entry.read_text(encoding="utf-8")
        return

    if isinstance(source, Mapping):
        for name in sorted(source):
            if _is_windows_file(name):
                yield name, source[name]
        return

    root_path = Path(source)
    if not root_path.is_dir():
        raise ConfigurationError(f"windows path is not a directory: {root_path}")
    for path in sorted(root_path.rglob("*")):
        if path.is_file() and _is_windows_file(path.name):
            try:
                yield str(path), path.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigurationError(
                    f"could not read {str(path)!r} alert windows data from file: {e}"
                ) from e


class WindowCatalog:
    """SLO period to MWMB windows catalog.

    Built once at startup and read-only afterwards. Lookups read the current
    map reference without locking; ``reload`` builds a complete new map and
    swaps the reference, so readers always see either the old or the new
    catalog, never a half loaded one.
    """

    def __init__(self, source: WindowsSource | None = None):
        self._logger = get_logger("alert.WindowCatalog")
        self._reload_lock = threading.Lock()
        self._windows: dict[timedelta, Windows] = {}
        self.reload(source)

    def reload(self, source: WindowsSource | None = None) -> None:
        """Load windows from ``source`` (embedded defaults when None) and swap them in.

        On failure the previously loaded catalog stays in place.
        """
        with self._reload_lock:
            if source is None:
                windows = self._load(None)
            else:
                self._logger.info("using_custom_slo_period_windows_catalog")
                windows = self._load(source)
            self._windows = windows

        self._logger.info("slo_period_windows_loaded", windows=len(windows))

    def _load(self, source: WindowsSource | None) -> dict[timedelta, Windows]:
        loaded: dict[timedelta, Windows] = {}
        kind = "default" if source is None else "custom"

        try:
            for name, data in _iter_documents(source):
                try:
                    windows = load_windows_document(data)
                except ConfigurationError as e:
                    raise ConfigurationError(
                        f"could not load {name!r} alert windows: {e.message}",
                        details={"file": name},
                    ) from e

                stored = loaded.get(windows.slo_period)
                if stored is not None:
                    period = duration_to_prom_str(windows.slo_period)
                    if stored != windows:
                        raise CatalogConflictError(
                            f"{period!r} slo period is already loaded",
                            details={"file": name, "slo_period": period},
                        )
                    self._logger.warning(
                        "identical_slo_period_loaded_multiple_times", slo_period=period, file=name
                    )
                    continue

                loaded[windows.slo_period] = windows
        except ConfigurationError as e:
            raise type(e)(f"could not initialize {kind} windows: {e.message}", e.details) from e

        return loaded

    def get_windows(self, period: timedelta) -> Windows:
        """Exact match lookup of the windows for an SLO period.

        Raises:
            NotFoundError: If the period was never loaded.
        """
        windows = self._windows.get(period)
        if windows is None:
            raise NotFoundError(
                f"window period {duration_to_prom_str(period)} missing",
                details={"slo_period": duration_to_prom_str(period)},
            )
        return windows

    def periods(self) -> list[timedelta]:
        """Supported SLO periods, ascending."""
        return sorted(self._windows)
