"""Multiwindow multi-burn rate alert generation."""

from __future__ import annotations

from slorules.alerts.windows import Window, WindowCatalog
from slorules.core.errors import NotFoundError, UnsupportedWindowError
from slorules.core.promutils import duration_to_prom_str
from slorules.models import SLO, AlertSeverity, MWMBAlert, MWMBAlertGroup


class AlertGenerator:
    """Builds the MWMB alert group of an SLO from the window catalog.

    Stateless apart from the read-only catalog, one instance can be shared
    by concurrent generation requests.
    """

    def __init__(self, catalog: WindowCatalog):
        self.catalog = catalog

    def generate_mwmb_alerts(self, slo: SLO) -> MWMBAlertGroup:
        """Return the page/ticket x quick/slow alerts of ``slo``.

        Raises:
            UnsupportedWindowError: If the SLO time window has no catalog entry.
        """
        try:
            windows = self.catalog.get_windows(slo.time_window)
        except NotFoundError as e:
            raise UnsupportedWindowError(
                f"the slo period windows for {duration_to_prom_str(slo.time_window)} are not supported",
                details={"slo": slo.id, **e.details},
            ) from e

        error_budget = 100 - slo.objective

        def build(window: Window, speed: float, severity: AlertSeverity, kind: str) -> MWMBAlert:
            return MWMBAlert(
                id=f"{slo.id}-{severity.value}-{kind}",
                short_window=window.short_window,
                long_window=window.long_window,
                burn_rate_factor=speed,
                error_budget=error_budget,
                severity=severity,
            )

        return MWMBAlertGroup(
            page_quick=build(
                windows.page_quick, windows.speed_page_quick(), AlertSeverity.PAGE, "quick"
            ),
            page_slow=build(
                windows.page_slow, windows.speed_page_slow(), AlertSeverity.PAGE, "slow"
            ),
            ticket_quick=build(
                windows.ticket_quick, windows.speed_ticket_quick(), AlertSeverity.TICKET, "quick"
            ),
            ticket_slow=build(
                windows.ticket_slow, windows.speed_ticket_slow(), AlertSeverity.TICKET, "slow"
            ),
        )
