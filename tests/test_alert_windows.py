"""Tests for the SLO period window catalog and MWMB alert generation."""

from datetime import timedelta

import pytest
from structlog.testing import capture_logs

from slorules.alerts import AlertGenerator, WindowCatalog, burn_rate_factor, load_windows_document
from slorules.core.errors import (
    CatalogConflictError,
    ConfigurationError,
    NotFoundError,
    UnsupportedWindowError,
)
from slorules.models import AlertSeverity

WINDOWS_14D = """
apiVersion: sloth.slok.dev/v1
kind: AlertWindows
spec:
  sloPeriod: 14d
  page:
    quick: {errorBudgetPercent: 4, shortWindow: 5m, longWindow: 1h}
    slow: {errorBudgetPercent: 10, shortWindow: 30m, longWindow: 6h}
  ticket:
    quick: {errorBudgetPercent: 20, shortWindow: 2h, longWindow: 1d}
    slow: {errorBudgetPercent: 20, shortWindow: 6h, longWindow: 3d}
"""

WINDOWS_14D_OTHER = WINDOWS_14D.replace("errorBudgetPercent: 4,", "errorBudgetPercent: 5,")


class TestBurnRateFactor:
    """Tests for the burn rate factor formula."""

    def test_30d_page_quick(self):
        """2% of a 30 day budget in 1 hour is 14.4x the sustainable rate."""
        assert burn_rate_factor(timedelta(days=30), 2, timedelta(hours=1)) == pytest.approx(14.4)

    def test_28d_page_quick(self):
        assert burn_rate_factor(timedelta(days=28), 2, timedelta(hours=1)) == pytest.approx(13.44)

    def test_full_budget_over_full_period_is_one(self):
        assert burn_rate_factor(timedelta(days=30), 100, timedelta(days=30)) == pytest.approx(1)


class TestLoadWindowsDocument:
    """Tests for parsing window documents."""

    def test_valid_document(self):
        windows = load_windows_document(WINDOWS_14D)

        assert windows.slo_period == timedelta(days=14)
        assert windows.page_quick.error_budget_percent == 4
        assert windows.page_quick.short_window == timedelta(minutes=5)
        assert windows.ticket_slow.long_window == timedelta(days=3)

    def test_empty_document(self):
        with pytest.raises(ConfigurationError, match="spec is required"):
            load_windows_document("")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigurationError, match="could not unmarshal"):
            load_windows_document("spec: [unclosed")

    def test_wrong_kind(self):
        with pytest.raises(ConfigurationError, match="invalid spec version"):
            load_windows_document(WINDOWS_14D.replace("AlertWindows", "PrometheusServiceLevel"))

    def test_missing_period(self):
        with pytest.raises(ConfigurationError, match="slo period is required"):
            load_windows_document(WINDOWS_14D.replace("sloPeriod: 14d", "sloPeriod: 0"))

    def test_missing_window_field(self):
        doc = WINDOWS_14D.replace("{errorBudgetPercent: 10, shortWindow: 30m, longWindow: 6h}", "{errorBudgetPercent: 10, shortWindow: 30m}")

        with pytest.raises(ConfigurationError, match="invalid page slow: long window is required"):
            load_windows_document(doc)

    def test_invalid_duration(self):
        with pytest.raises(ConfigurationError, match="invalid page.quick"):
            load_windows_document(WINDOWS_14D.replace("shortWindow: 5m", "shortWindow: 5minutes"))


class TestWindowCatalog:
    """Tests for the window catalog."""

    def test_default_periods(self, catalog):
        """Test the embedded catalog covers 7, 28 and 30 day periods."""
        assert catalog.periods() == [timedelta(days=7), timedelta(days=28), timedelta(days=30)]

    def test_default_30d_windows(self, catalog):
        windows = catalog.get_windows(timedelta(days=30))

        assert windows.page_quick.short_window == timedelta(minutes=5)
        assert windows.page_quick.long_window == timedelta(hours=1)
        assert windows.page_slow.long_window == timedelta(hours=6)
        assert windows.ticket_quick.long_window == timedelta(days=1)
        assert windows.ticket_slow.long_window == timedelta(days=3)
        assert windows.speed_page_quick() == pytest.approx(14.4)
        assert windows.speed_page_slow() == pytest.approx(6)
        assert windows.speed_ticket_quick() == pytest.approx(3)
        assert windows.speed_ticket_slow() == pytest.approx(1)

    def test_unknown_period(self, catalog):
        with pytest.raises(NotFoundError, match="window period 2w missing"):
            catalog.get_windows(timedelta(days=14))

    def test_custom_mapping_source(self):
        catalog = WindowCatalog({"14d.yaml": WINDOWS_14D, "README.md": "ignored"})

        assert catalog.periods() == [timedelta(days=14)]

    def test_logs_with_component_name(self):
        with capture_logs() as logs:
            WindowCatalog({"14d.yaml": WINDOWS_14D})

        assert [log["event"] for log in logs] == [
            "using_custom_slo_period_windows_catalog",
            "slo_period_windows_loaded",
        ]
        assert all(log["svc"] == "alert.WindowCatalog" for log in logs)
        assert logs[-1]["windows"] == 1

    def test_custom_catalog_replaces_defaults(self):
        catalog = WindowCatalog({"14d.yaml": WINDOWS_14D})

        with pytest.raises(NotFoundError):
            catalog.get_windows(timedelta(days=30))

    def test_identical_duplicates_are_tolerated(self):
        catalog = WindowCatalog({"a.yaml": WINDOWS_14D, "b.yml": WINDOWS_14D})

        assert catalog.periods() == [timedelta(days=14)]

    def test_conflicting_duplicates_fail(self):
        with pytest.raises(CatalogConflictError, match="'2w' slo period is already loaded"):
            WindowCatalog({"a.yaml": WINDOWS_14D, "b.yaml": WINDOWS_14D_OTHER})

    def test_invalid_document_names_file(self):
        with pytest.raises(ConfigurationError, match="could not load 'bad.yaml' alert windows"):
            WindowCatalog({"bad.yaml": "kind: Other"})

    def test_directory_source_is_walked_recursively(self, tmp_path):
        nested = tmp_path / "team" / "windows"
        nested.mkdir(parents=True)
        (nested / "14d.yaml").write_text(WINDOWS_14D)
        (tmp_path / "notes.txt").write_text("not a window document")

        catalog = WindowCatalog(tmp_path)

        assert catalog.periods() == [timedelta(days=14)]

    def test_directory_source_must_exist(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not a directory"):
            WindowCatalog(tmp_path / "missing")

    def test_reload_swaps_catalog(self):
        catalog = WindowCatalog()

        catalog.reload({"14d.yaml": WINDOWS_14D})

        assert catalog.periods() == [timedelta(days=14)]

    def test_failed_reload_keeps_previous_catalog(self):
        catalog = WindowCatalog()

        with pytest.raises(CatalogConflictError):
            catalog.reload({"a.yaml": WINDOWS_14D, "b.yaml": WINDOWS_14D_OTHER})

        assert timedelta(days=30) in catalog.periods()


class TestAlertGenerator:
    """Tests for MWMB alert group generation."""

    def test_30d_alert_group(self, alert_generator, slo_factory):
        group = alert_generator.generate_mwmb_alerts(slo_factory(objective=99))

        assert group.page_quick.id == "test-id-page-quick"
        assert group.page_slow.id == "test-id-page-slow"
        assert group.ticket_quick.id == "test-id-ticket-quick"
        assert group.ticket_slow.id == "test-id-ticket-slow"

        assert group.page_quick.severity == AlertSeverity.PAGE
        assert group.ticket_slow.severity == AlertSeverity.TICKET

        assert group.page_quick.burn_rate_factor == pytest.approx(14.4)
        assert group.page_slow.burn_rate_factor == pytest.approx(6)
        assert group.ticket_quick.burn_rate_factor == pytest.approx(3)
        assert group.ticket_slow.burn_rate_factor == pytest.approx(1)

        for alert in group.alerts():
            assert alert.error_budget == pytest.approx(1)

    def test_28d_alert_group(self, alert_generator, slo_factory):
        group = alert_generator.generate_mwmb_alerts(slo_factory(time_window=timedelta(days=28)))

        assert group.page_quick.burn_rate_factor == pytest.approx(13.44)
        assert group.page_slow.burn_rate_factor == pytest.approx(5.6)
        assert group.ticket_quick.burn_rate_factor == pytest.approx(2.8)
        assert group.ticket_slow.burn_rate_factor == pytest.approx(0.9333333333333333)

    def test_7d_alert_group(self, alert_generator, slo_factory):
        group = alert_generator.generate_mwmb_alerts(slo_factory(time_window=timedelta(days=7)))

        assert group.page_quick.burn_rate_factor == pytest.approx(13.44)
        assert group.page_slow.burn_rate_factor == pytest.approx(3.5)
        assert group.ticket_quick.burn_rate_factor == pytest.approx(1.4)
        assert group.ticket_slow.burn_rate_factor == pytest.approx(0.98)

    def test_error_budget(self, alert_generator, slo_factory):
        group = alert_generator.generate_mwmb_alerts(slo_factory(objective=99.9))

        assert group.page_quick.error_budget == pytest.approx(0.1)

    def test_windows_are_distinct_and_sorted(self, alert_group):
        assert alert_group.windows() == [
            timedelta(minutes=5),
            timedelta(minutes=30),
            timedelta(hours=1),
            timedelta(hours=2),
            timedelta(hours=6),
            timedelta(days=1),
            timedelta(days=3),
        ]

    def test_unsupported_period(self, alert_generator, slo_factory):
        with pytest.raises(UnsupportedWindowError, match="2w are not supported"):
            alert_generator.generate_mwmb_alerts(slo_factory(time_window=timedelta(days=14)))
