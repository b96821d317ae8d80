"""Root test configuration."""

import logging
from datetime import timedelta

import pytest
import structlog
from slorules.alerts import AlertGenerator, WindowCatalog
from slorules.models import SLI, SLO, AlertMeta, Info, Mode, SLIEvents

ERROR_QUERY = 'sum(rate(http_request_duration_seconds_count{job="myservice",code=~"(5..|429)"}[{{.window}}]))'
TOTAL_QUERY = 'sum(rate(http_request_duration_seconds_count{job="myservice"}[{{.window}}]))'


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def make_slo(**overrides) -> SLO:
    """Build a valid event based SLO, overriding any field."""
    fields = dict(
        id="test-id",
        name="test-name",
        service="test-svc",
        sli=SLI(events=SLIEvents(error_query=ERROR_QUERY, total_query=TOTAL_QUERY)),
        time_window=timedelta(days=30),
        objective=99,
        labels={"owner": "myteam"},
        page_alert_meta=AlertMeta(name="P1-SLO", labels={"routing": "pager"}),
        ticket_alert_meta=AlertMeta(name="P2-SLO", labels={"routing": "tickets"}),
    )
    fields.update(overrides)
    return SLO(**fields)


@pytest.fixture(scope="session")
def catalog():
    """Window catalog with the embedded defaults."""
    return WindowCatalog()


@pytest.fixture
def alert_generator(catalog):
    return AlertGenerator(catalog)


@pytest.fixture
def slo():
    return make_slo()


@pytest.fixture
def alert_group(alert_generator, slo):
    """MWMB alerts of the default 30 day SLO."""
    return alert_generator.generate_mwmb_alerts(slo)


@pytest.fixture
def info():
    return Info(version="test-ver", mode=Mode.TEST, spec="test/spec/v1")


@pytest.fixture
def slo_factory():
    """Factory building valid SLOs with field overrides."""
    return make_slo
