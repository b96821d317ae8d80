"""Tests for environment settings and service composition."""

from datetime import timedelta

import pydantic
import pytest
from slorules.config import Settings, get_settings
from slorules.core.errors import ConfigurationError
from slorules.generate import GenerateService, Request, build_service
from slorules.models import Info, Mode, SLOGroup

WINDOWS_7D = """
apiVersion: sloth.slok.dev/v1
kind: AlertWindows
spec:
  sloPeriod: 7d
  page:
    quick: {errorBudgetPercent: 8, shortWindow: 5m, longWindow: 1h}
    slow: {errorBudgetPercent: 12.5, shortWindow: 30m, longWindow: 6h}
  ticket:
    quick: {errorBudgetPercent: 20, shortWindow: 2h, longWindow: 1d}
    slow: {errorBudgetPercent: 42, shortWindow: 6h, longWindow: 3d}
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run without a .env file and with a fresh settings cache."""
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def keep_test_logging(monkeypatch):
    monkeypatch.setattr("slorules.generate.service.configure_logging", lambda level: None)


class TestSettings:
    """Tests for Settings loading."""

    def test_defaults(self):
        settings = Settings()

        assert settings.windows_path is None
        assert settings.default_slo_period == "30d"
        assert settings.optimized_sli_rules is False
        assert settings.disable_default_plugins is False
        assert settings.extra_labels == {}
        assert settings.plugin_metadata() == []

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SLORULES_DEFAULT_SLO_PERIOD", "28d")
        monkeypatch.setenv("SLORULES_OPTIMIZED_SLI_RULES", "true")
        monkeypatch.setenv("SLORULES_EXTRA_LABELS", '{"env": "prod"}')

        settings = get_settings()

        assert settings.default_slo_period == "28d"
        assert settings.optimized_sli_rules is True
        assert settings.extra_labels == {"env": "prod"}

    def test_settings_are_cached(self):
        assert get_settings() is get_settings()

    def test_invalid_period(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(default_slo_period="a month")

    def test_extra_plugins(self, monkeypatch):
        monkeypatch.setenv(
            "SLORULES_EXTRA_PLUGINS",
            '[{"id": "sloth.dev/core/noop/v1", "priority": 5, "config": {"a": 1}}]',
        )

        (plugin,) = Settings().plugin_metadata()

        assert plugin.id == "sloth.dev/core/noop/v1"
        assert plugin.priority == 5
        assert plugin.config == {"a": 1}

    def test_extra_plugins_require_id(self):
        with pytest.raises(pydantic.ValidationError, match="extra plugins require an id"):
            Settings(extra_plugins=[{"priority": 1}])

    def test_info_uses_configured_version(self, monkeypatch):
        monkeypatch.setenv("SLORULES_VERSION", "v1.2.3")

        info = Settings().info(Mode.CLI_GEN_PROMETHEUS, spec="prometheus/v1")

        assert info == Info(version="v1.2.3", mode=Mode.CLI_GEN_PROMETHEUS, spec="prometheus/v1")

    def test_info_version_reaches_info_metric(self, slo):
        settings = Settings(version="v1.2.3")

        result = build_service(settings).generate(
            Request(info=settings.info(Mode.TEST), slo_group=SLOGroup(slos=[slo]))
        ).prometheus_slos[0]

        info_rule = result.rules.metadata_rec_rules.rules[-1]
        assert info_rule.record == "sloth_slo_info"
        assert info_rule.labels["sloth_version"] == "v1.2.3"
        assert info_rule.labels["sloth_mode"] == "test"


class TestBuildService:
    """Tests for composing the generation service from settings."""

    def test_default_service(self, info, slo):
        service = build_service(Settings())

        response = service.generate(Request(info=info, slo_group=SLOGroup(slos=[slo])))

        assert isinstance(service, GenerateService)
        assert len(response.prometheus_slos[0].rules.sli_error_rec_rules.rules) == 8

    def test_service_uses_cached_settings(self, monkeypatch):
        monkeypatch.setenv("SLORULES_DEFAULT_SLO_PERIOD", "7d")

        assert build_service().default_slo_period == timedelta(days=7)

    def test_custom_windows_directory(self, tmp_path, info, slo_factory):
        windows_dir = tmp_path / "windows"
        windows_dir.mkdir()
        (windows_dir / "7d.yaml").write_text(WINDOWS_7D)

        service = build_service(Settings(windows_path=windows_dir, default_slo_period="7d"))
        slo = slo_factory(time_window=timedelta(0))

        result = service.generate(Request(info=info, slo_group=SLOGroup(slos=[slo]))).prometheus_slos[0]

        assert result.slo.time_window == timedelta(days=7)

    def test_default_period_must_be_supported(self, tmp_path):
        windows_dir = tmp_path / "windows"
        windows_dir.mkdir()
        (windows_dir / "7d.yaml").write_text(WINDOWS_7D)

        with pytest.raises(ConfigurationError, match="default slo period 30d is not supported"):
            build_service(Settings(windows_path=windows_dir))

    def test_disable_default_plugins(self):
        service = build_service(Settings(disable_default_plugins=True))

        assert service.default_processors == []

    def test_extra_labels_and_plugins(self, info, slo):
        settings = Settings(
            extra_labels={"env": "prod"},
            extra_plugins=[{"id": "sloth.dev/contrib/sli_total_amount/v1"}],
        )

        result = build_service(settings).generate(
            Request(info=info, slo_group=SLOGroup(slos=[slo]))
        ).prometheus_slos[0]

        assert result.slo.labels["env"] == "prod"
        assert result.rules.extra_rules[0].name == "sloth-slo-sli-total-amount-test-id"
