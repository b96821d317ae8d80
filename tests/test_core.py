"""Tests for core helpers: Prometheus text formatting, templates and errors."""

from datetime import timedelta

import pytest
from slorules.core.errors import (
    CatalogConflictError,
    ConfigurationError,
    ExitCode,
    TemplateRenderError,
    ValidationError,
    format_error_message,
)
from slorules.core.promutils import (
    duration_to_prom_str,
    format_float,
    format_float_plain,
    is_valid_label_name,
    labels_to_prom_filter,
    labels_to_prom_group,
    merge_labels,
    parse_duration,
)
from slorules.core.templating import Template, render_template


class TestDurations:
    """Tests for Prometheus duration parsing and formatting."""

    @pytest.mark.parametrize(
        "duration,expected",
        [
            (timedelta(minutes=5), "5m"),
            (timedelta(minutes=30), "30m"),
            (timedelta(hours=1), "1h"),
            (timedelta(hours=1, minutes=30), "1h30m"),
            (timedelta(days=1), "1d"),
            (timedelta(days=3), "3d"),
            (timedelta(days=7), "1w"),
            (timedelta(days=28), "4w"),
            (timedelta(days=30), "30d"),
            (timedelta(days=365), "1y"),
            (timedelta(milliseconds=1500), "1s500ms"),
            (timedelta(0), "0s"),
        ],
    )
    def test_duration_to_prom_str(self, duration, expected):
        """Test years and weeks are only used when exact."""
        assert duration_to_prom_str(duration) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("5m", timedelta(minutes=5)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("4w", timedelta(days=28)),
            ("30d", timedelta(days=30)),
            ("1y", timedelta(days=365)),
            ("250ms", timedelta(milliseconds=250)),
            ("0", timedelta(0)),
        ],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "5", "5x", "m5", "1.5h", "-1h"])
    def test_parse_invalid_duration(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestFloatFormatting:
    """Tests for shortest float formatting used in expressions."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (14.4, "14.4"),
            (6.0, "6"),
            (1.0, "1"),
            (0.01, "0.01"),
            (0.99, "0.99"),
            (30.0, "30"),
            (0.0001, "0.0001"),
            (0.00001, "1e-05"),
            (1.5e-05, "1.5e-05"),
            (123456.0, "123456"),
            (1000000.0, "1e+06"),
            (0.0, "0"),
            (-2.5, "-2.5"),
        ],
    )
    def test_format_float(self, value, expected):
        assert format_float(value) == expected

    def test_format_float_plain_never_uses_exponent(self):
        assert format_float_plain(99.9) == "99.9"
        assert format_float_plain(100.0) == "100"
        assert format_float_plain(1000000.0) == "1000000"


class TestLabels:
    """Tests for label helpers."""

    def test_labels_to_prom_filter_is_sorted_and_quoted(self):
        result = labels_to_prom_filter({"sloth_slo": "b", "sloth_id": "a", "owner": 'x"y'})

        assert result == '{owner="x\\"y", sloth_id="a", sloth_slo="b"}'

    def test_labels_to_prom_filter_sorts_by_label_name(self):
        # `team2="b"` sorts before `team="a"` as a whole string.
        result = labels_to_prom_filter({"team2": "b", "team": "a"})

        assert result == '{team="a", team2="b"}'

    def test_labels_to_prom_group(self):
        assert labels_to_prom_group({"b": "1", "a": "2", "c": "3"}) == "a, b, c"

    def test_merge_labels_later_wins(self):
        result = merge_labels({"a": "1", "b": "1"}, None, {"b": "2"}, {"c": "3"})

        assert result == {"a": "1", "b": "2", "c": "3"}

    def test_merge_labels_does_not_mutate_inputs(self):
        first = {"a": "1"}

        merge_labels(first, {"a": "2"})

        assert first == {"a": "1"}

    @pytest.mark.parametrize(
        "name,valid",
        [("owner", True), ("_tier", True), ("team_2", True), ("2team", False), ("a-b", False), ("", False)],
    )
    def test_is_valid_label_name(self, name, valid):
        assert is_valid_label_name(name) is valid


class TestTemplate:
    """Tests for strict query templates."""

    def test_render_variables(self):
        tpl = Template('rate(x{job="a"}[{{ .window }}]) / {{.other}}')

        assert tpl.variables == ["window", "other"]
        assert tpl.render({"window": "5m", "other": 2}) == 'rate(x{job="a"}[5m]) / 2'

    def test_text_without_actions(self):
        assert render_template("vector(1)", {}) == "vector(1)"

    def test_missing_variable_fails(self):
        with pytest.raises(TemplateRenderError, match="no entry for key 'window'"):
            render_template("rate(x[{{.window}}])", {})

    def test_extra_data_is_ignored(self):
        assert render_template("{{.window}}", {"window": "1h", "unused": "x"}) == "1h"

    @pytest.mark.parametrize(
        "text",
        [
            "{{ if .window }}x{{ end }}",
            "{{ .window | printf }}",
            "{{ window }}",
        ],
    )
    def test_unsupported_actions_fail_on_parse(self, text):
        with pytest.raises(TemplateRenderError, match="unsupported action"):
            Template(text)

    def test_unclosed_action_fails(self):
        with pytest.raises(TemplateRenderError, match="unclosed action"):
            Template("rate(x[{{ .window ])")


class TestErrors:
    """Tests for the error hierarchy."""

    def test_exit_codes(self):
        assert ConfigurationError("x").exit_code == ExitCode.CONFIG_ERROR
        assert CatalogConflictError("x").exit_code == ExitCode.CONFIG_ERROR
        assert ValidationError("x").exit_code == ExitCode.VALIDATION_ERROR

    def test_validation_error_lists_problems(self):
        error = ValidationError("invalid slo", problems=["a: bad", "b: worse"])

        assert error.problems == ["a: bad", "b: worse"]
        assert str(error) == "invalid slo: a: bad; b: worse"

    def test_format_error_message_with_details(self):
        error = ConfigurationError("bad window", details={"file": "30d.yaml"})

        assert format_error_message(error) == "bad window (file=30d.yaml)"
