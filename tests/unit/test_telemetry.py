import pytest

from json_transactions.telemetry import (
    InMemoryReporter,
    TelemetryContext,
    TelemetryReporter,
    telemetry_enabled,
)

pytestmark = pytest.mark.unit


def test_disabled_by_default_returns_shared_noop():
    reporter = InMemoryReporter()
    ctx = TelemetryContext(reporter)
    assert not telemetry_enabled()
    assert ctx is TelemetryContext()
    with ctx("anything", size=1):
        ctx.count("calls")
    assert reporter.timings == {}
    assert reporter.metrics == {}


def test_enabled_without_reporters_is_noop(monkeypatch):
    monkeypatch.setenv("JSON_TRANSACTIONS_TELEMETRY", "1")
    assert TelemetryContext() is TelemetryContext()


def test_debug_flag_enables(monkeypatch):
    monkeypatch.setenv("DEBUG", "1")
    assert telemetry_enabled()


def test_nested_scopes_and_metrics(monkeypatch):
    monkeypatch.setenv("JSON_TRANSACTIONS_TELEMETRY", "1")
    reporter = InMemoryReporter()
    assert isinstance(reporter, TelemetryReporter)
    ctx = TelemetryContext(reporter)

    with ctx("outer"):
        with ctx("inner", stage="parse"):
            ctx.count("errors")

    assert set(reporter.timings) == {"outer", "outer.inner"}
    [(_, inner_meta)] = reporter.timings["outer.inner"]
    assert inner_meta["parent_scope"] == "outer"
    assert inner_meta["stage"] == "parse"
    [(value, metric_meta)] = reporter.metrics["outer.inner.errors"]
    assert value == 1
    assert metric_meta["metric_type"] == "counter"
    assert "outer.inner" in reporter.get_report()


def test_failing_reporter_does_not_break_scope(monkeypatch, caplog):
    monkeypatch.setenv("JSON_TRANSACTIONS_TELEMETRY", "1")

    class Broken:
        def record_timing(self, scope, duration, **metadata):
            raise RuntimeError("reporter down")

        def record_metric(self, scope, value, **metadata):
            raise RuntimeError("reporter down")

    ctx = TelemetryContext(Broken())
    with ctx("scope"):
        ctx.count("n")
    assert "reporter down" in caplog.text


def test_scope_name_must_be_non_empty(monkeypatch):
    monkeypatch.setenv("JSON_TRANSACTIONS_TELEMETRY", "1")
    ctx = TelemetryContext(InMemoryReporter())
    with pytest.raises(ValueError):
        with ctx(""):
            pass
