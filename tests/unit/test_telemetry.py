import logging

import pytest

from stepflow import telemetry
from stepflow.core.exceptions import InvalidStepError
from stepflow.core.types import AIStep, FormatterStep, Shorten
from stepflow.runner import PipelineRunner
from stepflow.telemetry import SimpleReporter, TelemetryContext

pytestmark = pytest.mark.unit


@pytest.fixture
def enabled(monkeypatch):
    monkeypatch.setattr(telemetry, "_TELEMETRY_ENABLED", True)


def test_disabled_context_is_a_shared_no_op(monkeypatch):
    monkeypatch.setattr(telemetry, "_TELEMETRY_ENABLED", False)
    reporter = SimpleReporter()
    ctx = TelemetryContext(reporter)
    assert ctx is TelemetryContext()
    with ctx("scope"):
        ctx.count("calls")
    assert reporter.timings == {}
    assert reporter.metrics == {}


def test_nested_scopes_record_dotted_paths(enabled):  # noqa: ARG001
    reporter = SimpleReporter()
    ctx = TelemetryContext(reporter)

    with ctx("outer"):
        with ctx("inner", step=1):
            ctx.metric("chars", 12)

    assert set(reporter.timings) == {"outer", "outer.inner"}
    [(value, metadata)] = reporter.metrics["outer.inner.chars"]
    assert value == 12
    assert metadata["parent_scope"] == "outer.inner"
    assert "outer.inner: 1 call(s)" in reporter.get_report()


def test_empty_scope_name_is_rejected(enabled):  # noqa: ARG001
    ctx = TelemetryContext(SimpleReporter())
    with pytest.raises(ValueError), ctx(""):
        pass


def test_failing_reporter_is_logged_not_raised(enabled, caplog):  # noqa: ARG001
    class Broken:
        def record_timing(self, scope, duration, **metadata):
            raise RuntimeError("disk full")

        def record_metric(self, scope, value, **metadata):
            raise RuntimeError("disk full")

    ctx = TelemetryContext(Broken())
    with caplog.at_level(logging.ERROR, logger="stepflow.telemetry"), ctx("scope"):
        ctx.count("calls")
    assert "Telemetry reporter 'Broken' failed" in caplog.text


@pytest.mark.asyncio
async def test_runner_reports_steps_and_errors(enabled, keyless_config):  # noqa: ARG001
    reporter = SimpleReporter()
    runner = PipelineRunner(telemetry=TelemetryContext(reporter))

    await runner.run([FormatterStep(Shorten()), FormatterStep(Shorten())], "a. b. c", keyless_config)
    with pytest.raises(InvalidStepError):
        await runner.run([AIStep("")], "text", keyless_config)

    assert len(reporter.timings["runner.step"]) == 3
    [(increment, metadata)] = reporter.metrics["runner.error"]
    assert increment == 1
    assert metadata["error"] == "InvalidStepError"
