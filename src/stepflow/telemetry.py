"""Run telemetry: step timings and counters.

Disabled by default. Set ``STEPFLOW_TELEMETRY=1`` (or ``DEBUG=1``) before
import and pass reporters to ``TelemetryContext`` to collect data; otherwise
every call goes to a shared no-op object.
"""

from collections import deque
from contextvars import ContextVar, Token
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, NamedTuple, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)

# Scope names active in the current task; each asyncio task gets its own copy
_active_scopes: ContextVar[tuple[str, ...]] = ContextVar("stepflow_scopes", default=())

_TELEMETRY_ENABLED = (
    os.getenv("STEPFLOW_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"
)


@runtime_checkable
class TelemetryReporter(Protocol):
    """Receives finished scope timings and recorded metrics."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


def _qualified(name: str, scopes: tuple[str, ...]) -> tuple[str, dict[str, Any]]:
    """Dotted path for ``name`` under ``scopes`` plus positional metadata."""
    parent = ".".join(scopes) or None
    path = f"{parent}.{name}" if parent else name
    return path, {"depth": len(scopes), "parent_scope": parent}


def _notify(
    reporters: tuple[TelemetryReporter, ...], method: str, *args: Any, **metadata: Any
) -> None:
    # A broken reporter must never fail a run
    for reporter in reporters:
        try:
            getattr(reporter, method)(*args, **metadata)
        except Exception as e:
            log.error(
                "Telemetry reporter '%s' failed: %s",
                type(reporter).__name__,
                e,
                exc_info=True,
            )


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """Stateless stand-in used whenever telemetry is off."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _TimedScope:
    """One ``with ctx(name):`` block; reports its duration on exit."""

    __slots__ = ("_context", "_metadata", "_name", "_path", "_started", "_token")

    def __init__(
        self, context: "_EnabledTelemetryContext", name: str, metadata: dict[str, Any]
    ) -> None:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")
        self._context = context
        self._name = name
        self._metadata = metadata
        self._path = name
        self._started = 0.0
        self._token: Token[tuple[str, ...]] | None = None

    def __enter__(self) -> "_EnabledTelemetryContext":
        scopes = _active_scopes.get()
        self._path, _ = _qualified(self._name, scopes)
        self._token = _active_scopes.set((*scopes, self._name))
        self._started = time.perf_counter()
        return self._context

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        duration = time.perf_counter() - self._started
        if self._token is not None:
            _active_scopes.reset(self._token)
        _, position = _qualified(self._name, _active_scopes.get())
        metadata = {**position, "failed": exc_type is not None, **self._metadata}
        _notify(self._context.reporters, "record_timing", self._path, duration, **metadata)


class _EnabledTelemetryContext:
    """Forwards scopes and metrics to the configured reporters."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter) -> None:
        self.reporters = reporters

    def __call__(self, name: str, **metadata: Any) -> _TimedScope:
        return _TimedScope(self, name, metadata)

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record ``value`` under ``name`` in the current scope."""
        path, position = _qualified(name, _active_scopes.get())
        _notify(self.reporters, "record_metric", path, value, **{**position, **metadata})

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter increment."""
        self.metric(name, increment, metric_type="counter", **metadata)


_NO_OP_SINGLETON = _NoOpTelemetryContext()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return a live context when telemetry is enabled and reporters are given.

    Otherwise return the shared no-op context.
    """
    if _TELEMETRY_ENABLED and reporters:
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class Sample(NamedTuple):
    """One recorded timing or metric value with its metadata."""

    value: Any
    metadata: dict[str, Any]


class SimpleReporter:
    """Keeps the most recent samples per scope in memory.

    ``get_report()`` renders call counts and durations per scope, which is
    usually enough to see which step of a workflow is slow.
    """

    def __init__(self, max_entries_per_scope: int = 1000) -> None:
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[Sample]] = {}
        self.metrics: dict[str, deque[Sample]] = {}

    def _bucket(self, store: dict[str, deque[Sample]], scope: str) -> deque[Sample]:
        return store.setdefault(scope, deque(maxlen=self.max_entries))

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self._bucket(self.timings, scope).append(Sample(duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self._bucket(self.metrics, scope).append(Sample(value, metadata))

    def get_report(self) -> str:
        """Render collected timings and metric totals as plain text."""
        lines = ["stepflow telemetry"]
        for scope, samples in sorted(self.timings.items()):
            durations = [s.value for s in samples]
            failed = sum(1 for s in samples if s.metadata.get("failed"))
            lines.append(
                f"  {scope}: {len(durations)} call(s), "
                f"mean {sum(durations) / len(durations) * 1000:.1f} ms, "
                f"max {max(durations) * 1000:.1f} ms, {failed} failed"
            )
        for scope, samples in sorted(self.metrics.items()):
            total = sum(s.value for s in samples if isinstance(s.value, int | float))
            lines.append(f"  {scope}: {len(samples)} sample(s), total {total:g}")
        return "\n".join(lines)
