"""Telemetry context and reporter interfaces.

Provides no-op behavior when disabled and per-stage timings and counters
when enabled via the ``JSON_TRANSACTIONS_TELEMETRY=1`` (or ``DEBUG=1``)
environment flag.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import threading
import time
from types import TracebackType
from typing import Any, Protocol, Self, runtime_checkable

log = logging.getLogger(__name__)

# Context-aware state for thread/async safety
_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar(
    "scope_stack",
    default=(),
)


def telemetry_enabled() -> bool:
    """Return True when telemetry has been switched on in the environment."""
    return (
        os.getenv("JSON_TRANSACTIONS_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"
    )


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """An immutable and stateless no-op context."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    """Full-featured telemetry context when enabled."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        return self._create_scope(name, **metadata)

    @contextmanager
    def _create_scope(
        self, name: str, **metadata: Any
    ) -> Iterator["_EnabledTelemetryContext"]:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")

        scope_stack = _scope_stack_var.get()
        scope_path = ".".join((*scope_stack, name))
        start_time = time.perf_counter()
        token = _scope_stack_var.set((*scope_stack, name))

        try:
            yield self
        finally:
            duration = time.perf_counter() - start_time
            _scope_stack_var.reset(token)
            enhanced_metadata = {
                "depth": len(scope_stack),
                "parent_scope": ".".join(scope_stack) if scope_stack else None,
                **metadata,
            }
            for reporter in self.reporters:
                try:
                    reporter.record_timing(scope_path, duration, **enhanced_metadata)
                except Exception as e:
                    log.error(
                        "Telemetry reporter '%s' failed: %s",
                        type(reporter).__name__,
                        e,
                        exc_info=True,
                    )

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record a metric within current scope context."""
        scope_stack = _scope_stack_var.get()
        scope_path = ".".join((*scope_stack, name))
        enhanced_metadata = {
            "depth": len(scope_stack),
            "parent_scope": ".".join(scope_stack) if scope_stack else None,
            **metadata,
        }
        for reporter in self.reporters:
            try:
                reporter.record_metric(scope_path, value, **enhanced_metadata)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter metric."""
        self.metric(name, increment, metric_type="counter", **metadata)


_NO_OP_SINGLETON = _NoOpTelemetryContext()

type TelemetryContextProtocol = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return a telemetry context.

    Returns a full-featured context when telemetry is enabled and reporters
    are given, otherwise the shared no-op instance.
    """
    if reporters and telemetry_enabled():
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class InMemoryReporter:
    """Reporter that keeps recent timings and metrics in memory.

    Decode stages may run on several worker threads at once, so recording
    is guarded by a lock.
    """

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = {}
        self._lock = threading.Lock()

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        with self._lock:
            self.timings.setdefault(scope, deque(maxlen=self.max_entries)).append(
                (duration, metadata)
            )

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        with self._lock:
            self.metrics.setdefault(scope, deque(maxlen=self.max_entries)).append(
                (value, metadata)
            )

    def get_report(self) -> str:
        """Flat report of call counts and totals per scope."""
        lines = ["=== Telemetry Report ===", "--- Timings ---"]
        with self._lock:
            for scope, values in sorted(self.timings.items()):
                durations = [v[0] for v in values]
                lines.append(
                    f"{scope:<40} | Calls: {len(durations):<4} | "
                    f"Avg: {sum(durations) / len(durations):.4f}s"
                )
            if self.metrics:
                lines.append("--- Metrics ---")
                for scope, metric_values in sorted(self.metrics.items()):
                    total = sum(
                        v[0] for v in metric_values if isinstance(v[0], int | float)
                    )
                    lines.append(
                        f"{scope:<40} | Count: {len(metric_values):<4} | Total: {total:,.0f}"
                    )
        return "\n".join(lines)
