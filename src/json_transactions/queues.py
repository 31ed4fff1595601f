"""Queue providers: where decoding work runs.

A transaction never decides for itself which thread parses JSON. It asks its
``QueueProvider`` for an execution queue and submits the whole decode
pipeline there as a single zero-argument callable. Swapping providers lets
callers choose shared parallel decoding, strictly serial decoding, or
synchronous decoding in tests.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
import logging
import threading
from typing import Any, ClassVar, Protocol, runtime_checkable

from json_transactions.config import FrozenConfig, default_config

log = logging.getLogger(__name__)


@runtime_checkable
class ExecutionQueue(Protocol):
    """Anything that can schedule a zero-argument callable."""

    def submit(self, fn: Callable[[], Any], /) -> Any: ...  # noqa: D102


@runtime_checkable
class QueueProvider(Protocol):
    """Strategy handing out the execution queue a transaction decodes on."""

    def queue(self) -> ExecutionQueue: ...  # noqa: D102


def _logged(fn: Callable[[], Any]) -> Callable[[], Any]:
    """Log anything escaping queued work before it disappears into a Future."""

    def runner() -> Any:
        try:
            return fn()
        except Exception:
            log.exception("Unhandled error in queued transaction work")
            raise

    return runner


class _ExecutorQueue:
    """Adapter putting logging around a ``ThreadPoolExecutor``."""

    __slots__ = ("_executor",)

    def __init__(self, executor: ThreadPoolExecutor) -> None:
        self._executor = executor

    def submit(self, fn: Callable[[], Any], /) -> Future[Any]:
        return self._executor.submit(_logged(fn))


class ImmediateQueue:
    """Runs submitted work right away on the calling thread."""

    def submit(self, fn: Callable[[], Any], /) -> Future[Any]:
        future: Future[Any] = Future()
        try:
            future.set_result(_logged(fn)())
        except Exception as e:
            future.set_exception(e)
            raise
        return future


class ImmediateQueueProvider:
    """Synchronous provider, mainly for tests and simple scripts."""

    _queue = ImmediateQueue()

    def queue(self) -> ImmediateQueue:
        return self._queue


class SerialQueueProvider:
    """Provider whose work runs one item at a time, in submission order."""

    def __init__(self, name: str = "json-transactions-serial") -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._queue = _ExecutorQueue(self._executor)

    def queue(self) -> ExecutionQueue:
        return self._queue

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work and optionally wait for queued items."""
        self._executor.shutdown(wait=wait)


class DefaultQueueProvider:
    """Process-wide shared thread pool.

    Use ``DefaultQueueProvider.instance()`` rather than constructing one per
    transaction; the pool is created lazily on first use. The first
    ``instance(config)`` call fixes the pool size for the process until
    ``reset_instance()``.
    """

    _instance: ClassVar[DefaultQueueProvider | None] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, config: FrozenConfig | None = None) -> None:
        self.config = config if config is not None else default_config()
        self._executor: ThreadPoolExecutor | None = None
        self._queue: _ExecutorQueue | None = None
        self._lock = threading.Lock()

    @classmethod
    def instance(cls, config: FrozenConfig | None = None) -> DefaultQueueProvider:
        """Return the shared provider, creating it on first call.

        ``config`` only applies when the provider is created; later calls
        return the existing provider whatever config they pass.
        """
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls(config)
            elif (
                config is not None
                and config.max_workers != cls._instance.config.max_workers
            ):
                log.debug(
                    "Shared decode pool already sized to %d workers; ignoring %d",
                    cls._instance.config.max_workers,
                    config.max_workers,
                )
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Shut down and forget the shared provider."""
        with cls._instance_lock:
            instance, cls._instance = cls._instance, None
        if instance is not None:
            instance.shutdown(wait=True)

    def queue(self) -> ExecutionQueue:
        with self._lock:
            if self._queue is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.config.max_workers,
                    thread_name_prefix="json-transactions",
                )
                self._queue = _ExecutorQueue(self._executor)
                log.debug(
                    "Started decode pool with %d workers", self.config.max_workers
                )
            return self._queue

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop the pool; a later ``queue()`` call starts a fresh one."""
        with self._lock:
            executor, self._executor, self._queue = self._executor, None, None
        if executor is not None:
            executor.shutdown(wait=wait)
