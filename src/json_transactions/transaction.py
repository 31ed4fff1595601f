"""JSON transactions: decoding a network response into a typed payload.

A ``JSONTransaction`` wraps a lower-level ``DataTransaction``. When the wrapped
transaction succeeds, the raw bytes go through four stages on an execution
queue obtained from the transaction's ``QueueProvider``:

1. ``validate_metadata(metadata, data)`` (optional)
2. parse the bytes as JSON (skipped for an empty body, which parses as ``None``)
3. ``process_payload(json_value, data)`` builds the payload
4. ``validate_payload(payload, data, metadata)`` (optional)

The outcome is reported exactly once to the completion callback as
``Succeeded(payload, metadata)`` or ``Failed(error)``. Exceptions raised by any
stage are converted into ``TransactionError`` kinds; none escape ``execute``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import dataclasses
import logging
import threading
from typing import Any, ClassVar

import httpx

from json_transactions.config import FrozenConfig, default_config
from json_transactions.core.exceptions import TransactionError, TransportError
from json_transactions.core.types import (
    Failed,
    JSONReadingOptions,
    Result,
    Succeeded,
    is_result,
)
from json_transactions.payload import (
    PayloadProcessor,
    array_payload,
    dictionary_payload,
    required_payload,
)
from json_transactions.queues import DefaultQueueProvider, QueueProvider
from json_transactions.telemetry import TelemetryContext, TelemetryContextProtocol
from json_transactions.transport import DataTransaction, URLTransaction
from json_transactions.validation import MetadataValidator, PayloadValidator

log = logging.getLogger(__name__)

type TransactionResult[T] = Result[T, Any, TransactionError]
type Callback[T] = Callable[[TransactionResult[T]], None]


@dataclasses.dataclass(frozen=True, slots=True)
class _Stages:
    """The slot values one execution runs with."""

    reading_options: JSONReadingOptions
    validate_metadata: MetadataValidator | None
    process_payload: PayloadProcessor[Any]
    validate_payload: PayloadValidator | None


class JSONTransaction[T]:
    """Retrieves a JSON document and produces a payload of type ``T``.

    Construct with exactly one of ``url``, ``request`` or ``wrapping``. The
    first two build a ``URLTransaction``; ``wrapping`` decorates any existing
    ``DataTransaction``.

    The four slots (``reading_options``, ``validate_metadata``,
    ``process_payload``, ``validate_payload``) may be set after construction
    but must not change while an execution is in flight. Executions take a
    snapshot of the slots when they start, and hold no other state, so one
    instance may be executed any number of times, concurrently.
    """

    default_payload_processor: ClassVar[PayloadProcessor[Any]] = staticmethod(
        required_payload
    )

    def __init__(
        self,
        url: str | httpx.URL | None = None,
        *,
        request: httpx.Request | None = None,
        upload: bytes | None = None,
        wrapping: DataTransaction | None = None,
        queue_provider: QueueProvider | None = None,
        config: FrozenConfig | None = None,
        reading_options: JSONReadingOptions | None = None,
        validate_metadata: MetadataValidator | None = None,
        process_payload: PayloadProcessor[T] | None = None,
        validate_payload: PayloadValidator | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the transaction.

        Args:
            url: URL of the network service.
            request: A prepared ``httpx.Request`` to issue instead of a URL.
            upload: Optional body to send; only valid with ``url``/``request``.
            wrapping: An existing transaction to decorate.
            queue_provider: Supplies the queue decoding runs on. Defaults to
                the shared ``DefaultQueueProvider``.
            config: Frozen configuration; resolved from the environment when
                omitted.
            reading_options: JSON parsing options; derived from ``config``
                when omitted.
            validate_metadata: Optional first-stage validator.
            process_payload: Builds the payload; defaults to the class's
                ``default_payload_processor``.
            validate_payload: Optional last-stage validator.
            telemetry: Optional telemetry context for stage timings.

        Raises:
            TypeError: If not exactly one of ``url``, ``request`` and
                ``wrapping`` is given, or ``upload`` is combined with
                ``wrapping``.
        """
        given = sum(arg is not None for arg in (url, request, wrapping))
        if given != 1:
            raise TypeError(
                f"{type(self).__name__} requires exactly one of url, request or wrapping"
            )
        if wrapping is not None and upload is not None:
            raise TypeError(
                "upload cannot be combined with wrapping; "
                "the wrapped transaction owns its request body"
            )

        self.config = config if config is not None else default_config()
        self.queue_provider = (
            queue_provider
            if queue_provider is not None
            else DefaultQueueProvider.instance(self.config)
        )
        if wrapping is not None:
            self._wrapped_transaction: DataTransaction = wrapping
        else:
            self._wrapped_transaction = URLTransaction(
                url,
                request=request,
                upload=upload,
                queue_provider=self.queue_provider,
                config=self.config,
            )

        self.reading_options = (
            reading_options
            if reading_options is not None
            else self.config.reading_options()
        )
        self.validate_metadata = validate_metadata
        self.process_payload: PayloadProcessor[T] = (
            process_payload
            if process_payload is not None
            else type(self).default_payload_processor
        )
        self.validate_payload = validate_payload
        self.telemetry = telemetry if telemetry is not None else TelemetryContext()

    @property
    def url(self) -> Any:
        """The URL of the wrapped transaction."""
        return self._wrapped_transaction.url

    @property
    def upload(self) -> bytes | None:
        """The request body the wrapped transaction sends, if it has one."""
        return getattr(self._wrapped_transaction, "upload", None)

    @property
    def wrapped_transaction(self) -> DataTransaction:
        """The lower-level transaction this one decorates."""
        return self._wrapped_transaction

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._wrapped_transaction!r})"

    # ---------- execution ----------

    def execute(self, completion: Callback[T]) -> None:
        """Execute the transaction, reporting the result to ``completion``.

        The work may happen asynchronously; ``completion`` is called exactly
        once, possibly on another thread.
        """
        stages = _Stages(
            reading_options=self.reading_options,
            validate_metadata=self.validate_metadata,
            process_payload=self.process_payload,
            validate_payload=self.validate_payload,
        )

        def on_wrapped_result(result: Any) -> None:
            if not is_result(result):
                completion(
                    Failed(
                        TransportError(
                            f"{self._wrapped_transaction!r} reported "
                            f"{type(result).__name__}; expected Succeeded or Failed"
                        )
                    )
                )
                return
            if isinstance(result, Failed):
                completion(result)
                return
            data, metadata = result.payload, result.metadata
            self.queue_provider.queue().submit(
                lambda: completion(self._decode(data, metadata, stages))
            )

        self._wrapped_transaction.execute(on_wrapped_result)

    async def execute_async(self) -> TransactionResult[T]:
        """Execute the transaction and await its result."""
        loop = asyncio.get_running_loop()
        future: asyncio.Future[TransactionResult[T]] = loop.create_future()

        def resolve(result: TransactionResult[T]) -> None:
            if not future.done():
                future.set_result(result)

        self.execute(lambda result: loop.call_soon_threadsafe(resolve, result))
        return await future

    def execute_sync(self, timeout: float | None = None) -> TransactionResult[T]:
        """Execute the transaction and block until its result is available.

        Do not call this from a worker of a serial queue provider the
        transaction itself uses; the decode step would never get to run.

        Raises:
            TimeoutError: If no result arrives within ``timeout`` seconds.
        """
        done = threading.Event()
        results: list[TransactionResult[T]] = []

        def complete(result: TransactionResult[T]) -> None:
            results.append(result)
            done.set()

        self.execute(complete)
        if not done.wait(timeout):
            raise TimeoutError(f"{self!r} did not complete within {timeout}s")
        return results[0]

    # ---------- decode pipeline ----------

    def _decode(self, data: bytes, metadata: Any, stages: _Stages) -> TransactionResult[T]:
        ctx = self.telemetry
        stage = "validate_metadata"
        try:
            if stages.validate_metadata is not None:
                with ctx("json_transaction.validate_metadata"):
                    stages.validate_metadata(metadata, data)

            stage = "parse"
            if data:
                with ctx("json_transaction.parse", size=len(data)):
                    json_value = stages.reading_options.loads(data)
            else:
                json_value = None

            stage = "process_payload"
            with ctx("json_transaction.process_payload"):
                payload = stages.process_payload(json_value, data)

            stage = "validate_payload"
            if stages.validate_payload is not None:
                with ctx("json_transaction.validate_payload"):
                    stages.validate_payload(payload, data, metadata)
        except Exception as e:
            error = TransactionError.wrap(e, stage)
            ctx.count("json_transaction.error", stage=stage)
            log.debug(
                "%r failed at %s: %s: %s",
                self,
                stage,
                type(error).__name__,
                error,
            )
            return Failed(error)

        return Succeeded(payload, metadata)


class JSONDictionaryTransaction(JSONTransaction[dict[str, Any]]):
    """A ``JSONTransaction`` whose payload is the root JSON object."""

    default_payload_processor: ClassVar[PayloadProcessor[Any]] = staticmethod(
        dictionary_payload
    )


class JSONArrayTransaction(JSONTransaction[list[Any]]):
    """A ``JSONTransaction`` whose payload is the root JSON array."""

    default_payload_processor: ClassVar[PayloadProcessor[Any]] = staticmethod(
        array_payload
    )
