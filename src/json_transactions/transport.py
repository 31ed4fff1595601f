"""The lower-level transaction that fetches raw bytes over HTTP.

``URLTransaction`` is the default transaction a ``JSONTransaction`` wraps. It
knows nothing about JSON: it issues one HTTP request and reports the body
bytes together with ``ResponseMetadata``. HTTP error statuses are not
failures at this level; they are metadata for validators to judge.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from json_transactions.config import FrozenConfig, default_config
from json_transactions.core.exceptions import TransactionError, TransportError
from json_transactions.core.types import Failed, ResponseMetadata, Succeeded
from json_transactions.queues import DefaultQueueProvider, QueueProvider

log = logging.getLogger(__name__)

type DataResult = Succeeded[bytes, Any] | Failed[TransactionError]


@runtime_checkable
class DataTransaction(Protocol):
    """Contract for a transaction that yields raw bytes and metadata.

    ``execute`` must invoke ``completion`` exactly once, with either
    ``Succeeded(data, metadata)`` or ``Failed(TransactionError)``.
    """

    @property
    def url(self) -> Any: ...  # noqa: D102

    def execute(self, completion: Callable[[DataResult], None]) -> None: ...  # noqa: D102


class URLTransaction:
    """Fetches the bytes at a URL using ``httpx``.

    Exactly one of ``url`` or ``request`` must be given. The HTTP method is
    ``method`` when set, otherwise POST when there is an ``upload`` body and
    GET when there is not.

    A caller-supplied ``client`` is used as-is and never closed here; without
    one, a short-lived client configured from ``config`` is opened for each
    execution.
    """

    def __init__(
        self,
        url: str | httpx.URL | None = None,
        *,
        request: httpx.Request | None = None,
        upload: bytes | None = None,
        method: str | None = None,
        headers: Mapping[str, str] | None = None,
        client: httpx.Client | None = None,
        queue_provider: QueueProvider | None = None,
        config: FrozenConfig | None = None,
    ) -> None:
        if (url is None) == (request is None):
            raise TypeError("URLTransaction requires exactly one of url or request")
        self.config = config if config is not None else default_config()
        self.queue_provider = (
            queue_provider
            if queue_provider is not None
            else DefaultQueueProvider.instance(self.config)
        )
        self.upload = upload
        self._request = request
        self._url = httpx.URL(url) if url is not None else request.url  # type: ignore[union-attr]
        if method is not None:
            self._method = method.upper()
        elif request is not None:
            self._method = request.method
        else:
            self._method = "POST" if upload is not None else "GET"
        self._headers = httpx.Headers(headers) if headers is not None else None
        self._client = client

    @property
    def url(self) -> httpx.URL:
        """The URL this transaction requests."""
        return self._url

    @property
    def method(self) -> str:
        """The HTTP method this transaction uses."""
        return self._method

    def __repr__(self) -> str:
        return f"URLTransaction({self._method} {self._url})"

    def execute(self, completion: Callable[[DataResult], None]) -> None:
        """Issue the request on the provider's queue and report the outcome."""

        def perform() -> None:
            completion(self._fetch())

        self.queue_provider.queue().submit(perform)

    def _fetch(self) -> DataResult:
        try:
            if self._client is not None:
                response = self._send(self._client)
            else:
                with httpx.Client(
                    timeout=self.config.timeout_seconds,
                    headers={"User-Agent": self.config.user_agent},
                ) as client:
                    response = self._send(client)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            log.debug("%s %s failed: %s", self._method, self._url, e)
            error = TransportError(f"Request to {self._url} failed: {e}")
            error.__cause__ = e
            return Failed(error)

        log.debug(
            "%s %s -> %d (%d bytes)",
            self._method,
            self._url,
            response.status_code,
            len(response.content),
        )
        try:
            metadata = ResponseMetadata.from_response(response)
        except (TypeError, ValueError) as e:
            error = TransportError(f"Unusable response from {self._url}: {e}")
            error.__cause__ = e
            return Failed(error)
        return Succeeded(response.content, metadata)

    def _send(self, client: httpx.Client) -> httpx.Response:
        headers = httpx.Headers(self._request.headers if self._request else None)
        # Framing headers are recomputed for the body actually sent
        for name in ("content-length", "transfer-encoding"):
            if name in headers:
                del headers[name]
        if self._headers is not None:
            headers.update(self._headers)
        if self.upload is not None:
            content: bytes | None = self.upload
        elif self._request is not None:
            content = self._request.read() or None
        else:
            content = None
        request = client.build_request(
            self._method, self._url, headers=headers, content=content
        )
        return client.send(request, follow_redirects=self.config.follow_redirects)
