"""Core data types that flow through a transaction.

This module defines the immutable values a transaction produces and consumes:
the ``Succeeded``/``Failed`` result union, the metadata describing an HTTP
response, and the options controlling how JSON bytes are parsed.
"""

from __future__ import annotations

from collections.abc import Callable
import dataclasses
import json
import typing

import httpx

# --- Minimal guard helpers ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


# --- Dynamic JSON value ---

type JSONValue = (
    None | bool | int | float | str | list[JSONValue] | dict[str, JSONValue]
)

# --- Result union ---
# Every execution ends in exactly one of these two values. Failures are part
# of the data flow rather than exceptions crossing the API boundary.


@dataclasses.dataclass(frozen=True, slots=True)
class Succeeded[TPayload, TMetadata]:
    """A transaction that produced a payload."""

    payload: TPayload
    metadata: TMetadata


@dataclasses.dataclass(frozen=True, slots=True)
class Failed[TError: Exception]:
    """A transaction that failed, containing the error."""

    error: TError


type Result[TPayload, TMetadata, TError: Exception] = (
    Succeeded[TPayload, TMetadata] | Failed[TError]
)


def is_result(value: object) -> bool:
    """Return True when ``value`` is a ``Succeeded`` or ``Failed``."""
    return isinstance(value, Succeeded | Failed)


# --- Response metadata ---


@dataclasses.dataclass(frozen=True, slots=True)
class ResponseMetadata:
    """Transport-level description of an HTTP response.

    Transactions never interpret this value; they forward it to validators
    and into the final ``Succeeded`` result.
    """

    url: str
    status_code: int
    headers: httpx.Headers = dataclasses.field(default_factory=httpx.Headers)
    http_version: str = "HTTP/1.1"
    elapsed: float | None = None

    def __post_init__(self) -> None:
        """Validate invariants for type safety."""
        _require(
            condition=isinstance(self.status_code, int)
            and 100 <= self.status_code <= 999,
            message=f"must be a three-digit int, got {self.status_code!r}",
            field_name="status_code",
        )
        if not isinstance(self.headers, httpx.Headers):
            object.__setattr__(self, "headers", httpx.Headers(self.headers))

    @property
    def content_type(self) -> str | None:
        """Media type from the Content-Type header, without parameters."""
        raw = self.headers.get("content-type")
        if not raw:
            return None
        return raw.split(";", 1)[0].strip().lower() or None

    @property
    def is_success(self) -> bool:
        """True for 2xx status codes."""
        return 200 <= self.status_code < 300

    @classmethod
    def from_response(cls, response: httpx.Response) -> ResponseMetadata:
        """Build metadata from a fully read ``httpx.Response``."""
        try:
            elapsed: float | None = response.elapsed.total_seconds()
        except RuntimeError:
            # Only available once the response stream is closed
            elapsed = None
        return cls(
            url=str(response.url),
            status_code=response.status_code,
            headers=response.headers,
            http_version=response.http_version,
            elapsed=elapsed,
        )


# --- JSON reading options ---


def _reject_constant(name: str) -> typing.NoReturn:
    raise ValueError(f"Non-standard JSON constant {name!r} is not allowed")


@dataclasses.dataclass(frozen=True, slots=True)
class JSONReadingOptions:
    """Options controlling how response bytes are parsed as JSON.

    The defaults are strict: the root must be an object or array, and the
    non-standard ``NaN``/``Infinity`` literals are rejected.
    """

    allow_fragments: bool = False
    allow_nan: bool = False
    parse_float: Callable[[str], typing.Any] | None = None
    parse_int: Callable[[str], typing.Any] | None = None
    object_pairs_hook: Callable[[list[tuple[str, typing.Any]]], typing.Any] | None = (
        None
    )
    encoding: str | None = None

    def loads(self, data: bytes) -> JSONValue:
        """Parse ``data`` according to these options.

        Raises:
            ValueError: If the bytes are not acceptable JSON.
        """
        document: str | bytes = (
            data.decode(self.encoding) if self.encoding is not None else data
        )
        kwargs: dict[str, typing.Any] = {}
        if self.parse_float is not None:
            kwargs["parse_float"] = self.parse_float
        if self.parse_int is not None:
            kwargs["parse_int"] = self.parse_int
        if self.object_pairs_hook is not None:
            kwargs["object_pairs_hook"] = self.object_pairs_hook
        if not self.allow_nan:
            kwargs["parse_constant"] = _reject_constant

        value = json.loads(document, **kwargs)
        if not self.allow_fragments and not isinstance(value, dict | list):
            raise ValueError(
                "JSON text must have an object or array at its root "
                f"(got {type(value).__name__}); set allow_fragments=True to accept it"
            )
        return value
