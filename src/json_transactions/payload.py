"""Payload processors: turning parsed JSON into the payload a caller wants.

A payload processor has the signature ``(json_value, data) -> T``. It receives
the parsed JSON (``None`` when the response body was empty) and the raw bytes,
and either returns the payload or raises. Raising is the only way to signal
that the JSON has the wrong shape; processors never return sentinels.
"""

from __future__ import annotations

from collections.abc import Callable
import typing

from pydantic import TypeAdapter, ValidationError

from json_transactions.core.exceptions import (
    MissingPayloadError,
    PayloadConstructionError,
)
from json_transactions.core.types import JSONValue

type PayloadProcessor[T] = Callable[[JSONValue | None, bytes], T]


def required_payload(json_value: JSONValue | None, data: bytes) -> JSONValue:  # noqa: ARG001
    """Return the parsed JSON unchanged, requiring that there was some."""
    if json_value is None:
        raise MissingPayloadError("Response did not contain a JSON payload")
    return json_value


def optional_payload(json_value: JSONValue | None, data: bytes) -> JSONValue | None:  # noqa: ARG001
    """Return the parsed JSON unchanged; absent JSON becomes ``None``."""
    return json_value


def dictionary_payload(
    json_value: JSONValue | None, data: bytes
) -> dict[str, JSONValue]:
    """Require a JSON object at the document root."""
    value = required_payload(json_value, data)
    if not isinstance(value, dict):
        raise PayloadConstructionError(
            f"Expected a JSON object at the root, got {_json_type_name(value)}"
        )
    return value


def array_payload(json_value: JSONValue | None, data: bytes) -> list[JSONValue]:
    """Require a JSON array at the document root."""
    value = required_payload(json_value, data)
    if not isinstance(value, list):
        raise PayloadConstructionError(
            f"Expected a JSON array at the root, got {_json_type_name(value)}"
        )
    return value


def typed_payload[T](
    tp: type[T] | typing.Any, *, optional: bool = False
) -> PayloadProcessor[T | None]:
    """Build a processor that coerces JSON into ``tp`` with pydantic.

    ``tp`` may be anything ``pydantic.TypeAdapter`` accepts: a model class,
    a dataclass, a ``TypedDict`` or a plain annotation such as
    ``list[int]``.

    Args:
        tp: The payload type.
        optional: When True, an empty response body yields ``None`` instead
            of raising ``MissingPayloadError``.
    """
    adapter: TypeAdapter[T] = TypeAdapter(tp)
    type_name = getattr(tp, "__name__", repr(tp))

    def process(json_value: JSONValue | None, data: bytes) -> T | None:  # noqa: ARG001
        if json_value is None:
            if optional:
                return None
            raise MissingPayloadError(
                f"Response did not contain a JSON payload for {type_name}"
            )
        try:
            return adapter.validate_python(json_value)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            raise PayloadConstructionError(
                f"JSON does not match {type_name}: {problems}"
            ) from e

    process.__name__ = f"typed_payload[{type_name}]"
    return process


def _json_type_name(value: object) -> str:
    match value:
        case None:
            return "null"
        case bool():
            return "boolean"
        case int() | float():
            return "number"
        case str():
            return "string"
        case list():
            return "array"
        case dict():
            return "object"
        case _:
            return type(value).__name__
