"""Ready-made validators for the metadata and payload slots.

Metadata validators have the signature ``(metadata, data) -> None`` and run
before any parsing. Payload validators have the signature
``(payload, data, metadata) -> None`` and run last. Both signal rejection by
raising.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from json_transactions.core.exceptions import HTTPStatusError, MetadataValidationError
from json_transactions.core.types import ResponseMetadata

type MetadataValidator = Callable[[Any, bytes], None]
type PayloadValidator = Callable[[Any, bytes, Any], None]


def require_success_status(metadata: ResponseMetadata, data: bytes) -> None:  # noqa: ARG001
    """Reject any response whose status is not 2xx."""
    if not 200 <= metadata.status_code < 300:
        raise HTTPStatusError(
            f"HTTP {metadata.status_code} from {metadata.url}",
            status_code=metadata.status_code,
        )


def require_status(*codes: int) -> MetadataValidator:
    """Build a validator accepting only the given status codes."""
    if not codes:
        raise ValueError("require_status needs at least one status code")
    allowed = frozenset(codes)

    def validate(metadata: ResponseMetadata, data: bytes) -> None:  # noqa: ARG001
        if metadata.status_code not in allowed:
            raise HTTPStatusError(
                f"HTTP {metadata.status_code} from {metadata.url}; "
                f"expected one of {sorted(allowed)}",
                status_code=metadata.status_code,
            )

    return validate


def require_json_content_type(metadata: ResponseMetadata, data: bytes) -> None:
    """Reject non-empty bodies not labelled ``application/json`` or ``+json``."""
    if not data:
        return
    content_type = metadata.content_type
    if content_type == "application/json" or (
        content_type is not None and content_type.endswith("+json")
    ):
        return
    raise MetadataValidationError(
        f"Expected a JSON content type from {metadata.url}, got {content_type!r}"
    )


def chain[F: Callable[..., None]](*validators: F) -> Callable[..., None]:
    """Compose validators of one signature; they run in order, first failure wins."""

    def validate(*args: Any) -> None:
        for validator in validators:
            validator(*args)

    return validate
