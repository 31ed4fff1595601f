"""Exception hierarchy for JSON transactions.

Every failure a transaction can report is a ``TransactionError``. Callers
handle exactly one error type regardless of which stage failed; the concrete
subclass and the ``stage`` attribute tell them where it happened.
"""

from __future__ import annotations

from typing import ClassVar


class TransactionError(Exception):
    """Base exception for all transaction failures."""

    default_stage: ClassVar[str | None] = None

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        """Initialize with a message and the pipeline stage that failed."""
        super().__init__(message)
        self.message = message
        self.stage = stage if stage is not None else self.default_stage

    @classmethod
    def wrap(cls, error: BaseException, stage: str | None = None) -> TransactionError:
        """Convert an arbitrary exception into the error kind for ``stage``.

        A ``TransactionError`` that already is the stage's kind (or a subclass
        of it, such as ``HTTPStatusError`` for ``validate_metadata``) is
        returned unchanged so validators can raise precise kinds of their
        own. Any other error, including a ``TransactionError`` of a different
        stage, is wrapped with the original kept as ``__cause__``.
        """
        kind = _STAGE_ERRORS.get(stage, TransactionError) if stage else cls
        if isinstance(error, kind if stage else TransactionError):
            return error
        wrapped = kind(str(error) or type(error).__name__, stage=stage)
        wrapped.__cause__ = error
        return wrapped


class TransportError(TransactionError):
    """Raised when the wrapped transaction could not produce a response."""

    default_stage = "transport"


class MetadataValidationError(TransactionError):
    """Raised when response metadata is unacceptable before parsing."""

    default_stage = "validate_metadata"


class HTTPStatusError(MetadataValidationError):
    """Raised when the response status code is not an accepted one."""

    def __init__(self, message: str, *, status_code: int) -> None:  # noqa: D107
        super().__init__(message)
        self.status_code = status_code


class MalformedJSONError(TransactionError):
    """Raised when the response body is not valid JSON."""

    default_stage = "parse"


class PayloadConstructionError(TransactionError):
    """Raised when parsed JSON cannot be turned into the requested payload."""

    default_stage = "process_payload"


class MissingPayloadError(PayloadConstructionError):
    """Raised when a payload is required but the response had no JSON body."""


class PayloadValidationError(TransactionError):
    """Raised when a constructed payload fails a semantic check."""

    default_stage = "validate_payload"


_STAGE_ERRORS: dict[str | None, type[TransactionError]] = {
    "transport": TransportError,
    "validate_metadata": MetadataValidationError,
    "parse": MalformedJSONError,
    "process_payload": PayloadConstructionError,
    "validate_payload": PayloadValidationError,
}
