"""Decode network responses into typed JSON payloads."""

import importlib.metadata
import logging

from json_transactions.config import FrozenConfig, resolve_config
from json_transactions.core.exceptions import (
    HTTPStatusError,
    MalformedJSONError,
    MetadataValidationError,
    MissingPayloadError,
    PayloadConstructionError,
    PayloadValidationError,
    TransactionError,
    TransportError,
)
from json_transactions.core.types import (
    Failed,
    JSONReadingOptions,
    JSONValue,
    ResponseMetadata,
    Result,
    Succeeded,
)
from json_transactions.payload import (
    array_payload,
    dictionary_payload,
    optional_payload,
    required_payload,
    typed_payload,
)
from json_transactions.queues import (
    DefaultQueueProvider,
    ExecutionQueue,
    ImmediateQueueProvider,
    QueueProvider,
    SerialQueueProvider,
)
from json_transactions.telemetry import TelemetryContext, TelemetryReporter
from json_transactions.transaction import (
    JSONArrayTransaction,
    JSONDictionaryTransaction,
    JSONTransaction,
)
from json_transactions.transport import DataTransaction, URLTransaction
from json_transactions.validation import (
    chain,
    require_json_content_type,
    require_status,
    require_success_status,
)

try:
    __version__ = importlib.metadata.version("json-transactions")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Set up a null handler for the library's root logger.
# This prevents 'No handler found' errors if the consuming app has no logging configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Transactions
    "JSONTransaction",
    "JSONDictionaryTransaction",
    "JSONArrayTransaction",
    "DataTransaction",
    "URLTransaction",
    # Results & data
    "Result",
    "Succeeded",
    "Failed",
    "ResponseMetadata",
    "JSONReadingOptions",
    "JSONValue",
    # Payload processors
    "required_payload",
    "optional_payload",
    "dictionary_payload",
    "array_payload",
    "typed_payload",
    # Validators
    "require_success_status",
    "require_status",
    "require_json_content_type",
    "chain",
    # Queue providers
    "QueueProvider",
    "ExecutionQueue",
    "DefaultQueueProvider",
    "SerialQueueProvider",
    "ImmediateQueueProvider",
    # Configuration
    "FrozenConfig",
    "resolve_config",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    # Exceptions
    "TransactionError",
    "TransportError",
    "MetadataValidationError",
    "HTTPStatusError",
    "MalformedJSONError",
    "PayloadConstructionError",
    "MissingPayloadError",
    "PayloadValidationError",
]
