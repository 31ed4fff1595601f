"""
Global test configuration for json-transactions.
"""

from collections.abc import Callable
import logging
import os
import threading
from typing import Any

import pytest

from json_transactions.config import FrozenConfig
from json_transactions.core.exceptions import TransactionError
from json_transactions.core.types import Failed, ResponseMetadata, Succeeded
from json_transactions.queues import DefaultQueueProvider, ImmediateQueueProvider


class ScriptedTransaction:
    """A wrapped transaction that replays a fixed outcome.

    Records how many times it was executed and, optionally, delivers its
    completion from a separate thread like a real network transaction would.
    """

    def __init__(
        self,
        data: bytes = b"",
        metadata: Any = None,
        *,
        error: TransactionError | None = None,
        threaded: bool = False,
        url: str = "https://api.example.test/resource",
    ) -> None:
        self.data = data
        self.metadata = (
            metadata
            if metadata is not None
            else ResponseMetadata(
                url=url,
                status_code=200,
                headers={"content-type": "application/json"},
            )
        )
        self.error = error
        self.threaded = threaded
        self.executions = 0
        self._url = url

    @property
    def url(self) -> str:
        return self._url

    def execute(self, completion: Callable[[Any], None]) -> None:
        self.executions += 1
        result = (
            Failed(self.error)
            if self.error is not None
            else Succeeded(self.data, self.metadata)
        )
        if self.threaded:
            threading.Thread(target=completion, args=(result,)).start()
        else:
            completion(result)


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_transaction_env(request, monkeypatch):
    """Ensure a clean JSON_TRANSACTIONS_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the env unchanged.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("JSON_TRANSACTIONS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture
def shared_default_provider():
    """Yield the process-wide provider and tear it down afterwards."""
    yield DefaultQueueProvider.instance()
    DefaultQueueProvider.reset_instance()


@pytest.fixture
def unset_default_provider():
    """Start without a process-wide provider and tear down any one created."""
    DefaultQueueProvider.reset_instance()
    yield
    DefaultQueueProvider.reset_instance()


@pytest.fixture
def immediate() -> ImmediateQueueProvider:
    return ImmediateQueueProvider()


@pytest.fixture
def config() -> FrozenConfig:
    return FrozenConfig()


@pytest.fixture
def scripted() -> type[ScriptedTransaction]:
    """The ScriptedTransaction class, for building wrapped transactions."""
    return ScriptedTransaction


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated tests of a single module",
        "contract: Behavioural guarantees of the public transaction API",
        "allow_env_pollution: Keep JSON_TRANSACTIONS_* variables from the real environment",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)
