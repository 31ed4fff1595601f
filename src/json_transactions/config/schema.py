"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces configuration
values from the environment and programmatic overrides into the correct types
with proper defaults.
"""

import importlib.metadata
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_user_agent() -> str:
    try:
        version = importlib.metadata.version("json-transactions")
    except importlib.metadata.PackageNotFoundError:
        version = "development"
    return f"json-transactions/{version}"


class TransactionSettings(BaseSettings):
    """Pydantic settings schema for transaction configuration.

    This handles validation, type coercion, and default values for all
    configuration fields. It integrates with environment variables using
    the JSON_TRANSACTIONS_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="JSON_TRANSACTIONS_",
        env_file=None,
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars for forward compatibility
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Network timeout applied to each request, in seconds",
        gt=0,
    )

    follow_redirects: bool = Field(
        default=True,
        description="Whether URL transactions follow HTTP redirects",
    )

    max_workers: int = Field(
        default=4,
        description="Worker threads in the shared default decode queue",
        ge=1,
    )

    user_agent: str = Field(
        default_factory=_default_user_agent,
        description="User-Agent header sent by URL transactions",
        min_length=1,
    )

    allow_fragments: bool = Field(
        default=False,
        description="Accept JSON documents whose root is not an object or array",
    )

    @field_validator("user_agent", mode="before")
    @classmethod
    def strip_user_agent(cls, v: Any) -> Any:
        """Trim surrounding whitespace so blank values fail min_length."""
        if isinstance(v, str):
            return v.strip()
        return v

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary keyed by field name."""
        return {
            "timeout_seconds": self.timeout_seconds,
            "follow_redirects": self.follow_redirects,
            "max_workers": self.max_workers,
            "user_agent": self.user_agent,
            "allow_fragments": self.allow_fragments,
        }
