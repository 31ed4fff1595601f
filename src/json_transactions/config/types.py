"""Core configuration data types.

This module defines the fundamental data structures used by the configuration
system, following the resolve-once, freeze-then-flow pattern.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from json_transactions.core.types import JSONReadingOptions

ConfigOrigin = Literal["programmatic", "env", "default"]
SourceMap = Mapping[str, ConfigOrigin]

FIELD_ORDER = (
    "timeout_seconds",
    "follow_redirects",
    "max_workers",
    "user_agent",
    "allow_fragments",
)


class ResolvedConfig(NamedTuple):
    """Configuration after resolution from all sources, before freezing.

    Includes audit metadata recording where each value came from.
    """

    timeout_seconds: float
    follow_redirects: bool
    max_workers: int
    user_agent: str
    allow_fragments: bool

    origin: SourceMap

    def to_frozen(self) -> "FrozenConfig":
        """Convert to the immutable configuration used by transactions."""
        return FrozenConfig(
            timeout_seconds=self.timeout_seconds,
            follow_redirects=self.follow_redirects,
            max_workers=self.max_workers,
            user_agent=self.user_agent,
            allow_fragments=self.allow_fragments,
        )

    def audit(self) -> str:
        """Human-readable report showing the origin of each field."""
        lines = []
        for field in FIELD_ORDER:
            if field in self.origin:
                origin = self.origin[field]
                value = getattr(self, field)
                if origin == "env":
                    lines.append(f"{field}: env:JSON_TRANSACTIONS_{field.upper()}={value}")
                else:
                    lines.append(f"{field}: {origin}:{value}")
        return "\n".join(lines)


@dataclass(frozen=True)
class FrozenConfig:
    """Immutable configuration handed to transactions and queue providers.

    Any attempt to modify this object will raise an exception.
    """

    timeout_seconds: float = 30.0
    follow_redirects: bool = True
    max_workers: int = 4
    user_agent: str = "json-transactions"
    allow_fragments: bool = False

    def reading_options(self) -> JSONReadingOptions:
        """Default JSON reading options implied by this configuration."""
        return JSONReadingOptions(allow_fragments=self.allow_fragments)
