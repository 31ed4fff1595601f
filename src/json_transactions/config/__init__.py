"""Configuration management for JSON transactions.

Resolve once, freeze, then flow:

- ResolvedConfig: Post-resolution configuration with audit metadata
- FrozenConfig: Immutable configuration handed to transactions
- SourceMap: Audit tracking of configuration value origins
"""

from .api import default_config, resolve_config
from .env_loader import EnvironmentConfigLoader
from .schema import TransactionSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig, SourceMap

__all__ = [
    "ConfigOrigin",
    "EnvironmentConfigLoader",
    "FrozenConfig",
    "ResolvedConfig",
    "SourceMap",
    "TransactionSettings",
    "default_config",
    "resolve_config",
]
