"""Public API for the configuration system."""

import logging
from typing import Any

from pydantic import ValidationError

from .env_loader import EnvironmentConfigLoader
from .schema import TransactionSettings
from .types import ConfigOrigin, FrozenConfig, ResolvedConfig

log = logging.getLogger(__name__)

_env_loader = EnvironmentConfigLoader()


def resolve_config(programmatic: dict[str, Any] | None = None) -> ResolvedConfig:
    """Resolve configuration from all sources with proper precedence.

    Precedence: Programmatic > Environment > Defaults. Unknown programmatic
    keys are ignored.

    Args:
        programmatic: Dictionary of programmatic overrides (highest precedence).

    Returns:
        ResolvedConfig with merged values and source tracking for audit.

    Raises:
        ValueError: If validation fails or environment variables are invalid.
    """
    # Schema defaults only; the environment is applied as its own layer below
    defaults = {
        name: field.get_default(call_default_factory=True)
        for name, field in TransactionSettings.model_fields.items()
    }
    merged: dict[str, Any] = dict(defaults)
    origin: dict[str, ConfigOrigin] = dict.fromkeys(defaults, "default")

    for field, value in _env_loader.load_env_config().items():
        merged[field] = value
        origin[field] = "env"

    if programmatic:
        for field, value in programmatic.items():
            if field in merged:
                merged[field] = value
                origin[field] = "programmatic"

    try:
        final = TransactionSettings(**merged).to_dict()
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}") from e

    resolved = ResolvedConfig(**final, origin=origin)
    log.debug("Resolved configuration:\n%s", resolved.audit())
    return resolved


def default_config() -> FrozenConfig:
    """Resolve from the environment and freeze in one step."""
    return resolve_config().to_frozen()
