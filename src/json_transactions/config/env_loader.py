"""Environment variable configuration loading.

Reads JSON_TRANSACTIONS_* variables and coerces them through the settings
schema, returning only the fields that were actually set.
"""

import os
from typing import Any

from pydantic import ValidationError

from .schema import TransactionSettings
from .types import FIELD_ORDER

ENV_PREFIX = "JSON_TRANSACTIONS_"


class EnvironmentConfigLoader:
    """Loads configuration from JSON_TRANSACTIONS_* environment variables."""

    def load_env_config(self) -> dict[str, Any]:
        """Load configuration from environment variables.

        Returns:
            Dictionary of configuration values found in the environment.
            Only includes fields that are actually set (not defaults).

        Raises:
            ValueError: If environment variables contain invalid values.
        """
        env_values: dict[str, Any] = {}
        for field_name in FIELD_ORDER:
            env_var = f"{ENV_PREFIX}{field_name.upper()}"
            if env_var in os.environ:
                env_values[field_name] = os.environ[env_var]

        if not env_values:
            return {}

        try:
            settings = TransactionSettings(**env_values)
        except ValidationError as e:
            env_var_list = [
                f"{ENV_PREFIX}{field_name.upper()}={os.environ[f'{ENV_PREFIX}{field_name.upper()}']}"
                for field_name in env_values
            ]
            raise ValueError(
                f"Invalid environment variable values: {', '.join(env_var_list)}. "
                f"Error: {e}"
            ) from e

        return {field_name: getattr(settings, field_name) for field_name in env_values}
