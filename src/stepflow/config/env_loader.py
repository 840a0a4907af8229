"""Environment variable configuration loading.

Loads configuration from ``STEPFLOW_*`` environment variables, optionally
seeded from a ``.env`` file, with type coercion through the settings schema.
"""

import os
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

from .schema import StepflowSettings
from .types import FIELD_ORDER

ENV_PREFIX = "STEPFLOW_"
ENV_VARS: dict[str, str] = {f"{ENV_PREFIX}{f.upper()}": f for f in FIELD_ORDER}


class EnvironmentConfigLoader:
    """Loads configuration from environment variables and ``.env`` files."""

    def load_env_config(self, env_file: str | Path | None = None) -> dict[str, Any]:
        """Load configuration from environment variables.

        Args:
            env_file: Optional path to a .env file. Values from the process
                environment take precedence over values from the file.

        Returns:
            Dictionary of configuration values that are actually set (not
            defaults), coerced to their schema types.

        Raises:
            FileNotFoundError: If ``env_file`` does not exist.
            ValueError: If environment variables contain invalid values.
        """
        raw: dict[str, str | None] = {}
        if env_file:
            env_path = Path(env_file)
            if not env_path.exists():
                raise FileNotFoundError(f"Environment file not found: {env_path}")
            raw.update(dotenv_values(env_path, encoding="utf-8"))
        raw.update(os.environ)

        env_values = {
            field: raw[var]
            for var, field in ENV_VARS.items()
            if raw.get(var) is not None
        }
        if not env_values:
            return {}

        try:
            settings = StepflowSettings(**env_values)
        except Exception as e:
            shown = [
                f"{var}=<redacted>" if field == "api_key" else f"{var}={raw[var]}"
                for var, field in ENV_VARS.items()
                if field in env_values
            ]
            raise ValueError(
                f"Invalid environment variable values: {', '.join(shown)}. Error: {e}"
            ) from e

        return {field: getattr(settings, field) for field in env_values}

    def get_env_summary(self) -> dict[str, str]:
        """Summarize the ``STEPFLOW_*`` variables that are set, keys redacted."""
        return {
            var: "<redacted>" if field == "api_key" else os.environ[var]
            for var, field in ENV_VARS.items()
            if var in os.environ
        }
