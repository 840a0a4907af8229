"""Configuration schema and validation using Pydantic.

This module defines the settings schema that validates and coerces
configuration values from the various sources (environment, files,
programmatic) into the correct types with proper defaults.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import AIMode

_MODE_ALIASES: dict[str, AIMode] = {
    "remote": "remote",
    "local-demo": "local-demo",
    "local_demo": "local-demo",
    "demo": "local-demo",
}


class StepflowSettings(BaseSettings):
    """Pydantic settings schema for stepflow configuration.

    Handles validation, type coercion and defaults for all configuration
    fields. Integrates with environment variables using the STEPFLOW_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="STEPFLOW_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars for forward compatibility
    )

    # --- Core Configuration Fields ---

    api_key: str | None = Field(
        default=None,
        description="API key for the remote AI provider",
    )

    model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier sent to the provider",
        min_length=1,
    )

    temperature: float = Field(
        default=0.4,
        description="Sampling temperature for AI steps",
        ge=0.0,
        le=1.0,
    )

    mode: AIMode = Field(
        default="remote",
        description="'remote' to call the provider, 'local-demo' for the offline substitute",
    )

    provider: str = Field(
        default="openai",
        description="Remote provider name (see stepflow.pipeline.adapters)",
    )

    request_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds",
        gt=0,
    )

    # --- Validation Rules ---

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, v: Any) -> AIMode:
        """Accept mode aliases such as 'demo'."""
        if isinstance(v, str):
            normalized = v.strip().lower()
            if normalized in _MODE_ALIASES:
                return _MODE_ALIASES[normalized]
        raise ValueError(f"Invalid mode: {v}. Must be one of: remote, local-demo")

    @field_validator("provider", mode="before")
    @classmethod
    def parse_provider(cls, v: Any) -> str:
        """Normalize and check the provider name."""
        # Imported here to keep the schema importable without adapter modules
        from stepflow.pipeline.adapters.registry import list_providers

        if isinstance(v, str) and v.strip().lower() in list_providers():
            return v.strip().lower()
        raise ValueError(
            f"Invalid provider: {v}. Must be one of: {', '.join(list_providers())}"
        )

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, v: Any) -> Any:
        """Treat an empty or whitespace-only key as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary suitable for source tracking.

        Returns:
            Dictionary with field names as keys and resolved values.
        """
        return {
            "api_key": self.api_key,
            "model": self.model,
            "temperature": self.temperature,
            "mode": self.mode,
            "provider": self.provider,
            "request_timeout": self.request_timeout,
        }
