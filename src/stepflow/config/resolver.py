"""Layered configuration resolution.

Layers are applied lowest first, so a later layer overrides an earlier one:
defaults, home file, project file, environment, programmatic overrides. Only
fields known to the settings schema are taken from any layer.
"""

from collections.abc import Callable
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stepflow.core.exceptions import ConfigurationError

from .audit import SourceTracker
from .env_loader import EnvironmentConfigLoader
from .file_loader import ConfigFileError, FileConfigLoader, ProfileNotFoundError
from .schema import StepflowSettings
from .types import ConfigOrigin, ResolvedConfig

log = logging.getLogger(__name__)

PROFILE_ENV = "STEPFLOW_PROFILE"

type Layer = tuple[ConfigOrigin, Callable[[], dict[str, Any]]]


class ConfigResolver:
    """Merges every configuration source into one validated ``ResolvedConfig``."""

    def __init__(
        self,
        file_loader: FileConfigLoader | None = None,
        env_loader: EnvironmentConfigLoader | None = None,
    ) -> None:
        """Use the given loaders, or the standard file and environment loaders."""
        self.file_loader = file_loader or FileConfigLoader()
        self.env_loader = env_loader or EnvironmentConfigLoader()

    def resolve(
        self,
        programmatic: dict[str, Any] | None = None,
        *,
        profile: str | None = None,
        use_env_file: str | Path | None = None,
        project_root: Path | None = None,
    ) -> ResolvedConfig:
        """Resolve and validate the effective configuration.

        ``profile`` defaults to ``$STEPFLOW_PROFILE``.

        Raises:
            ConfigurationError: If a source is malformed or the merged values
                fail validation.
        """
        if profile is None:
            profile = os.getenv(PROFILE_ENV)

        defaults = {
            name: info.default for name, info in StepflowSettings.model_fields.items()
        }
        layers: list[Layer] = [
            ("file", lambda: self._home_values(profile)),
            ("file", lambda: self._project_values(project_root, profile)),
            ("env", lambda: self._env_values(use_env_file)),
            ("programmatic", lambda: dict(programmatic or {})),
        ]

        merged = dict(defaults)
        tracker = SourceTracker()
        tracker.record(defaults, "default")
        for origin, load in layers:
            values = {k: v for k, v in load().items() if k in defaults}
            merged.update(values)
            tracker.record(values, origin)

        try:
            settings = StepflowSettings(**merged)
        except PydanticValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        resolved = ResolvedConfig(**settings.to_dict(), origin=tracker.source_map)
        log.debug("Resolved configuration: %s", resolved)
        return resolved

    def _home_values(self, profile: str | None) -> dict[str, Any]:
        # Home file problems are non-fatal
        try:
            return self.file_loader.load_home_config(profile=profile)
        except ProfileNotFoundError as e:
            log.debug("Home profile not applied: %s", e)
            return {}
        except ConfigFileError as e:
            log.warning("Ignoring home configuration: %s", e)
            return {}

    def _project_values(
        self, project_root: Path | None, profile: str | None
    ) -> dict[str, Any]:
        try:
            return self.file_loader.load_project_config(
                project_root=project_root, profile=profile
            )
        except ProfileNotFoundError as e:
            # The profile may live only in the home file
            log.debug("Project profile not applied: %s", e)
            return {}
        except ConfigFileError as e:
            raise ConfigurationError(str(e)) from e

    def _env_values(self, env_file: str | Path | None) -> dict[str, Any]:
        try:
            return self.env_loader.load_env_config(env_file=env_file)
        except (ValueError, FileNotFoundError) as e:
            raise ConfigurationError(f"Environment configuration error: {e}") from e

    def list_available_profiles(
        self, project_root: Path | None = None
    ) -> dict[str, list[str]]:
        """Profile names found in the project and home files."""
        return self.file_loader.list_available_profiles(project_root)
