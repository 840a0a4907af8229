"""TOML configuration files.

Two files are consulted: the nearest ``pyproject.toml`` (its
``[tool.stepflow]`` table) and a per-user ``~/.config/stepflow.toml``. Both
may define named profiles under ``profiles.<name>``; selecting a profile
replaces the file's top-level values with that profile's values.
"""

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
import tomllib
from typing import Any

log = logging.getLogger(__name__)

HOME_CONFIG_ENV = "STEPFLOW_CONFIG_HOME"


class ConfigFileError(Exception):
    """A configuration file could not be read or lacks the requested profile."""

    def __init__(self, file_path: Path, message: str) -> None:
        """Keep the offending path for callers that want to report it."""
        super().__init__(f"Config file error in {file_path}: {message}")
        self.file_path = file_path
        self.message = message


class ProfileNotFoundError(ConfigFileError):
    """The requested profile is not defined in the file."""


@dataclass(frozen=True, slots=True)
class ConfigFile:
    """The stepflow table of one TOML file."""

    path: Path
    table: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def read(cls, path: Path, *, section: tuple[str, ...] = ()) -> "ConfigFile":
        """Parse ``path`` and descend into ``section`` (missing keys give {})."""
        try:
            data: Any = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigFileError(path, f"Failed to parse TOML: {e}") from e
        for key in section:
            data = data.get(key, {}) if isinstance(data, dict) else {}
        return cls(path, data if isinstance(data, dict) else {})

    @property
    def profiles(self) -> dict[str, Any]:
        return self.table.get("profiles", {})

    def values(self, profile: str | None = None) -> dict[str, Any]:
        """Top-level values, or the values of ``profile`` when given."""
        if not profile:
            return {k: v for k, v in self.table.items() if k != "profiles"}
        if profile not in self.profiles:
            raise ProfileNotFoundError(
                self.path,
                f"Profile '{profile}' not found. Available profiles: {list(self.profiles)}",
            )
        return dict(self.profiles[profile])


def find_pyproject(start: Path | None = None) -> Path | None:
    """Nearest ``pyproject.toml`` in ``start`` (default: cwd) or its parents."""
    directory = (start or Path.cwd()).resolve()
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def home_config_path() -> Path:
    """``$STEPFLOW_CONFIG_HOME`` if set, else ``~/.config/stepflow.toml``."""
    if override := os.environ.get(HOME_CONFIG_ENV):
        return Path(override)
    return Path.home() / ".config" / "stepflow.toml"


class FileConfigLoader:
    """Loads the project and home configuration files."""

    def project_file(self, project_root: Path | None = None) -> ConfigFile | None:
        path = find_pyproject(project_root)
        if path is None:
            return None
        return ConfigFile.read(path, section=("tool", "stepflow"))

    def home_file(self) -> ConfigFile | None:
        path = home_config_path()
        return ConfigFile.read(path) if path.exists() else None

    def load_project_config(
        self, project_root: Path | None = None, profile: str | None = None
    ) -> dict[str, Any]:
        """Values from ``[tool.stepflow]`` (or one of its profiles).

        Raises:
            ConfigFileError: If the file is malformed or the profile is missing.
        """
        config_file = self.project_file(project_root)
        if config_file is None or not config_file.table:
            return {}
        return config_file.values(profile)

    def load_home_config(self, profile: str | None = None) -> dict[str, Any]:
        """Values from the home file (or one of its profiles).

        Raises:
            ConfigFileError: If the file is malformed or the profile is missing.
        """
        config_file = self.home_file()
        return {} if config_file is None else config_file.values(profile)

    def list_available_profiles(
        self, project_root: Path | None = None
    ) -> dict[str, list[str]]:
        """Profile names per file; unreadable files are reported as having none."""
        found: dict[str, list[str]] = {"project": [], "home": []}
        for label, load in (
            ("project", lambda: self.project_file(project_root)),
            ("home", self.home_file),
        ):
            try:
                config_file = load()
            except ConfigFileError as e:
                log.debug("Skipping %s profiles: %s", label, e)
                continue
            if config_file is not None:
                found[label] = list(config_file.profiles)
        return found
