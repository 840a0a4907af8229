"""Module-level entry points backed by one shared ``ConfigResolver``."""

import os
from pathlib import Path
from typing import Any

from .resolver import PROFILE_ENV, ConfigResolver
from .types import ResolvedConfig

_resolver = ConfigResolver()


def resolve_config(
    programmatic: dict[str, Any] | None = None,
    *,
    profile: str | None = None,
    use_env_file: str | Path | None = None,
    project_root: Path | None = None,
) -> ResolvedConfig:
    """Return the effective configuration.

    Sources, highest precedence first: ``programmatic`` overrides,
    ``STEPFLOW_*`` environment variables (optionally seeded from
    ``use_env_file``), ``[tool.stepflow]`` in the nearest ``pyproject.toml``
    (searched from ``project_root`` or the cwd), the home file, and the
    schema defaults. ``profile`` selects a named profile in both files.

    Raises:
        ConfigurationError: If a source is malformed or a value is invalid.

    Example:
        run_config = resolve_config({"mode": "local-demo"}).to_run_configuration()
    """
    return _resolver.resolve(
        programmatic,
        profile=profile,
        use_env_file=use_env_file,
        project_root=project_root,
    )


def list_available_profiles(project_root: Path | None = None) -> dict[str, list[str]]:
    """Profile names defined in the project and home files."""
    return _resolver.list_available_profiles(project_root)


def get_effective_profile() -> str | None:
    """The profile named by ``$STEPFLOW_PROFILE``, if any."""
    return os.getenv(PROFILE_ENV) or None
