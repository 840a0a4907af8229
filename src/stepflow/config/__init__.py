"""Configuration for stepflow.

Settings are resolved once from every source into a ``ResolvedConfig``
(values plus the origin of each value) and then frozen into the
``RunConfiguration`` that a single run consumes.
"""

from .api import get_effective_profile, list_available_profiles, resolve_config
from .audit import SourceTracker, summarize_origins, was_user_supplied
from .file_loader import ConfigFileError, FileConfigLoader, ProfileNotFoundError
from .resolver import ConfigResolver
from .schema import StepflowSettings
from .types import (
    AI_MODES,
    AIMode,
    ConfigOrigin,
    ResolvedConfig,
    RunConfiguration,
    SourceMap,
)

__all__ = [
    "AIMode",
    "AI_MODES",
    "ConfigFileError",
    "ConfigOrigin",
    "ConfigResolver",
    "FileConfigLoader",
    "ProfileNotFoundError",
    "ResolvedConfig",
    "RunConfiguration",
    "SourceMap",
    "SourceTracker",
    "StepflowSettings",
    "get_effective_profile",
    "list_available_profiles",
    "resolve_config",
    "summarize_origins",
    "was_user_supplied",
]
