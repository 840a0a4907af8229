"""Provenance bookkeeping for resolved configuration values."""

from collections import Counter
from collections.abc import Iterable

from .types import ConfigOrigin, SourceMap

_USER_ORIGINS: frozenset[ConfigOrigin] = frozenset({"programmatic", "env", "file"})


class SourceTracker:
    """Remembers which source supplied each field; later records win."""

    def __init__(self) -> None:
        """Start with no recorded fields."""
        self._origins: dict[str, ConfigOrigin] = {}

    def record(self, fields: Iterable[str], origin: ConfigOrigin) -> None:
        """Attribute every field in ``fields`` to ``origin``."""
        for name in fields:
            self._origins[name] = origin

    @property
    def source_map(self) -> SourceMap:
        """Snapshot of the field-to-origin mapping."""
        return dict(self._origins)


def summarize_origins(source_map: SourceMap) -> dict[str, int]:
    """Count fields per origin, e.g. ``{"env": 1, "default": 5}``."""
    return dict(Counter(source_map.values()))


def was_user_supplied(source_map: SourceMap, field: str) -> bool:
    """True when ``field`` came from anything other than the schema default."""
    return source_map.get(field) in _USER_ORIGINS
