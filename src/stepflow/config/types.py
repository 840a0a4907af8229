"""Configuration value types.

``ResolvedConfig`` is what resolution produces; ``RunConfiguration`` is the
frozen subset a single run is given.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal, NamedTuple

from stepflow.core.types import _require

# --- Provenance ---

ConfigOrigin = Literal["programmatic", "env", "file", "default"]
SourceMap = Mapping[str, ConfigOrigin]

AIMode = Literal["remote", "local-demo"]
AI_MODES: tuple[AIMode, ...] = ("remote", "local-demo")

FIELD_ORDER: tuple[str, ...] = (
    "api_key",
    "model",
    "temperature",
    "mode",
    "provider",
    "request_timeout",
)

# --- Per-run configuration ---


@dataclass(frozen=True)
class RunConfiguration:
    """Immutable settings for a single run.

    The runner only needs to know whether a key exists; the key itself
    belongs to the remote invoker and never travels with the run.
    """

    model_name: str
    temperature: float
    api_key_present: bool
    mode: AIMode = "remote"

    def __post_init__(self) -> None:
        """Validate RunConfiguration invariants."""
        _require(
            condition=isinstance(self.model_name, str) and self.model_name.strip() != "",
            message="must be a non-empty str",
            field_name="model_name",
        )
        _require(
            condition=isinstance(self.temperature, int | float)
            and not isinstance(self.temperature, bool)
            and 0.0 <= self.temperature <= 1.0,
            message=f"must be numeric within [0.0, 1.0], got {self.temperature!r}",
            field_name="temperature",
        )
        _require(
            condition=isinstance(self.api_key_present, bool),
            message="must be bool",
            field_name="api_key_present",
            exc=TypeError,
        )
        _require(
            condition=self.mode in AI_MODES,
            message=f"must be one of {list(AI_MODES)}, got {self.mode!r}",
            field_name="mode",
        )

    @classmethod
    def local_demo(
        cls, *, model_name: str = "gpt-4o-mini", temperature: float = 0.4
    ) -> "RunConfiguration":
        """Configuration for offline runs that never need a key."""
        return cls(
            model_name=model_name,
            temperature=temperature,
            api_key_present=False,
            mode="local-demo",
        )


# --- Resolved configuration ---


def _shown(field: str, value: object) -> object:
    """Display value for ``field``; the API key is never shown."""
    if field == "api_key" and value is not None:
        return "[REDACTED]"
    return value


class ResolvedConfig(NamedTuple):
    """Merged, validated settings plus the origin of every value.

    Printing or logging an instance never reveals the API key.
    """

    api_key: str | None
    model: str
    temperature: float
    mode: AIMode
    provider: str
    request_timeout: float
    origin: SourceMap

    def __repr__(self) -> str:
        """Field listing with the key redacted."""
        fields = ", ".join(
            f"{name}={_shown(name, getattr(self, name))!r}" for name in FIELD_ORDER
        )
        return f"ResolvedConfig({fields}, origin={dict(self.origin)!r})"

    __str__ = __repr__

    @property
    def has_api_key(self) -> bool:
        """Whether a non-blank API key was resolved."""
        return bool(self.api_key and self.api_key.strip())

    def to_run_configuration(self) -> RunConfiguration:
        """Freeze into the settings one run needs; the key itself stays behind."""
        return RunConfiguration(
            model_name=self.model,
            temperature=self.temperature,
            api_key_present=self.has_api_key,
            mode=self.mode,
        )

    def with_overrides(self, **overrides: object) -> "ResolvedConfig":
        """Copy with known fields replaced and marked ``programmatic``.

        Values are not re-validated; unknown names are ignored.
        """
        known = {k: v for k, v in overrides.items() if k in FIELD_ORDER}
        origin = {**self.origin, **dict.fromkeys(known, "programmatic")}
        return self._replace(**known, origin=origin)

    def audit(self) -> str:
        """One ``field: origin:value`` line per field, key redacted.

        Environment-sourced values name their variable, e.g.
        ``model: env:STEPFLOW_MODEL=gpt-4.1``.
        """
        lines = []
        for name in FIELD_ORDER:
            origin = self.origin.get(name)
            if origin is None:
                continue
            value = _shown(name, getattr(self, name))
            if origin == "env" and name != "api_key":
                lines.append(f"{name}: env:STEPFLOW_{name.upper()}={value}")
            else:
                lines.append(f"{name}: {origin}:{value}")
        return "\n".join(lines)
