"""Core data types that flow through the pipeline.

Steps, formatter operations and trace records are immutable value objects.
A step list is data only: it carries no behavior and no reference to the
collaborators that will execute it, so the same list can be run many times
under different configurations.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import typing

# --- Validation helpers ---


def _is_tuple_of(value: object, typ: type | tuple[type, ...]) -> bool:
    return isinstance(value, tuple) and all(isinstance(v, typ) for v in value)


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Raise ``exc`` with ``message`` (prefixed by ``field_name``) unless ``condition``."""
    if not condition:
        raise exc(f"{field_name}: {message}" if field_name else message)


if typing.TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from stepflow.config import RunConfiguration

# --- Handler results ---
# Step handlers return Success|Failure; the runner raises the carried error.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful step result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed step result, containing the error."""

    error: TFailure


Result = Success[TSuccess] | Failure[TFailure]

# --- Formatter operations ---


class ToneKind(str, Enum):
    """Target tone for the tone formatter."""

    CASUAL = "casual"
    NEUTRAL = "neutral"
    PROFESSIONAL = "professional"

    @property
    def display_name(self) -> str:
        """Human label, e.g. ``"Casual"``."""
        return self.value.capitalize()


@dataclasses.dataclass(frozen=True, slots=True)
class FixGrammar:
    """Grammar and spelling cleanup (AI-routed, with an offline fallback)."""

    kind: typing.ClassVar[str] = "fixGrammar"

    @property
    def display_name(self) -> str:  # noqa: D102
        return "Fix grammar"


@dataclasses.dataclass(frozen=True, slots=True)
class Shorten:
    """Keep the first two sentences, or the first 28 words."""

    kind: typing.ClassVar[str] = "shorten"

    @property
    def display_name(self) -> str:  # noqa: D102
        return "Shorten"


@dataclasses.dataclass(frozen=True, slots=True)
class Expand:
    """Append a generic follow-up paragraph."""

    kind: typing.ClassVar[str] = "expand"

    @property
    def display_name(self) -> str:  # noqa: D102
        return "Expand"


@dataclasses.dataclass(frozen=True, slots=True)
class BulletPoints:
    """Turn lines and sentences into a bulleted list."""

    kind: typing.ClassVar[str] = "bulletPoints"

    @property
    def display_name(self) -> str:  # noqa: D102
        return "Bullet points"


@dataclasses.dataclass(frozen=True, slots=True)
class Tone:
    """Rewrite the text toward a target tone."""

    tone: ToneKind = ToneKind.NEUTRAL
    kind: typing.ClassVar[str] = "tone"

    def __post_init__(self) -> None:
        """Coerce plain strings into ToneKind."""
        if isinstance(self.tone, str) and not isinstance(self.tone, ToneKind):
            try:
                object.__setattr__(self, "tone", ToneKind(self.tone))
            except ValueError as e:
                raise ValueError(f"tone: unknown tone {self.tone!r}") from e
        _require(
            condition=isinstance(self.tone, ToneKind),
            message="must be a ToneKind",
            field_name="tone",
            exc=TypeError,
        )

    @property
    def display_name(self) -> str:  # noqa: D102
        return f"Tone: {self.tone.display_name}"


type FormatterOperation = FixGrammar | Shorten | Expand | BulletPoints | Tone

FORMATTER_OPERATION_TYPES: tuple[type, ...] = (
    FixGrammar,
    Shorten,
    Expand,
    BulletPoints,
    Tone,
)

# --- Steps ---


@dataclasses.dataclass(frozen=True, slots=True)
class AIStep:
    """A free-form instruction executed by an AI invoker.

    An empty instruction is representable on purpose: it is reported by the
    runner at the position where it occurs rather than at construction time.
    """

    instruction: str | None

    def __post_init__(self) -> None:
        """Validate field types."""
        _require(
            condition=self.instruction is None or isinstance(self.instruction, str),
            message="must be a str or None",
            field_name="instruction",
            exc=TypeError,
        )

    @property
    def clean_instruction(self) -> str:
        """The instruction with surrounding whitespace removed ("" if missing)."""
        return (self.instruction or "").strip()

    @property
    def title(self) -> str:
        """Short label used in traces."""
        if self.clean_instruction:
            return f"AI Step: {self.clean_instruction}"
        return "AI Step"


@dataclasses.dataclass(frozen=True, slots=True)
class FormatterStep:
    """A deterministic formatter operation."""

    operation: FormatterOperation | None

    def __post_init__(self) -> None:
        """Validate field types."""
        _require(
            condition=self.operation is None
            or isinstance(self.operation, FORMATTER_OPERATION_TYPES),
            message="must be a FormatterOperation or None",
            field_name="operation",
            exc=TypeError,
        )

    @property
    def title(self) -> str:
        """Short label used in traces."""
        if self.operation is None:
            return "Formatter"
        return self.operation.display_name


type Step = AIStep | FormatterStep

# --- Per-run records ---


@dataclasses.dataclass(frozen=True, slots=True)
class StepCommand:
    """The input of a single step handler invocation."""

    step: Step
    text: str
    config: RunConfiguration
    index: int  # 1-based position in the step list

    def __post_init__(self) -> None:
        """Validate StepCommand invariants."""
        _require(
            condition=isinstance(self.step, AIStep | FormatterStep),
            message="must be an AIStep or FormatterStep",
            field_name="step",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.text, str),
            message="must be str",
            field_name="text",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.index, int) and self.index >= 1,
            message=f"must be an int >= 1, got {self.index!r}",
            field_name="index",
        )


@dataclasses.dataclass(frozen=True, slots=True)
class TraceStep:
    """The output snapshot of one executed step."""

    index: int
    title: str
    output: str

    def __post_init__(self) -> None:
        """Validate TraceStep invariants."""
        _require(
            condition=isinstance(self.index, int) and self.index >= 1,
            message=f"must be an int >= 1, got {self.index!r}",
            field_name="index",
        )
        _require(
            condition=isinstance(self.title, str) and isinstance(self.output, str),
            message="must be str",
            field_name="title and output",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class RunResult:
    """Final output of a run together with its step-by-step trace."""

    final_output: str
    steps: tuple[TraceStep, ...] = ()

    def __post_init__(self) -> None:
        """Validate RunResult invariants."""
        _require(
            condition=_is_tuple_of(self.steps, TraceStep),
            message="must be a tuple[TraceStep, ...]",
            field_name="steps",
            exc=TypeError,
        )
        _require(
            condition=[s.index for s in self.steps]
            == list(range(1, len(self.steps) + 1)),
            message="trace indices must be 1..n in execution order",
            field_name="steps",
        )

    def to_dict(self) -> dict[str, typing.Any]:
        """Return a JSON-friendly representation."""
        return {
            "final_output": self.final_output,
            "steps": [dataclasses.asdict(s) for s in self.steps],
        }
