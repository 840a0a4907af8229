"""Workflow documents: JSON encoding of steps and pre-run validation.

The JSON shape matches the workflow files written by the mobile app::

    {
      "name": "Email cleanup",
      "inputText": "hey i wanted to check in",
      "blocks": [
        {"type": "formatter", "formatterOperation": {"kind": "fixGrammar"}},
        {"type": "ai", "instruction": "Rewrite as a short email"},
        {"type": "formatter", "formatterOperation": {"kind": "tone", "tone": "professional"}}
      ]
    }

Decoding is strict about the shape (unknown ``type``/``kind``/``tone`` values
are rejected) and lenient about missing payloads: a block without an
instruction or operation decodes to a step the runner will report as invalid
at its position.
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any

from stepflow.core.exceptions import ValidationError
from stepflow.core.types import (
    AIStep,
    BulletPoints,
    Expand,
    FixGrammar,
    FormatterOperation,
    FormatterStep,
    Shorten,
    Step,
    Tone,
    ToneKind,
)

_SIMPLE_OPERATIONS: dict[str, FormatterOperation] = {
    FixGrammar.kind: FixGrammar(),
    Shorten.kind: Shorten(),
    Expand.kind: Expand(),
    BulletPoints.kind: BulletPoints(),
}


@dataclasses.dataclass(frozen=True, slots=True)
class Workflow:
    """A named step list with its input text."""

    name: str = "My Workflow"
    steps: tuple[Step, ...] = ()
    input_text: str = ""


def operation_from_dict(data: Any) -> FormatterOperation:
    """Decode a ``{"kind": ..., "tone": ...}`` mapping into an operation."""
    if not isinstance(data, dict):
        raise ValidationError(f"formatterOperation must be an object, got {data!r}")
    kind = data.get("kind")
    if kind in _SIMPLE_OPERATIONS:
        return _SIMPLE_OPERATIONS[kind]
    if kind == Tone.kind:
        tone = data.get("tone")
        try:
            return Tone(ToneKind(tone))
        except ValueError as e:
            allowed = [t.value for t in ToneKind]
            raise ValidationError(
                f"Unknown tone {tone!r}. Must be one of: {allowed}"
            ) from e
    allowed_kinds = [*_SIMPLE_OPERATIONS, Tone.kind]
    raise ValidationError(
        f"Unknown formatter kind {kind!r}. Must be one of: {allowed_kinds}"
    )


def operation_to_dict(operation: FormatterOperation) -> dict[str, str]:
    """Encode an operation as a ``{"kind": ...}`` mapping."""
    match operation:
        case Tone(tone=tone):
            return {"kind": Tone.kind, "tone": tone.value}
        case FixGrammar() | Shorten() | Expand() | BulletPoints():
            return {"kind": operation.kind}
    raise TypeError(f"Not a formatter operation: {operation!r}")


def step_from_dict(data: Any) -> Step:
    """Decode a single block mapping into a step."""
    if not isinstance(data, dict):
        raise ValidationError(f"Step must be an object, got {data!r}")
    step_type = data.get("type")
    if step_type == "ai":
        instruction = data.get("instruction")
        if instruction is not None and not isinstance(instruction, str):
            raise ValidationError("instruction must be a string")
        return AIStep(instruction)
    if step_type == "formatter":
        raw_operation = data.get("formatterOperation")
        if raw_operation is None:
            return FormatterStep(None)
        return FormatterStep(operation_from_dict(raw_operation))
    raise ValidationError(
        f"Unknown step type {step_type!r}. Must be one of: ['ai', 'formatter']"
    )


def step_to_dict(step: Step) -> dict[str, Any]:
    """Encode a step as a block mapping."""
    match step:
        case AIStep(instruction=instruction):
            data: dict[str, Any] = {"type": "ai"}
            if instruction is not None:
                data["instruction"] = instruction
            return data
        case FormatterStep(operation=operation):
            data = {"type": "formatter"}
            if operation is not None:
                data["formatterOperation"] = operation_to_dict(operation)
            return data
    raise TypeError(f"Not a step: {step!r}")


def workflow_from_dict(data: Any) -> Workflow:
    """Decode a workflow document."""
    if not isinstance(data, dict):
        raise ValidationError("Workflow document must be a JSON object")
    blocks = data.get("blocks", [])
    if not isinstance(blocks, list):
        raise ValidationError("blocks must be a list")
    steps: list[Step] = []
    for position, block in enumerate(blocks, start=1):
        try:
            steps.append(step_from_dict(block))
        except ValidationError as e:
            raise ValidationError(f"Block {position}: {e}") from e
    name = data.get("name", "My Workflow")
    input_text = data.get("inputText", "")
    if not isinstance(name, str) or not isinstance(input_text, str):
        raise ValidationError("name and inputText must be strings")
    return Workflow(name=name, steps=tuple(steps), input_text=input_text)


def workflow_to_dict(workflow: Workflow) -> dict[str, Any]:
    """Encode a workflow document."""
    return {
        "name": workflow.name,
        "blocks": [step_to_dict(s) for s in workflow.steps],
        "inputText": workflow.input_text,
    }


def load_workflow(path: str | Path) -> Workflow:
    """Read a workflow document from a JSON file.

    Raises:
        ValidationError: If the file cannot be read or does not decode.
    """
    file_path = Path(path)
    try:
        raw = json.loads(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValidationError(f"Cannot read workflow file {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in {file_path}: {e}") from e
    return workflow_from_dict(raw)


def dump_workflow(workflow: Workflow, path: str | Path) -> None:
    """Write a workflow document as pretty-printed JSON."""
    Path(path).write_text(
        json.dumps(workflow_to_dict(workflow), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )


def ensure_runnable(steps: tuple[Step, ...] | list[Step], text: str) -> None:
    """Reject run requests that must never reach the runner.

    Raises:
        ValidationError: If there are no steps or the input is blank.
    """
    if not steps:
        raise ValidationError("Add at least one step before running the workflow.")
    if not text.strip():
        raise ValidationError("Enter some input text before running the workflow.")
