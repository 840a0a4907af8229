"""Workflow document decoding and pre-run validation."""

import json

import pytest

from stepflow.core.exceptions import ValidationError
from stepflow.core.types import (
    AIStep,
    BulletPoints,
    FixGrammar,
    FormatterStep,
    Tone,
    ToneKind,
)
from stepflow.core.workflow import (
    Workflow,
    dump_workflow,
    ensure_runnable,
    load_workflow,
    step_from_dict,
    workflow_from_dict,
    workflow_to_dict,
)

pytestmark = pytest.mark.unit

DOCUMENT = {
    "name": "Email cleanup",
    "inputText": "hey i wanted to check in",
    "blocks": [
        {"type": "formatter", "formatterOperation": {"kind": "fixGrammar"}},
        {"type": "ai", "instruction": "Rewrite as a short email"},
        {
            "type": "formatter",
            "formatterOperation": {"kind": "tone", "tone": "professional"},
        },
    ],
}


def test_decodes_blocks_in_order():
    workflow = workflow_from_dict(DOCUMENT)
    assert workflow.name == "Email cleanup"
    assert workflow.input_text == "hey i wanted to check in"
    assert workflow.steps == (
        FormatterStep(FixGrammar()),
        AIStep("Rewrite as a short email"),
        FormatterStep(Tone(ToneKind.PROFESSIONAL)),
    )


def test_encoding_matches_document_shape():
    assert workflow_to_dict(workflow_from_dict(DOCUMENT)) == DOCUMENT


def test_missing_payloads_decode_to_invalid_steps():
    assert step_from_dict({"type": "ai"}) == AIStep(None)
    assert step_from_dict({"type": "formatter"}) == FormatterStep(None)


def test_defaults_for_missing_fields():
    workflow = workflow_from_dict({})
    assert workflow == Workflow()


@pytest.mark.parametrize(
    ("block", "message"),
    [
        ({"type": "script"}, "Unknown step type"),
        ({"type": "formatter", "formatterOperation": {"kind": "uppercase"}}, "Unknown formatter kind"),
        ({"type": "formatter", "formatterOperation": {"kind": "tone", "tone": "loud"}}, "Unknown tone"),
        ({"type": "ai", "instruction": 7}, "instruction must be a string"),
    ],
)
def test_rejects_malformed_blocks_with_position(block, message):
    document = {"blocks": [{"type": "ai", "instruction": "ok"}, block]}
    with pytest.raises(ValidationError, match=message) as exc_info:
        workflow_from_dict(document)
    assert str(exc_info.value).startswith("Block 2: ")


def test_rejects_non_object_document():
    with pytest.raises(ValidationError):
        workflow_from_dict([1, 2])


def test_load_and_dump(tmp_path):
    path = tmp_path / "flow.json"
    workflow = Workflow(
        name="Notes",
        steps=(AIStep("Summarize"), FormatterStep(BulletPoints())),
        input_text="a. b",
    )
    dump_workflow(workflow, path)
    assert json.loads(path.read_text(encoding="utf-8"))["blocks"][1] == {
        "type": "formatter",
        "formatterOperation": {"kind": "bulletPoints"},
    }
    assert load_workflow(path) == workflow


def test_load_reports_unreadable_and_invalid_files(tmp_path):
    with pytest.raises(ValidationError, match="Cannot read workflow file"):
        load_workflow(tmp_path / "missing.json")
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValidationError, match="Invalid JSON"):
        load_workflow(broken)


class TestEnsureRunnable:
    def test_rejects_empty_step_list(self):
        with pytest.raises(ValidationError, match="at least one step"):
            ensure_runnable([], "text")

    @pytest.mark.parametrize("text", ["", "   \n\t"])
    def test_rejects_blank_input(self, text):
        with pytest.raises(ValidationError, match="input text"):
            ensure_runnable([AIStep("Summarize")], text)

    def test_accepts_steps_with_text(self):
        ensure_runnable((AIStep(""),), "text")
