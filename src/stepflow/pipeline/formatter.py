"""Deterministic formatter transformations.

Every transform here is a pure function of its input: no I/O, no randomness,
no dependence on configuration. ``FormatterEngine.apply`` never raises for a
known operation.
"""

from __future__ import annotations

import dataclasses
import logging
import re

from stepflow.core.types import (
    BulletPoints,
    Expand,
    FixGrammar,
    FormatterOperation,
    Shorten,
    Tone,
    ToneKind,
)

logger = logging.getLogger(__name__)

EXPAND_FILLER = "Additional details can be added here to expand on the main idea."
PROFESSIONAL_CLOSING = "Please let me know if you need any additional details."
BULLET = "• "
ELLIPSIS = "…"
SHORTEN_WORD_LIMIT = 28

_WHITESPACE_RUN = re.compile(r"\s+")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.:;!?])")
_PUNCT_THEN_CHAR = re.compile(r"([,.:;!?])(\S)")
_LONE_I = re.compile(r"\b[iI]\b")
_GREETING = re.compile(r"^(hey|hi|hello) ", re.IGNORECASE)
_SENTENCE_SPLIT = re.compile(r"[.!?\n]")
_BULLET_SPLIT = re.compile(r"[\n.]")


@dataclasses.dataclass(frozen=True, slots=True)
class FormatterOutcome:
    """Formatter output plus whether the text was changed."""

    text: str
    changed: bool


def _clean_line(line: str) -> tuple[str, bool]:
    """Clean a single line; also report whether it opened with a greeting."""
    line = _WHITESPACE_RUN.sub(" ", line)
    line = _SPACE_BEFORE_PUNCT.sub(r"\1", line)
    line = _PUNCT_THEN_CHAR.sub(r"\1 \2", line)
    line = _LONE_I.sub("I", line).strip()
    greeted = _GREETING.match(line) is not None
    if greeted:
        line = _GREETING.sub(r"\1, ", line, count=1)
    return line, greeted


def _capitalize_first_letter(text: str) -> str:
    for position, char in enumerate(text):
        if char.isalpha():
            return text[:position] + char.upper() + text[position + 1 :]
    return text


def fix_grammar(text: str) -> str:
    """Offline grammar cleanup used when no AI provider is involved.

    Line structure is preserved. A single-line result that reads like a
    sentence (three or more words, or an opening greeting) gets a period.
    """
    cleaned: list[str] = []
    opened_with_greeting: bool | None = None
    for line in text.replace("\t", " ").split("\n"):
        line, greeted = _clean_line(line)
        if line and opened_with_greeting is None:
            opened_with_greeting = greeted
        cleaned.append(line)

    result = "\n".join(cleaned).strip()
    if (
        result
        and "\n" not in result
        and result[-1] not in ".!?"
        and (len(result.split(" ")) >= 3 or opened_with_greeting)
    ):
        result += "."
    return _capitalize_first_letter(result)


def shorten(text: str) -> str:
    """Keep the first two sentences, or cap an unpunctuated text at 28 words."""
    trimmed = text.strip()
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(trimmed)]
    sentences = [s for s in sentences if s]
    if len(sentences) >= 2:
        return ". ".join(sentences[:2]) + "."
    words = trimmed.split()
    if len(words) > SHORTEN_WORD_LIMIT:
        return " ".join(words[:SHORTEN_WORD_LIMIT]) + ELLIPSIS
    return trimmed


def expand(text: str) -> str:
    return f"{text}\n\n{EXPAND_FILLER}"


def bullet_points(text: str) -> str:
    fragments = (f.strip() for f in _BULLET_SPLIT.split(text))
    return "\n".join(f"{BULLET}{f}" for f in fragments if f)


def apply_tone(tone: ToneKind, text: str) -> str:
    """Rewrite ``text`` toward ``tone``."""
    match tone:
        case ToneKind.CASUAL:
            return text.replace("do not", "don't")
        case ToneKind.NEUTRAL:
            return text
        case ToneKind.PROFESSIONAL:
            return f"{text}\n\n{PROFESSIONAL_CLOSING}"


class FormatterEngine:
    """Applies formatter operations to text.

    Stateless; a single instance can be shared across runs and threads.
    """

    def apply(self, operation: FormatterOperation, text: str) -> str:
        """Return ``text`` transformed by ``operation``."""
        match operation:
            case FixGrammar():
                return fix_grammar(text)
            case Shorten():
                return shorten(text)
            case Expand():
                return expand(text)
            case BulletPoints():
                return bullet_points(text)
            case Tone(tone=tone):
                return apply_tone(tone, text)
        raise TypeError(f"Unknown formatter operation: {operation!r}")

    def apply_with_change(
        self, operation: FormatterOperation, text: str
    ) -> FormatterOutcome:
        """Like ``apply`` but also report whether the text changed."""
        output = self.apply(operation, text)
        changed = isinstance(operation, Expand) or output != text
        if not changed:
            logger.debug("Formatter %s left the text unchanged", operation.display_name)
        return FormatterOutcome(text=output, changed=changed)
