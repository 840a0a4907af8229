"""Local demo invoker.

This is not an AI: it picks a canned transformation by keyword matching on
the instruction so that workflows can be exercised offline and without
billing. Output is fully deterministic.
"""

from __future__ import annotations

import re

from stepflow.pipeline.formatter import BULLET, ELLIPSIS, fix_grammar

SUMMARY_WORD_LIMIT = 24
MAX_BULLETS = 8

_SENTENCE_SPLIT = re.compile(r"[.!?\n]")
_BULLET_SPLIT = re.compile(r"[\n.]")
_WORD_SPLIT = re.compile(r"[ \n]+")


def summarize(text: str) -> str:
    text = text.strip()
    if not text:
        return ""
    parts = [p.strip() for p in _SENTENCE_SPLIT.split(text)]
    parts = [p for p in parts if p]
    if len(parts) >= 2:
        return f"Summary: {'. '.join(parts[:2])}."
    words = [w for w in _WORD_SPLIT.split(text) if w]
    suffix = ELLIPSIS if len(words) > SUMMARY_WORD_LIMIT else ""
    return "Summary: " + " ".join(words[:SUMMARY_WORD_LIMIT]) + suffix


def bullet_points(text: str) -> str:
    fragments = [f.strip() for f in _BULLET_SPLIT.split(text)]
    fragments = [f for f in fragments if f]
    return "\n".join(f"{BULLET}{f}" for f in fragments[:MAX_BULLETS])


def rewrite_professional(text: str) -> str:
    cleaned = fix_grammar(text).strip()
    if not cleaned:
        return ""
    return f"Hi,\n\n{cleaned}\n\nThanks,"


def fake_translate_to_french(text: str) -> str:
    if not text:
        return ""
    return f"FR (demo): {text}"


class DemoInvoker:
    """Deterministic keyword-driven stand-in for a remote provider."""

    async def invoke(self, text: str, instruction: str) -> str:
        """Pick a transformation from the instruction and apply it."""
        trimmed = text.strip()
        lowered = instruction.lower()

        if "grammar" in lowered or "spelling" in lowered:
            return fix_grammar(trimmed)
        if "summarize" in lowered:
            return summarize(trimmed)
        if "bullet" in lowered:
            return bullet_points(trimmed)
        if "translate" in lowered and ("french" in lowered or "fr" in lowered):
            return fake_translate_to_french(trimmed)
        if any(word in lowered for word in ("rewrite", "professional", "email")):
            return rewrite_professional(trimmed)
        # Unrecognized instructions still produce a visible change
        return summarize(trimmed)
