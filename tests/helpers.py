"""Fake collaborators shared by the pipeline tests."""

from __future__ import annotations

from dataclasses import dataclass, field

from stepflow.core.exceptions import ProviderError
from stepflow.pipeline.cancellation import CancelToken


@dataclass
class RecordingRemoteInvoker:
    """Remote invoker that echoes and records every call."""

    reply: str | None = None
    calls: list[tuple[str, str, str, float]] = field(default_factory=list)

    async def invoke(
        self, text: str, instruction: str, model: str, temperature: float
    ) -> str:
        self.calls.append((text, instruction, model, temperature))
        if self.reply is not None:
            return self.reply
        return f"[{instruction}] {text}"


@dataclass
class RecordingLocalInvoker:
    """Local invoker that records every call."""

    calls: list[tuple[str, str]] = field(default_factory=list)

    async def invoke(self, text: str, instruction: str) -> str:
        self.calls.append((text, instruction))
        return f"local({instruction}): {text}"


@dataclass
class FailingRemoteInvoker:
    """Remote invoker that raises the configured exception."""

    error: Exception = field(default_factory=lambda: ProviderError("Request failed (500). boom"))
    calls: int = 0

    async def invoke(
        self, text: str, instruction: str, model: str, temperature: float
    ) -> str:
        self.calls += 1
        raise self.error


@dataclass
class CancelAfter:
    """Progress callback that trips ``token`` when step ``after`` is reported.

    Progress is reported before a step executes, so the reported step still
    runs and the run stops at the next step boundary.
    """

    token: CancelToken
    after: int
    seen: list[tuple[int, int]] = field(default_factory=list)

    def __call__(self, current: int, total: int) -> None:
        self.seen.append((current, total))
        if current >= self.after:
            self.token.cancel()


@dataclass
class CancellingLocalInvoker:
    """Local invoker that trips ``token`` while its call is in flight."""

    token: CancelToken
    calls: int = 0

    async def invoke(self, text: str, instruction: str) -> str:
        self.calls += 1
        self.token.cancel()
        return text.upper()
