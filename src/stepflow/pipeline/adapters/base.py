"""Invoker protocols for AI steps.

The runner depends only on these shapes. Concrete adapters live next to this
module; tests inject their own fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

SYSTEM_MESSAGE = (
    "You are a helpful assistant. Follow the user instruction precisely. "
    "Output plain text only. Keep the response concise."
)


def build_user_message(text: str, instruction: str) -> str:
    """Render the user turn shared by all remote providers."""
    return f"Instruction: {instruction}\n\nInput:\n{text}"


@runtime_checkable
class RemoteInvoker(Protocol):
    """A remote AI provider.

    Implementations raise ``ProviderError`` for any failure (transport,
    non-2xx status, undecodable or empty response).
    """

    async def invoke(
        self, text: str, instruction: str, model: str, temperature: float
    ) -> str:
        """Apply ``instruction`` to ``text`` and return the provider's output."""
        ...


@runtime_checkable
class LocalInvoker(Protocol):
    """An offline, deterministic substitute for a remote provider.

    Implementations never fail and return identical output for identical
    inputs.
    """

    async def invoke(self, text: str, instruction: str) -> str:
        """Apply ``instruction`` to ``text`` without any network access."""
        ...
