"""Provider registry for remote invokers.

Adapters are imported lazily so that the SDK of an unused provider is never
loaded.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from stepflow.pipeline.adapters.base import RemoteInvoker


def _openai(api_key: str, **options: Any) -> RemoteInvoker:
    from stepflow.pipeline.adapters.openai import OpenAIChatAdapter

    return OpenAIChatAdapter(api_key, **options)


def _gemini(api_key: str, **options: Any) -> RemoteInvoker:
    from stepflow.pipeline.adapters.gemini import GoogleGenAIAdapter

    # The genai client manages its own timeouts
    options.pop("timeout", None)
    return GoogleGenAIAdapter(api_key, **options)


_PROVIDERS: dict[str, Callable[..., RemoteInvoker]] = {
    "openai": _openai,
    "gemini": _gemini,
}


def list_providers() -> tuple[str, ...]:
    """Names accepted by ``build_remote_invoker``."""
    return tuple(_PROVIDERS)


def build_remote_invoker(provider: str, api_key: str, **options: Any) -> RemoteInvoker:
    """Create the remote invoker registered under ``provider``.

    Raises:
        ValueError: If the provider is unknown.
    """
    try:
        factory = _PROVIDERS[provider]
    except KeyError:
        raise ValueError(
            f"Unknown provider {provider!r}. Must be one of: {list(_PROVIDERS)}"
        ) from None
    return factory(api_key, **options)
