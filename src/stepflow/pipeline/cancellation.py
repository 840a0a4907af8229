"""Cooperative cancellation for pipeline runs."""

from __future__ import annotations

import threading


class CancelToken:
    """A one-way cancellation flag checked by the runner between steps.

    Safe to trip from any thread or from a progress callback. Tripping the
    token never interrupts the step that is already running; the runner only
    refuses to start the next one.
    """

    __slots__ = ("_event",)

    def __init__(self) -> None:
        """Create an untripped token."""
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._event.is_set()

    def __repr__(self) -> str:
        """Show the token state."""
        return f"CancelToken(cancelled={self.cancelled})"
