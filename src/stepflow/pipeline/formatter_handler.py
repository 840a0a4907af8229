"""Formatter step handling."""

from __future__ import annotations

from stepflow.core.exceptions import InvalidStepError, PipelineError
from stepflow.core.types import (
    Failure,
    FixGrammar,
    FormatterStep,
    Result,
    StepCommand,
    Success,
)
from stepflow.pipeline.ai_handler import AIStepHandler
from stepflow.pipeline.base import BaseAsyncHandler
from stepflow.pipeline.formatter import FormatterEngine


class FormatterStepHandler(BaseAsyncHandler[str, PipelineError]):
    """Executes formatter steps.

    Grammar fixing is delegated to the AI handler; every other operation is
    applied synchronously by the formatter engine and cannot fail.
    """

    def __init__(self, ai_handler: AIStepHandler, engine: FormatterEngine | None = None) -> None:
        """Initialize with the AI handler used for AI-backed operations."""
        self._ai = ai_handler
        self._engine = engine or FormatterEngine()

    async def handle(self, command: StepCommand) -> Result[str, PipelineError]:
        """Handle a ``FormatterStep`` command."""
        step = command.step
        if not isinstance(step, FormatterStep):
            raise TypeError(f"FormatterStepHandler cannot handle {type(step).__name__}")
        if step.operation is None:
            return Failure(
                InvalidStepError("Missing formatter operation", step_index=command.index)
            )
        if isinstance(step.operation, FixGrammar):
            return await self._ai.fix_grammar(command)
        return Success(self._engine.apply(step.operation, command.text))
