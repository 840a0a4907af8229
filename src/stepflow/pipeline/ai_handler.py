"""AI step handling.

Routes an instruction to the local demo substitute or the remote provider
according to the run configuration. Also serves formatter steps whose
operation is AI-backed (grammar fixing).
"""

from __future__ import annotations

import logging

from stepflow.core.exceptions import (
    InvalidStepError,
    MissingAPIKeyError,
    PipelineError,
    ProviderError,
)
from stepflow.core.types import AIStep, Failure, Result, StepCommand, Success
from stepflow.pipeline.adapters.base import LocalInvoker, RemoteInvoker
from stepflow.pipeline.adapters.demo import DemoInvoker
from stepflow.pipeline.base import BaseAsyncHandler

logger = logging.getLogger(__name__)

FIX_GRAMMAR_INSTRUCTION = (
    "Fix grammar and spelling. Keep the original meaning. Preserve the original "
    "language. Keep formatting (line breaks). Return only the corrected text."
)
FIX_GRAMMAR_DEMO_INSTRUCTION = "Fix grammar and spelling."
FIX_GRAMMAR_MAX_TEMPERATURE = 0.3


class AIStepHandler(BaseAsyncHandler[str, PipelineError]):
    """Executes AI instructions against the running text.

    The handler never raises for expected failures; it returns ``Failure``
    with a typed error carrying the step index.
    """

    def __init__(
        self,
        remote: RemoteInvoker | None = None,
        local: LocalInvoker | None = None,
    ) -> None:
        """Initialize with the remote provider and the local substitute."""
        self._remote = remote
        self._local: LocalInvoker = local or DemoInvoker()

    async def handle(self, command: StepCommand) -> Result[str, PipelineError]:
        """Handle an ``AIStep`` command."""
        step = command.step
        if not isinstance(step, AIStep):
            raise TypeError(f"AIStepHandler cannot handle {type(step).__name__}")
        instruction = step.clean_instruction
        if not instruction:
            return Failure(
                InvalidStepError("Missing instruction", step_index=command.index)
            )
        return await self.invoke(
            command,
            instruction=instruction,
            temperature=command.config.temperature,
        )

    async def fix_grammar(self, command: StepCommand) -> Result[str, PipelineError]:
        """Run the fixed grammar instruction with a clamped temperature."""
        return await self.invoke(
            command,
            instruction=FIX_GRAMMAR_INSTRUCTION,
            temperature=min(command.config.temperature, FIX_GRAMMAR_MAX_TEMPERATURE),
            demo_instruction=FIX_GRAMMAR_DEMO_INSTRUCTION,
        )

    async def invoke(
        self,
        command: StepCommand,
        *,
        instruction: str,
        temperature: float,
        demo_instruction: str | None = None,
    ) -> Result[str, PipelineError]:
        """Send ``instruction`` to the invoker selected by the run mode."""
        config = command.config
        if config.mode == "local-demo":
            output = await self._local.invoke(
                command.text, demo_instruction or instruction
            )
            return Success(output)

        if not config.api_key_present:
            return Failure(MissingAPIKeyError(step_index=command.index))
        if self._remote is None:
            return Failure(
                ProviderError("No remote provider is configured.", step_index=command.index)
            )

        try:
            output = await self._remote.invoke(
                command.text, instruction, config.model_name, temperature
            )
        except ProviderError as e:
            return Failure(e.at_step(command.index))
        except Exception as e:  # Any other adapter failure is a provider error
            logger.debug("Remote invoker raised %s", type(e).__name__, exc_info=True)
            error = ProviderError(str(e) or type(e).__name__, step_index=command.index)
            error.__cause__ = e
            return Failure(error)
        return Success(output)
