"""The primary entry point for executing a step list.

A run is a one-shot linear state machine: each step consumes the text the
previous step produced, and the first failure aborts the run. There is one
execution path; ``run`` and ``run_with_trace`` differ only in whether trace
entries are collected.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import TYPE_CHECKING

from stepflow.core.exceptions import PipelineError, RunCancelledError
from stepflow.core.types import (
    AIStep,
    Failure,
    FormatterStep,
    Result,
    RunResult,
    Step,
    StepCommand,
    Success,
    TraceStep,
)
from stepflow.pipeline.adapters.demo import DemoInvoker
from stepflow.pipeline.ai_handler import AIStepHandler
from stepflow.pipeline.formatter_handler import FormatterStepHandler
from stepflow.telemetry import TelemetryContext

if TYPE_CHECKING:
    from stepflow.config import ResolvedConfig, RunConfiguration
    from stepflow.pipeline.adapters.base import LocalInvoker, RemoteInvoker
    from stepflow.pipeline.cancellation import CancelToken
    from stepflow.pipeline.formatter import FormatterEngine
    from stepflow.telemetry import TelemetryContextProtocol

logger = logging.getLogger(__name__)

type ProgressCallback = Callable[[int, int], None]


class PipelineRunner:
    """Executes step lists against input text.

    The runner holds no per-run state, so one instance can serve concurrent
    runs of independent step lists.
    """

    def __init__(
        self,
        remote: RemoteInvoker | None = None,
        local: LocalInvoker | None = None,
        *,
        formatter: FormatterEngine | None = None,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        """Initialize the runner with its collaborators.

        Args:
            remote: Provider used for AI steps in remote mode.
            local: Offline substitute used in local-demo mode. Defaults to
                ``DemoInvoker``.
            formatter: Formatter engine for deterministic steps.
            telemetry: Optional telemetry context (no-op by default).
        """
        self._ai_handler = AIStepHandler(remote=remote, local=local)
        self._formatter_handler = FormatterStepHandler(self._ai_handler, formatter)
        self._telemetry: TelemetryContextProtocol = telemetry or TelemetryContext()

    async def run(
        self,
        steps: Sequence[Step],
        text: str,
        config: RunConfiguration,
        on_progress: ProgressCallback | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> str:
        """Run ``steps`` over ``text`` and return the final output.

        Raises:
            RunCancelledError: Cancellation was observed at a step boundary.
            InvalidStepError: A step is malformed.
            MissingAPIKeyError: An AI step needs a key in remote mode.
            ProviderError: The AI provider failed.
        """
        output, _ = await self._execute(
            steps, text, config, on_progress, cancel_token, collect_trace=False
        )
        return output

    async def run_with_trace(
        self,
        steps: Sequence[Step],
        text: str,
        config: RunConfiguration,
        on_progress: ProgressCallback | None = None,
        *,
        cancel_token: CancelToken | None = None,
    ) -> RunResult:
        """Run ``steps`` over ``text`` and return the output with its trace.

        Raises the same errors as ``run``; no partial trace is returned.
        """
        output, trace = await self._execute(
            steps, text, config, on_progress, cancel_token, collect_trace=True
        )
        return RunResult(final_output=output, steps=tuple(trace))

    async def _execute(
        self,
        steps: Sequence[Step],
        text: str,
        config: RunConfiguration,
        on_progress: ProgressCallback | None,
        cancel_token: CancelToken | None,
        *,
        collect_trace: bool,
    ) -> tuple[str, list[TraceStep]]:
        current = text
        trace: list[TraceStep] = []
        total = len(steps)
        ctx = self._telemetry

        for position, step in enumerate(steps, start=1):
            if cancel_token is not None and cancel_token.cancelled:
                ctx.count("runner.cancelled", step=position)
                logger.debug("Run cancelled before step %d/%d", position, total)
                raise RunCancelledError(step_index=position)

            if on_progress is not None:
                on_progress(position, total)

            command = StepCommand(step=step, text=current, config=config, index=position)
            logger.debug("Step %d/%d: %s", position, total, step.title)
            with ctx("runner.step", step=position, kind=type(step).__name__):
                result = await self._dispatch(command)

            if isinstance(result, Failure):
                ctx.count("runner.error", step=position, error=type(result.error).__name__)
                logger.warning(
                    "Run failed at step %d/%d (%s): %s",
                    position,
                    total,
                    type(result.error).__name__,
                    result.error,
                )
                raise result.error

            current = result.value
            if collect_trace:
                trace.append(TraceStep(index=position, title=step.title, output=current))

        logger.debug("Run finished after %d step(s)", total)
        return current, trace

    async def _dispatch(self, command: StepCommand) -> Result[str, PipelineError]:
        match command.step:
            case AIStep():
                result = await self._ai_handler.handle(command)
            case FormatterStep():
                result = await self._formatter_handler.handle(command)
            case _:
                raise TypeError(f"Unsupported step type: {type(command.step).__name__}")

        # Guard: handlers must return Success|Failure
        if not isinstance(result, Success | Failure):
            raise TypeError("Handler returned a non-Result value; expected Success|Failure.")
        return result


def create_runner(
    config: ResolvedConfig | None = None,
    *,
    telemetry: TelemetryContextProtocol | None = None,
) -> PipelineRunner:
    """Create a runner wired for ``config``.

    If no configuration is provided it is resolved from the environment. The
    remote provider is only built when an API key is available; without one,
    AI steps in remote mode fail with ``MissingAPIKeyError``.
    """
    # This is the only place where ambient configuration is resolved.
    if config is None:
        from stepflow.config import resolve_config

        config = resolve_config()

    remote = None
    if config.has_api_key and config.api_key is not None:
        from stepflow.pipeline.adapters.registry import build_remote_invoker

        remote = build_remote_invoker(
            config.provider, config.api_key, timeout=config.request_timeout
        )
    return PipelineRunner(remote=remote, local=DemoInvoker(), telemetry=telemetry)
