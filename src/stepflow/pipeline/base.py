"""Base protocol for step handlers."""

from typing import Protocol, TypeVar

from stepflow.core.exceptions import PipelineError
from stepflow.core.types import Result, StepCommand

# Invariant output, errors bounded to run failures
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=PipelineError)


class BaseAsyncHandler(Protocol[T_Out, T_Error]):
    """Protocol for asynchronous step handlers.

    Each handler executes one kind of step against the running text and
    reports expected failures as ``Failure`` values.
    """

    async def handle(self, command: StepCommand) -> Result[T_Out, T_Error]:
        """Execute one step.

        Args:
            command: The step, the running text and the run configuration.

        Returns:
            A Result containing either the new running text or an error.
        """
        ...
