"""Exceptions raised by the stepflow pipeline core."""  # noqa: D415


class StepflowError(Exception):
    """Base exception for stepflow errors"""  # noqa: D415


class ConfigurationError(StepflowError):
    """Raised when configuration sources or values are invalid"""  # noqa: D415


class ValidationError(StepflowError):
    """Raised when a workflow document or run request fails validation"""  # noqa: D415


class PipelineError(StepflowError):
    """Base class for failures that abort a run.

    Attributes:
        step_index: 1-based position of the step that failed, when known.
    """

    def __init__(self, message: str, *, step_index: int | None = None) -> None:
        """Initialize with a human-readable message and the failing step."""
        super().__init__(message)
        self.step_index = step_index


class RunCancelledError(PipelineError):
    """Raised when a cancellation is observed at a step boundary."""

    def __init__(self, *, step_index: int | None = None) -> None:
        """Initialize the cancellation error."""
        super().__init__("The workflow was cancelled.", step_index=step_index)


class InvalidStepError(PipelineError):
    """Raised when a step definition is malformed.

    This is a data bug in the step list; retrying the same run cannot succeed.
    """

    def __init__(self, reason: str, *, step_index: int | None = None) -> None:
        """Initialize with the reason the step is invalid."""
        super().__init__(f"This step is invalid: {reason}.", step_index=step_index)
        self.reason = reason


class MissingAPIKeyError(PipelineError):
    """Raised when an AI step is reached in remote mode without an API key."""

    def __init__(self, *, step_index: int | None = None) -> None:
        """Initialize the missing key error."""
        super().__init__(
            "Please add your API key in Settings to run AI steps.",
            step_index=step_index,
        )


class ProviderError(PipelineError):
    """Raised when the AI provider fails to return usable text."""

    def __init__(self, detail: str, *, step_index: int | None = None) -> None:
        """Initialize with the provider failure detail."""
        super().__init__(f"The API request failed. {detail}", step_index=step_index)
        self.detail = detail

    def at_step(self, step_index: int) -> "ProviderError":
        """Return a copy of this error attributed to ``step_index``."""
        error = ProviderError(self.detail, step_index=step_index)
        error.__cause__ = self
        return error
