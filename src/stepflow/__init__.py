"""stepflow: sequential text-transformation pipelines of AI and formatter steps."""

import importlib.metadata
import logging

from stepflow.config import ResolvedConfig, RunConfiguration, resolve_config
from stepflow.core.exceptions import (
    ConfigurationError,
    InvalidStepError,
    MissingAPIKeyError,
    PipelineError,
    ProviderError,
    RunCancelledError,
    StepflowError,
    ValidationError,
)
from stepflow.core.types import (
    AIStep,
    BulletPoints,
    Expand,
    Failure,
    FixGrammar,
    FormatterOperation,
    FormatterStep,
    Result,
    RunResult,
    Shorten,
    Step,
    Success,
    Tone,
    ToneKind,
    TraceStep,
)
from stepflow.core.workflow import (
    Workflow,
    ensure_runnable,
    load_workflow,
    workflow_from_dict,
    workflow_to_dict,
)
from stepflow.pipeline.adapters import DemoInvoker, LocalInvoker, RemoteInvoker
from stepflow.pipeline.cancellation import CancelToken
from stepflow.pipeline.formatter import FormatterEngine
from stepflow.runner import PipelineRunner, create_runner
from stepflow.telemetry import SimpleReporter, TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("stepflow")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Public API
__all__ = [  # noqa: RUF022
    # Runner
    "PipelineRunner",
    "create_runner",
    "CancelToken",
    # Steps & results
    "Step",
    "AIStep",
    "FormatterStep",
    "FormatterOperation",
    "FixGrammar",
    "Shorten",
    "Expand",
    "BulletPoints",
    "Tone",
    "ToneKind",
    "TraceStep",
    "RunResult",
    "Result",
    "Success",
    "Failure",
    # Formatter & invokers
    "FormatterEngine",
    "DemoInvoker",
    "LocalInvoker",
    "RemoteInvoker",
    # Workflow documents
    "Workflow",
    "load_workflow",
    "workflow_from_dict",
    "workflow_to_dict",
    "ensure_runnable",
    # Configuration
    "RunConfiguration",
    "ResolvedConfig",
    "resolve_config",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
    "SimpleReporter",
    # Exceptions
    "StepflowError",
    "ConfigurationError",
    "ValidationError",
    "PipelineError",
    "RunCancelledError",
    "InvalidStepError",
    "MissingAPIKeyError",
    "ProviderError",
]
