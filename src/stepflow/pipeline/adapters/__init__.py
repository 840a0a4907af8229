"""AI invoker adapters."""

from stepflow.pipeline.adapters.base import LocalInvoker, RemoteInvoker
from stepflow.pipeline.adapters.demo import DemoInvoker
from stepflow.pipeline.adapters.registry import build_remote_invoker, list_providers

__all__ = [
    "DemoInvoker",
    "LocalInvoker",
    "RemoteInvoker",
    "build_remote_invoker",
    "list_providers",
]
