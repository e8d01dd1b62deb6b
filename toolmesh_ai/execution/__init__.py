"""Execution adapter: sync and queue invocation of tools at the provider."""

from .adapter import ExecutionAdapter, JobState, QueueJob, QueueRunner, RetryPolicy, SyncRunner
from .errors import (
    JobFailedError,
    JobTimeoutError,
    ProviderHTTPError,
    ProviderNotConfiguredError,
    ToolExecutionError,
)
from .http import ProviderClient
from .status import JobPhase, classify_status

__all__ = [
    "ExecutionAdapter",
    "JobFailedError",
    "JobPhase",
    "JobState",
    "JobTimeoutError",
    "ProviderClient",
    "ProviderHTTPError",
    "ProviderNotConfiguredError",
    "QueueJob",
    "QueueRunner",
    "RetryPolicy",
    "SyncRunner",
    "ToolExecutionError",
    "classify_status",
]
