"""Error types raised while executing a tool at the provider.

Purpose:
- Distinguish transient failures (retried by ``invoke_with_retries``) from
  terminal ones (``JobFailedError``).
- Carry the provider job handle when a queue job outlives the wait budget so
  callers can resume polling later.
"""

from __future__ import annotations

from typing import Any, Optional

from toolmesh_ai.core.errors import ToolMeshError


class ToolExecutionError(ToolMeshError):
    """Base error for failed tool invocations.

    Args:
        message: Human-readable error description.
        tool_id: Tool that was being invoked, when known.
    """

    def __init__(self, message: str, *, tool_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.tool_id = tool_id


class ProviderHTTPError(ToolExecutionError):
    """The provider answered with a non-success HTTP status.

    Args:
        message: Human-readable error description.
        status_code: HTTP status code of the response.
        details: Response body, truncated.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
        tool_id: Optional[str] = None,
    ) -> None:
        super().__init__(message, tool_id=tool_id)
        self.status_code = status_code
        self.details = details


class ProviderNotConfiguredError(ToolExecutionError):
    def __init__(self) -> None:
        super().__init__("Provider API key is not configured")


class JobFailedError(ToolExecutionError):
    """A queue job reached a terminal failure status. Never retried."""

    def __init__(self, job_id: str, status: str, *, tool_id: Optional[str] = None) -> None:
        super().__init__(f"Tool execution failed with status: {status}", tool_id=tool_id)
        self.job_id = job_id
        self.status = status


class JobTimeoutError(ToolExecutionError):
    """A queue job did not finish within the wait budget; the job may still complete."""

    def __init__(self, job_id: str, waited_seconds: float, *, tool_id: Optional[str] = None) -> None:
        super().__init__(f"Tool execution timed out after {waited_seconds:g}s", tool_id=tool_id)
        self.job_id = job_id
        self.waited_seconds = waited_seconds
