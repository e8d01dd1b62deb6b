"""Execution adapter: one ``invoke`` over sync calls and queue jobs.

Each ``ExecutionMode`` has its own runner:

- ``SyncRunner`` posts the input once and returns the response body.
- ``QueueRunner`` submits a job and drives a ``QueueJob`` state machine
  (``submitted -> polling -> completed | failed | timed_out``) with an
  injectable clock and sleep, so tests never wait on real time.

``ExecutionAdapter.invoke_with_retries`` layers a bounded exponential backoff
on top. ``JobFailedError`` is terminal and short-circuits the retries.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.registry.models import ExecutionMode, ToolDefinition

from .errors import JobFailedError, JobTimeoutError, ToolExecutionError
from .http import ProviderClient
from .status import JobPhase, classify_status, normalize_status

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class JobState(str, Enum):
    submitted = "submitted"
    polling = "polling"
    completed = "completed"
    failed = "failed"
    timed_out = "timed_out"


_TERMINAL_STATES = frozenset({JobState.completed, JobState.failed, JobState.timed_out})


@dataclass
class QueueJob:
    """Lifecycle of one provider queue job."""

    tool_id: str
    model_path: str
    request_id: str
    started_at: float
    state: JobState = JobState.submitted
    last_status: Optional[str] = None
    polls: int = 0
    history: list[JobState] = field(default_factory=lambda: [JobState.submitted])

    @property
    def finished(self) -> bool:
        return self.state in _TERMINAL_STATES

    def advance(self, new_state: JobState) -> None:
        if self.finished:
            raise ToolExecutionError(
                f"Queue job {self.request_id} is already {self.state.value}", tool_id=self.tool_id
            )
        self.state = new_state
        self.history.append(new_state)


class Runner(Protocol):
    async def run(self, tool: ToolDefinition, payload: Mapping[str, Any]) -> Any:
        ...


class SyncRunner:
    """One POST to the provider; the response body is the result."""

    def __init__(self, client: ProviderClient) -> None:
        self._client = client

    async def run(self, tool: ToolDefinition, payload: Mapping[str, Any]) -> Any:
        return await self._client.run(tool.provider_path, dict(payload))


class QueueRunner:
    """Submit-and-poll execution for long running tools."""

    def __init__(
        self,
        client: ProviderClient,
        *,
        poll_interval_seconds: float = 3.0,
        max_wait_seconds: float = 300.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self.poll_interval_seconds = poll_interval_seconds
        self.max_wait_seconds = max_wait_seconds
        self._clock = clock
        self._sleep = sleep

    async def submit(self, tool: ToolDefinition, payload: Mapping[str, Any]) -> QueueJob:
        request_id = await self._client.submit(tool.provider_path, dict(payload))
        logger.debug("Queue job submitted", extra={"tool_id": tool.id, "job_id": request_id})
        return QueueJob(
            tool_id=tool.id,
            model_path=tool.provider_path,
            request_id=request_id,
            started_at=self._clock(),
        )

    async def wait(self, job: QueueJob) -> Any:
        """
        Poll ``job`` until it reaches a terminal state.

        Returns:
            The provider result once the job completes.

        Raises:
            JobFailedError: The provider reported a failure status.
            JobTimeoutError: ``max_wait_seconds`` elapsed first.
        """
        while self._clock() - job.started_at < self.max_wait_seconds:
            await self._sleep(self.poll_interval_seconds)
            status = await self._client.status(job.model_path, job.request_id)
            job.polls += 1
            job.last_status = normalize_status(status.get("status"))

            phase = classify_status(job.last_status)
            if phase is JobPhase.completed:
                result = await self._client.result(job.model_path, job.request_id)
                job.advance(JobState.completed)
                return result
            if phase is JobPhase.failed:
                job.advance(JobState.failed)
                raise JobFailedError(job.request_id, job.last_status or "UNKNOWN", tool_id=job.tool_id)
            if job.state is JobState.submitted:
                job.advance(JobState.polling)

        job.advance(JobState.timed_out)
        logger.warning(
            "Queue job exceeded wait budget",
            extra={"tool_id": job.tool_id, "job_id": job.request_id, "polls": job.polls},
        )
        raise JobTimeoutError(job.request_id, self.max_wait_seconds, tool_id=job.tool_id)

    async def run(self, tool: ToolDefinition, payload: Mapping[str, Any]) -> Any:
        job = await self.submit(tool, payload)
        return await self.wait(job)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff: ``min(base * 2**attempt, cap)`` seconds."""

    max_retries: int = 1
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay_seconds * (2**attempt), self.max_delay_seconds)


class ExecutionAdapter:
    """Dispatch tool invocations to the runner for the tool's execution mode."""

    def __init__(
        self,
        client: ProviderClient,
        *,
        runners: Optional[Mapping[ExecutionMode, Runner]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        poll_interval_seconds: float = 3.0,
        max_wait_seconds: float = 300.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._runners: Dict[ExecutionMode, Runner] = {
            ExecutionMode.sync: SyncRunner(client),
            ExecutionMode.queue: QueueRunner(
                client,
                poll_interval_seconds=poll_interval_seconds,
                max_wait_seconds=max_wait_seconds,
                clock=clock,
                sleep=sleep,
            ),
        }
        if runners:
            self._runners.update(runners)

    def runner_for(self, mode: ExecutionMode) -> Runner:
        try:
            return self._runners[mode]
        except KeyError as e:
            raise ToolExecutionError(f"No runner for execution mode: {mode}") from e

    @property
    def queue_runner(self) -> QueueRunner:
        runner = self._runners[ExecutionMode.queue]
        if not isinstance(runner, QueueRunner):
            raise ToolExecutionError("Queue runner does not support job handles")
        return runner

    async def invoke(self, tool: ToolDefinition, payload: Mapping[str, Any]) -> Any:
        """Execute ``tool`` once with ``payload``."""
        return await self.runner_for(tool.execution_mode).run(tool, payload)

    async def invoke_with_retries(self, tool: ToolDefinition, payload: Mapping[str, Any]) -> Any:
        """Execute ``tool``, retrying transient failures up to ``retry_policy.max_retries`` times."""
        policy = self.retry_policy
        attempt = 0
        while True:
            try:
                return await self.invoke(tool, payload)
            except JobFailedError:
                raise
            except Exception as exc:
                if attempt >= policy.max_retries:
                    raise
                backoff = policy.delay_for(attempt)
                logger.warning(
                    "Tool execution failed, retrying",
                    extra={
                        "tool_id": tool.id,
                        "attempt": attempt + 1,
                        "max_retries": policy.max_retries,
                        "backoff_seconds": backoff,
                        "error": str(exc),
                    },
                )
                await self._sleep(backoff)
                attempt += 1

    async def job_status(self, tool: ToolDefinition, job_id: str) -> Dict[str, Any]:
        """Current status of a previously submitted queue job."""
        status = await self.client.status(tool.provider_path, job_id)
        normalized = normalize_status(status.get("status"))
        return {
            "jobId": job_id,
            "toolId": tool.id,
            "status": normalized,
            "phase": classify_status(normalized).value,
            "raw": status,
        }

    async def job_result(self, tool: ToolDefinition, job_id: str) -> Any:
        return await self.client.result(tool.provider_path, job_id)
