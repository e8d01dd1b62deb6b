"""Periodic reachability checks for registered tools.

The monitor probes every enabled tool in small batches and writes the
resulting ``ToolHealth`` snapshots back into the registry. Probe results are
interpreted as follows:

- HTTP status below 500 counts as reachable (providers answer ``HEAD`` with
  401/405/422, which still proves the endpoint exists). Latency above
  ``DEGRADED_LATENCY_MS`` marks the tool ``degraded``, otherwise ``healthy``.
- A 5xx status or a transport error increments the failure counter; the tool
  becomes ``down`` after ``DOWN_AFTER_FAILURES`` consecutive failures and is
  ``degraded`` before that.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from toolmesh_ai.core.logging_config import get_logger

from .models import HealthStatus, ToolDefinition, ToolHealth
from .registry import ToolRegistry

logger = get_logger(__name__)

DEGRADED_LATENCY_MS = 5000
DOWN_AFTER_FAILURES = 3

Probe = Callable[[ToolDefinition], Awaitable[int]]
"""Send a lightweight request to the tool's endpoint and return the HTTP status code."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def next_health(
    previous: ToolHealth,
    *,
    status_code: Optional[int],
    latency_ms: float,
    checked_at: datetime,
) -> ToolHealth:
    """
    Fold one probe outcome into the previous snapshot.

    Args:
        previous: The snapshot before the probe.
        status_code: HTTP status returned by the probe, or ``None`` on transport error.
        latency_ms: Time the probe took.
        checked_at: When the probe completed.

    Returns:
        ToolHealth: The new snapshot.
    """
    if status_code is not None and status_code < 500:
        status = HealthStatus.degraded if latency_ms > DEGRADED_LATENCY_MS else HealthStatus.healthy
        return replace(
            previous,
            status=status,
            last_checked_at=checked_at,
            last_success_at=checked_at,
            consecutive_failures=0,
            latency_ms=latency_ms,
        )

    failures = previous.consecutive_failures + 1
    return replace(
        previous,
        status=HealthStatus.down if failures >= DOWN_AFTER_FAILURES else HealthStatus.degraded,
        last_checked_at=checked_at,
        consecutive_failures=failures,
        latency_ms=latency_ms,
    )


class HealthMonitor:
    """Background health checker bound to one ``ToolRegistry``."""

    def __init__(
        self,
        registry: ToolRegistry,
        probe: Probe,
        *,
        interval_seconds: float = 300.0,
        initial_delay_seconds: float = 30.0,
        batch_size: int = 5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._registry = registry
        self._probe = probe
        self._interval = interval_seconds
        self._initial_delay = initial_delay_seconds
        self._batch_size = max(1, batch_size)
        self._clock = clock
        self._sleep = sleep
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def check_tool(self, tool: ToolDefinition) -> ToolHealth:
        """Probe one tool and record the resulting snapshot."""
        previous = self._registry.health(tool.id) or ToolHealth()
        started = self._clock()
        status_code: Optional[int]
        try:
            status_code = await self._probe(tool)
        except Exception as exc:
            logger.debug("Health probe failed for %s: %s", tool.id, exc, extra={"tool_id": tool.id})
            status_code = None
        latency_ms = (self._clock() - started) * 1000.0

        health = next_health(previous, status_code=status_code, latency_ms=latency_ms, checked_at=_utcnow())
        self._registry.record_health(tool.id, health)
        return health

    async def run_once(self) -> List[ToolHealth]:
        """Check every enabled tool, ``batch_size`` at a time."""
        tools = self._registry.enabled()
        logger.info("Running health checks for %d tools", len(tools))

        results: List[ToolHealth] = []
        for start in range(0, len(tools), self._batch_size):
            batch = tools[start : start + self._batch_size]
            results.extend(await asyncio.gather(*(self.check_tool(tool) for tool in batch)))

        counts = {status: 0 for status in HealthStatus}
        for health in results:
            counts[health.status] += 1
        logger.info(
            "Health checks complete: %d healthy, %d degraded, %d down",
            counts[HealthStatus.healthy],
            counts[HealthStatus.degraded],
            counts[HealthStatus.down],
        )
        return results

    async def _loop(self) -> None:
        await self._sleep(self._initial_delay)
        while True:
            try:
                await self.run_once()
            except Exception as exc:
                logger.error("Health check run failed: %s", exc, exc_info=True)
            await self._sleep(self._interval)

    def start(self) -> None:
        """Schedule the periodic sweep on the running event loop."""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._loop(), name="tool-health-monitor")
        logger.info("Tool health checks scheduled", extra={"interval_seconds": self._interval})

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
