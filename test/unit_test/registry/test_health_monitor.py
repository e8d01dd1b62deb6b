from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Dict, List

import pytest

from toolmesh_ai.registry.health import DEGRADED_LATENCY_MS, HealthMonitor, next_health
from toolmesh_ai.registry.models import HealthStatus, ToolDefinition, ToolHealth
from toolmesh_ai.registry.registry import ToolRegistry

CHECKED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestNextHealth:
    def test_reachable_probe_is_healthy(self) -> None:
        health = next_health(ToolHealth(), status_code=405, latency_ms=120.0, checked_at=CHECKED_AT)
        assert health.status is HealthStatus.healthy
        assert health.last_success_at == CHECKED_AT
        assert health.consecutive_failures == 0
        assert health.latency_ms == 120.0

    def test_slow_probe_is_degraded(self) -> None:
        health = next_health(
            ToolHealth(), status_code=200, latency_ms=DEGRADED_LATENCY_MS + 1, checked_at=CHECKED_AT
        )
        assert health.status is HealthStatus.degraded

    def test_down_after_three_consecutive_failures(self) -> None:
        health = ToolHealth()
        statuses: List[HealthStatus] = []
        for code in (503, None, 500):
            health = next_health(health, status_code=code, latency_ms=10.0, checked_at=CHECKED_AT)
            statuses.append(health.status)
        assert statuses == [HealthStatus.degraded, HealthStatus.degraded, HealthStatus.down]
        assert health.consecutive_failures == 3
        assert health.last_success_at is None

    def test_success_resets_failure_count(self) -> None:
        failing = ToolHealth(status=HealthStatus.down, consecutive_failures=5)
        health = next_health(failing, status_code=401, latency_ms=5.0, checked_at=CHECKED_AT)
        assert health.status is HealthStatus.healthy
        assert health.consecutive_failures == 0


class TestHealthMonitor:
    @pytest.mark.asyncio
    async def test_run_once_records_every_enabled_tool(self, registry: ToolRegistry, fake_time) -> None:
        codes: Dict[str, int] = {"image.upscale": 503}

        async def probe(tool: ToolDefinition) -> int:
            return codes.get(tool.id, 405)

        monitor = HealthMonitor(registry, probe, batch_size=4, clock=fake_time.monotonic, sleep=fake_time.sleep)
        results = await monitor.run_once()

        assert len(results) == len(registry.enabled())
        assert registry.health("image.upscale").status is HealthStatus.degraded
        assert registry.health("audio.tts").status is HealthStatus.healthy

    @pytest.mark.asyncio
    async def test_probe_exception_counts_as_failure(self, registry: ToolRegistry, fake_time) -> None:
        async def probe(tool: ToolDefinition) -> int:
            raise ConnectionError("unreachable")

        monitor = HealthMonitor(registry, probe, clock=fake_time.monotonic, sleep=fake_time.sleep)
        tool = registry.get("image.upscale")
        for _ in range(3):
            await monitor.check_tool(tool)

        assert registry.health("image.upscale").status is HealthStatus.down
        assert "image.upscale" not in {entry["name"] for entry in registry.to_mcp_tools()}

    @pytest.mark.asyncio
    async def test_provider_probe(self, registry: ToolRegistry, provider_client, fake_provider, fake_time) -> None:
        fake_provider.probe_statuses["fal-ai/creative-upscaler"] = 502

        async def probe(tool: ToolDefinition) -> int:
            return await provider_client.probe(tool.provider_path)

        monitor = HealthMonitor(registry, probe, clock=fake_time.monotonic, sleep=fake_time.sleep)
        health = await monitor.check_tool(registry.get("image.upscale"))
        assert health.status is HealthStatus.degraded
        assert fake_provider.requests[-1].method == "HEAD"

    @pytest.mark.asyncio
    async def test_start_and_stop(self, registry: ToolRegistry) -> None:
        probed = asyncio.Event()

        async def probe(tool: ToolDefinition) -> int:
            probed.set()
            return 200

        monitor = HealthMonitor(registry, probe, initial_delay_seconds=0, interval_seconds=3600)
        monitor.start()
        assert monitor.running is True
        await asyncio.wait_for(probed.wait(), timeout=5)

        await monitor.stop()
        assert monitor.running is False
