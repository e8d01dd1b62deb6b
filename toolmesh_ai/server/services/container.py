from __future__ import annotations

"""Service container.

Builds the engine object graph from ``Settings`` and owns its background
tasks. The server holds one process-wide container (see ``get_container``);
library users and tests build their own with ``ServiceContainer.build``.
"""

from typing import Optional

import httpx

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.credits.ledger import InMemoryCreditLedger
from toolmesh_ai.execution.adapter import ExecutionAdapter, RetryPolicy
from toolmesh_ai.execution.http import ProviderClient
from toolmesh_ai.gateway.auth import StaticApiKeyResolver
from toolmesh_ai.gateway.handler import McpHandler
from toolmesh_ai.gateway.sessions import SessionRegistry
from toolmesh_ai.planning.executor import PlanExecutor
from toolmesh_ai.planning.generator import PlanGenerator, PydanticAIReasoningService, ReasoningService
from toolmesh_ai.planning.orchestrator import Orchestrator
from toolmesh_ai.registry.health import HealthMonitor
from toolmesh_ai.registry.models import ToolDefinition
from toolmesh_ai.registry.registry import ToolRegistry
from toolmesh_ai.server.core import constant
from toolmesh_ai.server.core.config import Settings, settings

logger = get_logger(__name__)


class ServiceContainer:
    """Holds every long-lived engine component for one server process."""

    def __init__(
        self,
        *,
        config: Settings,
        registry: ToolRegistry,
        client: ProviderClient,
        adapter: ExecutionAdapter,
        ledger: InMemoryCreditLedger,
        orchestrator: Orchestrator,
        handler: McpHandler,
        sessions: SessionRegistry,
        resolver: StaticApiKeyResolver,
        health_monitor: HealthMonitor,
    ) -> None:
        self.config = config
        self.registry = registry
        self.client = client
        self.adapter = adapter
        self.ledger = ledger
        self.orchestrator = orchestrator
        self.handler = handler
        self.sessions = sessions
        self.resolver = resolver
        self.health_monitor = health_monitor

    @classmethod
    def build(
        cls,
        config: Settings,
        *,
        registry: Optional[ToolRegistry] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        reasoning: Optional[ReasoningService] = None,
    ) -> "ServiceContainer":
        """
        Wire the engine from configuration.

        Args:
            config: Application settings.
            registry: Tool catalog; defaults to the built-in tools.
            http_client: Transport for provider calls, mainly for tests.
            reasoning: Plan generation backend; defaults to a Pydantic AI agent.
        """
        provider = config.provider
        orchestrator_config = config.orchestrator
        health_config = config.health_check
        gateway_config = config.gateway

        registry = registry if registry is not None else ToolRegistry.with_builtin_tools()
        client = ProviderClient(
            api_key=provider.api_key,
            sync_base_url=provider.sync_base_url,
            queue_base_url=provider.queue_base_url,
            timeout=provider.request_timeout_seconds,
            probe_timeout=provider.probe_timeout_seconds,
            client=http_client,
        )
        adapter = ExecutionAdapter(
            client,
            retry_policy=RetryPolicy(max_retries=orchestrator_config.max_retries),
            poll_interval_seconds=orchestrator_config.queue_poll_interval_seconds,
            max_wait_seconds=orchestrator_config.queue_max_wait_seconds,
        )
        ledger = InMemoryCreditLedger(gateway_config.credit_balances)
        if reasoning is None:
            reasoning = PydanticAIReasoningService(
                orchestrator_config.reasoning_model, max_tokens=orchestrator_config.max_tokens
            )
        generator = PlanGenerator(registry, reasoning, timeout_seconds=orchestrator_config.timeout_seconds)
        orchestrator = Orchestrator(generator, PlanExecutor(registry, adapter))
        handler = McpHandler(
            registry,
            adapter,
            orchestrator,
            ledger=ledger,
            jobs_url_prefix=f"{constant.API_V1_STR}/jobs",
        )

        async def probe(tool: ToolDefinition) -> int:
            return await client.probe(tool.provider_path)

        health_monitor = HealthMonitor(
            registry,
            probe,
            interval_seconds=health_config.interval_seconds,
            initial_delay_seconds=health_config.initial_delay_seconds,
            batch_size=health_config.batch_size,
        )
        return cls(
            config=config,
            registry=registry,
            client=client,
            adapter=adapter,
            ledger=ledger,
            orchestrator=orchestrator,
            handler=handler,
            sessions=SessionRegistry(),
            resolver=StaticApiKeyResolver(gateway_config.api_keys),
            health_monitor=health_monitor,
        )

    async def start(self) -> None:
        """Start background tasks. Must be called from a running event loop."""
        if self.config.health_check.enabled:
            self.health_monitor.start()
        self.ledger.start_sweeper()
        logger.info(
            "Service container started",
            extra={"tools": self.registry.size, "provider_configured": bool(self.client.api_key)},
        )

    async def stop(self) -> None:
        await self.health_monitor.stop()
        await self.ledger.stop_sweeper()
        await self.client.aclose()
        logger.info("Service container stopped")


_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    global _container
    if _container is None:
        _container = ServiceContainer.build(settings)
    return _container
