from typing import Any, AsyncGenerator, Callable, Dict

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from toolmesh_ai.server.core.config import Settings
from toolmesh_ai.server.services.container import ServiceContainer, get_container

API_KEY = "key-alice"
USER_ID = "alice"


def build_settings(**overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "PROVIDER_API_KEY": "test-key",
        "PROVIDER_SYNC_BASE_URL": "http://mock/sync",
        "PROVIDER_QUEUE_BASE_URL": "http://mock/queue",
        "ORCHESTRATOR_QUEUE_POLL_INTERVAL_SECONDS": 0.001,
        "ORCHESTRATOR_QUEUE_MAX_WAIT_SECONDS": 0.01,
        "ORCHESTRATOR_MAX_RETRIES": 0,
        "HEALTH_CHECK_ENABLED": False,
        "MCP_API_KEYS": {API_KEY: USER_ID},
        "MCP_CREDIT_BALANCES": {USER_ID: 10},
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def reasoning(scripted_reasoning):
    """Reasoning backend for plan generation; tests add completions with ``script``."""
    return scripted_reasoning()


@pytest.fixture
def container_factory(
    provider_http_client: httpx.AsyncClient, reasoning
) -> Callable[..., ServiceContainer]:
    def _factory(**overrides: Any) -> ServiceContainer:
        return ServiceContainer.build(build_settings(**overrides), http_client=provider_http_client, reasoning=reasoning)

    return _factory


@pytest.fixture
def container(container_factory) -> ServiceContainer:
    return container_factory()


@pytest_asyncio.fixture(name="client")
async def client_fixture(container: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the service container overridden."""
    from toolmesh_ai.server.main import app

    app.dependency_overrides[get_container] = lambda: container

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    return build_settings
