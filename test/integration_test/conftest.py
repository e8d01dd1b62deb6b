from typing import Any, AsyncGenerator, Callable, Dict, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic_ai import models
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from toolmesh_ai.planning.generator import PydanticAIReasoningService
from toolmesh_ai.server.core.config import Settings
from toolmesh_ai.server.services.container import ServiceContainer, get_container

API_KEY = "key-alice"


class PlannerModel:
    """Pydantic AI ``FunctionModel`` answering plan requests with scripted text."""

    def __init__(self) -> None:
        self.replies: List[str] = []
        self.requests: List[List[ModelMessage]] = []
        self.model = FunctionModel(self._respond)

    def _respond(self, messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        self.requests.append(messages)
        return ModelResponse(parts=[TextPart(self.replies.pop(0))])


@pytest.fixture
def planner_model() -> PlannerModel:
    models.ALLOW_MODEL_REQUESTS = False
    return PlannerModel()


@pytest.fixture
def app_container(provider_http_client: httpx.AsyncClient, planner_model: PlannerModel) -> ServiceContainer:
    values: Dict[str, Any] = {
        "PROVIDER_API_KEY": "test-key",
        "PROVIDER_SYNC_BASE_URL": "http://mock/sync",
        "PROVIDER_QUEUE_BASE_URL": "http://mock/queue",
        "ORCHESTRATOR_QUEUE_POLL_INTERVAL_SECONDS": 0.001,
        "ORCHESTRATOR_QUEUE_MAX_WAIT_SECONDS": 1.0,
        "ORCHESTRATOR_MAX_RETRIES": 0,
        "HEALTH_CHECK_ENABLED": False,
        "MCP_API_KEYS": {API_KEY: "alice"},
        "MCP_CREDIT_BALANCES": {"alice": 10},
    }
    return ServiceContainer.build(
        Settings(_env_file=None, **values),
        http_client=provider_http_client,
        reasoning=PydanticAIReasoningService(planner_model.model),
    )


@pytest_asyncio.fixture
async def app_client(app_container: ServiceContainer) -> AsyncGenerator[AsyncClient, None]:
    from toolmesh_ai.server.main import app

    app.dependency_overrides[get_container] = lambda: app_container
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://localhost", headers={"X-API-Key": API_KEY}
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def rpc() -> Callable[..., Dict[str, Any]]:
    counter = iter(range(1, 10_000))

    def _rpc(method: str, params: Any = None) -> Dict[str, Any]:
        message: Dict[str, Any] = {"jsonrpc": "2.0", "id": next(counter), "method": method}
        if params is not None:
            message["params"] = params
        return message

    return _rpc
