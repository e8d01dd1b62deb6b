from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import httpx
import pytest

from toolmesh_ai.execution.adapter import ExecutionAdapter, RetryPolicy
from toolmesh_ai.execution.http import ProviderClient
from toolmesh_ai.registry.registry import ToolRegistry

MOCK_SYNC_BASE_URL = "http://mock/sync"
MOCK_QUEUE_BASE_URL = "http://mock/queue"


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://0.0.0.0",
        "http://test",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
    yield


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------


class FakeTime:
    """Monotonic clock and sleep that advance together without waiting."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

ResponseSpec = Union[None, httpx.Response, Callable[[Dict[str, Any]], Any], Any]


@dataclass
class _Job:
    model_path: str
    payload: Dict[str, Any]
    polls: int = 0


@dataclass
class FakeProvider:
    """Programmable stand-in for the provider's sync and queue HTTP APIs.

    - ``sync_responses[model_path]``: body for ``POST {sync}/{model_path}``.
    - ``queue_statuses[model_path]``: statuses returned by successive polls;
      the last one repeats. Defaults to ``["COMPLETED"]``.
    - ``queue_results[model_path]``: body for the result fetch.
    - ``probe_statuses[model_path]``: status for ``HEAD`` probes (default 405).

    A response spec may be a JSON-able value, an ``httpx.Response`` or a
    callable receiving the request payload.
    """

    sync_responses: Dict[str, ResponseSpec] = field(default_factory=dict)
    queue_statuses: Dict[str, List[str]] = field(default_factory=dict)
    queue_results: Dict[str, ResponseSpec] = field(default_factory=dict)
    probe_statuses: Dict[str, int] = field(default_factory=dict)
    jobs: Dict[str, _Job] = field(default_factory=dict)
    requests: List[httpx.Request] = field(default_factory=list)

    def sync_payloads(self, model_path: str) -> List[Dict[str, Any]]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == "POST" and r.url.path == f"/sync/{model_path}"
        ]

    def _respond(self, spec: ResponseSpec, payload: Dict[str, Any]) -> httpx.Response:
        if spec is None:
            return httpx.Response(404, json={"detail": "not found"})
        if isinstance(spec, httpx.Response):
            return spec
        if callable(spec):
            produced = spec(payload)
            return produced if isinstance(produced, httpx.Response) else httpx.Response(200, json=produced)
        return httpx.Response(200, json=spec)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        payload = json.loads(request.content) if request.content else {}

        if path.startswith("/sync/"):
            model_path = path[len("/sync/") :]
            if request.method == "HEAD":
                return httpx.Response(self.probe_statuses.get(model_path, 405))
            return self._respond(self.sync_responses.get(model_path), payload)

        if path.startswith("/queue/"):
            rest = path[len("/queue/") :]
            if "/requests/" not in rest:
                request_id = f"req-{len(self.jobs) + 1}"
                self.jobs[request_id] = _Job(model_path=rest, payload=payload)
                return httpx.Response(200, json={"request_id": request_id, "status": "IN_QUEUE"})

            model_path, _, tail = rest.partition("/requests/")
            request_id, _, suffix = tail.partition("/")
            job = self.jobs.get(request_id)
            if job is None:
                return httpx.Response(404, json={"detail": f"unknown request {request_id}"})
            if suffix == "status":
                statuses = self.queue_statuses.get(model_path, ["COMPLETED"])
                status = statuses[min(job.polls, len(statuses) - 1)]
                job.polls += 1
                return httpx.Response(200, json={"status": status, "request_id": request_id})
            return self._respond(self.queue_results.get(model_path), job.payload)

        return httpx.Response(404, json={"detail": "not found"})


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def provider_http_client(fake_provider: FakeProvider) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_provider.handle))


@pytest.fixture
def provider_client(provider_http_client: httpx.AsyncClient) -> ProviderClient:
    return ProviderClient(
        api_key="test-key",
        sync_base_url=MOCK_SYNC_BASE_URL,
        queue_base_url=MOCK_QUEUE_BASE_URL,
        client=provider_http_client,
    )


@pytest.fixture
def adapter(provider_client: ProviderClient, fake_time: FakeTime) -> ExecutionAdapter:
    return ExecutionAdapter(
        provider_client,
        retry_policy=RetryPolicy(max_retries=1),
        poll_interval_seconds=3.0,
        max_wait_seconds=30.0,
        clock=fake_time.monotonic,
        sleep=fake_time.sleep,
    )


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry.with_builtin_tools()


# ---------------------------------------------------------------------------
# Reasoning
# ---------------------------------------------------------------------------


class ScriptedReasoning:
    """``ReasoningService`` returning canned completions in order."""

    def __init__(self, *completions: Union[str, BaseException]) -> None:
        self._completions = list(completions)
        self.calls: List[Dict[str, str]] = []

    def script(self, *completions: Union[str, BaseException]) -> "ScriptedReasoning":
        self._completions.extend(completions)
        return self

    async def complete(self, system_prompt: str, prompt: str) -> str:
        self.calls.append({"system_prompt": system_prompt, "prompt": prompt})
        if not self._completions:
            raise RuntimeError("no scripted completion left")
        completion = self._completions.pop(0)
        if isinstance(completion, BaseException):
            raise completion
        return completion


@pytest.fixture
def scripted_reasoning() -> Callable[..., ScriptedReasoning]:
    return ScriptedReasoning


def _image_then_upscale_plan(upscale_mapping: str = "$step1.images[0].url") -> Dict[str, Any]:
    return {
        "steps": [
            {
                "stepId": "step1",
                "toolId": "image.generate.flux-pro-kontext",
                "input": {"prompt": "a lighthouse at dusk"},
                "description": "Generate the base image",
            },
            {
                "stepId": "step2",
                "toolId": "image.upscale",
                "input": {"scale": 2},
                "inputMappings": {"image_url": upscale_mapping},
                "description": "Upscale it",
            },
        ],
        "estimatedCredits": 1.0,
        "estimatedDurationSeconds": 20,
    }


@pytest.fixture
def image_upscale_plan_json() -> str:
    return json.dumps(_image_then_upscale_plan())


@pytest.fixture
def stub_image_pipeline(fake_provider: FakeProvider) -> FakeProvider:
    """Provider answering the text-to-image and upscale tools synchronously."""
    fake_provider.sync_responses["fal-ai/flux-pro/kontext/text-to-image"] = {
        "images": [{"url": "https://cdn.mock/generated.png", "width": 1024, "height": 768}],
        "seed": 42,
    }
    fake_provider.sync_responses["fal-ai/creative-upscaler"] = lambda payload: {
        "image": {"url": "https://cdn.mock/upscaled.png", "source": payload.get("image_url")}
    }
    return fake_provider


def _build_orchestrator(registry: ToolRegistry, adapter: ExecutionAdapter, reasoning: Any) -> Any:
    from toolmesh_ai.planning.executor import PlanExecutor
    from toolmesh_ai.planning.generator import PlanGenerator
    from toolmesh_ai.planning.orchestrator import Orchestrator

    generator = PlanGenerator(registry, reasoning, timeout_seconds=5)
    return Orchestrator(generator, PlanExecutor(registry, adapter))


@pytest.fixture
def orchestrator_factory(registry: ToolRegistry, adapter: ExecutionAdapter) -> Callable[..., Any]:
    def _factory(*completions: Union[str, BaseException], reasoning: Optional[ScriptedReasoning] = None) -> Any:
        return _build_orchestrator(registry, adapter, reasoning or ScriptedReasoning(*completions))

    return _factory
