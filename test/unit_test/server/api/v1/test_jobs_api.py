import json

import pytest
from httpx import AsyncClient

from toolmesh_ai.execution.errors import ProviderHTTPError
from toolmesh_ai.server.main import app
from toolmesh_ai.server.services.container import get_container

pytestmark = pytest.mark.asyncio

DEMUCS = "fal-ai/demucs"
STEM_TOOL = "audio.stem-separation"


async def _start_slow_job(client: AsyncClient, fake_provider) -> dict:
    fake_provider.queue_statuses[DEMUCS] = ["IN_PROGRESS"]
    response = await client.post(
        "/mcp",
        json={
            "jsonrpc": "2.0",
            "id": 1,
            "method": "tools/call",
            "params": {"name": STEM_TOOL, "arguments": {"audio_url": "https://cdn.mock/track.mp3"}},
        },
    )
    assert response.status_code == 200
    return json.loads(response.json()["result"]["content"][0]["text"])


async def test_processing_job_can_be_followed(client: AsyncClient, fake_provider):
    handle = await _start_slow_job(client, fake_provider)
    assert handle["status"] == "PROCESSING"
    assert handle["statusUrl"] == f"/api/v1/jobs/{handle['jobId']}?tool_id={STEM_TOOL}"

    response = await client.get(handle["statusUrl"])
    assert response.status_code == 200
    assert response.json()["status"] == "IN_PROGRESS"
    assert response.json()["phase"] == "in_progress"

    fake_provider.queue_statuses[DEMUCS] = ["COMPLETED"]
    fake_provider.queue_results[DEMUCS] = {"vocals": {"url": "https://cdn.mock/vocals.wav"}}

    status = await client.get(handle["statusUrl"])
    assert status.json() == {
        "jobId": handle["jobId"],
        "toolId": STEM_TOOL,
        "status": "COMPLETED",
        "phase": "completed",
        "raw": {"status": "COMPLETED", "request_id": handle["jobId"]},
    }

    result = await client.get(handle["resultUrl"])
    assert result.status_code == 200
    assert result.json() == {"vocals": {"url": "https://cdn.mock/vocals.wav"}}


async def test_unknown_job(client: AsyncClient):
    response = await client.get(f"/api/v1/jobs/req-404?tool_id={STEM_TOOL}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Job not found: req-404"


async def test_unknown_tool(client: AsyncClient):
    response = await client.get("/api/v1/jobs/req-1/result?tool_id=audio.teleport")
    assert response.status_code == 404
    assert response.json()["detail"] == "Tool not found: audio.teleport"


async def test_tool_id_is_required(client: AsyncClient):
    response = await client.get("/api/v1/jobs/req-1")
    assert response.status_code == 422


async def test_provider_error_is_bad_gateway(client: AsyncClient, container, monkeypatch):
    async def failing_status(tool, job_id):
        raise ProviderHTTPError("Provider status check failed: 500 - boom", status_code=500)

    monkeypatch.setattr(container.adapter, "job_status", failing_status)

    response = await client.get(f"/api/v1/jobs/req-1?tool_id={STEM_TOOL}")
    assert response.status_code == 502
    assert response.json()["detail"] == "Provider status check failed: 500 - boom"


async def test_unconfigured_provider(client: AsyncClient, container_factory):
    unconfigured = container_factory(PROVIDER_API_KEY=None)
    app.dependency_overrides[get_container] = lambda: unconfigured

    response = await client.get(f"/api/v1/jobs/req-1?tool_id={STEM_TOOL}")

    assert response.status_code == 503
    assert response.json()["detail"] == "Provider API key is not configured"
