"""An MCP client session driven across the SSE and message transports."""

from __future__ import annotations

import json

import pytest
from starlette.requests import Request

from toolmesh_ai.server.api.v1.mcp import open_sse_session

pytestmark = pytest.mark.asyncio

API_KEY = "key-alice"
DEMUCS = "fal-ai/demucs"


def _sse_request() -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/mcp/sse",
            "headers": [(b"x-api-key", API_KEY.encode())],
            "query_string": b"",
        }
    )


async def test_session_lifecycle(app_client, app_container, fake_provider, rpc):
    response = await open_sse_session(_sse_request(), app_container)
    events = response.body_iterator
    try:
        endpoint = await anext(events)
        assert endpoint["event"] == "endpoint"
        message_url = endpoint["data"]
        assert message_url.startswith("/mcp/message?sessionId=mcp-")

        async def exchange(message):
            ack = await app_client.post(message_url, json=message)
            assert ack.status_code == 202
            event = await anext(events)
            assert event["event"] == "message"
            return json.loads(event["data"])

        initialized = await exchange(rpc("initialize", {"protocolVersion": "2024-11-05", "capabilities": {}}))
        assert initialized["result"]["serverInfo"]["name"] == "toolmesh-gateway"

        listed = await exchange(rpc("tools/list"))
        names = [tool["name"] for tool in listed["result"]["tools"]]
        assert "audio.stem-separation" in names
        assert names[-1] == "orchestrate"

        fake_provider.queue_statuses[DEMUCS] = ["IN_QUEUE", "IN_PROGRESS"]
        called = await exchange(
            rpc("tools/call", {"name": "audio.stem-separation", "arguments": {"audio_url": "https://cdn.mock/t.mp3"}})
        )
        handle = json.loads(called["result"]["content"][0]["text"])
        assert handle["status"] == "PROCESSING"
        assert await app_container.ledger.balance("alice") == 8

        fake_provider.queue_statuses[DEMUCS] = ["COMPLETED"]
        fake_provider.queue_results[DEMUCS] = {"vocals": {"url": "https://cdn.mock/vocals.wav"}}
        status = await app_client.get(handle["statusUrl"])
        assert status.json()["phase"] == "completed"
        result = await app_client.get(handle["resultUrl"])
        assert result.json() == {"vocals": {"url": "https://cdn.mock/vocals.wav"}}

        broke = await exchange(
            rpc("tools/call", {"name": "music.generate", "arguments": {"prompt": "x", "duration": 999}})
        )
        assert broke["error"]["code"] == -32602
        assert broke["error"]["data"]["validationErrors"] == ["Field 'duration' must be <= 180, got 999"]
    finally:
        await events.aclose()

    assert len(app_container.sessions) == 0
    closed = await app_client.post(message_url, json=rpc("ping"))
    assert closed.status_code == 404


async def test_credit_exhaustion_over_http(app_client, app_container, fake_provider, rpc):
    fake_provider.sync_responses["fal-ai/flux-pro/kontext/max"] = {"images": [{"url": "https://cdn.mock/edit.png"}]}
    call = {"name": "image.generate.flux-pro-kontext-edit", "arguments": {"prompt": "add a hat", "image_url": "https://cdn.mock/a.png"}}

    for _ in range(20):
        response = await app_client.post("/mcp", json=rpc("tools/call", call))
        assert "result" in response.json()

    rejected = await app_client.post("/mcp", json=rpc("tools/call", call))

    assert rejected.status_code == 200
    assert rejected.json()["error"] == {
        "code": -32000,
        "message": "Insufficient credits. Need 0.5, have 0",
        "data": {"required": 0.5, "available": 0},
    }
    assert len(fake_provider.sync_payloads("fal-ai/flux-pro/kontext/max")) == 20
