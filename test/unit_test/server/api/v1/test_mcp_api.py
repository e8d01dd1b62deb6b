import json

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from toolmesh_ai.gateway.auth import CallerContext
from toolmesh_ai.server.api.v1.mcp import open_sse_session

pytestmark = pytest.mark.asyncio

API_KEY = "key-alice"
UPSCALER = "fal-ai/creative-upscaler"


def _rpc(method: str, params=None, request_id=1) -> dict:
    message = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def _sse_request(headers=None) -> Request:
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "GET", "path": "/mcp/sse", "headers": raw_headers, "query_string": b""})


class TestStatelessTransport:
    async def test_server_info(self, client: AsyncClient, container):
        response = await client.get("/mcp")
        assert response.status_code == 200
        body = response.json()
        assert body["protocolVersion"] == "2024-11-05"
        assert body["tools"] == container.registry.size + 1

    async def test_ping(self, client: AsyncClient):
        response = await client.post("/mcp", json=_rpc("ping"))
        assert response.status_code == 200
        assert response.json() == {"jsonrpc": "2.0", "id": 1, "result": {}}

    async def test_tools_list(self, client: AsyncClient):
        response = await client.post("/mcp", json=_rpc("tools/list"))
        assert response.status_code == 200
        assert response.json()["result"]["tools"][-1]["name"] == "orchestrate"

    async def test_parse_error_is_bad_request(self, client: AsyncClient):
        response = await client.post("/mcp", content=b"{oops", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32700

    async def test_invalid_request_is_bad_request(self, client: AsyncClient):
        response = await client.post("/mcp", json={"jsonrpc": "2.0", "id": 1})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32600

    async def test_method_errors_are_ok_status(self, client: AsyncClient):
        response = await client.post("/mcp", json=_rpc("nope"))
        assert response.status_code == 200
        assert response.json()["error"]["code"] == -32601

    async def test_notification_is_accepted(self, client: AsyncClient):
        response = await client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
        assert response.status_code == 202
        assert response.json() == {"accepted": True}

    async def test_batch(self, client: AsyncClient):
        response = await client.post("/mcp", json=[_rpc("ping", request_id=1), _rpc("ping", request_id=2)])
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [1, 2]

    async def test_invalid_api_key(self, client: AsyncClient):
        response = await client.post("/mcp", json=_rpc("ping"), headers={"X-API-Key": "stolen"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid API key"

    async def test_metered_call(self, client: AsyncClient, container, fake_provider):
        fake_provider.sync_responses[UPSCALER] = {"image": {"url": "https://cdn.mock/up.png"}}

        response = await client.post(
            "/mcp",
            json=_rpc("tools/call", {"name": "image.upscale", "arguments": {"image_url": "https://cdn.mock/a.png"}}),
            headers={"Authorization": f"Bearer {API_KEY}"},
        )

        assert response.status_code == 200
        content = response.json()["result"]["content"][0]
        assert json.loads(content["text"]) == {"image": {"url": "https://cdn.mock/up.png"}}
        assert await container.ledger.balance("alice") == pytest.approx(9.5)

    async def test_orchestrate_over_http(self, client: AsyncClient, container, reasoning, stub_image_pipeline, image_upscale_plan_json):
        reasoning.script(image_upscale_plan_json)

        response = await client.post(
            "/mcp",
            json=_rpc("tools/call", {"name": "orchestrate", "arguments": {"goal": "a lighthouse, upscaled"}}),
            headers={"X-API-Key": API_KEY},
        )

        summary = json.loads(response.json()["result"]["content"][0]["text"])
        assert summary["success"] is True
        assert summary["totalCredits"] == pytest.approx(1.0)
        assert await container.ledger.balance("alice") == pytest.approx(9.0)


async def test_api_key_can_be_required(client: AsyncClient, container_factory):
    from toolmesh_ai.server.main import app
    from toolmesh_ai.server.services.container import get_container

    strict = container_factory(MCP_REQUIRE_API_KEY=True)
    app.dependency_overrides[get_container] = lambda: strict

    anonymous = await client.post("/mcp", json=_rpc("ping"))
    assert anonymous.status_code == 401
    assert anonymous.json()["detail"] == "API key required"

    keyed = await client.post("/mcp", json=_rpc("ping"), headers={"X-API-Key": API_KEY})
    assert keyed.status_code == 200


class TestSessionTransport:
    async def test_message_requires_session_id(self, client: AsyncClient):
        response = await client.post("/mcp/message", json=_rpc("ping"))
        assert response.status_code == 400

    async def test_unknown_session(self, client: AsyncClient):
        response = await client.post("/mcp/message?sessionId=mcp-gone", json=_rpc("ping"))
        assert response.status_code == 404

    async def test_reply_is_pushed_to_session(self, client: AsyncClient, container):
        session = container.sessions.open(CallerContext(user_id="alice"))

        response = await client.post(f"/mcp/message?sessionId={session.session_id}", json=_rpc("ping", request_id=7))

        assert response.status_code == 202
        assert response.json() == {"accepted": True}
        assert session.queue.get_nowait() == {"jsonrpc": "2.0", "id": 7, "result": {}}

    async def test_session_caller_is_metered(self, client: AsyncClient, container, fake_provider):
        fake_provider.sync_responses[UPSCALER] = {"image": {"url": "https://cdn.mock/up.png"}}
        session = container.sessions.open(CallerContext(user_id="alice"))

        await client.post(
            f"/mcp/message?sessionId={session.session_id}",
            json=_rpc("tools/call", {"name": "image.upscale", "arguments": {"image_url": "https://cdn.mock/a.png"}}),
        )

        assert "result" in session.queue.get_nowait()
        assert await container.ledger.balance("alice") == pytest.approx(9.5)

    async def test_notification_gets_no_push(self, client: AsyncClient, container):
        session = container.sessions.open()

        response = await client.post(
            f"/mcp/message?sessionId={session.session_id}",
            json={"jsonrpc": "2.0", "method": "notifications/initialized"},
        )

        assert response.status_code == 202
        assert session.queue.empty()

    async def test_sse_stream_announces_endpoint_and_relays_messages(self, container):
        response = await open_sse_session(_sse_request({"X-API-Key": API_KEY}), container)
        events = response.body_iterator

        endpoint = await anext(events)
        assert endpoint["event"] == "endpoint"
        session_id = endpoint["data"].split("sessionId=", 1)[1]
        session = container.sessions.get(session_id)
        assert session.caller == CallerContext(user_id="alice")

        container.sessions.deliver(session_id, {"jsonrpc": "2.0", "id": 1, "result": {}})
        message = await anext(events)
        assert message == {"event": "message", "data": json.dumps({"jsonrpc": "2.0", "id": 1, "result": {}})}

        await events.aclose()
        assert container.sessions.get(session_id) is None
        assert len(container.sessions) == 0
