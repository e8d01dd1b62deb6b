import pytest
from httpx import AsyncClient

from toolmesh_ai.registry.models import HealthStatus, ToolHealth

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/tools"


async def test_list_tools(client: AsyncClient, container):
    response = await client.get(f"{BASE}/")
    assert response.status_code == 200
    tools = response.json()
    assert len(tools) == container.registry.size
    upscale = next(t for t in tools if t["id"] == "image.upscale")
    assert upscale["executionMode"] == "sync"
    assert upscale["inputSchema"]["required"] == ["image_url"]
    assert upscale["pricing"]["credits"] == 0.5


@pytest.mark.parametrize(
    "query,expected_id",
    [
        ("category=image-processing", "image.upscale"),
        ("tag=stem-separation", "audio.stem-separation"),
        ("q=UPSCALE", "image.upscale"),
    ],
)
async def test_filters(client: AsyncClient, query: str, expected_id: str):
    response = await client.get(f"{BASE}/?{query}")
    assert response.status_code == 200
    assert expected_id in [t["id"] for t in response.json()]


async def test_filters_combine(client: AsyncClient):
    response = await client.get(f"{BASE}/?category=audio-processing&q=upscale")
    assert response.status_code == 200
    assert response.json() == []


async def test_unknown_category_is_rejected(client: AsyncClient):
    response = await client.get(f"{BASE}/?category=teleportation")
    assert response.status_code == 422


async def test_categories(client: AsyncClient, container):
    response = await client.get(f"{BASE}/categories")
    assert response.status_code == 200
    categories = response.json()
    assert sum(c["count"] for c in categories) == container.registry.size
    processing = next(c for c in categories if c["category"] == "image-processing")
    assert "image.upscale" in processing["tools"]


async def test_tools_health(client: AsyncClient, container):
    container.registry.record_health("image.upscale", ToolHealth(status=HealthStatus.down, consecutive_failures=3))

    response = await client.get(f"{BASE}/health")

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["down"] == 1
    assert body["summary"]["unknown"] == container.registry.size - 1
    assert body["tools"]["image.upscale"]["consecutiveFailures"] == 3


async def test_get_tool(client: AsyncClient):
    response = await client.get(f"{BASE}/image.upscale")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Creative Upscaler"
    assert body["health"]["status"] == "unknown"


async def test_get_unknown_tool(client: AsyncClient):
    response = await client.get(f"{BASE}/image.teleport")
    assert response.status_code == 404
    assert response.json()["detail"] == "Tool not found: image.teleport"


async def test_price_flat(client: AsyncClient):
    response = await client.post(f"{BASE}/image.upscale/price", json={"image_url": "https://cdn.mock/a.png"})
    assert response.status_code == 200
    body = response.json()
    assert body["toolId"] == "image.upscale"
    assert body["credits"] == 0.5
    assert body["usd"] == pytest.approx(0.039)
    assert body["meteringUnits"] == "39000"


async def test_price_per_second(client: AsyncClient):
    response = await client.post(f"{BASE}/video.generate.veo3/price", json={"prompt": "waves", "duration": "8s"})
    assert response.status_code == 200
    body = response.json()
    assert body["credits"] == pytest.approx(17.6)
    assert body["usd"] == pytest.approx(1.04)
    assert body["meteringUnits"] == "1040000"


async def test_price_invalid_input(client: AsyncClient):
    response = await client.post(f"{BASE}/image.upscale/price", json={"scale": 4})
    assert response.status_code == 422
    assert response.json()["detail"] == {"validationErrors": ["Missing required field: image_url"]}


async def test_price_unknown_tool(client: AsyncClient):
    response = await client.post(f"{BASE}/image.teleport/price", json={})
    assert response.status_code == 404
