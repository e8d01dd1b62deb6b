"""
Tools API Endpoints.

Read-only discovery over the capability registry: list and search tools,
group them by category, inspect advisory health and quote prices. Tool
invocation goes through the MCP transports, not through this router.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, status

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.registry.models import HealthStatus, ToolCategory, ToolDefinition
from toolmesh_ai.server.services.deps import ContainerDep

logger = get_logger(__name__)

router = APIRouter()


def _serialize(tool: ToolDefinition) -> Dict[str, Any]:
    return tool.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get(
    "/",
    summary="List Tools",
    description="List enabled tools, optionally filtered by category, tag or a free-text query.",
    response_description="A list of tool definitions.",
)
async def list_tools(
    container: ContainerDep,
    category: Optional[ToolCategory] = None,
    tag: Optional[str] = None,
    q: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    List tools.

    Filters combine: every tool returned matches all the filters given.

    **Query Parameters:**
    - `category`: one of the tool categories, e.g. `image-generation`
    - `tag`: exact tag match
    - `q`: case-insensitive match on name, description, tags and id
    """
    registry = container.registry
    tools = registry.search(q) if q else registry.enabled()
    if category is not None:
        tools = [tool for tool in tools if tool.category is category]
    if tag:
        tools = [tool for tool in tools if tag in tool.tags]
    return [_serialize(tool) for tool in tools]


@router.get(
    "/categories",
    summary="List Categories",
    description="Enabled tools grouped by category.",
    response_description="Category name, tool count and tool ids.",
)
async def list_categories(container: ContainerDep) -> List[Dict[str, Any]]:
    return container.registry.categories()


@router.get(
    "/health",
    summary="Tool Health",
    description="Advisory health snapshot of every tool that has been probed.",
    response_description="Per-tool health plus status counts.",
)
async def tools_health(container: ContainerDep) -> Dict[str, Any]:
    snapshots = container.registry.all_health()
    counts = {health_status.value: 0 for health_status in HealthStatus}
    for health in snapshots.values():
        counts[health.status.value] += 1
    return {
        "summary": counts,
        "tools": {tool_id: health.to_dict() for tool_id, health in snapshots.items()},
    }


@router.post(
    "/{tool_id}/price",
    summary="Quote Price",
    description="Validate the given input and compute the price of one invocation.",
    response_description="USD cost, credits and metering units.",
    responses={
        404: {"description": "Unknown tool"},
        422: {"description": "Input does not satisfy the tool schema"},
    },
)
async def quote_price(
    tool_id: str,
    container: ContainerDep,
    params: Optional[Dict[str, Any]] = Body(default=None),
) -> Dict[str, Any]:
    """
    Quote a price.

    The body is the same argument object a `tools/call` would send.
    """
    params = params or {}
    registry = container.registry
    if tool_id not in registry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tool not found: {tool_id}")
    validation = registry.validate_input(tool_id, params)
    if not validation.valid:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"validationErrors": validation.errors},
        )
    price = registry.calculate_price(tool_id, params)
    return {"toolId": tool_id, **price.to_dict()}


@router.get(
    "/{tool_id}",
    summary="Get Tool",
    description="Retrieve one tool definition with its current health.",
    response_description="Tool definition.",
    responses={404: {"description": "Unknown tool"}},
)
async def get_tool(tool_id: str, container: ContainerDep) -> Dict[str, Any]:
    registry = container.registry
    tool = registry.get(tool_id)
    if tool is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tool not found: {tool_id}")
    health = registry.health(tool_id)
    return {**_serialize(tool), "health": health.to_dict() if health else None}
