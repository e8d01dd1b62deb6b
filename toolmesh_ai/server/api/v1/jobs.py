"""
Jobs API Endpoints.

Status and result lookups for queue jobs. A direct ``tools/call`` that
outlives its wait budget answers with a job handle pointing here; the
``tool_id`` query parameter selects the provider model the job ran on.
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Query, status

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.execution.errors import ProviderHTTPError, ProviderNotConfiguredError, ToolExecutionError
from toolmesh_ai.registry.models import ToolDefinition
from toolmesh_ai.server.services.container import ServiceContainer
from toolmesh_ai.server.services.deps import ContainerDep

logger = get_logger(__name__)

router = APIRouter()


def _tool_or_404(container: ServiceContainer, tool_id: str) -> ToolDefinition:
    tool = container.registry.get(tool_id)
    if tool is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Tool not found: {tool_id}")
    return tool


def _provider_failure(job_id: str, exc: ToolExecutionError) -> HTTPException:
    if isinstance(exc, ProviderNotConfiguredError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    logger.warning("Job lookup failed", extra={"job_id": job_id, "error": str(exc)})
    if isinstance(exc, ProviderHTTPError) and exc.status_code == status.HTTP_404_NOT_FOUND:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Job not found: {job_id}")
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get(
    "/{job_id}",
    summary="Get Job Status",
    description="Current provider status of a queue job.",
    response_description="Normalized status, phase and the raw provider payload.",
    responses={404: {"description": "Unknown tool or job"}, 502: {"description": "Provider error"}},
)
async def get_job_status(
    job_id: str,
    container: ContainerDep,
    tool_id: str = Query(..., description="Tool the job was submitted for"),
) -> Dict[str, Any]:
    tool = _tool_or_404(container, tool_id)
    try:
        return await container.adapter.job_status(tool, job_id)
    except ToolExecutionError as exc:
        raise _provider_failure(job_id, exc) from exc


@router.get(
    "/{job_id}/result",
    summary="Get Job Result",
    description="Fetch the output of a completed queue job.",
    response_description="The provider's result payload.",
    responses={404: {"description": "Unknown tool or job"}, 502: {"description": "Provider error"}},
)
async def get_job_result(
    job_id: str,
    container: ContainerDep,
    tool_id: str = Query(..., description="Tool the job was submitted for"),
) -> Any:
    tool = _tool_or_404(container, tool_id)
    try:
        return await container.adapter.job_result(tool, job_id)
    except ToolExecutionError as exc:
        raise _provider_failure(job_id, exc) from exc
