"""
Orchestration API Endpoints.

Lists the workflow templates accepted by the ``orchestrate`` meta-tool.
Workflows themselves run through ``tools/call`` on the MCP transports so
that they are metered like any other call.
"""

from typing import Any, Dict, List

from fastapi import APIRouter

from toolmesh_ai.planning.templates import (
    TEMPLATE_DESCRIPTIONS,
    TEMPLATE_PARAMETERS,
    TEMPLATE_REQUIRED_PARAMETERS,
    build_template_plan,
    template_names,
)

router = APIRouter()


@router.get(
    "/templates",
    summary="List Workflow Templates",
    description="Workflow templates usable through the orchestrate tool.",
    response_description="Template names, descriptions, parameters (and which are required) and the tools each one chains.",
)
async def list_templates() -> List[Dict[str, Any]]:
    """
    List workflow templates.

    Pass a template's `name` as `template` and its parameters as `params`
    when calling the `orchestrate` tool. Leaving out any of `requiredParameters`
    makes the call fail with -32602 before any tool runs.
    """
    templates = []
    for name in template_names():
        plan = build_template_plan(name)
        templates.append(
            {
                "name": name,
                "description": TEMPLATE_DESCRIPTIONS.get(name, ""),
                "parameters": TEMPLATE_PARAMETERS.get(name, []),
                "requiredParameters": TEMPLATE_REQUIRED_PARAMETERS.get(name, []),
                "tools": [step.tool_id for step in plan.steps] if plan else [],
                "estimatedCredits": plan.estimated_credits if plan else 0,
            }
        )
    return templates
