from __future__ import annotations

"""Natural-language plan generation.

``PlanGenerator`` turns a goal into an ``OrchestrationPlan``:

- Describe the enabled catalog (optionally restricted to
  ``context["allowedTools"]``) to a reasoning service.
- Extract a JSON plan from the free-form completion.
- Drop steps that name tools the registry does not know and fill in
  ``tool_name`` for the rest.

The reasoning call itself is a black box behind ``ReasoningService``. The
default implementation drives a Pydantic AI ``Agent``.
"""

import asyncio
import json
import re
from typing import Any, Dict, List, Mapping, Optional, Protocol

from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.settings import ModelSettings

from toolmesh_ai.core.errors import ToolMeshError
from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.registry.models import ToolDefinition
from toolmesh_ai.registry.registry import ToolRegistry

from .models import OrchestrationPlan

logger = get_logger(__name__)

MAX_GOAL_LENGTH = 2000

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?\s*```")

SYSTEM_PROMPT_TEMPLATE = """You are the ToolMesh Orchestrator. You plan multi-step AI workflows by selecting and chaining tools.

AVAILABLE TOOLS:
{catalog}

Given a user's creative goal, create an execution plan as a JSON array of steps.
Each step should specify:
- stepId: unique identifier (e.g., "step1", "step2")
- toolId: the tool to invoke
- input: the input parameters for the tool
- inputMappings: references to outputs from previous steps using $stepId.path syntax
- description: what this step does

RULES:
1. Use $stepN.path.to.value to reference outputs from step N in later steps
2. Common output paths: $step1.images[0].url, $step1.audio_file.url, $step1.video.url, $step1.output
3. Order steps logically - dependencies must come before dependents
4. Minimize steps - only use what's needed
5. Include realistic input parameters
6. Never refuse - always plan something useful

Respond with ONLY a JSON object:
{{
  "steps": [...],
  "estimatedCredits": number,
  "estimatedDurationSeconds": number
}}"""


class PlanGenerationFailedError(ToolMeshError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to generate plan: {reason}")
        self.reason = reason


class ReasoningService(Protocol):
    async def complete(self, system_prompt: str, prompt: str) -> str:
        ...


class PydanticAIReasoningService:
    """``ReasoningService`` backed by a Pydantic AI agent.

    Args:
        model: A Pydantic AI model or model name such as ``"anthropic:claude-sonnet-4-5"``.
        max_tokens: Completion budget per call.
    """

    def __init__(self, model: Any, *, max_tokens: int = 2048) -> None:
        self._model = model
        self._max_tokens = max_tokens

    async def complete(self, system_prompt: str, prompt: str) -> str:
        agent: Agent[None, str] = Agent(
            self._model,
            output_type=str,
            system_prompt=system_prompt,
            model_settings=ModelSettings(max_tokens=self._max_tokens),
        )
        result = await agent.run(prompt)
        return result.output


def extract_json(text: str) -> Any:
    """
    Pull the first JSON value out of a model completion.

    Strategies, in order: the whole text; the first fenced code block; the
    first decodable ``{...}`` object; the first decodable ``[...]`` array.

    Returns:
        The decoded value, or ``None`` if nothing decodes.
    """
    try:
        return json.loads(text)
    except ValueError:
        pass

    fenced = _FENCED_BLOCK.search(text)
    if fenced:
        try:
            return json.loads(fenced.group(1))
        except ValueError:
            pass

    decoder = json.JSONDecoder()
    for opener in ("{", "["):
        start = text.find(opener)
        while start != -1:
            try:
                value, _ = decoder.raw_decode(text, start)
                return value
            except ValueError:
                start = text.find(opener, start + 1)
    return None


def sanitize_goal(goal: Any) -> str:
    if not isinstance(goal, str):
        return ""
    return goal.strip()[:MAX_GOAL_LENGTH]


def describe_tool(tool: ToolDefinition) -> Dict[str, Any]:
    properties = tool.input_schema.properties
    return {
        "id": tool.id,
        "name": tool.name,
        "description": tool.description,
        "category": tool.category.value,
        "inputs": ", ".join(f"{name} ({param.type}): {param.description or ''}" for name, param in properties.items()),
        "required": list(tool.input_schema.required),
        "outputType": ", ".join(tool.output_mime_types),
        "credits": tool.pricing.credits,
        "executionMode": tool.execution_mode.value,
    }


class PlanGenerator:
    """Produce orchestration plans from natural-language goals."""

    def __init__(
        self,
        registry: ToolRegistry,
        reasoning: ReasoningService,
        *,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._registry = registry
        self._reasoning = reasoning
        self._timeout = timeout_seconds

    def catalog_for(self, context: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        allowed = (context or {}).get("allowedTools")
        tools = self._registry.tools_for_agent(allowed) if isinstance(allowed, list) else self._registry.enabled()
        return [describe_tool(tool) for tool in tools]

    def system_prompt(self, context: Optional[Mapping[str, Any]] = None) -> str:
        return SYSTEM_PROMPT_TEMPLATE.format(catalog=json.dumps(self.catalog_for(context), indent=2))

    async def generate_plan(self, goal: str, context: Optional[Mapping[str, Any]] = None) -> OrchestrationPlan:
        """
        Ask the reasoning service for a plan that achieves ``goal``.

        Args:
            goal: Natural-language description of the desired outcome.
            context: Optional caller context; ``allowedTools`` restricts the catalog.

        Returns:
            OrchestrationPlan: Steps whose tools all exist in the registry.

        Raises:
            PlanGenerationFailedError: Empty goal, reasoning failure or timeout,
                or no valid JSON plan in the completion.
        """
        sanitized = sanitize_goal(goal)
        if not sanitized:
            raise PlanGenerationFailedError("Goal is required for orchestration")

        prompt = f"Goal: {sanitized}"
        if context:
            prompt += f"\nContext: {json.dumps(context, default=str)}"

        try:
            completion = await asyncio.wait_for(
                self._reasoning.complete(self.system_prompt(context), prompt), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            logger.error("Plan generation timed out", extra={"goal": sanitized, "timeout_seconds": self._timeout})
            raise PlanGenerationFailedError(f"reasoning call timed out after {self._timeout:g}s") from exc
        except Exception as exc:
            logger.error("Plan generation failed", extra={"goal": sanitized, "error": str(exc)})
            raise PlanGenerationFailedError(str(exc)) from exc

        return self.parse_plan(goal, completion or "")

    def parse_plan(self, goal: str, completion: str) -> OrchestrationPlan:
        data = extract_json(completion)
        if isinstance(data, list):
            data = {"steps": data}
        if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
            raise PlanGenerationFailedError("No valid JSON plan found in LLM response")

        kept: List[Dict[str, Any]] = []
        for raw_step in data["steps"]:
            if not isinstance(raw_step, dict):
                logger.warning("Plan step is not an object, removing step", extra={"step": repr(raw_step)[:200]})
                continue
            tool_id = raw_step.get("toolId", raw_step.get("tool_id"))
            tool = self._registry.get(tool_id) if isinstance(tool_id, str) else None
            if tool is None:
                logger.warning(
                    "Plan references unknown tool, removing step",
                    extra={"tool_id": tool_id, "step_id": raw_step.get("stepId", raw_step.get("step_id"))},
                )
                continue
            kept.append({**raw_step, "toolName": tool.name})

        try:
            return OrchestrationPlan.model_validate(
                {
                    "goal": goal,
                    "steps": kept,
                    "estimatedCredits": data.get("estimatedCredits") or 0,
                    "estimatedDurationSeconds": data.get("estimatedDurationSeconds") or 30,
                }
            )
        except ValidationError as exc:
            raise PlanGenerationFailedError(f"Plan does not match the expected shape: {exc.error_count()} error(s)") from exc
