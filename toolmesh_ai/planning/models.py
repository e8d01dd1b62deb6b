"""Plan and result models.

Field names are snake_case in Python and camelCase on the wire, so a plan
produced by a language model (``stepId``, ``toolId``, ``inputMappings``)
validates directly.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from toolmesh_ai.core.schemas import WireSchema


class StepStatus(str, Enum):
    completed = "completed"
    failed = "failed"
    skipped = "skipped"


class OrchestrationStep(WireSchema):
    step_id: str = Field(min_length=1)
    tool_id: str = Field(min_length=1)
    tool_name: str = ""
    input: Dict[str, Any] = Field(default_factory=dict)
    input_mappings: Dict[str, str] = Field(default_factory=dict)
    description: str = ""

    @field_validator("input", "input_mappings", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("tool_name", "description", mode="before")
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class OrchestrationPlan(WireSchema):
    goal: str
    steps: List[OrchestrationStep] = Field(default_factory=list)
    estimated_credits: float = 0.0
    estimated_duration_seconds: float = 30.0

    @field_validator("estimated_credits", "estimated_duration_seconds", mode="before")
    @classmethod
    def _default_estimates(cls, value: Any, info: Any) -> Any:
        if value is None:
            return 0.0 if info.field_name == "estimated_credits" else 30.0
        return value

    @model_validator(mode="after")
    def _unique_step_ids(self) -> "OrchestrationPlan":
        seen: set[str] = set()
        for step in self.steps:
            if step.step_id in seen:
                raise ValueError(f"duplicate step id: {step.step_id}")
            seen.add(step.step_id)
        return self


class StepResult(WireSchema):
    """Outcome of one step. Immutable once recorded."""

    model_config = ConfigDict(frozen=True)

    step_id: str
    tool_id: str
    status: StepStatus
    result: Any = None
    error: Optional[str] = None
    duration_ms: float = 0.0


class OrchestrationResult(WireSchema):
    success: bool
    goal: str
    plan: OrchestrationPlan
    step_results: List[StepResult]
    final_output: Any = None
    total_duration_ms: float
    total_credits: float

    def summary(self) -> Dict[str, Any]:
        """Compact view returned to protocol callers."""
        return {
            "success": self.success,
            "goal": self.goal,
            "totalCredits": self.total_credits,
            "totalDurationMs": self.total_duration_ms,
            "steps": [
                {
                    "stepId": r.step_id,
                    "toolId": r.tool_id,
                    "status": r.status.value,
                    "durationMs": r.duration_ms,
                    "error": r.error,
                }
                for r in self.step_results
            ],
            "finalOutput": self.final_output,
        }
