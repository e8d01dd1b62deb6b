"""Orchestration: plan models, generation, templates and dependency-graph execution."""

from .executor import PlanExecutor, build_dependency_graph, resolve_input
from .generator import (
    PlanGenerationFailedError,
    PlanGenerator,
    PydanticAIReasoningService,
    ReasoningService,
    extract_json,
)
from .models import OrchestrationPlan, OrchestrationResult, OrchestrationStep, StepResult, StepStatus
from .orchestrator import Orchestrator
from .templates import WORKFLOW_TEMPLATES, TemplateParameterError, build_template_plan, template_names

__all__ = [
    "OrchestrationPlan",
    "OrchestrationResult",
    "OrchestrationStep",
    "Orchestrator",
    "PlanExecutor",
    "PlanGenerationFailedError",
    "PlanGenerator",
    "PydanticAIReasoningService",
    "ReasoningService",
    "StepResult",
    "StepStatus",
    "TemplateParameterError",
    "WORKFLOW_TEMPLATES",
    "build_dependency_graph",
    "build_template_plan",
    "extract_json",
    "resolve_input",
    "template_names",
]
