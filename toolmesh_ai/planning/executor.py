from __future__ import annotations

"""Dependency-graph plan execution.

The executor turns an ``OrchestrationPlan`` into an ``OrchestrationResult``.

Responsibilities
----------------

- Derive step dependencies from ``$stepId...`` references in
  ``input_mappings``.
- Run steps in waves: every step whose dependencies are all processed runs
  concurrently with the others in its wave.
- Cascade failures: a step with a failed or skipped dependency is skipped
  without being executed; a plan whose remaining steps can never become ready
  (cycles, references to unknown steps) has those steps skipped.

Step failures never raise out of ``execute``; they are recorded on the result.
"""

import asyncio
import time
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Set

from toolmesh_ai.core.logging_config import get_logger
from toolmesh_ai.credits.errors import InsufficientCreditsError
from toolmesh_ai.credits.ledger import CreditLedger
from toolmesh_ai.execution.adapter import ExecutionAdapter
from toolmesh_ai.registry.registry import ToolRegistry

from .models import OrchestrationPlan, OrchestrationResult, OrchestrationStep, StepResult, StepStatus
from .references import MISSING, ReferenceSyntaxError, evaluate, is_reference, parse_reference, referenced_step

logger = get_logger(__name__)

SKIPPED_DEPENDENCY_FAILED = "Skipped: dependency failed"
SKIPPED_UNFULFILLABLE = "Skipped: circular or unfulfillable dependency"


def build_dependency_graph(steps: List[OrchestrationStep]) -> Dict[str, Set[str]]:
    """Map each step id to the ids of the steps its mappings reference (self references ignored)."""
    graph: Dict[str, Set[str]] = {}
    for step in steps:
        deps: Set[str] = set()
        for ref in step.input_mappings.values():
            dep = referenced_step(ref)
            if dep and dep != step.step_id:
                deps.add(dep)
        graph[step.step_id] = deps
    return graph


def resolve_input(step: OrchestrationStep, outputs: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Overlay resolved ``input_mappings`` onto a copy of the step's literal input.

    A mapping that is not a reference is ignored. A reference that is malformed
    or does not resolve leaves the literal value in place and logs a warning.
    """
    resolved = dict(step.input)
    for key, ref in step.input_mappings.items():
        if not is_reference(ref):
            continue
        try:
            reference = parse_reference(ref)
        except ReferenceSyntaxError as exc:
            logger.warning("Input mapping is malformed", extra={"step_id": step.step_id, "key": key, "ref": ref, "error": str(exc)})
            continue

        value = evaluate(reference.path, outputs.get(reference.step_id))
        if value is MISSING:
            logger.warning(
                "Input mapping could not be resolved",
                extra={"step_id": step.step_id, "key": key, "ref": ref, "source_step": reference.step_id},
            )
            continue
        resolved[key] = value
    return resolved


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000.0, 3)


class PlanExecutor:
    """Execute orchestration plans against a registry through an execution adapter.

    When both ``ledger`` and ``user_id`` are given to ``execute``, every step
    reserves its own price before it is invoked. A step whose reservation is
    rejected fails without touching the provider; the reservation of a step
    is committed when it completes and rolled back when it fails.
    """

    def __init__(self, registry: ToolRegistry, adapter: ExecutionAdapter) -> None:
        self._registry = registry
        self._adapter = adapter

    async def execute(
        self,
        plan: OrchestrationPlan,
        *,
        ledger: Optional[CreditLedger] = None,
        user_id: Optional[str] = None,
    ) -> OrchestrationResult:
        started = time.monotonic()
        logger.info("Executing plan", extra={"goal": plan.goal, "step_count": len(plan.steps)})

        graph = build_dependency_graph(plan.steps)
        steps_by_id = {step.step_id: step for step in plan.steps}
        remaining: List[str] = list(steps_by_id)
        processed: Set[str] = set()
        unsuccessful: Set[str] = set()
        outputs: Dict[str, Any] = {}
        credits_by_step: Dict[str, float] = {}
        results: List[StepResult] = []

        while remaining:
            ready: List[str] = []
            skipped_in_pass = False
            for step_id in list(remaining):
                deps = graph[step_id]
                if not deps <= processed:
                    continue
                if deps & unsuccessful:
                    remaining.remove(step_id)
                    processed.add(step_id)
                    unsuccessful.add(step_id)
                    skipped_in_pass = True
                    results.append(self._skipped(steps_by_id[step_id], SKIPPED_DEPENDENCY_FAILED))
                    logger.info("Step skipped: dependency failed", extra={"step_id": step_id})
                    continue
                ready.append(step_id)

            if not ready:
                # A skip in this pass can unblock steps declared before it.
                if skipped_in_pass:
                    continue
                if remaining:
                    logger.warning(
                        "Plan has circular or unfulfillable dependencies", extra={"step_ids": list(remaining)}
                    )
                    for step_id in remaining:
                        results.append(self._skipped(steps_by_id[step_id], SKIPPED_UNFULFILLABLE))
                break

            snapshot = MappingProxyType(dict(outputs))
            wave = await asyncio.gather(
                *(self._run_step(steps_by_id[step_id], snapshot, ledger, user_id) for step_id in ready)
            )
            for step_result, credits in wave:
                results.append(step_result)
                remaining.remove(step_result.step_id)
                processed.add(step_result.step_id)
                if step_result.status is StepStatus.completed:
                    outputs[step_result.step_id] = step_result.result
                    credits_by_step[step_result.step_id] = credits
                else:
                    unsuccessful.add(step_result.step_id)

        final_output = None
        for step in reversed(plan.steps):
            if step.step_id in credits_by_step:
                final_output = outputs[step.step_id]
                break

        success = len(results) == len(plan.steps) and all(r.status is StepStatus.completed for r in results)
        total_credits = sum(credits_by_step.values())
        logger.info(
            "Plan finished",
            extra={"goal": plan.goal, "success": success, "total_credits": total_credits},
        )
        return OrchestrationResult(
            success=success,
            goal=plan.goal,
            plan=plan,
            step_results=results,
            final_output=final_output,
            total_duration_ms=_elapsed_ms(started),
            total_credits=total_credits,
        )

    @staticmethod
    def _skipped(step: OrchestrationStep, reason: str) -> StepResult:
        return StepResult(step_id=step.step_id, tool_id=step.tool_id, status=StepStatus.skipped, error=reason)

    async def _run_step(
        self,
        step: OrchestrationStep,
        outputs: Mapping[str, Any],
        ledger: Optional[CreditLedger],
        user_id: Optional[str],
    ) -> tuple[StepResult, float]:
        started = time.monotonic()
        tool = self._registry.get(step.tool_id)
        if tool is None:
            logger.warning("Step skipped: tool not found", extra={"step_id": step.step_id, "tool_id": step.tool_id})
            return self._skipped(step, f"Tool not found: {step.tool_id}"), 0.0

        payload = resolve_input(step, outputs)
        validation = self._registry.validate_input(step.tool_id, payload)
        if not validation.valid:
            message = f"Invalid input: {'; '.join(validation.errors)}"
            logger.warning("Step failed validation", extra={"step_id": step.step_id, "errors": validation.errors})
            return self._failed(step, message, started), 0.0

        price = self._registry.calculate_price(step.tool_id, payload)
        credits = price.credits if price is not None else 0.0

        tx_id: Optional[str] = None
        if ledger is not None and user_id is not None:
            try:
                tx_id = await ledger.reserve(user_id, credits, f"orchestrate:{step.tool_id}")
            except InsufficientCreditsError as exc:
                logger.warning(
                    "Step rejected: insufficient credits",
                    extra={"step_id": step.step_id, "required": exc.required, "available": exc.available},
                )
                return self._failed(step, str(exc), started), 0.0
            except Exception as exc:
                logger.error("Credit reservation failed", extra={"step_id": step.step_id, "error": str(exc)})
                return self._failed(step, f"Credit reservation failed: {exc}", started), 0.0

        logger.info(
            "Executing step", extra={"step_id": step.step_id, "tool_id": step.tool_id, "description": step.description}
        )
        try:
            result = await self._adapter.invoke_with_retries(tool, payload)
        except Exception as exc:
            logger.error("Step failed", extra={"step_id": step.step_id, "tool_id": step.tool_id, "error": str(exc)})
            if tx_id is not None and ledger is not None:
                try:
                    await ledger.rollback(tx_id)
                except Exception as rollback_exc:
                    logger.error(
                        "Credit rollback failed",
                        extra={"step_id": step.step_id, "tx_id": tx_id, "error": str(rollback_exc)},
                    )
            return self._failed(step, str(exc), started), 0.0

        if tx_id is not None and ledger is not None:
            try:
                await ledger.commit(tx_id)
            except Exception as exc:
                logger.error("Credit commit failed", extra={"step_id": step.step_id, "tx_id": tx_id, "error": str(exc)})
                return self._failed(step, f"Credit commit failed: {exc}", started), 0.0
        step_result = StepResult(
            step_id=step.step_id,
            tool_id=step.tool_id,
            status=StepStatus.completed,
            result=result,
            duration_ms=_elapsed_ms(started),
        )
        return step_result, credits

    @staticmethod
    def _failed(step: OrchestrationStep, error: str, started: float) -> StepResult:
        return StepResult(
            step_id=step.step_id,
            tool_id=step.tool_id,
            status=StepStatus.failed,
            error=error,
            duration_ms=_elapsed_ms(started),
        )
