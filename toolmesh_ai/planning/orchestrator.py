from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from toolmesh_ai.credits.ledger import CreditLedger

from .executor import PlanExecutor
from .generator import PlanGenerator
from .models import OrchestrationResult
from .templates import TemplateParameterError, build_template_plan, missing_template_parameters

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Facade over plan generation and execution.

    This is the entry point the protocol gateway uses for the ``orchestrate``
    meta-tool: either instantiate a named workflow template or ask the
    ``PlanGenerator`` for a plan, then run it with the ``PlanExecutor``.
    """

    def __init__(self, generator: PlanGenerator, executor: PlanExecutor) -> None:
        self.generator = generator
        self.executor = executor

    async def orchestrate(
        self,
        goal: str,
        context: Optional[Mapping[str, Any]] = None,
        *,
        ledger: Optional[CreditLedger] = None,
        user_id: Optional[str] = None,
    ) -> OrchestrationResult:
        """Generate a plan for ``goal`` and execute it.

        Raises:
            PlanGenerationFailedError: If no plan could be produced.
        """
        plan = await self.generator.generate_plan(goal, context)
        return await self.executor.execute(plan, ledger=ledger, user_id=user_id)

    async def run(
        self,
        goal: str,
        *,
        template: Optional[str] = None,
        params: Optional[Mapping[str, Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
        ledger: Optional[CreditLedger] = None,
        user_id: Optional[str] = None,
    ) -> OrchestrationResult:
        """Run a template when ``template`` names one, otherwise generate a plan.

        Raises:
            TemplateParameterError: If the template's required parameters are missing;
                no step runs in that case.
            PlanGenerationFailedError: If no plan could be produced.
        """
        if template:
            plan = build_template_plan(template, params, goal=goal)
            if plan is not None:
                missing = missing_template_parameters(template, params)
                if missing:
                    raise TemplateParameterError(template, missing)
                logger.info("Running workflow template %s", template, extra={"template": template})
                return await self.executor.execute(plan, ledger=ledger, user_id=user_id)
            logger.info("Unknown workflow template %s, falling back to plan generation", template)
        return await self.orchestrate(goal, context, ledger=ledger, user_id=user_id)
