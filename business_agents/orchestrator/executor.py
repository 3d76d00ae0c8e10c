"""Plan execution: run validated steps against the domain agents.

Steps run sequentially in plan order. A step whose dependencies have not
completed is logged and run anyway; the executor never reorders or blocks.
A failed HIGH or URGENT step aborts the rest of the plan.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Set

from .errors import AgentNotRegisteredError, StepExecutionError
from .models import AgentType, BusinessTask, StepResult, TaskStep, step_id

logger = logging.getLogger(__name__)


class PlanExecutor:
    """Dispatches plan steps to registered domain agents.

    Args:
        agents: Agent type -> object exposing ``async process_task(task_data)``
    """

    def __init__(self, agents: Mapping[AgentType, Any]):
        self.agents = {AgentType(agent_type): agent for agent_type, agent in agents.items()}

    def check_agents(self, plan: List[TaskStep]) -> None:
        """Make sure every agent type the plan needs is registered.

        Raises:
            AgentNotRegisteredError: One or more agent types have no agent
        """
        missing = {step.agent_type for step in plan if step.agent_type not in self.agents}
        if missing:
            raise AgentNotRegisteredError(missing)

    async def execute(self, plan: List[TaskStep], task: Optional[BusinessTask] = None) -> List[StepResult]:
        """Execute the plan and return one StepResult per attempted step.

        Args:
            plan: Validated steps, in execution order
            task: The originating task (used for log context only)

        Returns:
            Results in plan order; shorter than the plan only after an abort

        Raises:
            AgentNotRegisteredError: Before any step runs, if an agent is missing
        """
        self.check_agents(plan)

        label = f" for '{task.description[:60]}'" if task is not None else ""
        logger.info(f"🚀 Executing plan with {len(plan)} steps{label}...")

        results: List[StepResult] = []
        completed: Set[str] = set()

        for index, step in enumerate(plan):
            logger.info(f"📍 Step {index + 1}/{len(plan)}: {step.agent_type.value} - {step.task_type}")

            unmet = [dep for dep in step.dependencies if dep not in completed]
            if unmet:
                # Known limitation: proceed without waiting or reordering
                logger.info(f"⏳ Waiting for dependencies: {', '.join(unmet)}")

            try:
                output = await self._dispatch(step)
            except Exception as e:
                error = str(e) or e.__class__.__name__
                logger.error(f"❌ Step {index + 1} failed: {error}")
                results.append(StepResult(
                    step_index=index,
                    agent_type=step.agent_type,
                    task_type=step.task_type,
                    success=False,
                    error=error,
                ))

                if step.priority.is_critical:
                    logger.warning(f"🛑 Critical step failed ({step.priority.value}), aborting execution")
                    break
                continue

            results.append(StepResult(
                step_index=index,
                agent_type=step.agent_type,
                task_type=step.task_type,
                success=True,
                result=output,
            ))
            completed.add(step_id(index))
            logger.info(f"✅ Step {index + 1} completed successfully")

        return results

    async def _dispatch(self, step: TaskStep) -> Any:
        agent = self.agents[step.agent_type]
        task_data: Dict[str, Any] = {**step.task_data}
        task_data.setdefault("type", step.task_type)

        output = await agent.process_task(task_data)

        # Agents may report failure in-band instead of raising
        if isinstance(output, dict) and output.get("success") is False:
            raise StepExecutionError(output.get("error") or "Agent reported failure")
        return output
