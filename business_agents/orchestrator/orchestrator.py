"""Orchestrator: single entry point for multi-agent business tasks.

Plans a task with the model, executes the plan against the domain agents and
synthesizes a final report. All LLM traffic goes through one SmartRouter.

Only a structurally impossible plan (an agent type with no registered agent)
raises to the caller; provider flakiness, unparseable plans and failed steps
all degrade into fallbacks or partial results.
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional, Union

from ..agents import CustomerAgent, EmailAgent, FinanceAgent, SocialAgent
from ..llm import SmartRouter
from .errors import AgentNotRegisteredError
from .executor import PlanExecutor
from .models import AgentType, BusinessTask, Priority, TaskKind, TaskOutcome, utc_now
from .planner import PlanGenerator
from .synthesizer import ResultSynthesizer

logger = logging.getLogger(__name__)


def default_agents(router, user_id: str) -> Dict[AgentType, Any]:
    """One agent per agent type, all sharing ``router``."""
    return {
        AgentType.EMAIL: EmailAgent(router, user_id),
        AgentType.FINANCE: FinanceAgent(router, user_id),
        AgentType.SOCIAL: SocialAgent(router, user_id),
        AgentType.CUSTOMER: CustomerAgent(router, user_id),
    }


class Orchestrator:
    """Coordinates planning, execution and synthesis for one user.

    Args:
        router: Shared SmartRouter (built from the environment if omitted)
        agents: Agent type -> agent; defaults to the four built-in agents
        state_store: Optional object with ``async save_state(record)``
        user_id: Owner recorded on checkpoints
    """

    def __init__(
        self,
        router: Optional[SmartRouter] = None,
        agents: Optional[Mapping[Union[AgentType, str], Any]] = None,
        state_store: Any = None,
        user_id: str = "anonymous",
    ):
        self.router = router or SmartRouter.from_env()
        self.user_id = user_id
        if agents is None:
            agents = default_agents(self.router, user_id)
        self.agents = {AgentType(agent_type): agent for agent_type, agent in agents.items()}
        self.state_store = state_store

        self.planner = PlanGenerator(self.router)
        self.executor = PlanExecutor(self.agents)
        self.synthesizer = ResultSynthesizer(self.router)

    async def process_task(self, task: Union[BusinessTask, Dict[str, Any]]) -> TaskOutcome:
        """Plan, execute and synthesize one business task.

        The model's plan is used as soon as it validates, so a model that
        names an agent type with no registered agent fails the whole call even
        when the keyword fallback plan could have run.

        Raises:
            AgentNotRegisteredError: The plan needs an agent that is not registered
        """
        if isinstance(task, dict):
            task = BusinessTask(**task)

        task_id = task.id or f"TASK-{int(time.time() * 1000)}"
        logger.info(f"🎯 Orchestrator processing: {task.description}")
        logger.info(f"📊 Priority: {task.priority.value} | Type: {task.type.value}")

        await self._checkpoint(task_id, {"task": task.to_dict(), "status": "planning"})

        try:
            plan = await self.planner.plan(task)
            logger.info(f"📋 Execution plan created with {len(plan)} steps")
            results = await self.executor.execute(plan, task)
        except AgentNotRegisteredError as e:
            logger.error(f"❌ Orchestrator error: {e}")
            await self._checkpoint(task_id, {
                "task": task.to_dict(),
                "status": "failed",
                "error": str(e),
            })
            raise

        report = await self.synthesizer.synthesize(results, task)

        outcome = TaskOutcome(
            task_id=task_id,
            description=task.description,
            status="completed",
            execution_plan=plan,
            agent_results=results,
            final_result=report,
        )

        await self._checkpoint(task_id, {
            "task": task.to_dict(),
            "status": "completed",
            "execution_plan": [step.to_dict() for step in plan],
            "results": [result.to_dict() for result in results],
            "final_result": report.to_dict(),
        })

        logger.info(f"✅ Task {task_id} finished: {report.overall_status.value}")
        return outcome

    async def _checkpoint(self, task_id: str, state: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Persist orchestration state; an unavailable store is a no-op."""
        if self.state_store is None:
            return None

        record = {
            "id": task_id,
            "user_id": self.user_id,
            "agent_type": "orchestrator",
            "state": state,
        }
        try:
            return await self.state_store.save_state(record)
        except Exception as e:
            logger.warning(f"Skipping checkpoint for {task_id}: {e}")
            return None

    # Quick task methods for common business scenarios

    async def handle_customer_complaint(self, customer_data: Dict[str, Any]) -> TaskOutcome:
        return await self.process_task(BusinessTask(
            type=TaskKind.MULTI_AGENT,
            description=(
                f"Handle customer complaint from {customer_data.get('name', 'a customer')}: "
                f"{customer_data.get('complaint', '')}"
            ),
            priority=Priority.HIGH,
            required_agents=[AgentType.CUSTOMER, AgentType.EMAIL],
            context=customer_data,
            user_id=self.user_id,
        ))

    async def launch_social_campaign(self, campaign_data: Dict[str, Any]) -> TaskOutcome:
        return await self.process_task(BusinessTask(
            type=TaskKind.MULTI_AGENT,
            description=f"Launch social media campaign: {campaign_data.get('title', 'untitled')}",
            priority=Priority.MEDIUM,
            required_agents=[AgentType.SOCIAL, AgentType.EMAIL],
            context=campaign_data,
            user_id=self.user_id,
        ))

    async def monthly_financial_report(self, report_data: Dict[str, Any]) -> TaskOutcome:
        return await self.process_task(BusinessTask(
            type=TaskKind.MULTI_AGENT,
            description="Generate monthly financial report and email to stakeholders",
            priority=Priority.MEDIUM,
            required_agents=[AgentType.FINANCE, AgentType.EMAIL],
            context=report_data,
            user_id=self.user_id,
        ))

    async def get_agent_status(self) -> Dict[str, Any]:
        """Registered agents plus provider availability"""
        return {
            "orchestrator": "active",
            "agents": {
                agent_type.value: "active" if agent_type in self.agents else "missing"
                for agent_type in AgentType
            },
            "llm_providers": await self.router.get_provider_status(),
            "user_id": self.user_id,
            "timestamp": utc_now(),
        }

