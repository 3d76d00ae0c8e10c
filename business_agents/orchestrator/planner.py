"""Plan generation: turn a business task into an ordered list of agent steps.

The model's answer is untrusted input. Each element is decoded into a
TaskStep with explicit defaults, and anything unusable is dropped. When
nothing usable comes back (or the router fails) a keyword-based plan is
built instead, so planning always yields at least one step.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from ..llm import ChatMessage, LLMError, QueryComplexity
from .errors import PlanParseError
from .models import (
    AgentType,
    BusinessTask,
    Priority,
    TaskStep,
    DEFAULT_ESTIMATED_DURATION,
    parse_step_id,
    step_id,
)

logger = logging.getLogger(__name__)

PLANNER_SYSTEM_PROMPT = (
    "You are an AI task planning specialist. Analyze business tasks and create "
    "optimal execution plans using available agents."
)

AGENT_CAPABILITIES = {
    AgentType.EMAIL: "Compose emails, reply to emails, categorize emails, summarize emails",
    AgentType.FINANCE: (
        "Categorize expenses, generate reports, analyze transactions, "
        "budget forecasts, generate invoices"
    ),
    AgentType.SOCIAL: (
        "Create posts, schedule content, analyze engagement, respond to comments, "
        "hashtag research, competitor analysis"
    ),
    AgentType.CUSTOMER: (
        "Respond to inquiries, categorize tickets, escalate issues, follow up, "
        "satisfaction surveys, knowledge base search"
    ),
}

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def build_planning_prompt(task: BusinessTask) -> str:
    """Planning prompt embedding the task and every agent's capabilities"""
    agents = "\n".join(
        f"{i}. {agent.value.upper()} AGENT - {capabilities}"
        for i, (agent, capabilities) in enumerate(AGENT_CAPABILITIES.items(), start=1)
    )
    return f"""
Analyze this business task and create an execution plan using available agents:

Task: "{task.description}"
Priority: {task.priority.value}
Context: {json.dumps(task.context, indent=2, default=str)}
Deadline: {task.deadline or 'Not specified'}

Available Agents:
{agents}

Create a step-by-step execution plan:
1. Identify which agents are needed
2. Determine the sequence of agent tasks
3. Specify the task type for each agent
4. Include any dependencies between tasks, referring to earlier steps as "step_0", "step_1", ...
5. Estimate duration for each step

Format as JSON array with this structure:
[
  {{
    "agentType": "email|finance|social|customer",
    "taskType": "specific_task_name",
    "taskData": {{ "task_specific_data": "here" }},
    "dependencies": ["step_0"],
    "estimatedDuration": "time_estimate",
    "priority": "low|medium|high|urgent"
  }}
]

Return ONLY the JSON array, no additional text.
"""


def parse_plan(content: Optional[str], task: BusinessTask) -> List[TaskStep]:
    """Decode the model's answer into validated steps.

    Raises:
        PlanParseError: No JSON array, invalid JSON, or no usable element
    """
    match = _JSON_ARRAY.search(content or "")
    if not match:
        raise PlanParseError("No JSON array found in planner output")

    try:
        raw_plan = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise PlanParseError(f"Planner output is not valid JSON: {e}") from e

    if not isinstance(raw_plan, list):
        raise PlanParseError("Planner output is not a JSON array")

    steps: List[TaskStep] = []
    positions: Dict[int, int] = {}
    for raw_index, raw_step in enumerate(raw_plan):
        step = validate_step(raw_step, raw_index, task, positions)
        if step is not None:
            positions[raw_index] = len(steps)
            steps.append(step)

    if not steps:
        raise PlanParseError("Planner output contained no usable steps")
    return steps


def validate_step(
    raw_step: Any,
    index: int,
    task: BusinessTask,
    positions: Optional[Dict[int, int]] = None,
) -> Optional[TaskStep]:
    """Decode one plan element, or return None when it cannot be repaired.

    ``index`` is the element's position in the model's array, which is how
    the model numbers its dependencies. ``positions`` maps the raw index of
    every earlier accepted step to its index in the validated plan; surviving
    dependencies are rewritten to validated ids and references to dropped
    steps are removed.
    """
    if positions is None:
        positions = {i: i for i in range(index)}

    if not isinstance(raw_step, dict):
        logger.warning(f"Dropping non-object plan step: {raw_step!r}")
        return None

    try:
        agent_type = AgentType(str(raw_step.get("agentType", "")).lower())
    except ValueError:
        logger.warning(f"Dropping plan step with unknown agentType: {raw_step.get('agentType')!r}")
        return None

    task_data = raw_step.get("taskData")
    if not isinstance(task_data, dict):
        task_data = {}

    task_type = raw_step.get("taskType") or task_data.get("type")
    if not isinstance(task_type, str) or not task_type.strip():
        logger.warning(f"Dropping {agent_type.value} plan step without taskType")
        return None
    task_data = {**task_data}
    task_data.setdefault("type", task_type)

    dependencies = []
    raw_dependencies = raw_step.get("dependencies") or []
    if not isinstance(raw_dependencies, list):
        raw_dependencies = []
    for dependency in raw_dependencies:
        target = parse_step_id(dependency)
        if target is None or target >= index or target not in positions:
            # Treated as no dependency
            logger.debug(f"Ignoring dependency {dependency!r} on step {index}")
            continue
        resolved = step_id(positions[target])
        if resolved not in dependencies:
            dependencies.append(resolved)

    try:
        priority = Priority(str(raw_step.get("priority", "")).lower())
    except ValueError:
        priority = task.priority

    estimated_duration = raw_step.get("estimatedDuration")
    if not isinstance(estimated_duration, str) or not estimated_duration.strip():
        estimated_duration = DEFAULT_ESTIMATED_DURATION

    return TaskStep(
        agent_type=agent_type,
        task_type=task_type,
        task_data=task_data,
        dependencies=dependencies,
        priority=priority,
        estimated_duration=estimated_duration,
    )


def create_fallback_plan(task: BusinessTask) -> List[TaskStep]:
    """Deterministic keyword plan. Never empty."""
    description = task.description.lower()
    plan: List[TaskStep] = []

    if "email" in description or "message" in description:
        plan.append(TaskStep(
            agent_type=AgentType.EMAIL,
            task_type="compose",
            task_data={"content": task.description, "type": "compose"},
            priority=task.priority,
            estimated_duration="5 minutes",
        ))

    if "social" in description or "post" in description:
        plan.append(TaskStep(
            agent_type=AgentType.SOCIAL,
            task_type="create_post",
            task_data={"content": task.description, "type": "create_post"},
            priority=task.priority,
            estimated_duration="10 minutes",
        ))

    if any(word in description for word in ("finance", "money", "cost")):
        plan.append(TaskStep(
            agent_type=AgentType.FINANCE,
            task_type="analyze_transaction",
            task_data={"description": task.description, "type": "analyze_transaction"},
            priority=task.priority,
            estimated_duration="8 minutes",
        ))

    if "customer" in description or "support" in description:
        plan.append(TaskStep(
            agent_type=AgentType.CUSTOMER,
            task_type="respond_inquiry",
            task_data={
                "customerMessage": {"content": task.description},
                "type": "respond_inquiry",
            },
            priority=task.priority,
            estimated_duration="7 minutes",
        ))

    if not plan:
        plan.append(TaskStep(
            agent_type=AgentType.CUSTOMER,
            task_type="knowledge_base",
            task_data={"knowledgeQuery": task.description, "type": "knowledge_base"},
            priority=task.priority,
            estimated_duration="5 minutes",
        ))

    return plan


async def create_plan(router, task: BusinessTask) -> List[TaskStep]:
    """Ask the model for a plan through ``router``; fall back on any failure.

    Args:
        router: Anything with an async ``route(messages, complexity)``
        task: The business task to plan

    Returns:
        A non-empty list of validated steps
    """
    logger.info("🧠 Creating execution plan...")

    messages = [
        ChatMessage(role="system", content=PLANNER_SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_planning_prompt(task)),
    ]

    try:
        response = await router.route(messages, QueryComplexity.COMPLEX)
        plan = parse_plan(response.content, task)
        logger.info(f"📋 Model plan accepted with {len(plan)} steps")
        return plan
    except PlanParseError as e:
        logger.warning(f"Plan parsing failed, using fallback: {e}")
    except LLMError as e:
        logger.warning(f"Planner LLM call failed, using fallback: {e}")
    except Exception as e:
        logger.error(f"Unexpected planner error, using fallback: {e}")

    plan = create_fallback_plan(task)
    logger.info(f"📋 Fallback plan created with {len(plan)} steps")
    return plan


class PlanGenerator:
    """Planner bound to a router."""

    def __init__(self, router):
        self.router = router

    async def plan(self, task: BusinessTask) -> List[TaskStep]:
        return await create_plan(self.router, task)

    def to_json(self, plan: List[TaskStep]) -> str:
        return json.dumps([step.to_dict() for step in plan], indent=2)
