"""Data model shared by the planner, executor and synthesizer.

Step ids are "step_<index>" with a 0-based plan index, so a dependency on the
first step of a plan is written "step_0".
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class AgentType(str, Enum):
    """Domain agents a plan step can be assigned to."""

    EMAIL = "email"
    FINANCE = "finance"
    SOCIAL = "social"
    CUSTOMER = "customer"


class Priority(str, Enum):
    """Priority of a task or step. HIGH and URGENT steps abort on failure."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def is_critical(self) -> bool:
        return self in (Priority.HIGH, Priority.URGENT)


class TaskKind(str, Enum):
    MULTI_AGENT = "multi_agent"
    SINGLE_AGENT = "single_agent"


class OverallStatus(str, Enum):
    """Overall outcome of an executed plan."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


DEFAULT_ESTIMATED_DURATION = "5-10 minutes"


def step_id(index: int) -> str:
    """Id used to reference the step at ``index`` in a dependency list."""
    return f"step_{index}"


def parse_step_id(value: Any) -> Optional[int]:
    """Return the plan index encoded in a step id, or None if malformed."""
    if not isinstance(value, str) or not value.startswith("step_"):
        return None
    suffix = value[len("step_"):]
    if not suffix.isdigit():
        return None
    return int(suffix)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class BusinessTask:
    """A natural-language business request handed to the orchestrator.

    Attributes:
        description: What the user wants done
        priority: Task priority, inherited by plan steps that omit one
        type: multi_agent or single_agent
        user_id: Owner of the request
        id: Optional caller-supplied id
        required_agents: Agent types the caller expects to be involved
        context: Free-form data embedded in the planning prompt
        deadline: Free-form deadline text
    """
    description: str
    priority: Priority = Priority.MEDIUM
    type: TaskKind = TaskKind.MULTI_AGENT
    user_id: str = "anonymous"
    id: Optional[str] = None
    required_agents: List[AgentType] = field(default_factory=list)
    context: Dict[str, Any] = field(default_factory=dict)
    deadline: Optional[str] = None

    def __post_init__(self):
        """Validate task structure."""
        if not isinstance(self.description, str) or not self.description.strip():
            raise ValueError("Task description must be a non-empty string")
        self.priority = Priority(self.priority)
        self.type = TaskKind(self.type)
        self.required_agents = [AgentType(agent) for agent in self.required_agents or []]
        if self.context is None:
            self.context = {}
        if not isinstance(self.context, dict):
            raise ValueError("Task context must be a dictionary")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["priority"] = self.priority.value
        data["type"] = self.type.value
        data["required_agents"] = [agent.value for agent in self.required_agents]
        return data


@dataclass
class TaskStep:
    """One unit of work assigned to exactly one domain agent.

    Attributes:
        agent_type: Agent that runs the step
        task_type: Operation name understood by that agent
        task_data: Payload passed to the agent's process_task
        dependencies: Ids of earlier steps this step waits for
        priority: Step priority (critical priorities abort the plan on failure)
        estimated_duration: Advisory duration text
    """
    agent_type: AgentType
    task_type: str
    task_data: Dict[str, Any] = field(default_factory=dict)
    dependencies: List[str] = field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    estimated_duration: str = DEFAULT_ESTIMATED_DURATION

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape the planner asks the model for."""
        return {
            "agentType": self.agent_type.value,
            "taskType": self.task_type,
            "taskData": dict(self.task_data),
            "dependencies": list(self.dependencies),
            "estimatedDuration": self.estimated_duration,
            "priority": self.priority.value,
        }


@dataclass
class StepResult:
    """Outcome of one attempted plan step."""
    step_index: int
    agent_type: AgentType
    task_type: str
    success: bool
    result: Any = None
    error: Optional[str] = None
    completed_at: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "stepIndex": self.step_index,
            "agentType": self.agent_type.value,
            "taskType": self.task_type,
            "success": self.success,
            "completedAt": self.completed_at,
        }
        if self.success:
            data["result"] = self.result
        else:
            data["error"] = self.error
        return data


@dataclass
class AgentPerformance:
    agent: AgentType
    success_rate: int
    total_tasks: int


@dataclass
class ExecutionReport:
    """Final report: deterministic metrics plus the model's narrative.

    Attributes:
        total_steps: Number of attempted steps
        successful_steps: Steps that succeeded
        failed_steps: Steps that failed
        success_rate: Integer percent, 0 when nothing was attempted
        overall_status: success, partial_success or failure
        agent_performance: Per agent type success rate (all four types)
        summary: Narrative text, or a placeholder if synthesis failed
        recommendations: Recommendation lines pulled from the narrative
        synthesized_at: ISO timestamp
    """
    total_steps: int
    successful_steps: int
    failed_steps: int
    success_rate: int
    overall_status: OverallStatus
    agent_performance: List[AgentPerformance]
    summary: str = ""
    recommendations: List[str] = field(default_factory=list)
    synthesized_at: str = field(default_factory=utc_now)

    def agent_success_rate(self, agent: AgentType) -> int:
        for performance in self.agent_performance:
            if performance.agent == AgentType(agent):
                return performance.success_rate
        return 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["overall_status"] = self.overall_status.value
        data["agent_performance"] = [
            {
                "agent": p.agent.value,
                "success_rate": p.success_rate,
                "total_tasks": p.total_tasks,
            }
            for p in self.agent_performance
        ]
        return data


@dataclass
class TaskOutcome:
    """What process_task returns to its caller."""
    task_id: str
    description: str
    status: str
    execution_plan: List[TaskStep]
    agent_results: List[StepResult]
    final_result: ExecutionReport
    completed_at: str = field(default_factory=utc_now)

    @property
    def total_steps(self) -> int:
        return len(self.execution_plan)

    @property
    def successful_steps(self) -> int:
        return len([r for r in self.agent_results if r.success])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "description": self.description,
            "status": self.status,
            "execution_plan": [step.to_dict() for step in self.execution_plan],
            "agent_results": [result.to_dict() for result in self.agent_results],
            "final_result": self.final_result.to_dict(),
            "completed_at": self.completed_at,
            "total_steps": self.total_steps,
            "successful_steps": self.successful_steps,
        }

    def __repr__(self):
        """Human-readable representation."""
        return (
            f"TaskOutcome(\n"
            f"  task_id={self.task_id},\n"
            f"  status={self.final_result.overall_status.value},\n"
            f"  steps={self.successful_steps}/{self.total_steps},\n"
            f"  success_rate={self.final_result.success_rate}%\n"
            f")"
        )
