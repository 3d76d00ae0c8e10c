"""Orchestrator package: plan, execute and synthesize multi-agent tasks."""

from .errors import (
    OrchestrationError,
    PlanParseError,
    StepExecutionError,
    AgentNotRegisteredError,
    SynthesisError,
)
from .models import (
    AgentType,
    Priority,
    TaskKind,
    OverallStatus,
    BusinessTask,
    TaskStep,
    StepResult,
    AgentPerformance,
    ExecutionReport,
    TaskOutcome,
)
from .planner import PlanGenerator, create_plan, create_fallback_plan, parse_plan
from .executor import PlanExecutor
from .synthesizer import ResultSynthesizer, synthesize_results, compute_metrics
from .orchestrator import Orchestrator, default_agents
