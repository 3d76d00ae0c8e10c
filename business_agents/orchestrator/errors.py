"""Orchestration errors."""


class OrchestrationError(Exception):
    """Base class for planning, execution and synthesis errors."""
    pass


class PlanParseError(OrchestrationError):
    """Raised when the planner's model output holds no usable plan."""
    pass


class StepExecutionError(OrchestrationError):
    """Raised when a domain agent reports a failed step."""
    pass


class AgentNotRegisteredError(OrchestrationError):
    """Raised when a plan needs an agent type nobody registered."""

    def __init__(self, agent_types):
        names = ", ".join(sorted(str(getattr(a, "value", a)) for a in agent_types))
        super().__init__(f"No agent registered for: {names}")
        self.agent_types = list(agent_types)


class SynthesisError(OrchestrationError):
    """Raised when the narrative report cannot be produced."""
    pass
