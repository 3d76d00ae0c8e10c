"""Result synthesis: metrics plus a narrative report.

Metrics come from ``compute_metrics``, a pure function of the step results,
so re-running synthesis over the same results always gives the same
success rate and overall status. Only the narrative depends on the model.
"""

import json
import logging
import math
from typing import List

from ..llm import ChatMessage, QueryComplexity
from .errors import SynthesisError
from .models import (
    AgentPerformance,
    AgentType,
    BusinessTask,
    ExecutionReport,
    OverallStatus,
    StepResult,
)

logger = logging.getLogger(__name__)

SYNTHESIS_PLACEHOLDER = "Error synthesizing results"

SYNTHESIZER_SYSTEM_PROMPT = (
    "You are an executive assistant providing comprehensive summaries of "
    "multi-agent business task execution."
)

RECOMMENDATION_MARKERS = ("recommend", "suggest", "next step", "should")


def percent(part: int, total: int) -> int:
    """Integer percentage, rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    return int(math.floor(part * 100 / total + 0.5))


def compute_metrics(results: List[StepResult]) -> ExecutionReport:
    """Deterministic metrics for a list of step results (empty narrative)."""
    total = len(results)
    successful = len([r for r in results if r.success])
    failed = total - successful

    if failed == 0:
        overall = OverallStatus.SUCCESS
    elif successful > failed:
        overall = OverallStatus.PARTIAL_SUCCESS
    else:
        overall = OverallStatus.FAILURE

    performance = []
    for agent in AgentType:
        agent_results = [r for r in results if r.agent_type == agent]
        agent_successes = len([r for r in agent_results if r.success])
        performance.append(AgentPerformance(
            agent=agent,
            success_rate=percent(agent_successes, len(agent_results)),
            total_tasks=len(agent_results),
        ))

    return ExecutionReport(
        total_steps=total,
        successful_steps=successful,
        failed_steps=failed,
        success_rate=percent(successful, total),
        overall_status=overall,
        agent_performance=performance,
    )


def extract_recommendations(content: str, limit: int = 5) -> List[str]:
    lines = [line.strip() for line in content.split("\n")]
    return [
        line for line in lines
        if line and any(marker in line.lower() for marker in RECOMMENDATION_MARKERS)
    ][:limit]


def build_synthesis_prompt(results: List[StepResult], task: BusinessTask) -> str:
    successful = [r.to_dict() for r in results if r.success]
    failed = [r.to_dict() for r in results if not r.success]

    return f"""
Synthesize the results from multiple AI agents working on this business task:

Original Task: "{task.description}"
Priority: {task.priority.value}

Successful Agent Results:
{json.dumps(successful, indent=2, default=str)}

Failed Agent Results:
{json.dumps(failed, indent=2, default=str)}

Provide a comprehensive summary including:
1. Executive summary of what was accomplished
2. Key outcomes and deliverables
3. Any issues or failures and their impact
4. Recommendations for next steps
5. Overall success assessment
6. Lessons learned for future tasks

Format as a professional business report.
"""


async def write_narrative(router, results: List[StepResult], task: BusinessTask) -> str:
    """Route the narrative prompt.

    Raises:
        SynthesisError: The router failed or returned no text
    """
    messages = [
        ChatMessage(role="system", content=SYNTHESIZER_SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_synthesis_prompt(results, task)),
    ]
    try:
        response = await router.route(messages, QueryComplexity.COMPLEX)
    except Exception as e:
        raise SynthesisError(f"Narrative call failed: {e}") from e

    if not response.content:
        raise SynthesisError("Narrative call returned no content")
    return response.content


async def synthesize_results(router, results: List[StepResult], task: BusinessTask) -> ExecutionReport:
    """Build the final report; a failed narrative call only changes the summary."""
    logger.info("🔄 Synthesizing results from all agents...")

    report = compute_metrics(results)
    try:
        report.summary = await write_narrative(router, results, task)
        report.recommendations = extract_recommendations(report.summary)
    except SynthesisError as e:
        logger.warning(f"Synthesis failed, returning metrics only: {e}")
        report.summary = SYNTHESIS_PLACEHOLDER

    logger.info(
        f"🎯 Results synthesized: {report.overall_status.value} "
        f"({report.successful_steps}/{report.total_steps}, {report.success_rate}%)"
    )
    return report


class ResultSynthesizer:
    """Synthesizer bound to a router."""

    def __init__(self, router):
        self.router = router

    async def synthesize(self, results: List[StepResult], task: BusinessTask) -> ExecutionReport:
        return await synthesize_results(self.router, results, task)
