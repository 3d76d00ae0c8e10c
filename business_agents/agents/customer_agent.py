"""Customer Service Agent"""

from ..llm import QueryComplexity
from .base_agent import BaseAgent, pick


def _message(task):
    message = task.get("customerMessage")
    if isinstance(message, dict):
        return message.get("content") or "Not specified"
    return message or pick(task, "content")


def _respond_inquiry(task):
    return f"""
Respond to this customer inquiry with empathy and a clear resolution:

"{_message(task)}"
"""


def _categorize_ticket(task):
    return f"""
Categorize this support ticket (billing, technical, account, product, other)
and assign a priority (low, medium, high, urgent):

"{_message(task)}"
"""


def _escalate_issue(task):
    return f"""
Write an internal escalation note for this customer issue, including a short
summary, impact and the suggested owner:

"{_message(task)}"
"""


def _follow_up(task):
    return f"""
Write a follow-up message checking that this customer's issue was resolved:

"{_message(task)}"
"""


def _satisfaction_survey(task):
    return f"""
Draft a short customer satisfaction survey (5 questions) about:
{pick(task, "content", "topic", default="our recent support interaction")}
"""


def _knowledge_base(task):
    return f"""
Answer this question using general business knowledge and best practices:

{pick(task, "knowledgeQuery", "content")}
"""


class CustomerAgent(BaseAgent):
    """Customer inquiries, ticket triage, escalation and knowledge lookups"""

    agent_type = "customer"
    system_prompt = "You are a patient, solution-oriented customer support specialist."
    PROMPTS = {
        "respond_inquiry": (QueryComplexity.MEDIUM, _respond_inquiry),
        "categorize_ticket": (QueryComplexity.SIMPLE, _categorize_ticket),
        "escalate_issue": (QueryComplexity.MEDIUM, _escalate_issue),
        "follow_up": (QueryComplexity.SIMPLE, _follow_up),
        "satisfaction_survey": (QueryComplexity.SIMPLE, _satisfaction_survey),
        "knowledge_base": (QueryComplexity.MEDIUM, _knowledge_base),
    }
