"""Email Agent"""

from ..llm import QueryComplexity
from .base_agent import BaseAgent, pick


def _compose(task):
    return f"""
Compose a professional email with the following details:
- Recipient: {pick(task, "recipient")}
- Subject: {pick(task, "subject")}
- Content request: {pick(task, "content", "description")}

Write a clear subject line and a concise, friendly body.
"""


def _reply(task):
    return f"""
Write a professional reply to this email:

{pick(task, "originalEmail", "content")}

Reply guidance: {pick(task, "content", default="Answer politely and helpfully")}
"""


def _categorize(task):
    return f"""
Categorize this email as one of: urgent, important, normal, promotional, spam.
Explain the choice in one sentence.

Email:
{pick(task, "originalEmail", "content")}
"""


def _summarize(task):
    return f"""
Summarize this email in 2-3 sentences and list any action items:

{pick(task, "originalEmail", "content")}
"""


class EmailAgent(BaseAgent):
    """Composes, replies to, categorizes and summarizes emails"""

    agent_type = "email"
    system_prompt = "You are a professional business email assistant."
    PROMPTS = {
        "compose": (QueryComplexity.MEDIUM, _compose),
        "reply": (QueryComplexity.MEDIUM, _reply),
        "categorize": (QueryComplexity.SIMPLE, _categorize),
        "summarize": (QueryComplexity.SIMPLE, _summarize),
    }
