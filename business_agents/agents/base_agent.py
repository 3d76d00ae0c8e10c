"""Base Domain Agent"""

import logging
from abc import ABC
from typing import Any, Callable, Dict, Tuple

from ..llm import ChatMessage, QueryComplexity

logger = logging.getLogger(__name__)

# task type -> (complexity, prompt builder)
PromptTable = Dict[str, Tuple[QueryComplexity, Callable[[Dict[str, Any]], str]]]


class BaseAgent(ABC):
    """Domain agent that answers one family of business tasks through the router.

    Subclasses set ``agent_type``, ``system_prompt`` and ``PROMPTS``. The
    task's ``type`` field picks the prompt builder; an unknown type raises
    ValueError, which the executor records as a failed step.
    """

    agent_type: str = "base"
    system_prompt: str = "You are a helpful business assistant."
    PROMPTS: PromptTable = {}

    def __init__(self, router, user_id: str = "anonymous"):
        self.router = router
        self.user_id = user_id

    @property
    def supported_tasks(self):
        return sorted(self.PROMPTS)

    async def process_task(self, task: Dict[str, Any]) -> Dict[str, Any]:
        """Run one task and return the generated content"""
        task_type = task.get("type")
        logger.info(f"{self.agent_type} agent processing {task_type} task...")

        if task_type not in self.PROMPTS:
            raise ValueError(f"Unknown {self.agent_type} task type: {task_type}")

        complexity, build_prompt = self.PROMPTS[task_type]
        messages = [
            ChatMessage(role="system", content=self.system_prompt),
            ChatMessage(role="user", content=build_prompt(task)),
        ]

        response = await self.router.route(messages, complexity)

        return {
            "type": task_type,
            "agent": self.agent_type,
            "content": response.content,
            "provider": response.provider,
        }


def pick(task: Dict[str, Any], *names: str, default: str = "Not specified") -> Any:
    """First non-empty value among ``names`` in ``task``."""
    for name in names:
        value = task.get(name)
        if value:
            return value
    return default
