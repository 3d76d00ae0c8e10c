"""Domain agents dispatched by the orchestrator."""

from .base_agent import BaseAgent
from .email_agent import EmailAgent
from .finance_agent import FinanceAgent
from .social_agent import SocialAgent
from .customer_agent import CustomerAgent

__all__ = [
    "BaseAgent",
    "EmailAgent",
    "FinanceAgent",
    "SocialAgent",
    "CustomerAgent",
]
