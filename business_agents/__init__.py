"""Business agent orchestration: smart LLM routing plus multi-agent task plans."""

__version__ = "1.0.0"
