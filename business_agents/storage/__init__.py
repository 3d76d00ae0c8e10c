"""Optional persistence for orchestration checkpoints."""

from .state_store import StateStore

__all__ = ["StateStore"]
