"""Checkpoint store for orchestration state using Redis"""

import os
import json
import uuid
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis
import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class StateStore:
    """Redis-based store for task / plan / result checkpoints.

    The store is optional: until ``connect`` succeeds every call is a no-op
    that returns None, and Redis errors are logged, never raised.
    """

    KEY_PREFIX = "orchestrator:state:"

    def __init__(self, redis_url: Optional[str] = None, ttl: Optional[int] = None):
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.ttl = ttl or int(os.getenv("STATE_TTL_SECONDS", "86400"))
        self.redis_client = None

    async def connect(self):
        """Connect to Redis"""
        try:
            self.redis_client = aioredis.from_url(self.redis_url)
            await self.redis_client.ping()
            logger.info("Connected to Redis state store")
        except (redis.RedisError, OSError) as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.redis_client = None
            raise

    async def disconnect(self):
        """Disconnect from Redis"""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None

    def _key(self, record_id: str) -> str:
        return f"{self.KEY_PREFIX}{record_id}"

    async def save_state(self, record: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Save a checkpoint record.

        Returns:
            The stored record (with ``id`` and ``updated_at``), or None when
            the store is unavailable
        """
        if not self.redis_client:
            logger.debug("State store not connected, skipping checkpoint")
            return None

        stored = {**record}
        stored.setdefault("id", str(uuid.uuid4()))
        stored["updated_at"] = datetime.now(timezone.utc).isoformat()

        try:
            await self.redis_client.setex(
                self._key(stored["id"]),
                self.ttl,
                json.dumps(stored, default=str)
            )
            logger.debug(f"Saved state {stored['id']}")
            return stored
        except (redis.RedisError, TypeError, ValueError) as e:
            logger.warning(f"State save error: {e}")
            return None

    async def get_state(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Load a checkpoint record by id"""
        if not self.redis_client:
            return None

        try:
            cached = await self.redis_client.get(self._key(record_id))
            if cached:
                return json.loads(cached)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.error(f"State get error: {e}")
            return None

    async def health(self) -> bool:
        """Check Redis health"""
        if not self.redis_client:
            return False

        try:
            await self.redis_client.ping()
            return True
        except (redis.RedisError, OSError):
            return False
