"""Idempotency Manager - Each inbound message drives at most one booking turn.

The transport may deliver the same webhook more than once. A reply like
"2" processed twice would answer two different stages, so each message id
is claimed with Redis ``SET NX`` before the turn runs.
"""

import redis.asyncio as redis
from redis.exceptions import RedisError

from citas.utils.logger import get_logger

logger = get_logger(__name__)


class IdempotencyManager:
    """Claims inbound message ids in Redis with a TTL."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        ttl_seconds: int = 86400,
        prefix: str = "idempotency:",
        client: redis.Redis | None = None,
    ) -> None:
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self._client = client

    async def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._client

    def _make_key(self, message_id: str) -> str:
        return f"{self.prefix}{message_id}"

    async def claim(self, message_id: str) -> bool:
        """Atomically mark ``message_id`` as being processed.

        Args:
            message_id: The transport's unique message identifier.

        Returns:
            True if this call claimed the message, False if it was seen
            before. Also True when Redis is unavailable (fail open).
        """
        try:
            client = await self._get_client()
            was_set = await client.set(
                self._make_key(message_id),
                "processing",
                ex=self.ttl_seconds,
                nx=True,
            )
        except RedisError as e:
            logger.warning(
                "idempotency_check_failed",
                message_id=message_id,
                error=str(e),
            )
            return True

        if not was_set:
            logger.info("duplicate_message_detected", message_id=message_id)
            return False
        return True

    async def release(self, message_id: str) -> None:
        """Forget a claim so the transport's retry is processed again."""
        try:
            client = await self._get_client()
            await client.delete(self._make_key(message_id))
        except RedisError as e:
            logger.warning(
                "idempotency_release_failed",
                message_id=message_id,
                error=str(e),
            )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("redis_connection_closed")
