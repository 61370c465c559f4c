"""Conversation State Manager - Booking session per requester.

Keeps the BookingSession in Redis between messages, with a TTL so a
requester who stops answering simply expires.
"""

from typing import Protocol

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from citas.core.fsm import BookingSession
from citas.utils.logger import get_logger

logger = get_logger(__name__)

# Session expires if the requester stops answering
CONVERSATION_TTL_SECONDS = 3600


class SessionStore(Protocol):
    async def get_or_create(self, requester_id: str) -> BookingSession: ...

    async def save(self, session: BookingSession) -> None: ...

    async def clear(self, requester_id: str) -> None: ...


class ConversationStateManager:
    """Gerencia a sessão de reserva por solicitante no Redis."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        ttl_seconds: int = CONVERSATION_TTL_SECONDS,
        client: redis.Redis | None = None,
    ) -> None:
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self._redis = client

    async def _get_redis(self) -> redis.Redis:
        """Obtém conexão Redis (lazy init)."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url, decode_responses=True)
        return self._redis

    def _key(self, requester_id: str) -> str:
        return f"conversation:{requester_id}"

    async def get_or_create(self, requester_id: str) -> BookingSession:
        """Load the requester's session, or a fresh IDLE one.

        A session that cannot be read is logged and replaced by a new
        one, which sends the requester back to the greeting.
        """
        try:
            r = await self._get_redis()
            data = await r.get(self._key(requester_id))
            if data:
                session = BookingSession.model_validate_json(data)
                logger.info(
                    "conversation_state_loaded",
                    requester_id=requester_id,
                    stage=session.stage.value,
                )
                return session
        except (RedisError, ValidationError) as e:
            logger.warning(
                "conversation_state_load_failed",
                requester_id=requester_id,
                error=str(e),
            )

        return BookingSession(requester_id=requester_id)

    async def save(self, session: BookingSession) -> None:
        try:
            r = await self._get_redis()
            await r.setex(
                self._key(session.requester_id),
                self.ttl_seconds,
                session.model_dump_json(),
            )
            logger.info(
                "conversation_state_saved",
                requester_id=session.requester_id,
                stage=session.stage.value,
            )
        except RedisError as e:
            logger.warning(
                "conversation_state_save_failed",
                requester_id=session.requester_id,
                error=str(e),
            )

    async def clear(self, requester_id: str) -> None:
        """Drop the session (flow finished or abandoned)."""
        try:
            r = await self._get_redis()
            await r.delete(self._key(requester_id))
            logger.info("conversation_state_cleared", requester_id=requester_id)
        except RedisError as e:
            logger.warning(
                "conversation_state_clear_failed",
                requester_id=requester_id,
                error=str(e),
            )

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


class MemoryConversationStateManager:
    """Sessions in a dict. Used with the memory backend and in tests."""

    def __init__(self) -> None:
        self._sessions: dict[str, str] = {}

    async def get_or_create(self, requester_id: str) -> BookingSession:
        data = self._sessions.get(requester_id)
        if data is None:
            return BookingSession(requester_id=requester_id)
        return BookingSession.model_validate_json(data)

    async def save(self, session: BookingSession) -> None:
        # Stored serialized so callers never share a live object
        self._sessions[session.requester_id] = session.model_dump_json()

    async def clear(self, requester_id: str) -> None:
        self._sessions.pop(requester_id, None)

    async def close(self) -> None:
        self._sessions.clear()
