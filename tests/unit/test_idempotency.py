"""Unit Tests - Idempotency Manager."""

from unittest.mock import AsyncMock, MagicMock

from redis.exceptions import ConnectionError as RedisConnectionError

from citas.core.idempotency import IdempotencyManager


class TestIdempotencyManager:
    """Tests for inbound message de-duplication."""

    def setup_method(self) -> None:
        self.client = MagicMock()
        self.client.set = AsyncMock(return_value=True)
        self.client.delete = AsyncMock(return_value=1)
        self.client.aclose = AsyncMock()
        self.manager = IdempotencyManager(ttl_seconds=60, client=self.client)

    async def test_first_claim_wins(self) -> None:
        assert await self.manager.claim("3EB0A1") is True

        self.client.set.assert_awaited_once_with(
            "idempotency:3EB0A1", "processing", ex=60, nx=True
        )

    async def test_repeated_message_is_rejected(self) -> None:
        self.client.set.return_value = None

        assert await self.manager.claim("3EB0A1") is False

    async def test_redis_failure_fails_open(self) -> None:
        """Test that a Redis outage does not block inbound messages."""
        self.client.set.side_effect = RedisConnectionError("down")

        assert await self.manager.claim("3EB0A1") is True

    async def test_release_deletes_claim(self) -> None:
        await self.manager.release("3EB0A1")

        self.client.delete.assert_awaited_once_with("idempotency:3EB0A1")

    async def test_release_swallows_redis_errors(self) -> None:
        self.client.delete.side_effect = RedisConnectionError("down")

        await self.manager.release("3EB0A1")

    async def test_close(self) -> None:
        await self.manager.close()

        self.client.aclose.assert_awaited_once()
        assert self.manager._client is None
