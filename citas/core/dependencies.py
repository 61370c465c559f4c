"""Application Dependencies - Wiring of the booking engine.

Builds the booking engine for the configured reservation backend and
keeps the handles that must be closed on shutdown.
"""

from dataclasses import dataclass

import redis.asyncio as redis
from fastapi import Request

from citas.config.booking import BookingConfig
from citas.config.settings import Settings
from citas.core.availability import AvailabilityResolver
from citas.core.booking import BookingConversation
from citas.core.idempotency import IdempotencyManager
from citas.core.slots import SlotCatalog
from citas.services.conversation_state import (
    ConversationStateManager,
    MemoryConversationStateManager,
    SessionStore,
)
from citas.services.reservations import (
    MemoryReservationEngine,
    RedisReservationEngine,
    ReservationEngine,
    ReservationStore,
    SupabaseReservationEngine,
)
from citas.services.supabase import create_supabase_client, set_supabase_client
from citas.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class AppDependencies:
    """Handles shared by the request handlers.

    Attributes:
        store: Reservation store over the configured engine.
        sessions: Per-requester booking sessions.
        conversation: The booking state machine.
        idempotency: Inbound de-duplication (None without Redis).
        redis_client: Shared Redis connection, if any.
    """

    store: ReservationStore
    sessions: SessionStore
    conversation: BookingConversation
    idempotency: IdempotencyManager | None = None
    redis_client: redis.Redis | None = None

    async def aclose(self) -> None:
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
        set_supabase_client(None)


async def build_dependencies(settings: Settings) -> AppDependencies:
    """Wire engine, store, resolver, sessions and conversation.

    Raises:
        ValueError: If the backend needs credentials that are missing,
            or the slot catalog is invalid.
    """
    backend = settings.reservation_backend
    catalog = SlotCatalog(settings.booking_slots)

    redis_client: redis.Redis | None = None
    idempotency: IdempotencyManager | None = None
    engine: ReservationEngine
    sessions: SessionStore

    if backend == "memory":
        engine = MemoryReservationEngine()
        sessions = MemoryConversationStateManager()
    else:
        redis_client = redis.from_url(settings.redis_url, decode_responses=True)
        sessions = ConversationStateManager(
            redis_url=settings.redis_url,
            ttl_seconds=settings.conversation_ttl_seconds,
            client=redis_client,
        )
        idempotency = IdempotencyManager(
            redis_url=settings.redis_url,
            ttl_seconds=settings.idempotency_ttl_seconds,
            client=redis_client,
        )
        if backend == "redis":
            engine = RedisReservationEngine(redis_client)
        else:
            supabase = await create_supabase_client(settings)
            set_supabase_client(supabase)
            engine = SupabaseReservationEngine(supabase, settings.reservations_table)

    store = ReservationStore(engine)
    conversation = BookingConversation(
        config=BookingConfig.from_settings(settings),
        resolver=AvailabilityResolver(store, catalog),
        store=store,
        sessions=sessions,
    )

    logger.info(
        "dependencies_built",
        reservation_backend=backend,
        slots=len(catalog),
        days_ahead=settings.booking_days_ahead,
    )
    return AppDependencies(
        store=store,
        sessions=sessions,
        conversation=conversation,
        idempotency=idempotency,
        redis_client=redis_client,
    )


def get_app_dependencies(request: Request) -> AppDependencies:
    """FastAPI dependency: the container built in the lifespan."""
    return request.app.state.deps
