"""Pytest Configuration - Shared fixtures for tests."""

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment before importing app
os.environ["APP_ENV"] = "development"
os.environ["RESERVATION_BACKEND"] = "memory"
os.environ["ENABLE_TRACING"] = "false"

from citas.config.booking import BookingConfig  # noqa: E402
from citas.core.availability import AvailabilityResolver  # noqa: E402
from citas.core.booking import BookingConversation  # noqa: E402
from citas.core.dependencies import AppDependencies  # noqa: E402
from citas.core.slots import SlotCatalog  # noqa: E402
from citas.services.conversation_state import MemoryConversationStateManager  # noqa: E402
from citas.services.reservations import (  # noqa: E402
    MemoryReservationEngine,
    ReservationStore,
)

# Saturday 17 Oct 2026, 12:00 UTC (06:00 in Mexico City)
SATURDAY_NOON = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def booking_config() -> BookingConfig:
    return BookingConfig()


@pytest.fixture
def catalog(booking_config: BookingConfig) -> SlotCatalog:
    return SlotCatalog(booking_config.slots)


@pytest.fixture
def store() -> ReservationStore:
    return ReservationStore(MemoryReservationEngine())


@pytest.fixture
def sessions() -> MemoryConversationStateManager:
    return MemoryConversationStateManager()


@pytest.fixture
def resolver(store: ReservationStore, catalog: SlotCatalog) -> AvailabilityResolver:
    return AvailabilityResolver(store, catalog)


@pytest.fixture
def conversation(
    booking_config: BookingConfig,
    resolver: AvailabilityResolver,
    store: ReservationStore,
    sessions: MemoryConversationStateManager,
) -> BookingConversation:
    """Booking conversation over memory storage with a fixed Saturday clock."""
    return BookingConversation(
        config=booking_config,
        resolver=resolver,
        store=store,
        sessions=sessions,
        clock=lambda: SATURDAY_NOON,
    )


@pytest.fixture
def evolution_payload() -> dict:
    """Sample Evolution API messages.upsert payload."""
    return {
        "event": "messages.upsert",
        "instance": "citas",
        "data": {
            "key": {
                "remoteJid": "5215512345678@s.whatsapp.net",
                "fromMe": False,
                "id": "3EB0E51D3B4B1A25AA4AA001",
            },
            "pushName": "Ana",
            "message": {"conversation": "hola"},
            "messageTimestamp": 1792152000,
        },
    }


@pytest.fixture
async def async_client(
    store: ReservationStore,
    sessions: MemoryConversationStateManager,
    conversation: BookingConversation,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for the FastAPI app, wired to memory storage.

    ASGITransport does not run the lifespan, so the dependency container
    is injected through dependency_overrides.
    """
    from citas.core.dependencies import get_app_dependencies
    from citas.main import app

    deps = AppDependencies(store=store, sessions=sessions, conversation=conversation)
    app.dependency_overrides[get_app_dependencies] = lambda: deps

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
