"""Services package - Storage and transport integrations."""

from citas.services.evolution import EvolutionAPIClient, send_whatsapp_replies
from citas.services.reservations import (
    MemoryReservationEngine,
    RedisReservationEngine,
    ReservationStore,
    SupabaseReservationEngine,
)

__all__ = [
    "EvolutionAPIClient",
    "send_whatsapp_replies",
    "ReservationStore",
    "MemoryReservationEngine",
    "RedisReservationEngine",
    "SupabaseReservationEngine",
]
