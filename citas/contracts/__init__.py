"""Contracts package - Pydantic schemas for data validation."""

from citas.contracts.appointment import (
    Appointment,
    AvailableDay,
    ReservationResult,
    ReservationStatus,
    make_reservation_key,
)
from citas.contracts.whatsapp_message import EvolutionWebhook, InboundMessage

__all__ = [
    "Appointment",
    "AvailableDay",
    "ReservationResult",
    "ReservationStatus",
    "make_reservation_key",
    "EvolutionWebhook",
    "InboundMessage",
]
