"""Core package - Scheduling engine and booking conversation."""

from citas.core.availability import AvailabilityResolver
from citas.core.booking import BookingConversation, BookingReply, parse_selection
from citas.core.calendar import generate_available_days
from citas.core.fsm import BookingSession, BookingStage
from citas.core.slots import SlotCatalog

__all__ = [
    "AvailabilityResolver",
    "BookingConversation",
    "BookingReply",
    "BookingSession",
    "BookingStage",
    "SlotCatalog",
    "generate_available_days",
    "parse_selection",
]
