"""Availability Resolver - Free catalog slots for a given day."""

from datetime import date
from typing import TYPE_CHECKING

from citas.contracts.appointment import make_reservation_key
from citas.core.slots import SlotCatalog
from citas.utils.logger import get_logger

if TYPE_CHECKING:
    from citas.services.reservations import ReservationStore

logger = get_logger(__name__)


class AvailabilityResolver:
    """Filters the slot catalog against committed reservations.

    The result is a snapshot. It narrows what is offered to the requester,
    but only ``ReservationStore.reserve`` decides who gets a slot.
    """

    def __init__(self, store: "ReservationStore", catalog: SlotCatalog) -> None:
        self.store = store
        self.catalog = catalog

    async def resolve_free_slots(self, date_key: date) -> list[str]:
        """Return the catalog slots with no reservation on ``date_key``.

        Args:
            date_key: Day to check.

        Returns:
            Free slot labels in catalog order. Empty when the day is full.

        Raises:
            StoreUnavailableError: If the store cannot be read.
        """
        taken = set(await self.store.load_for_date(date_key))
        free = [
            slot
            for slot in self.catalog.list_slots()
            if make_reservation_key(date_key, slot) not in taken
        ]

        logger.debug(
            "free_slots_resolved",
            date=date_key.isoformat(),
            taken=len(taken),
            free=len(free),
        )
        return free
