"""Finite State Machine - Per-requester state of the booking conversation."""

from enum import Enum

from pydantic import BaseModel, Field

from citas.contracts.appointment import AvailableDay


class BookingStage(str, Enum):
    """Stages of the booking conversation."""

    IDLE = "idle"
    AWAITING_DAY_SELECTION = "awaiting_day_selection"
    AWAITING_SLOT_SELECTION = "awaiting_slot_selection"
    COMPLETED = "completed"


# Forward transitions; reset() returns to IDLE from anywhere
VALID_TRANSITIONS: dict[BookingStage, list[BookingStage]] = {
    BookingStage.IDLE: [BookingStage.AWAITING_DAY_SELECTION],
    BookingStage.AWAITING_DAY_SELECTION: [BookingStage.AWAITING_SLOT_SELECTION],
    BookingStage.AWAITING_SLOT_SELECTION: [BookingStage.COMPLETED],
    BookingStage.COMPLETED: [],
}


class BookingSession(BaseModel):
    """Booking state of one requester.

    Holds what was offered at each stage so a numeric reply can be
    resolved against exactly the list the requester saw.
    """

    requester_id: str = Field(..., description="Requester identifier (E.164 phone)")
    stage: BookingStage = Field(default=BookingStage.IDLE)
    offered_days: list[AvailableDay] = Field(default_factory=list)
    chosen_day: AvailableDay | None = None
    offered_slots: list[str] = Field(default_factory=list)
    history: list[BookingStage] = Field(default_factory=list)

    def can_transition_to(self, next_stage: BookingStage) -> bool:
        return next_stage in VALID_TRANSITIONS.get(self.stage, [])

    def transition(self, next_stage: BookingStage) -> None:
        """Move to ``next_stage``.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if not self.can_transition_to(next_stage):
            raise ValueError(
                f"Transición inválida: {self.stage.value} -> {next_stage.value}"
            )
        self.history.append(self.stage)
        self.stage = next_stage

    def offer_days(self, days: list[AvailableDay]) -> None:
        self.offered_days = list(days)
        self.transition(BookingStage.AWAITING_DAY_SELECTION)

    def offer_slots(self, day: AvailableDay, slots: list[str]) -> None:
        self.chosen_day = day
        self.offered_slots = list(slots)
        self.transition(BookingStage.AWAITING_SLOT_SELECTION)

    def complete(self) -> None:
        self.transition(BookingStage.COMPLETED)

    def reset(self) -> None:
        """Back to IDLE, dropping everything offered so far."""
        self.history.append(self.stage)
        self.stage = BookingStage.IDLE
        self.offered_days = []
        self.chosen_day = None
        self.offered_slots = []

    @property
    def is_active(self) -> bool:
        """A question is pending for this requester."""
        return self.stage in (
            BookingStage.AWAITING_DAY_SELECTION,
            BookingStage.AWAITING_SLOT_SELECTION,
        )
