"""Appointment Contract - Models for slot reservations."""

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

KEY_SEPARATOR = "|"


def make_reservation_key(date_key: date | str, slot_label: str) -> str:
    """Build the unique key of a (day, slot) pair, e.g. ``2026-10-20|9:00 AM``."""
    if isinstance(date_key, date):
        date_key = date_key.isoformat()
    return f"{date_key}{KEY_SEPARATOR}{slot_label}"


class AvailableDay(BaseModel):
    """A day offered to the requester. Never persisted."""

    date_key: date = Field(..., description="Calendar date, no time")
    label: str = Field(..., description="Display text, e.g. 'lunes, 20 octubre'")


class Appointment(BaseModel):
    """A committed appointment (one Reservation Store record)."""

    key: str = Field(..., description="Unique date|slot key")
    date_key: date = Field(..., description="Appointment date")
    slot_label: str = Field(..., min_length=1, description="Slot label from the catalog")
    requester_id: str = Field(..., min_length=1, description="Requester identifier")
    created_at: datetime = Field(..., description="When the reservation was made")

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "key": "2026-10-20|9:00 AM",
                "date_key": "2026-10-20",
                "slot_label": "9:00 AM",
                "requester_id": "+5215512345678",
                "created_at": "2026-10-19T15:04:05+00:00",
            }
        },
    )

    @model_validator(mode="after")
    def check_key(self) -> "Appointment":
        expected = make_reservation_key(self.date_key, self.slot_label)
        if self.key != expected:
            raise ValueError(f"key {self.key!r} does not match {expected!r}")
        return self

    @classmethod
    def create(
        cls,
        date_key: date,
        slot_label: str,
        requester_id: str,
        created_at: datetime,
    ) -> "Appointment":
        """Build a candidate appointment with its derived key."""
        return cls(
            key=make_reservation_key(date_key, slot_label),
            date_key=date_key,
            slot_label=slot_label,
            requester_id=requester_id,
            created_at=created_at,
        )

    def to_record(self) -> dict[str, Any]:
        """Persisted layout: ISO strings for the date and the timestamp."""
        return self.model_dump(mode="json")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Appointment":
        return cls.model_validate(record)


class ReservationStatus(str, Enum):
    """Outcome of a reservation attempt."""

    COMMITTED = "committed"
    CONFLICT = "conflict"


class ReservationResult(BaseModel):
    """Outcome of ``ReservationStore.reserve``."""

    status: ReservationStatus
    appointment: Appointment

    @property
    def committed(self) -> bool:
        return self.status == ReservationStatus.COMMITTED
