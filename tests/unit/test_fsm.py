"""Unit Tests - FSM (Booking Session)."""

from datetime import date

import pytest

from citas.contracts.appointment import AvailableDay
from citas.core.fsm import BookingSession, BookingStage

DAYS = [
    AvailableDay(date_key=date(2026, 10, 19), label="lunes, 19 octubre"),
    AvailableDay(date_key=date(2026, 10, 20), label="martes, 20 octubre"),
]


class TestBookingSession:
    """Tests for the booking state machine."""

    def test_initial_state(self) -> None:
        session = BookingSession(requester_id="+5215512345678")

        assert session.stage == BookingStage.IDLE
        assert session.offered_days == []
        assert session.chosen_day is None
        assert session.offered_slots == []
        assert session.history == []
        assert not session.is_active

    def test_full_forward_flow(self) -> None:
        session = BookingSession(requester_id="+5215512345678")

        session.offer_days(DAYS)
        assert session.stage == BookingStage.AWAITING_DAY_SELECTION
        assert session.is_active

        session.offer_slots(DAYS[1], ["9:00 AM", "1:00 PM"])
        assert session.stage == BookingStage.AWAITING_SLOT_SELECTION
        assert session.chosen_day == DAYS[1]
        assert session.offered_slots == ["9:00 AM", "1:00 PM"]

        session.complete()
        assert session.stage == BookingStage.COMPLETED
        assert not session.is_active
        assert session.history == [
            BookingStage.IDLE,
            BookingStage.AWAITING_DAY_SELECTION,
            BookingStage.AWAITING_SLOT_SELECTION,
        ]

    def test_skipping_a_stage_raises(self) -> None:
        """Test that slots cannot be offered before days."""
        session = BookingSession(requester_id="+5215512345678")

        assert not session.can_transition_to(BookingStage.AWAITING_SLOT_SELECTION)
        with pytest.raises(ValueError) as exc_info:
            session.offer_slots(DAYS[0], ["9:00 AM"])

        assert "Transición inválida" in str(exc_info.value)

    def test_completed_is_terminal(self) -> None:
        session = BookingSession(requester_id="+5215512345678")
        session.offer_days(DAYS)
        session.offer_slots(DAYS[0], ["9:00 AM"])
        session.complete()

        for stage in BookingStage:
            assert not session.can_transition_to(stage)

    def test_reset_from_any_stage(self) -> None:
        """Test that reset drops offers and keeps history."""
        session = BookingSession(requester_id="+5215512345678")
        session.offer_days(DAYS)
        session.offer_slots(DAYS[0], ["9:00 AM"])

        session.reset()

        assert session.stage == BookingStage.IDLE
        assert session.offered_days == []
        assert session.chosen_day is None
        assert session.offered_slots == []
        assert session.history[-1] == BookingStage.AWAITING_SLOT_SELECTION

    def test_offer_days_copies_list(self) -> None:
        days = list(DAYS)
        session = BookingSession(requester_id="+5215512345678")

        session.offer_days(days)
        days.clear()

        assert len(session.offered_days) == 2

    def test_json_round_trip_keeps_offers(self) -> None:
        """Test the serialized form used by the session stores."""
        session = BookingSession(requester_id="+5215512345678")
        session.offer_days(DAYS)

        restored = BookingSession.model_validate_json(session.model_dump_json())

        assert restored == session
        assert restored.offered_days[1].date_key == date(2026, 10, 20)
