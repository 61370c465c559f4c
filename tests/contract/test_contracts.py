"""Contract Tests - Validate Pydantic schemas."""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from citas.contracts.appointment import (
    Appointment,
    ReservationResult,
    ReservationStatus,
    make_reservation_key,
)
from citas.contracts.whatsapp_message import EvolutionWebhook, InboundMessage, normalize_phone

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class TestInboundMessageContract:
    """Tests for InboundMessage schema."""

    def test_from_evolution(self, evolution_payload: dict) -> None:
        msg = InboundMessage.from_evolution(EvolutionWebhook(**evolution_payload))

        assert msg is not None
        assert msg.message_id == "3EB0E51D3B4B1A25AA4AA001"
        assert msg.requester_id == "+5215512345678"
        assert msg.text == "hola"
        assert msg.push_name == "Ana"
        assert msg.received_at == datetime.fromtimestamp(1792152000, tz=timezone.utc)

    def test_extended_text_message(self, evolution_payload: dict) -> None:
        evolution_payload["data"]["message"] = {"extendedTextMessage": {"text": " 2 "}}

        msg = InboundMessage.from_evolution(EvolutionWebhook(**evolution_payload))

        assert msg is not None
        assert msg.text == "2"

    def test_media_without_text_is_dropped(self, evolution_payload: dict) -> None:
        evolution_payload["data"]["message"] = {}

        assert InboundMessage.from_evolution(EvolutionWebhook(**evolution_payload)) is None

    @pytest.mark.parametrize(
        "remote_jid",
        ["status@broadcast", "123456789012345678@lid", "120363025@g.us"],
    )
    def test_senders_without_phone_number_are_dropped(
        self, evolution_payload: dict, remote_jid: str
    ) -> None:
        evolution_payload["data"]["key"]["remoteJid"] = remote_jid

        assert InboundMessage.from_evolution(EvolutionWebhook(**evolution_payload)) is None

    @pytest.mark.parametrize(
        "remote_jid",
        ["1234567890123456789@s.whatsapp.net", "abc@s.whatsapp.net"],
    )
    def test_unparseable_sender_is_dropped(self, evolution_payload: dict, remote_jid: str) -> None:
        """Test that a JID failing E.164 validation yields None instead of raising."""
        evolution_payload["data"]["key"]["remoteJid"] = remote_jid

        assert InboundMessage.from_evolution(EvolutionWebhook(**evolution_payload)) is None

    def test_requester_id_normalized(self) -> None:
        msg = InboundMessage(message_id="MSG1234", requester_id="52 155 1234-5678", text="hola")

        assert msg.requester_id == "+5215512345678"

    def test_invalid_requester_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InboundMessage(message_id="MSG1234", requester_id="abc", text="hola")

    def test_short_message_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InboundMessage(message_id="M1", requester_id="+5215512345678", text="hola")

    def test_normalize_phone(self) -> None:
        assert normalize_phone("+52 1 55 1234 5678") == "+5215512345678"


class TestAppointmentContract:
    """Tests for Appointment schema."""

    def test_create_derives_key(self) -> None:
        appointment = Appointment.create(date(2026, 10, 20), "9:00 AM", "+5215512345678", NOW)

        assert appointment.key == "2026-10-20|9:00 AM"
        assert make_reservation_key("2026-10-20", "9:00 AM") == appointment.key

    def test_mismatched_key_rejected(self) -> None:
        """Test that a record cannot claim a key of another slot."""
        with pytest.raises(ValidationError):
            Appointment(
                key="2026-10-20|10:30 AM",
                date_key=date(2026, 10, 20),
                slot_label="9:00 AM",
                requester_id="+5215512345678",
                created_at=NOW,
            )

    def test_record_layout(self) -> None:
        appointment = Appointment.create(date(2026, 10, 20), "9:00 AM", "+5215512345678", NOW)

        record = appointment.to_record()

        assert set(record) == {"key", "date_key", "slot_label", "requester_id", "created_at"}
        assert record["date_key"] == "2026-10-20"
        assert Appointment.from_record(record) == appointment

    def test_appointment_is_immutable(self) -> None:
        appointment = Appointment.create(date(2026, 10, 20), "9:00 AM", "+5215512345678", NOW)

        with pytest.raises(ValidationError):
            appointment.slot_label = "1:00 PM"

    def test_reservation_result(self) -> None:
        appointment = Appointment.create(date(2026, 10, 20), "9:00 AM", "+5215512345678", NOW)

        assert ReservationResult(status=ReservationStatus.COMMITTED, appointment=appointment).committed
        assert not ReservationResult(status="conflict", appointment=appointment).committed
