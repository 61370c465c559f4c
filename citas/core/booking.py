"""Booking Conversation - Three-stage reservation dialogue.

IDLE -> AWAITING_DAY_SELECTION -> AWAITING_SLOT_SELECTION -> COMPLETED,
with a reset to IDLE on a greeting, a dead end or a stage-2 error.

Each call to ``handle`` is one requester turn: load the session, apply the
reply, persist or drop the session, and return the texts to send in order.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from citas.config.booking import BookingConfig
from citas.contracts.appointment import Appointment
from citas.core.availability import AvailabilityResolver
from citas.core.calendar import generate_available_days
from citas.core.errors import StoreUnavailableError, UserInputError
from citas.core.fsm import BookingSession, BookingStage
from citas.core.templates import format_template, get_template, numbered_options
from citas.utils.logger import get_logger

if TYPE_CHECKING:
    from citas.services.conversation_state import SessionStore
    from citas.services.reservations import ReservationStore

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_selection(reply: str, max_option: int) -> int:
    """Read a 1-based option number.

    Args:
        reply: Raw text sent by the requester.
        max_option: Number of options that were offered.

    Returns:
        The 0-based index of the chosen option.

    Raises:
        UserInputError: If the reply is not an integer in [1, max_option].
    """
    candidate = reply.strip()
    # int() would also take "+2", "0_1" and non-ASCII digits
    if not (candidate.isascii() and candidate.isdigit()):
        raise UserInputError(reply, max_option)
    number = int(candidate)
    if not 1 <= number <= max_option:
        raise UserInputError(reply, max_option)
    return number - 1


@dataclass
class BookingReply:
    """Texts to send for one turn, and the stage reached."""

    messages: list[str] = field(default_factory=list)
    stage: BookingStage = BookingStage.IDLE


class BookingConversation:
    """Drives a requester from greeting to a committed appointment."""

    def __init__(
        self,
        config: BookingConfig,
        resolver: AvailabilityResolver,
        store: "ReservationStore",
        sessions: "SessionStore",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.config = config
        self.resolver = resolver
        self.store = store
        self.sessions = sessions
        self.clock = clock

    @property
    def restart_keyword(self) -> str:
        return self.config.greeting_keywords[0]

    async def handle(self, requester_id: str, text: str) -> BookingReply:
        """Process one reply from ``requester_id``.

        Args:
            requester_id: Stable identifier of the requester (phone number).
            text: Plain-text reply.

        Returns:
            BookingReply with the outgoing messages and the resulting stage.
        """
        session = await self.sessions.get_or_create(requester_id)

        if self.config.is_greeting(text):
            if session.stage != BookingStage.IDLE:
                logger.info("booking_restarted", previous_stage=session.stage.value)
                session.reset()
            messages = self._offer_days(session)
        elif session.stage == BookingStage.AWAITING_DAY_SELECTION:
            messages = await self._select_day(session, text)
        elif session.stage == BookingStage.AWAITING_SLOT_SELECTION:
            messages = await self._select_slot(session, text)
        else:
            messages = [format_template("idle_hint", keyword=self.restart_keyword)]

        if session.is_active:
            await self.sessions.save(session)
        else:
            await self.sessions.clear(requester_id)

        return BookingReply(messages=messages, stage=session.stage)

    def _offer_days(self, session: BookingSession) -> list[str]:
        now = self.clock().astimezone(self.config.tz)
        days = generate_available_days(now, self.config.days_ahead)
        session.offer_days(days)

        logger.info(
            "booking_started",
            first_day=days[0].date_key.isoformat(),
            days=len(days),
        )
        return [
            get_template("offer_days_intro"),
            format_template(
                "offer_days", options=numbered_options(d.label for d in days)
            ),
        ]

    async def _select_day(self, session: BookingSession, text: str) -> list[str]:
        try:
            index = parse_selection(text, len(session.offered_days))
        except UserInputError as e:
            # Same day list stays valid; ask again
            logger.info("day_selection_invalid", reply=e.reply)
            return [format_template("invalid_day", max_option=e.max_option)]

        day = session.offered_days[index]
        try:
            free_slots = await self.resolver.resolve_free_slots(day.date_key)
        except StoreUnavailableError as e:
            return self._store_failure(session, e, stage="day_selection")

        if not free_slots:
            logger.info("no_availability", date=day.date_key.isoformat())
            session.reset()
            return [
                format_template(
                    "no_availability", day=day.label, keyword=self.restart_keyword
                )
            ]

        session.offer_slots(day, free_slots)
        return [
            format_template(
                "offer_slots", day=day.label, options=numbered_options(free_slots)
            )
        ]

    async def _select_slot(self, session: BookingSession, text: str) -> list[str]:
        day = session.chosen_day
        try:
            if day is None:
                raise UserInputError(text, 0)
            index = parse_selection(text, len(session.offered_slots))
        except UserInputError as e:
            # No retry at this stage: restart forces a fresh availability read
            logger.info("slot_selection_invalid", reply=e.reply)
            session.reset()
            return [format_template("invalid_slot", keyword=self.restart_keyword)]

        slot = session.offered_slots[index]
        candidate = Appointment.create(
            date_key=day.date_key,
            slot_label=slot,
            requester_id=session.requester_id,
            created_at=self.clock(),
        )

        try:
            # Advisory re-check; reserve() below is what actually decides
            if slot not in await self.resolver.resolve_free_slots(day.date_key):
                logger.info("slot_taken_before_commit", key=candidate.key)
                session.reset()
                return [format_template("slot_taken", keyword=self.restart_keyword)]

            result = await self.store.reserve(candidate)
        except StoreUnavailableError as e:
            return self._store_failure(session, e, stage="commit", key=candidate.key)

        if not result.committed:
            session.reset()
            return [format_template("slot_taken", keyword=self.restart_keyword)]

        session.complete()
        logger.info("booking_confirmed", key=candidate.key)
        return [format_template("appointment_confirmed", day=day.label, slot=slot)]

    def _store_failure(
        self,
        session: BookingSession,
        error: StoreUnavailableError,
        **context: str,
    ) -> list[str]:
        logger.error(
            "booking_store_unavailable",
            error=str(error),
            error_type=type(error.__cause__ or error).__name__,
            **context,
        )
        session.reset()
        return [format_template("store_unavailable", keyword=self.restart_keyword)]
