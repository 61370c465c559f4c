"""Booking Configuration - The settings the scheduling engine consumes."""

from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field

from citas.config.settings import DEFAULT_SLOTS, Settings


class BookingConfig(BaseModel):
    """Configuração do fluxo de agendamento.

    Kept separate from Settings so the conversation can be built
    in tests without environment variables.
    """

    greeting_keywords: list[str] = Field(default_factory=lambda: ["hola"], min_length=1)
    greeting_case_sensitive: bool = False
    days_ahead: int = Field(default=5, ge=1)
    slots: list[str] = Field(default_factory=lambda: list(DEFAULT_SLOTS))
    timezone: str = "America/Mexico_City"

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingConfig":
        return cls(
            greeting_keywords=settings.greeting_keywords,
            greeting_case_sensitive=settings.greeting_case_sensitive,
            days_ahead=settings.booking_days_ahead,
            slots=settings.booking_slots,
            timezone=settings.booking_timezone,
        )

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def is_greeting(self, text: str) -> bool:
        """Check whether a message starts the booking flow.

        The whole message (trimmed) must equal one of the keywords.
        """
        candidate = text.strip()
        if self.greeting_case_sensitive:
            return candidate in self.greeting_keywords
        return candidate.casefold() in {k.casefold() for k in self.greeting_keywords}
