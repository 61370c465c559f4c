"""Booking errors."""


class BookingError(Exception):
    """Base class for booking engine errors."""


class UserInputError(BookingError):
    """A reply could not be read as a valid option number."""

    def __init__(self, reply: str, max_option: int) -> None:
        self.reply = reply
        self.max_option = max_option
        super().__init__(f"Opción inválida {reply!r} (esperado 1..{max_option})")


class StoreUnavailableError(BookingError):
    """The reservation store could not be reached or answered with a fault.

    Retryable. Never means the slot is free or taken.
    """


class CatalogError(BookingError, ValueError):
    """The configured slot catalog is unusable."""
