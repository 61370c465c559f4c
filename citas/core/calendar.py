"""Calendar Generator - Next business days offered to a requester."""

from datetime import date, datetime, timedelta

from citas.contracts.appointment import AvailableDay

# Weekday names in Spanish, Monday first (date.weekday() order)
WEEKDAYS_ES = [
    "lunes",
    "martes",
    "miércoles",
    "jueves",
    "viernes",
    "sábado",
    "domingo",
]

MONTHS_ES = [
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
]

# Monday..Friday as date.isoweekday()
BUSINESS_WEEKDAYS = frozenset({1, 2, 3, 4, 5})


def format_day_label(day: date) -> str:
    """Format a date for display, e.g. ``lunes, 20 octubre``.

    Args:
        day: Date to format.

    Returns:
        Spanish label with weekday, day number and month.
    """
    return f"{WEEKDAYS_ES[day.weekday()]}, {day.day} {MONTHS_ES[day.month - 1]}"


def generate_available_days(
    reference: date | datetime,
    count: int = 5,
) -> list[AvailableDay]:
    """Generate the next ``count`` business days after ``reference``.

    Starts the day after the reference date and walks forward one
    calendar day at a time, keeping Monday to Friday.

    Args:
        reference: Current instant or date. Only its calendar date is used,
            so a timezone-aware datetime should already be in the local zone.
        count: Number of days to produce (at least 1).

    Returns:
        Chronologically increasing list of distinct weekdays.

    Raises:
        ValueError: If count is lower than 1.
    """
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")

    current = reference.date() if isinstance(reference, datetime) else reference
    days: list[AvailableDay] = []
    while len(days) < count:
        current += timedelta(days=1)
        if current.isoweekday() in BUSINESS_WEEKDAYS:
            days.append(AvailableDay(date_key=current, label=format_day_label(current)))
    return days
