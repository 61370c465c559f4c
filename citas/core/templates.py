"""Response Templates - Texts sent to the requester at each stage.

Templates hold the fixed wording; placeholders are filled by the
booking conversation with the data of the current turn.
"""

from collections.abc import Iterable
from typing import Any

TEMPLATES: dict[str, str] = {
    # Stage 1: day selection
    "offer_days_intro": (
        "🙌 ¡Perfecto! Te ayudo a agendar tu cita. "
        "Por favor selecciona uno de estos días disponibles:"
    ),
    "offer_days": "{options}\n\nResponde con el número de tu preferencia.",
    "invalid_day": "⚠️ Por favor, responde con un número válido (1 al {max_option}).",
    "no_availability": (
        "❌ Lo siento, ya no hay horarios disponibles para el {day}.\n"
        "Por favor escribe *{keyword}* nuevamente para ver otras fechas."
    ),
    # Stage 2: slot selection
    "offer_slots": (
        "Excelente, has seleccionado el {day}. Horarios disponibles:\n\n"
        "{options}\n\n"
        "Responde con el número del horario que prefieras."
    ),
    "invalid_slot": (
        "⚠️ Opción inválida.\n"
        "Por favor inicia de nuevo escribiendo *{keyword}*."
    ),
    # Commit
    "appointment_confirmed": (
        "✅ ¡Cita confirmada!\n"
        "📅 Fecha: {day}\n"
        "🕒 Hora: {slot}"
    ),
    "slot_taken": (
        "❌ Ese horario ya fue reservado.\n"
        "Por favor inicia de nuevo con *{keyword}*."
    ),
    "store_unavailable": (
        "😔 Hubo un problema al confirmar tu cita.\n"
        "Por favor inténtalo de nuevo en unos minutos escribiendo *{keyword}*."
    ),
    # Outside the flow
    "idle_hint": "👋 Escribe *{keyword}* para agendar una cita.",
    "error": (
        "Lo sentimos, ocurrió un error al procesar tu mensaje. 😔\n"
        "Por favor, inténtalo de nuevo en unos instantes."
    ),
}


def get_template(template_key: str) -> str:
    """Get a template by its key, or the error template if unknown."""
    return TEMPLATES.get(template_key, TEMPLATES["error"])


def format_template(template_key: str, **context: Any) -> str:
    """Format a template with context data.

    Args:
        template_key: Key of the template.
        **context: Data to fill placeholders.

    Returns:
        Formatted text, or the raw template if a placeholder is missing.
    """
    template = get_template(template_key)
    try:
        return template.format(**context)
    except KeyError:
        return template


def numbered_options(items: Iterable[str]) -> str:
    """Render ``1. a\\n2. b`` style option lists."""
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))
