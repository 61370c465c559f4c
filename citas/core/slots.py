"""Slot Catalog - Ordered time labels bookable on any day."""

from collections.abc import Iterable

from citas.contracts.appointment import KEY_SEPARATOR
from citas.core.errors import CatalogError


class SlotCatalog:
    """Immutable, ordered list of slot labels for the process lifetime."""

    def __init__(self, labels: Iterable[str]) -> None:
        slots = tuple(label.strip() for label in labels)
        if not slots:
            raise CatalogError("El catálogo de horarios está vacío")
        if any(not label for label in slots):
            raise CatalogError("El catálogo contiene un horario vacío")
        if len(set(slots)) != len(slots):
            raise CatalogError(f"Horarios duplicados en el catálogo: {slots}")
        bad = [label for label in slots if KEY_SEPARATOR in label]
        if bad:
            raise CatalogError(f"Horarios con '{KEY_SEPARATOR}' no permitidos: {bad}")
        self._slots = slots

    def list_slots(self) -> list[str]:
        return list(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, label: object) -> bool:
        return label in self._slots

    def __repr__(self) -> str:
        return f"SlotCatalog({list(self._slots)!r})"
