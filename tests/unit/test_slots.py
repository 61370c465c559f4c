"""Unit Tests - Slot Catalog."""

import pytest

from citas.config.settings import DEFAULT_SLOTS
from citas.core.errors import CatalogError
from citas.core.slots import SlotCatalog


class TestSlotCatalog:
    """Tests for the ordered slot catalog."""

    def test_default_catalog_order(self) -> None:
        catalog = SlotCatalog(DEFAULT_SLOTS)

        assert catalog.list_slots() == ["9:00 AM", "10:30 AM", "1:00 PM", "3:30 PM", "5:00 PM"]
        assert len(catalog) == 5

    def test_list_slots_returns_a_copy(self) -> None:
        """Test that callers cannot mutate the catalog."""
        catalog = SlotCatalog(DEFAULT_SLOTS)

        slots = catalog.list_slots()
        slots.pop()

        assert len(catalog.list_slots()) == 5

    def test_labels_are_trimmed(self) -> None:
        catalog = SlotCatalog([" 9:00 AM ", "10:30 AM"])

        assert catalog.list_slots() == ["9:00 AM", "10:30 AM"]
        assert "9:00 AM" in catalog

    def test_empty_catalog_rejected(self) -> None:
        with pytest.raises(CatalogError):
            SlotCatalog([])

    def test_blank_label_rejected(self) -> None:
        with pytest.raises(CatalogError):
            SlotCatalog(["9:00 AM", "  "])

    def test_duplicate_labels_rejected(self) -> None:
        with pytest.raises(CatalogError):
            SlotCatalog(["9:00 AM", "9:00 AM"])

    def test_separator_in_label_rejected(self) -> None:
        """Test that labels cannot break the date|slot key format."""
        with pytest.raises(CatalogError):
            SlotCatalog(["9:00|10:00"])
