"""Tests for card, geometry and sheet models."""

import pytest

from proxysheet.models.card import ResolvedCard, bitmap_cache_key
from proxysheet.models.geometry import Slot


class TestResolvedCard:
    def test_set_number_addressing(self) -> None:
        card = ResolvedCard(display_name="Luke", query="luke", set_code="SOR", number="5")

        assert card.has_set_number
        assert card.cache_key == "name:luke"

    def test_image_ref_addressing(self) -> None:
        card = ResolvedCard(display_name="Luke", query="Luke", image_ref="https://cdn/luke.png")

        assert not card.has_set_number

    def test_rejects_both_modes(self) -> None:
        with pytest.raises(ValueError):
            ResolvedCard(
                display_name="Luke",
                query="Luke",
                set_code="SOR",
                number="5",
                image_ref="https://cdn/luke.png",
            )

    def test_rejects_neither_mode(self) -> None:
        with pytest.raises(ValueError):
            ResolvedCard(display_name="Luke", query="Luke", set_code="SOR")

    def test_frozen(self) -> None:
        card = ResolvedCard(display_name="Luke", query="Luke", set_code="SOR", number="5")

        with pytest.raises(AttributeError):
            card.number = "6"  # type: ignore[misc]


class TestBitmapCacheKey:
    def test_case_insensitive(self) -> None:
        assert bitmap_cache_key("Darth VADER") == bitmap_cache_key("darth vader") == "name:darth vader"


class TestSlot:
    def test_edges(self) -> None:
        slot = Slot(index=0, x=10, y=20, width=30, height=40)

        assert (slot.right, slot.bottom) == (40, 60)

    def test_adjacent_slots_do_not_overlap(self) -> None:
        a = Slot(index=0, x=0, y=0, width=10, height=10)
        b = Slot(index=1, x=10, y=0, width=10, height=10)

        assert not a.overlaps(b)
        assert a.overlaps(Slot(index=2, x=9, y=9, width=10, height=10))
