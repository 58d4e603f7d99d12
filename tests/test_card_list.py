"""Tests for the pasted card list parser."""

import pytest

from proxysheet.models.card import CardRequest
from proxysheet.parsers.card_list import (
    expand_requests,
    format_card_list,
    normalize_card_list,
    parse_card_line,
)


class TestParseCardLine:
    @pytest.mark.parametrize(
        ("line", "quantity", "name"),
        [
            ("3 Luke Skywalker", 3, "Luke Skywalker"),
            ("3x Luke Skywalker", 3, "Luke Skywalker"),
            ("3 x Luke Skywalker", 3, "Luke Skywalker"),
            ("3X Luke Skywalker", 3, "Luke Skywalker"),
            ("Luke Skywalker x3", 3, "Luke Skywalker"),
            ("Luke Skywalker x 3", 3, "Luke Skywalker"),
            ("Luke Skywalker 3x", 3, "Luke Skywalker"),
            ("Luke Skywalker (3)", 3, "Luke Skywalker"),
            ("Luke Skywalker", 1, "Luke Skywalker"),
        ],
    )
    def test_quantity_forms(self, line: str, quantity: int, name: str) -> None:
        """Prefix and suffix quantity markers are recognized."""
        assert parse_card_line(line) == CardRequest(raw_name=name, quantity=quantity)

    def test_collapses_whitespace(self) -> None:
        """Leading, trailing and repeated whitespace is collapsed."""
        request = parse_card_line("   2    Darth\tVader   ")

        assert request == CardRequest(raw_name="Darth Vader", quantity=2)

    def test_blank_line_is_none(self) -> None:
        assert parse_card_line("   ") is None

    @pytest.mark.parametrize("line", ["# leaders", "// notes", "#2 Luke"])
    def test_comments_skipped(self, line: str) -> None:
        assert parse_card_line(line) is None

    @pytest.mark.parametrize("line", ["Deck", "Sideboard", "leaders:", "Base", "MAIN"])
    def test_section_headers_skipped(self, line: str) -> None:
        assert parse_card_line(line) is None

    def test_zero_quantity_dropped(self) -> None:
        assert parse_card_line("0 Luke Skywalker") is None
        assert parse_card_line("Luke Skywalker x0") is None

    def test_set_hint_stripped(self) -> None:
        """Set hints in parentheses are annotations, not part of the name."""
        assert parse_card_line("Chewbacca (SOR)") == CardRequest(raw_name="Chewbacca")

    def test_set_hint_with_collector_number_stripped(self) -> None:
        """A collector number after a set hint is removed with it."""
        request = parse_card_line("2 Darth Vader (SOR) 010")

        assert request == CardRequest(raw_name="Darth Vader", quantity=2)

    def test_prefix_wins_over_suffix(self) -> None:
        """Only one quantity marker is read per line."""
        request = parse_card_line("2 Boba Fett x3")

        assert request == CardRequest(raw_name="Boba Fett x3", quantity=2)

    def test_name_with_digits_kept(self) -> None:
        assert parse_card_line("R2-D2") == CardRequest(raw_name="R2-D2")


class TestNormalizeCardList:
    def test_empty_input(self) -> None:
        assert normalize_card_list("") == []
        assert normalize_card_list("\n\n  \n") == []

    def test_preserves_order_without_merging(self) -> None:
        """The same name on two lines gives two requests."""
        requests = normalize_card_list("Luke Skywalker\nDarth Vader\n2 Luke Skywalker")

        assert requests == [
            CardRequest(raw_name="Luke Skywalker", quantity=1),
            CardRequest(raw_name="Darth Vader", quantity=1),
            CardRequest(raw_name="Luke Skywalker", quantity=2),
        ]

    def test_handles_crlf(self) -> None:
        requests = normalize_card_list("2 Luke Skywalker\r\nDarth Vader\r\n")

        assert [r.raw_name for r in requests] == ["Luke Skywalker", "Darth Vader"]

    def test_mixed_list(self, sample_card_list: str) -> None:
        """Headers, comments and annotations are dropped from a pasted export."""
        requests = normalize_card_list(sample_card_list)

        assert requests == [
            CardRequest(raw_name="Darth Vader", quantity=1),
            CardRequest(raw_name="Stormtrooper", quantity=3),
            CardRequest(raw_name="TIE Fighter", quantity=2),
            CardRequest(raw_name="Admiral Piett", quantity=2),
            CardRequest(raw_name="Death Trooper", quantity=2),
        ]


class TestFormatCardList:
    def test_formats_quantity_prefix(self) -> None:
        text = format_card_list([CardRequest("Luke Skywalker", 2), CardRequest("Darth Vader")])

        assert text == "2x Luke Skywalker\n1x Darth Vader"

    @pytest.mark.parametrize(
        "text",
        [
            "Luke Skywalker x2\nDarth Vader",
            "2 Boba Fett x3\nR2-D2 (SOR)\n1 7th Fleet Trooper",
            "# list\nDeck\n3x Stormtrooper\nTIE Fighter (4)\nFoo (3) bar",
            "X Wing",
            "x Marks the Spot x2",
            "1 2 Fast\n1 Wing x2",
        ],
    )
    def test_normalize_is_idempotent(self, text: str) -> None:
        """Re-parsing the formatted output yields the same requests."""
        requests = normalize_card_list(text)

        assert normalize_card_list(format_card_list(requests)) == requests

    def test_idempotent_on_sample(self, sample_card_list: str) -> None:
        requests = normalize_card_list(sample_card_list)

        assert normalize_card_list(format_card_list(requests)) == requests


class TestExpandRequests:
    def test_expands_quantities_in_order(self) -> None:
        names = expand_requests([CardRequest("Luke", 2), CardRequest("Vader"), CardRequest("Luke")])

        assert names == ["Luke", "Luke", "Vader", "Luke"]


class TestCardRequest:
    def test_rejects_blank_name(self) -> None:
        with pytest.raises(ValueError):
            CardRequest(raw_name="  ")

    def test_rejects_zero_quantity(self) -> None:
        with pytest.raises(ValueError):
            CardRequest(raw_name="Luke", quantity=0)

    def test_cache_key_is_case_insensitive(self) -> None:
        assert CardRequest("Luke Skywalker").cache_key == CardRequest("LUKE skywalker").cache_key
