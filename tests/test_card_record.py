"""Tests for the typed search-hit model."""

from proxysheet.models.card_record import CardRecord


class TestCardRecordAliases:
    def test_primary_field_names(self) -> None:
        record = CardRecord.from_hit(
            {"name": "Luke Skywalker", "set": "SOR", "setnumber": "005", "image": "https://x/y.png"}
        )

        assert record.name == "Luke Skywalker"
        assert record.set_code == "SOR"
        assert record.number == "005"
        assert record.image_url == "https://x/y.png"

    def test_alternate_set_and_number_names(self) -> None:
        """Fallback aliases are used when the primary names are absent."""
        record = CardRecord.from_hit({"Name": "Vader", "setCode": "SOR", "collector_number": "10"})

        assert record.name == "Vader"
        assert record.set_code == "SOR"
        assert record.number == "10"
        assert record.has_set_number

    def test_alias_priority_order(self) -> None:
        """The first alias in priority order wins when several are present."""
        record = CardRecord.from_hit(
            {"Set": "TWI", "code": "SHD", "Number": "9", "number": "7", "title": "T", "name": "N"}
        )

        assert record.set_code == "SHD"
        assert record.number == "7"
        assert record.name == "N"

    def test_blank_alias_falls_through(self) -> None:
        """Null or blank values do not shadow a later alias."""
        record = CardRecord.from_hit({"set": "", "setCode": None, "code": "SOR", "number": "  "})

        assert record.set_code == "SOR"
        assert record.number is None
        assert not record.has_set_number

    def test_numeric_number_coerced_to_string(self) -> None:
        record = CardRecord.from_hit({"set": "SOR", "number": 42})

        assert record.number == "42"

    def test_nested_image_paths(self) -> None:
        assert CardRecord.from_hit({"images": {"large": "https://a/l.png"}}).image_url == (
            "https://a/l.png"
        )
        assert CardRecord.from_hit({"images": {"front": "https://a/f.png"}}).image_url == (
            "https://a/f.png"
        )

    def test_image_alias_priority(self) -> None:
        record = CardRecord.from_hit(
            {"FrontArt": "https://a/art.png", "img": "https://a/img.png", "images": {}}
        )

        assert record.image_url == "https://a/img.png"

    def test_structured_set_value_ignored(self) -> None:
        """An expanded set object is not a set code."""
        record = CardRecord.from_hit({"set": {"code": "SOR"}, "Set": "SOR", "number": "1"})

        assert record.set_code == "SOR"

    def test_unknown_fields_ignored(self) -> None:
        record = CardRecord.from_hit({"name": "Luke", "cost": 3, "traits": ["Rebel"]})

        assert record.name == "Luke"
        assert record.set_code is None
        assert record.image_url is None

    def test_strips_whitespace(self) -> None:
        record = CardRecord.from_hit({"set": " SOR ", "number": " 010 "})

        assert record.set_code == "SOR"
        assert record.number == "010"
