"""Tests for the sheet-building CLI job."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from PIL import Image

from proxysheet.jobs.build_sheets import build_parser, config_from_args, main
from proxysheet.models.failure import ResolutionError
from proxysheet.models.geometry import LayoutConfig, Orientation, Spacing
from proxysheet.models.sheet import BuildResult, CardArt, Failure, Placement, Sheet
from proxysheet.services.geometry import compute_geometry


@pytest.fixture
def card_list(tmp_path: Path) -> Path:
    path = tmp_path / "list.txt"
    path.write_text("Luke Skywalker\nDarth Vader\n", encoding="utf-8")
    return path


@pytest.fixture
def built_result() -> BuildResult:
    """One sheet with a card and a failure, at 60 dpi."""
    geometry = compute_geometry(LayoutConfig(dpi=60))
    contents = [
        CardArt(name="Luke Skywalker", image=Image.new("RGB", (25, 35), "#3366cc")),
        Failure(name="Darth Vader", error=ResolutionError("Darth Vader")),
    ]
    placements = tuple(
        Placement(slot=slot, name=contents[slot.index].name, content=contents[slot.index])
        if slot.index < len(contents)
        else Placement(slot=slot, name=None, content=None)
        for slot in geometry.slots
    )
    return BuildResult(sheets=[Sheet(index=0, placements=placements)], geometry=geometry)


class TestArguments:
    def test_defaults_match_layout_defaults(self, card_list: Path) -> None:
        args = build_parser().parse_args([str(card_list)])

        assert config_from_args(args) == LayoutConfig()
        assert args.out == Path("sheets")
        assert args.pdf is None

    def test_layout_flags(self, card_list: Path) -> None:
        args = build_parser().parse_args(
            [
                str(card_list),
                "--rows", "3",
                "--cols", "3",
                "--dpi", "600",
                "--bleed-mm", "0",
                "--orientation", "portrait",
                "--spacing", "distribute",
            ]
        )

        config = config_from_args(args)
        assert (config.rows, config.cols, config.dpi, config.bleed_mm) == (3, 3, 600, 0.0)
        assert config.orientation == Orientation.PORTRAIT
        assert config.spacing == Spacing.DISTRIBUTE


class TestMain:
    def test_writes_png_and_pdf(
        self, tmp_path: Path, card_list: Path, built_result: BuildResult, capsys
    ) -> None:
        out = tmp_path / "out"
        pdf = tmp_path / "sheets.pdf"

        with patch(
            "proxysheet.jobs.build_sheets.run_build",
            new_callable=AsyncMock,
            return_value=built_result,
        ):
            exit_code = main([str(card_list), "--out", str(out), "--pdf", str(pdf)])

        assert exit_code == 0
        assert (out / "cards-sheet-1.png").exists()
        assert pdf.exists()
        printed = capsys.readouterr().out
        assert "Built 1 sheet(s) with 2 card(s)" in printed
        assert "Failed 1 placement(s)" in printed
        assert "Darth Vader" in printed

    def test_overlay_drawn_on_each_page(
        self, tmp_path: Path, card_list: Path, built_result: BuildResult
    ) -> None:
        guide = tmp_path / "guide.png"
        Image.new("RGB", (11, 8), "#ff0000").save(guide)
        out = tmp_path / "out"

        with patch(
            "proxysheet.jobs.build_sheets.run_build",
            new_callable=AsyncMock,
            return_value=built_result,
        ):
            exit_code = main(
                [str(card_list), "--out", str(out), "--overlay", str(guide), "--overlay-opacity", "1"]
            )

        assert exit_code == 0
        with Image.open(out / "cards-sheet-1.png") as page:
            assert page.convert("RGB").getpixel((0, 0)) == (255, 0, 0)

    def test_unreadable_overlay_exits_1(self, tmp_path: Path, card_list: Path) -> None:
        guide = tmp_path / "guide.png"
        guide.write_bytes(b"not an image")
        run_build = AsyncMock()

        with patch("proxysheet.jobs.build_sheets.run_build", run_build):
            exit_code = main([str(card_list), "--out", str(tmp_path), "--overlay", str(guide)])

        assert exit_code == 1
        run_build.assert_not_called()

    @pytest.mark.parametrize("flags", [["--rows", "0"], ["--cols", "11"], ["--dpi", "5000"]])
    def test_invalid_layout_exits_1(self, tmp_path: Path, card_list: Path, flags: list[str]) -> None:
        """Layout errors are reported before any request is made."""
        exit_code = main([str(card_list), "--out", str(tmp_path), *flags])

        assert exit_code == 1
        assert list(tmp_path.glob("*.png")) == []

    def test_empty_list(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "empty.txt"
        path.write_text("# nothing\n", encoding="utf-8")

        exit_code = main([str(path), "--out", str(tmp_path / "out")])

        assert exit_code == 0
        assert "No cards found" in capsys.readouterr().out
        assert not (tmp_path / "out").exists()
