"""
Build printable proxy sheets from a card list file.

Resolves every card through the proxy, lays them out on letter pages and
writes one PNG per sheet, plus an optional multi-page PDF.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from proxysheet.config import (
    DEFAULT_BLEED_MM,
    DEFAULT_CARD_HEIGHT_IN,
    DEFAULT_CARD_WIDTH_IN,
    DEFAULT_COLS,
    DEFAULT_DPI,
    DEFAULT_MARGIN_LEFT_IN,
    DEFAULT_MARGIN_TOP_IN,
    DEFAULT_ROWS,
)
from proxysheet.models.failure import ConfigError
from proxysheet.models.geometry import LayoutConfig, Orientation, Spacing
from proxysheet.models.sheet import BuildProgress, BuildResult
from proxysheet.services.sheet_builder import build_sheets_from_text, open_sheet_builder
from proxysheet.services.sheet_renderer import export_pdf, export_png, load_overlay

logger = logging.getLogger(__name__)


def _log_progress(progress: BuildProgress) -> None:
    logger.info(
        "[%d/%d] %s%s",
        progress.completed,
        progress.total,
        progress.name,
        " (failed)" if progress.failed else "",
    )


async def run_build(
    text: str,
    config: LayoutConfig,
    proxy_url: str | None = None,
) -> BuildResult:
    """
    Build sheets for a card list.

    Args:
        text: Card list, one card per line
        config: Requested layout
        proxy_url: Override for settings.proxy_url

    Raises:
        ConfigError: If the layout is invalid (before any network access)
    """
    async with open_sheet_builder(proxy_url=proxy_url) as builder:
        return await build_sheets_from_text(text, config, builder, progress=_log_progress)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Build printable proxy sheets from a card list")
    parser.add_argument("card_list", type=Path, help="Text file with one card per line")
    parser.add_argument(
        "--out",
        type=Path,
        default=Path("sheets"),
        help="Directory for PNG sheets (default: sheets)",
    )
    parser.add_argument("--pdf", type=Path, help="Also write all sheets to this PDF file")
    parser.add_argument("--rows", type=int, default=DEFAULT_ROWS)
    parser.add_argument("--cols", type=int, default=DEFAULT_COLS)
    parser.add_argument("--dpi", type=int, default=DEFAULT_DPI)
    parser.add_argument("--card-width", type=float, default=DEFAULT_CARD_WIDTH_IN, help="Inches")
    parser.add_argument("--card-height", type=float, default=DEFAULT_CARD_HEIGHT_IN, help="Inches")
    parser.add_argument("--margin-left", type=float, default=DEFAULT_MARGIN_LEFT_IN, help="Inches")
    parser.add_argument("--margin-top", type=float, default=DEFAULT_MARGIN_TOP_IN, help="Inches")
    parser.add_argument("--bleed-mm", type=float, default=DEFAULT_BLEED_MM)
    parser.add_argument(
        "--orientation",
        choices=[o.value for o in Orientation],
        help="Force an orientation (default: first that fits)",
    )
    parser.add_argument(
        "--spacing",
        choices=[s.value for s in Spacing],
        default=Spacing.NONE.value,
        help="Gap policy between cards (default: none)",
    )
    parser.add_argument("--overlay", type=Path, help="Cut-guide image drawn over each page")
    parser.add_argument(
        "--overlay-opacity",
        type=float,
        default=1.0,
        help="Overlay opacity from 0 to 1 (default: 1)",
    )
    parser.add_argument("--proxy-url", help="Card proxy endpoint (default: from settings)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def config_from_args(args: argparse.Namespace) -> LayoutConfig:
    return LayoutConfig(
        dpi=args.dpi,
        card_width_in=args.card_width,
        card_height_in=args.card_height,
        rows=args.rows,
        cols=args.cols,
        margin_left_in=args.margin_left,
        margin_top_in=args.margin_top,
        bleed_mm=args.bleed_mm,
        orientation=Orientation(args.orientation) if args.orientation else None,
        spacing=Spacing(args.spacing),
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    overlay = None
    if args.overlay:
        try:
            overlay = load_overlay(args.overlay)
        except OSError as e:
            logger.error("Cannot read overlay %s: %s", args.overlay, e)
            return 1

    text = args.card_list.read_text(encoding="utf-8")
    try:
        result = asyncio.run(run_build(text, config_from_args(args), args.proxy_url))
    except ConfigError as e:
        logger.error("%s (%s)", e.message, e.detail)
        return 1

    if not result.sheets:
        print("No cards found in list")
        return 0

    opacity = args.overlay_opacity
    paths = export_png(
        result.sheets, result.geometry, args.out, overlay=overlay, overlay_opacity=opacity
    )
    if args.pdf:
        paths.append(
            export_pdf(
                result.sheets, result.geometry, args.pdf, overlay=overlay, overlay_opacity=opacity
            )
        )

    print(f"Built {len(result.sheets)} sheet(s) with {result.placed_count} card(s):")
    for path in paths:
        print(f"  {path}")

    if result.overflow:
        print(f"\nWarning: {result.overflow.message}")

    if result.failures:
        print(f"\nFailed {len(result.failures)} placement(s):")
        for failure in result.failures:
            print(f"  {failure.name}: {failure.reason}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
