"""
Sheet rendering and export.

Paints a built Sheet onto a page-sized Pillow image: background, an optional
cut-guide overlay, bleed boxes in the cut-border colour behind every slot, card
art scaled to the slot, and a visible placeholder for failed cards. Anything past the page edge (an
overflowing layout) is clipped by the canvas.
"""

import logging
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from proxysheet.models.geometry import Geometry, Slot
from proxysheet.models.sheet import CardArt, Failure, Sheet

logger = logging.getLogger(__name__)

DEFAULT_BACKGROUND = "#ffffff"
DEFAULT_CUT_COLOR = "#000000"

PLACEHOLDER_FILL = "#ffeded"
PLACEHOLDER_BORDER = "#dd3333"
PLACEHOLDER_TEXT = "#990000"

# Sizes at 300 dpi, scaled linearly for other resolutions
_BORDER_WIDTH_AT_300 = 6
_FONT_SIZE_AT_300 = 26
_TEXT_INSET_AT_300 = 16


def _scaled(value: int, dpi: int) -> int:
    return max(1, round(value * dpi / 300))


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, max_width: int) -> list[str]:
    """Greedy word wrap; a single over-long word gets its own line."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        buffer = ""
        for word in paragraph.split(" "):
            candidate = f"{buffer} {word}" if buffer else word
            if buffer and draw.textlength(candidate, font=font) > max_width:
                lines.append(buffer)
                buffer = word
            else:
                buffer = candidate
        if buffer:
            lines.append(buffer)
    return lines


def draw_placeholder(page: Image.Image, slot: Slot, failure: Failure, dpi: int) -> None:
    """Pale red card with a red border and "Failed: <name>"."""
    draw = ImageDraw.Draw(page)
    border = _scaled(_BORDER_WIDTH_AT_300, dpi)

    draw.rectangle(
        (slot.x, slot.y, slot.right - 1, slot.bottom - 1),
        fill=PLACEHOLDER_FILL,
        outline=PLACEHOLDER_BORDER,
        width=border,
    )

    font_size = _scaled(_FONT_SIZE_AT_300, dpi)
    font = ImageFont.load_default(size=font_size)
    text_inset = _scaled(_TEXT_INSET_AT_300, dpi)
    line_height = round(font_size * 1.3)

    lines = wrap_text(draw, f"Failed:\n{failure.name}", font, slot.width - 2 * text_inset)
    y = slot.y + text_inset + border
    for line in lines:
        draw.text((slot.x + text_inset, y), line, fill=PLACEHOLDER_TEXT, font=font)
        y += line_height


def load_overlay(path: Path) -> Image.Image:
    """Read a cut-guide overlay image fully into memory as RGBA."""
    with Image.open(path) as image:
        return image.convert("RGBA")


def blend_overlay(page: Image.Image, overlay: Image.Image, opacity: float = 1.0) -> None:
    """
    Draw an overlay stretched to the full page at the given opacity.

    Opacity is clamped to 0..1 and multiplies the overlay's own alpha.
    """
    opacity = min(1.0, max(0.0, opacity))
    if opacity == 0.0:
        return
    layer = overlay.convert("RGBA").resize(page.size, Image.Resampling.LANCZOS)
    if opacity < 1.0:
        layer.putalpha(layer.getchannel("A").point(lambda a: round(a * opacity)))
    page.paste(layer, (0, 0), layer)


def render_sheet(
    sheet: Sheet,
    geometry: Geometry,
    *,
    cut_color: str = DEFAULT_CUT_COLOR,
    background: str = DEFAULT_BACKGROUND,
    overlay: Image.Image | None = None,
    overlay_opacity: float = 1.0,
) -> Image.Image:
    """
    Render one sheet to an RGB page image.

    Args:
        sheet: Built sheet
        geometry: Geometry the sheet was built with
        cut_color: Bleed fill colour
        background: Page colour
        overlay: Optional cut-guide image, stretched to the page under the cards
        overlay_opacity: Overlay opacity, clamped to 0..1

    Returns:
        Image of geometry.page_size_px
    """
    page = Image.new("RGB", geometry.page_size_px, background)
    if overlay is not None:
        blend_overlay(page, overlay, overlay_opacity)
    draw = ImageDraw.Draw(page)

    if geometry.bleed_px > 0:
        for slot in geometry.slots:
            x0, y0, x1, y1 = slot.bleed_box(geometry.bleed_px)
            draw.rectangle((x0, y0, x1 - 1, y1 - 1), fill=cut_color)

    # Placements of the same card share one CardArt; scale it once
    scaled: dict[int, Image.Image] = {}
    for placement in sheet.placements:
        content = placement.content
        slot = placement.slot
        if isinstance(content, CardArt):
            art = scaled.get(id(content))
            if art is None:
                art = content.image.convert("RGB").resize(
                    (slot.width, slot.height), Image.Resampling.LANCZOS
                )
                scaled[id(content)] = art
            page.paste(art, (slot.x, slot.y))
        elif isinstance(content, Failure):
            draw_placeholder(page, slot, content, geometry.dpi)

    return page


def export_png(
    sheets: list[Sheet],
    geometry: Geometry,
    directory: Path,
    stem: str = "cards-sheet",
    *,
    overlay: Image.Image | None = None,
    overlay_opacity: float = 1.0,
) -> list[Path]:
    """
    Write one PNG per sheet, tagged with the geometry's dpi.

    Returns:
        Paths written, in sheet order ("<stem>-1.png", "<stem>-2.png", ...)
    """
    directory.mkdir(parents=True, exist_ok=True)
    paths: list[Path] = []
    for sheet in sheets:
        path = directory / f"{stem}-{sheet.index + 1}.png"
        page = render_sheet(sheet, geometry, overlay=overlay, overlay_opacity=overlay_opacity)
        page.save(path, format="PNG", dpi=(geometry.dpi, geometry.dpi))
        paths.append(path)
        logger.info("Wrote %s", path)
    return paths


def export_pdf(
    sheets: list[Sheet],
    geometry: Geometry,
    path: Path,
    *,
    overlay: Image.Image | None = None,
    overlay_opacity: float = 1.0,
) -> Path:
    """
    Write all sheets to one multi-page PDF at the geometry's physical size.

    Raises:
        ValueError: If there are no sheets
    """
    if not sheets:
        raise ValueError("No sheets to export")

    pages = [
        render_sheet(sheet, geometry, overlay=overlay, overlay_opacity=overlay_opacity)
        for sheet in sheets
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    pages[0].save(
        path,
        format="PDF",
        resolution=float(geometry.dpi),
        save_all=True,
        append_images=pages[1:],
    )
    logger.info("Wrote %d page(s) to %s", len(pages), path)
    return path
