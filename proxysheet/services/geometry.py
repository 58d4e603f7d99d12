"""
Geometry Engine.

Derives page size, orientation, slot rectangles and bleed from a
LayoutConfig. Pure and deterministic: no I/O, no state between calls.

Orientation (auto): portrait 8.5x11 if the grid fits, else landscape 11x8.5
if it fits, else landscape anyway with a GeometryOverflow advisory. The
overflowing content is clipped at the page edge by the renderer.
"""

import logging
import math

from proxysheet.config import MAX_CARD_SIZE_IN, MAX_DPI, MAX_GRID, PAGE_SIZE_IN
from proxysheet.models.failure import ConfigError, GeometryOverflow
from proxysheet.models.geometry import Geometry, LayoutConfig, Orientation, Slot, Spacing

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4


def inches_to_px(inches: float, dpi: int) -> int:
    return round(inches * dpi)


def mm_to_px(mm: float, dpi: int) -> int:
    return round(mm / MM_PER_INCH * dpi)


def page_size_in(orientation: Orientation) -> tuple[float, float]:
    """(width, height) of the page in inches."""
    short, long = PAGE_SIZE_IN
    if orientation is Orientation.PORTRAIT:
        return short, long
    return long, short


def required_size_in(config: LayoutConfig) -> tuple[float, float]:
    """Width and height the grid needs, margins on both sides included."""
    width = config.cols * config.card_width_in + 2 * config.margin_left_in
    height = config.rows * config.card_height_in + 2 * config.margin_top_in
    return width, height


def fits(config: LayoutConfig, orientation: Orientation) -> bool:
    """
    Whether the grid plus both margins fits the page.

    Compared in device pixels, after rounding, so a fitting grid never spills
    past the page edge by a rounding pixel.
    """
    dpi = config.dpi
    page_w, page_h = page_size_in(orientation)
    need_w = config.cols * inches_to_px(config.card_width_in, dpi) + 2 * inches_to_px(
        config.margin_left_in, dpi
    )
    need_h = config.rows * inches_to_px(config.card_height_in, dpi) + 2 * inches_to_px(
        config.margin_top_in, dpi
    )
    return need_w <= inches_to_px(page_w, dpi) and need_h <= inches_to_px(page_h, dpi)


def validate_layout(config: LayoutConfig) -> None:
    """
    Reject configurations no geometry can be derived from.

    Raises:
        ConfigError: On the first invalid field
    """
    for field_name in ("rows", "cols"):
        value = getattr(config, field_name)
        if value < 1:
            raise ConfigError(field_name, f"{field_name} must be at least 1, got {value}")
        if value > MAX_GRID:
            raise ConfigError(field_name, f"{field_name} must be at most {MAX_GRID}, got {value}")
    if config.dpi <= 0:
        raise ConfigError("dpi", f"dpi must be positive, got {config.dpi}")
    if config.dpi > MAX_DPI:
        raise ConfigError("dpi", f"dpi must be at most {MAX_DPI}, got {config.dpi}")

    for field_name in ("card_width_in", "card_height_in"):
        value = getattr(config, field_name)
        if not math.isfinite(value) or value <= 0:
            raise ConfigError(field_name, f"{field_name} must be positive, got {value}")
        if value > MAX_CARD_SIZE_IN:
            raise ConfigError(
                field_name, f"{field_name} must be at most {MAX_CARD_SIZE_IN:g} in, got {value}"
            )

    for field_name in ("margin_left_in", "margin_top_in", "bleed_mm"):
        value = getattr(config, field_name)
        if not math.isfinite(value) or value < 0:
            raise ConfigError(field_name, f"{field_name} must not be negative, got {value}")

    if inches_to_px(config.card_width_in, config.dpi) < 1:
        raise ConfigError("card_width_in", "card is narrower than one pixel at this dpi")
    if inches_to_px(config.card_height_in, config.dpi) < 1:
        raise ConfigError("card_height_in", "card is shorter than one pixel at this dpi")


def choose_orientation(config: LayoutConfig) -> tuple[Orientation, GeometryOverflow | None]:
    """Pick the page orientation and report overflow if the grid does not fit."""
    if config.orientation is not None:
        candidates = [config.orientation]
    else:
        candidates = [Orientation.PORTRAIT, Orientation.LANDSCAPE]

    for orientation in candidates:
        if fits(config, orientation):
            return orientation, None

    # Nothing fits: the forced orientation, or landscape in auto mode
    orientation = config.orientation or Orientation.LANDSCAPE
    page_w, page_h = page_size_in(orientation)
    need_w, need_h = required_size_in(config)
    overflow = GeometryOverflow(
        orientation=orientation.value,
        required_width_in=need_w,
        required_height_in=need_h,
        page_width_in=page_w,
        page_height_in=page_h,
    )
    return orientation, overflow


def _distributed_gap(page_px: int, margin_px: int, count: int, card_px: int) -> int:
    if count < 2:
        return 0
    leftover = page_px - 2 * margin_px - count * card_px
    return max(0, leftover // (count - 1))


def compute_geometry(config: LayoutConfig) -> Geometry:
    """
    Compute page and slot geometry for a layout.

    Args:
        config: Requested layout

    Returns:
        Geometry with row-major slots and an overflow advisory if the grid
        does not fit the page.

    Raises:
        ConfigError: If rows/cols are below 1 or sizes are not positive
    """
    validate_layout(config)

    orientation, overflow = choose_orientation(config)
    page_w_in, page_h_in = page_size_in(orientation)
    dpi = config.dpi

    page_w_px = inches_to_px(page_w_in, dpi)
    page_h_px = inches_to_px(page_h_in, dpi)
    card_w_px = inches_to_px(config.card_width_in, dpi)
    card_h_px = inches_to_px(config.card_height_in, dpi)
    bleed_px = max(0, mm_to_px(config.bleed_mm, dpi))
    start_x = inches_to_px(config.margin_left_in, dpi)
    start_y = inches_to_px(config.margin_top_in, dpi)

    if config.spacing is Spacing.DISTRIBUTE:
        gap_x = _distributed_gap(page_w_px, start_x, config.cols, card_w_px)
        gap_y = _distributed_gap(page_h_px, start_y, config.rows, card_h_px)
    else:
        gap_x = gap_y = 0

    slots = tuple(
        Slot(
            index=row * config.cols + col,
            x=start_x + col * (card_w_px + gap_x),
            y=start_y + row * (card_h_px + gap_y),
            width=card_w_px,
            height=card_h_px,
        )
        for row in range(config.rows)
        for col in range(config.cols)
    )

    return Geometry(
        dpi=dpi,
        card_width_in=config.card_width_in,
        card_height_in=config.card_height_in,
        rows=config.rows,
        cols=config.cols,
        margin_left_in=config.margin_left_in,
        margin_top_in=config.margin_top_in,
        bleed_mm=config.bleed_mm,
        orientation=orientation,
        page_width_in=page_w_in,
        page_height_in=page_h_in,
        page_width_px=page_w_px,
        page_height_px=page_h_px,
        card_width_px=card_w_px,
        card_height_px=card_h_px,
        bleed_px=bleed_px,
        gap_x_px=gap_x,
        gap_y_px=gap_y,
        slots=slots,
        overflow=overflow,
    )
