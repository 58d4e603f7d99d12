"""
Print geometry models.

LayoutConfig is what the user asks for (physical units). Geometry is what
compute_geometry() derives from it (device pixels). Neither depends on card
content.
"""

from dataclasses import dataclass, field
from enum import Enum

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
from proxysheet.models.failure import GeometryOverflow


class Orientation(str, Enum):
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class Spacing(str, Enum):
    """How leftover page space is used between cards."""

    NONE = "none"
    """Cards abut; leftover space stays at the right/bottom edge."""

    DISTRIBUTE = "distribute"
    """Leftover space is split evenly between columns and rows (floored)."""


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """
    Requested sheet layout.

    Attributes:
        dpi: Output resolution (pixels per inch)
        card_width_in: Card width in inches
        card_height_in: Card height in inches
        rows: Cards per column
        cols: Cards per row
        margin_left_in: Left (and right) page margin in inches
        margin_top_in: Top (and bottom) page margin in inches
        bleed_mm: Bleed border drawn around each card, in millimetres
        orientation: Force an orientation; None picks the first that fits
        spacing: Gap policy between cards
    """

    dpi: int = DEFAULT_DPI
    card_width_in: float = DEFAULT_CARD_WIDTH_IN
    card_height_in: float = DEFAULT_CARD_HEIGHT_IN
    rows: int = DEFAULT_ROWS
    cols: int = DEFAULT_COLS
    margin_left_in: float = DEFAULT_MARGIN_LEFT_IN
    margin_top_in: float = DEFAULT_MARGIN_TOP_IN
    bleed_mm: float = DEFAULT_BLEED_MM
    orientation: Orientation | None = None
    spacing: Spacing = Spacing.NONE


@dataclass(frozen=True, slots=True)
class Slot:
    """A card-sized rectangle on the page, in device pixels."""

    index: int
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def bleed_box(self, bleed_px: int) -> tuple[int, int, int, int]:
        """(x0, y0, x1, y1) of the bleed rectangle around this slot."""
        return (
            self.x - bleed_px,
            self.y - bleed_px,
            self.right + bleed_px,
            self.bottom + bleed_px,
        )

    def overlaps(self, other: "Slot") -> bool:
        return (
            self.x < other.right
            and other.x < self.right
            and self.y < other.bottom
            and other.y < self.bottom
        )


@dataclass(frozen=True, slots=True)
class Geometry:
    """Derived page and slot geometry for one layout configuration."""

    dpi: int
    card_width_in: float
    card_height_in: float
    rows: int
    cols: int
    margin_left_in: float
    margin_top_in: float
    bleed_mm: float
    orientation: Orientation
    page_width_in: float
    page_height_in: float
    page_width_px: int
    page_height_px: int
    card_width_px: int
    card_height_px: int
    bleed_px: int
    gap_x_px: int
    gap_y_px: int
    slots: tuple[Slot, ...] = field(default_factory=tuple)
    overflow: GeometryOverflow | None = None

    @property
    def capacity(self) -> int:
        """Slots per sheet."""
        return self.rows * self.cols

    @property
    def page_size_px(self) -> tuple[int, int]:
        return (self.page_width_px, self.page_height_px)

    def contains(self, slot: Slot) -> bool:
        return (
            slot.x >= 0
            and slot.y >= 0
            and slot.right <= self.page_width_px
            and slot.bottom <= self.page_height_px
        )
