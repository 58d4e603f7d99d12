"""
Sheet Models.

A Sheet is one page worth of placements. Every placement ends in exactly one
state: CardArt (a decoded bitmap), Failure (a marker the renderer draws as a
placeholder), or None (an unused trailing slot on the last sheet).
"""

from dataclasses import dataclass

from PIL import Image

from proxysheet.models.card import ResolvedCard
from proxysheet.models.failure import FailureKind, GeometryOverflow, KnownError
from proxysheet.models.geometry import Geometry, Slot


@dataclass(frozen=True, slots=True, eq=False)
class CardArt:
    """
    Decoded artwork bound to a slot.

    Placements of the same name share one CardArt (and one image object).

    Attributes:
        name: Requested card name
        image: Decoded bitmap
        card: Resolution result, None when served from the bitmap cache
    """

    name: str
    image: Image.Image
    card: ResolvedCard | None = None


@dataclass(frozen=True, slots=True)
class Failure:
    """A slot whose card could not be resolved or fetched."""

    name: str
    error: KnownError

    @property
    def kind(self) -> FailureKind:
        return self.error.kind

    @property
    def reason(self) -> str:
        if self.error.detail:
            return f"{self.error.message} ({self.error.detail})"
        return self.error.message


SlotContent = CardArt | Failure | None


@dataclass(frozen=True, slots=True)
class Placement:
    """A slot and what ended up in it."""

    slot: Slot
    name: str | None
    content: SlotContent

    @property
    def is_empty(self) -> bool:
        return self.content is None

    @property
    def failed(self) -> bool:
        return isinstance(self.content, Failure)


@dataclass(frozen=True, slots=True)
class Sheet:
    """One page of placements, always exactly rows * cols long."""

    index: int
    placements: tuple[Placement, ...]

    @property
    def filled(self) -> list[Placement]:
        return [p for p in self.placements if not p.is_empty]

    @property
    def failures(self) -> list[Failure]:
        return [p.content for p in self.placements if isinstance(p.content, Failure)]

    def names(self) -> list[str | None]:
        return [p.name for p in self.placements]


@dataclass(frozen=True, slots=True)
class BuildProgress:
    """Progress snapshot passed to the build callback."""

    completed: int
    """Distinct card names finished so far."""

    total: int
    """Distinct card names in this build."""

    name: str
    """Name that just finished."""

    failed: bool = False


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Everything a renderer or API caller needs from one build."""

    sheets: list[Sheet]
    geometry: Geometry

    @property
    def overflow(self) -> GeometryOverflow | None:
        return self.geometry.overflow

    @property
    def failures(self) -> list[Failure]:
        return [f for sheet in self.sheets for f in sheet.failures]

    @property
    def placed_count(self) -> int:
        return sum(len(sheet.filled) for sheet in self.sheets)
