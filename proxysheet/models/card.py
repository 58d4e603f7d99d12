"""
Card Models.

CardRequest is untrusted user input (one pasted line). ResolvedCard is the
result of resolving that name against SWU-DB and is what the image fetcher
consumes. Both are frozen.
"""

from dataclasses import dataclass


def bitmap_cache_key(name: str) -> str:
    """Logical cache key for a requested card name (case-insensitive)."""
    return f"name:{name.lower()}"


@dataclass(frozen=True, slots=True)
class CardRequest:
    """
    One normalized line of the card list.

    Attributes:
        raw_name: Card name as typed, whitespace collapsed, annotations removed
        quantity: Number of slots to fill with this card (>= 1)
    """

    raw_name: str
    quantity: int = 1

    def __post_init__(self) -> None:
        if not self.raw_name.strip():
            raise ValueError("CardRequest.raw_name must not be blank")
        if self.quantity < 1:
            raise ValueError(f"CardRequest.quantity must be >= 1, got {self.quantity}")

    @property
    def cache_key(self) -> str:
        return bitmap_cache_key(self.raw_name)


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """
    A card identified well enough to download its artwork.

    Exactly one addressing mode is used: (set_code, number), which maps to the
    proxy's image template, or image_ref, a direct URL.

    Attributes:
        display_name: Name reported by SWU-DB (falls back to the query)
        query: The exact requested name this card was resolved from
        set_code: Set code as returned upstream (e.g., "SOR")
        number: Card number within the set, as a string
        image_ref: Direct https image URL when set/number are unavailable
    """

    display_name: str
    query: str
    set_code: str | None = None
    number: str | None = None
    image_ref: str | None = None

    def __post_init__(self) -> None:
        if self.has_set_number:
            if self.image_ref is not None:
                raise ValueError("ResolvedCard takes either set/number or image_ref, not both")
        elif not self.image_ref:
            raise ValueError(f"ResolvedCard for {self.query!r} has neither set/number nor image_ref")

    @property
    def has_set_number(self) -> bool:
        return bool(self.set_code) and self.number is not None and self.number != ""

    @property
    def cache_key(self) -> str:
        return bitmap_cache_key(self.query)
