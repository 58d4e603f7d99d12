from proxysheet.models.card import CardRequest, ResolvedCard, bitmap_cache_key
from proxysheet.models.card_record import CardRecord
from proxysheet.models.failure import (
    ConfigError,
    FailureDetail,
    FailureKind,
    FetchError,
    GeometryOverflow,
    KnownError,
    ResolutionError,
)
from proxysheet.models.geometry import Geometry, LayoutConfig, Orientation, Slot, Spacing
from proxysheet.models.sheet import (
    BuildProgress,
    BuildResult,
    CardArt,
    Failure,
    Placement,
    Sheet,
    SlotContent,
)

__all__ = [
    "BuildProgress",
    "BuildResult",
    "CardArt",
    "CardRecord",
    "CardRequest",
    "ConfigError",
    "Failure",
    "FailureDetail",
    "FailureKind",
    "FetchError",
    "Geometry",
    "GeometryOverflow",
    "KnownError",
    "LayoutConfig",
    "Orientation",
    "Placement",
    "ResolutionError",
    "ResolvedCard",
    "Sheet",
    "Slot",
    "SlotContent",
    "Spacing",
    "bitmap_cache_key",
]
