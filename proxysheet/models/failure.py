"""
Failure classification for sheet builds.

Every error the pipeline knows how to explain is a KnownError carrying a
FailureKind. Per-slot errors (ResolutionError, FetchError) are converted to
placeholders by the sheet builder; ConfigError is the only fatal kind.

Geometry overflow is NOT an exception: it is an advisory attached to the
computed geometry and surfaced to the caller.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"

    # Resource failures
    NOT_FOUND = "not_found"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"
    UNDECODABLE_IMAGE = "undecodable_image"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail for API responses."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class ResolutionError(KnownError):
    """
    No card matched a requested name.

    Raised after exact search, catalog matching and the title-case guess
    have all come up empty.
    """

    def __init__(self, name: str, detail: str | None = None):
        self.name = name
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f'No card found for "{name}"',
            detail=detail,
            suggestion="Check the spelling or paste the name exactly as printed.",
            status_code=404,
        )


class FetchError(KnownError):
    """
    Image download failed after every retry, or returned an undecodable body.
    """

    def __init__(
        self,
        url: str,
        attempts: int,
        cause: BaseException | None = None,
        kind: FailureKind = FailureKind.EXTERNAL_API_ERROR,
    ):
        self.url = url
        self.attempts = attempts
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(
            kind=kind,
            message=f"Could not fetch image after {attempts} attempt(s)",
            detail=f"{url} ({reason})",
            suggestion="The proxy or image host may be unavailable. Rebuild to retry.",
            status_code=502,
        )


class ConfigError(KnownError):
    """
    Layout configuration from which no valid geometry can be derived.

    This is the only fatal build error.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=f"Invalid layout configuration: {message}",
            detail=f"field: {field}",
            suggestion="Use 1-10 rows and columns, a dpi of at most 1200 and positive sizes.",
            status_code=400,
        )


@dataclass(frozen=True, slots=True)
class GeometryOverflow:
    """
    Advisory: the requested grid does not fit the chosen page.

    Attributes:
        orientation: Orientation that was used anyway
        required_width_in: cols * card width + 2 * left margin
        required_height_in: rows * card height + 2 * top margin
        page_width_in: Page width in the chosen orientation
        page_height_in: Page height in the chosen orientation
    """

    orientation: str
    required_width_in: float
    required_height_in: float
    page_width_in: float
    page_height_in: float

    @property
    def message(self) -> str:
        return (
            f"Grid needs {self.required_width_in:g}x{self.required_height_in:g} in "
            f"but the {self.orientation} page is {self.page_width_in:g}x{self.page_height_in:g} in; "
            "content past the page edge will be clipped"
        )
