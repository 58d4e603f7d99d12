"""
Sheets API endpoints.

Builds proxy sheets from a pasted card list. The JSON endpoint returns the
layout with per-slot status; the PNG endpoint renders one sheet.
"""

import io
from collections.abc import AsyncIterator
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from proxysheet.config import (
    DEFAULT_BLEED_MM,
    DEFAULT_CARD_HEIGHT_IN,
    DEFAULT_CARD_WIDTH_IN,
    DEFAULT_COLS,
    DEFAULT_DPI,
    DEFAULT_MARGIN_LEFT_IN,
    DEFAULT_MARGIN_TOP_IN,
    DEFAULT_ROWS,
    MAX_CARD_SIZE_IN,
    MAX_DPI,
    MAX_GRID,
)
from proxysheet.models.failure import ConfigError, FailureDetail
from proxysheet.models.geometry import LayoutConfig, Orientation, Spacing
from proxysheet.models.sheet import BuildResult, CardArt, Failure, Placement
from proxysheet.services.sheet_builder import (
    SheetBuilder,
    build_sheets_from_text,
    open_sheet_builder,
)
from proxysheet.services.sheet_renderer import render_sheet

router = APIRouter(prefix="/sheets", tags=["sheets"])

SlotStatus = Literal["card", "failed", "empty"]


async def get_sheet_builder() -> AsyncIterator[SheetBuilder]:
    """Sheet builder sharing the process-wide image cache."""
    async with open_sheet_builder() as builder:
        yield builder


class LayoutRequest(BaseModel):
    """Layout options; every field defaults to the standard 2x4 poker layout."""

    dpi: int = Field(default=DEFAULT_DPI, le=MAX_DPI)
    card_width_in: float = Field(default=DEFAULT_CARD_WIDTH_IN, le=MAX_CARD_SIZE_IN)
    card_height_in: float = Field(default=DEFAULT_CARD_HEIGHT_IN, le=MAX_CARD_SIZE_IN)
    rows: int = Field(default=DEFAULT_ROWS, le=MAX_GRID)
    cols: int = Field(default=DEFAULT_COLS, le=MAX_GRID)
    margin_left_in: float = DEFAULT_MARGIN_LEFT_IN
    margin_top_in: float = DEFAULT_MARGIN_TOP_IN
    bleed_mm: float = DEFAULT_BLEED_MM
    orientation: Orientation | None = Field(
        default=None,
        description="Force portrait or landscape; omit to pick the first that fits",
    )
    spacing: Spacing = Spacing.NONE

    def to_config(self) -> LayoutConfig:
        return LayoutConfig(**self.model_dump())


class BuildRequest(BaseModel):
    """Request model for building sheets."""

    text: str = Field(..., description="Card list, one card per line")
    layout: LayoutRequest = Field(default_factory=LayoutRequest)


class SlotResponse(BaseModel):
    index: int
    x: int
    y: int
    width: int
    height: int
    status: SlotStatus
    name: str | None = None
    display_name: str | None = None
    failure: FailureDetail | None = None


class SheetResponse(BaseModel):
    index: int
    slots: list[SlotResponse]


class GeometryResponse(BaseModel):
    dpi: int
    orientation: Orientation
    page_width_px: int
    page_height_px: int
    card_width_px: int
    card_height_px: int
    bleed_px: int
    rows: int
    cols: int


class BuildResponse(BaseModel):
    """Response model for a sheet build."""

    geometry: GeometryResponse
    sheet_count: int
    placed: int
    failed: int
    overflow: str | None = Field(
        default=None,
        description="Advisory when the grid does not fit the page",
    )
    sheets: list[SheetResponse] = Field(default_factory=list)


def _slot_response(placement: Placement) -> SlotResponse:
    slot = placement.slot
    content = placement.content
    response = SlotResponse(
        index=slot.index,
        x=slot.x,
        y=slot.y,
        width=slot.width,
        height=slot.height,
        status="empty",
        name=placement.name,
    )
    if isinstance(content, CardArt):
        response.status = "card"
        response.display_name = content.card.display_name if content.card else content.name
    elif isinstance(content, Failure):
        response.status = "failed"
        response.failure = content.error.to_detail()
    return response


def _build_response(result: BuildResult) -> BuildResponse:
    geometry = result.geometry
    return BuildResponse(
        geometry=GeometryResponse(
            dpi=geometry.dpi,
            orientation=geometry.orientation,
            page_width_px=geometry.page_width_px,
            page_height_px=geometry.page_height_px,
            card_width_px=geometry.card_width_px,
            card_height_px=geometry.card_height_px,
            bleed_px=geometry.bleed_px,
            rows=geometry.rows,
            cols=geometry.cols,
        ),
        sheet_count=len(result.sheets),
        placed=result.placed_count,
        failed=len(result.failures),
        overflow=result.overflow.message if result.overflow else None,
        sheets=[
            SheetResponse(
                index=sheet.index,
                slots=[_slot_response(p) for p in sheet.placements],
            )
            for sheet in result.sheets
        ],
    )


async def _run_build(request: BuildRequest, builder: SheetBuilder) -> BuildResult:
    try:
        return await build_sheets_from_text(request.text, request.layout.to_config(), builder)
    except ConfigError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.to_detail().model_dump(mode="json"),
        ) from e


@router.post("", response_model=BuildResponse)
async def build_sheets(
    request: BuildRequest,
    builder: Annotated[SheetBuilder, Depends(get_sheet_builder)],
) -> BuildResponse:
    """
    Build sheets for a card list.

    Cards that cannot be resolved or fetched are reported per slot as
    "failed"; they never fail the request. An invalid layout returns 400.
    """
    result = await _run_build(request, builder)
    return _build_response(result)


@router.post(
    "/{sheet_index}/png",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
async def render_sheet_png(
    sheet_index: int,
    request: BuildRequest,
    builder: Annotated[SheetBuilder, Depends(get_sheet_builder)],
) -> Response:
    """Build sheets for a card list and return one of them as a PNG."""
    result = await _run_build(request, builder)

    if sheet_index < 0 or sheet_index >= len(result.sheets):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Sheet {sheet_index} not found ({len(result.sheets)} sheet(s) built)",
        )

    image = render_sheet(result.sheets[sheet_index], result.geometry)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG", dpi=(result.geometry.dpi, result.geometry.dpi))
    return Response(content=buffer.getvalue(), media_type="image/png")
