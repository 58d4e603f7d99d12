"""
proxysheet services.

Resolution, fetching, caching, layout and rendering for proxy sheets.
"""

from proxysheet.services.card_resolver import CardResolver, match_catalog, secure_url, title_case
from proxysheet.services.geometry import compute_geometry, validate_layout
from proxysheet.services.image_cache import ImageCache, get_image_cache
from proxysheet.services.image_fetcher import (
    CardImageLoader,
    ImageFetcher,
    card_image_path,
    decode_image,
)
from proxysheet.services.proxy_client import ProxyClient, decode_image_body, unwrap_list
from proxysheet.services.retry import (
    RetryExhaustedError,
    RetryPolicy,
    retry_async,
    retry_policy_from_settings,
)
from proxysheet.services.sheet_builder import (
    SheetBuilder,
    build_sheets_from_text,
    open_sheet_builder,
)
from proxysheet.services.sheet_renderer import export_pdf, export_png, render_sheet

__all__ = [
    "CardImageLoader",
    "CardResolver",
    "ImageCache",
    "ImageFetcher",
    "ProxyClient",
    "RetryExhaustedError",
    "RetryPolicy",
    "SheetBuilder",
    "build_sheets_from_text",
    "card_image_path",
    "compute_geometry",
    "decode_image",
    "decode_image_body",
    "export_pdf",
    "export_png",
    "get_image_cache",
    "match_catalog",
    "open_sheet_builder",
    "render_sheet",
    "retry_async",
    "retry_policy_from_settings",
    "secure_url",
    "title_case",
    "unwrap_list",
    "validate_layout",
]
