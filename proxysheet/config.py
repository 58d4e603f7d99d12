from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "proxysheet"
    debug: bool = False

    # Serverless proxy that forwards to api.swu-db.com and strips CORS
    proxy_url: str = "http://localhost:8888/.netlify/functions/swu"

    # Direct image URLs on this domain (or its subdomains) go through the proxy
    upstream_domain: str = "swu-db.com"

    max_concurrency: int = 6

    fetch_max_attempts: int = 4
    fetch_timeout_seconds: float = 12.0
    fetch_backoff_seconds: float = 0.25

    metadata_timeout_seconds: float = 15.0


settings = Settings()


# =============================================================================
# PAGE AND CARD DEFAULTS
# =============================================================================

# Physical page, portrait (width, height) in inches. Landscape swaps them.
PAGE_SIZE_IN = (8.5, 11.0)

DEFAULT_DPI = 300
DEFAULT_CARD_WIDTH_IN = 2.5
DEFAULT_CARD_HEIGHT_IN = 3.5
DEFAULT_ROWS = 2
DEFAULT_COLS = 4
DEFAULT_MARGIN_LEFT_IN = 0.5
DEFAULT_MARGIN_TOP_IN = 0.75
DEFAULT_BLEED_MM = 0.5

# Largest accepted layout (rows and cols each, dpi, card edge in inches)
MAX_GRID = 10
MAX_DPI = 1200
MAX_CARD_SIZE_IN = 11.0

# Card numbers in image paths are zero-padded to this width ("7" -> "007")
CARD_NUMBER_WIDTH = 3
