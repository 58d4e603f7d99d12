"""
Health check endpoints.

Liveness plus a readiness check that pings the card proxy.
"""

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from proxysheet.services.proxy_client import CATALOG_PATH, ProxyClient

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    proxy: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness check.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response) -> HealthResponse:
    """
    Readiness check.

    Fetches the card-name catalog through the proxy. Returns 503 if the
    proxy or upstream is unreachable.
    """
    async with ProxyClient() as client:
        try:
            await client.get_json(CATALOG_PATH)
        except Exception:
            response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
            return HealthResponse(status="not ready", proxy="unreachable")
    return HealthResponse(status="ready", proxy="reachable")
