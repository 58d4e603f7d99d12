from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from proxysheet.api import health_router, sheets_router
from proxysheet.config import settings

app = FastAPI(
    title=settings.app_name,
    version=pkg_version("proxysheet"),
    debug=settings.debug,
)

app.include_router(health_router)
app.include_router(sheets_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
