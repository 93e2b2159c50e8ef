"""
Image Proxy Application

Builds the FastAPI app around the image proxy router.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import settings
from . import routes_fastapi

logger = logging.getLogger(__name__)


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # httpx logs every request URL at INFO, query-string tokens included
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"[ImageProxy] Image proxy service running on port {settings.port}")
    yield
    await routes_fastapi.upstream_fetcher.close()
    logger.info("[ImageProxy] Upstream client closed")


def create_app() -> FastAPI:
    """Create the FastAPI application with the proxy routes mounted."""
    configure_logging()
    app = FastAPI(
        title="Image Proxy Service",
        description="Relays token-protected images with CORS and cache headers",
        lifespan=lifespan,
    )
    app.include_router(routes_fastapi.router)
    return app
