"""
Image Proxy API Routes

Provides endpoints for:
- Proxying a token-protected image (tries several auth strategies)
- Proxying with the caller's session cookies
- Building a shareable proxy URL
- Debugging which auth strategy the upstream accepts
"""

import logging
from typing import Optional, Sequence
from urllib.parse import urlencode, quote

from fastapi import APIRouter, Query, Request
from fastapi.responses import Response, JSONResponse

from .classifier import Verdict, classify
from .config import settings
from .errors import ClientInputError, UpstreamAuthExhausted, UpstreamTransportError
from .fetcher import UpstreamFetcher
from .models import (
    ProxyRequest,
    ServiceStatus,
    ImageUrlResponse,
    DebugStatusResult,
    DebugErrorResult,
    DebugAuthResponse,
)
from .sequencer import try_strategies
from .strategies import (
    AuthStrategy,
    BEARER,
    PROXY_STRATEGIES,
    debug_strategies,
    session_cookie_strategy,
)

logger = logging.getLogger(__name__)

# ============================================
# Configuration
# ============================================

# Shared HTTP client for upstream requests (closed on app shutdown)
upstream_fetcher = UpstreamFetcher(timeout=settings.upstream_timeout)

# ============================================
# Router
# ============================================

router = APIRouter(tags=["Image Proxy"])


# ============================================
# Helpers
# ============================================

def parse_proxy_request(url: Optional[str], token: Optional[str]) -> ProxyRequest:
    """Validate the query parameters before any outbound call is made."""
    if not url:
        raise ClientInputError("URL parameter is required")
    if not token:
        raise ClientInputError("Token parameter is required")
    return ProxyRequest(remote_url=url, access_token=token)


def internal_error_response(error: Exception, action: str) -> JSONResponse:
    logger.error(f"[ImageProxy] Error {action}: {error}", exc_info=True)
    message = str(error) if settings.expose_error_details else "An unexpected error occurred"
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": message},
    )


async def relay_image(
    remote_url: str,
    token: str,
    strategies: Sequence[AuthStrategy],
) -> Response:
    """
    Fetch the image through the strategy sequence and shape the response.

    Raises:
        UpstreamAuthExhausted: when no strategy produced an image.
    """
    outcome = await try_strategies(upstream_fetcher, remote_url, token, strategies)

    if not outcome.is_acceptable:
        raise UpstreamAuthExhausted(outcome.last_error, outcome.content_type)

    image_data = outcome.body or b""
    content_type = outcome.content_type or settings.default_content_type

    logger.info(
        f"[ImageProxy] Proxied: {remote_url[:60]}... "
        f"({len(image_data)} bytes, via {outcome.strategy})"
    )

    return Response(
        content=image_data,
        media_type=content_type,
        headers={
            "Content-Type": content_type,
            "Content-Length": str(len(image_data)),
            "Cache-Control": f"public, max-age={settings.cache_max_age}",
            "Access-Control-Allow-Origin": "*",
        }
    )


# ============================================
# Endpoints
# ============================================

@router.get("/", response_model=ServiceStatus)
async def service_status():
    """Liveness message."""
    return ServiceStatus(status="Image Proxy Service is running")


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(content={
        "status": "healthy",
        "service": "image-proxy",
        "strategies": [strategy.name for strategy in PROXY_STRATEGIES],
    })


@router.get("/proxy-image")
async def proxy_image(
    url: Optional[str] = Query(None, description="URL of the protected image"),
    token: Optional[str] = Query(None, description="Access token for the upstream"),
):
    """
    Proxy a token-protected image.

    This endpoint:
    1. Validates that both url and token are present
    2. Tries bearer header, token cookie, then token query parameter
    3. Returns the first response that is really an image

    Example:
        GET /proxy-image?url=https://files.example.com/img.png&token=abc
    """
    try:
        proxy_request = parse_proxy_request(url, token)
        return await relay_image(
            proxy_request.remote_url,
            proxy_request.access_token,
            PROXY_STRATEGIES,
        )
    except ClientInputError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except UpstreamAuthExhausted as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except Exception as e:
        return internal_error_response(e, "proxying image")


@router.get("/proxy-image-session")
async def proxy_image_session(
    request: Request,
    url: Optional[str] = Query(None, description="URL of the protected image"),
    token: Optional[str] = Query(None, description="Optional access token"),
    session: Optional[str] = Query(None, description="Session cookie string to forward"),
):
    """
    Proxy an image using the caller's session cookies.

    Cookies come from the `session` parameter, or from the request's own
    Cookie header. If a token is also given, the regular strategies are
    tried after the session cookies.
    """
    try:
        if not url:
            raise ClientInputError("URL parameter is required")

        cookie_header = session or request.headers.get("cookie")
        if not cookie_header and not token:
            raise ClientInputError("Session cookie or token parameter is required")

        strategies = []
        if cookie_header:
            strategies.append(session_cookie_strategy(cookie_header))
        if token:
            strategies.extend(PROXY_STRATEGIES)

        return await relay_image(url, token or "", strategies)
    except ClientInputError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except UpstreamAuthExhausted as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except Exception as e:
        return internal_error_response(e, "proxying image with session")


@router.get("/get-image-url", response_model=ImageUrlResponse)
async def get_image_url(
    request: Request,
    url: Optional[str] = Query(None, description="URL of the protected image"),
    token: Optional[str] = Query(None, description="Access token for the upstream"),
):
    """
    Verify the image is reachable (HEAD only) and return a proxy URL for it.
    """
    try:
        if not url or not token:
            raise ClientInputError("URL and token parameters are required")

        # Reachability only: follow redirects to CDN or signed storage URLs
        response = await upstream_fetcher.fetch(
            url, BEARER.build_headers(token), method="HEAD", follow_redirects=True
        )
        if not response.ok:
            logger.warning(f"[ImageProxy] HEAD {response.status_code}: {url[:60]}...")
            return JSONResponse(
                status_code=response.status_code,
                content={"error": "Image not accessible", "status": response.status_code},
            )

        query = urlencode({"url": url, "token": token}, quote_via=quote)
        proxy_url = f"{request.url_for('proxy_image')}?{query}"

        return ImageUrlResponse(success=True, proxyUrl=proxy_url, originalUrl=url)
    except ClientInputError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        return internal_error_response(e, "generating proxy URL")


@router.get("/debug-auth", response_model=DebugAuthResponse)
async def debug_auth(
    url: Optional[str] = Query(None, description="URL to probe"),
    token: Optional[str] = Query(None, description="Optional access token"),
):
    """
    Probe every authentication method against the URL and report each result.

    Unlike /proxy-image this does not stop at the first success.
    """
    try:
        if not url:
            raise ClientInputError("URL parameter is required")

        results = []
        for strategy in debug_strategies(token_provided=bool(token)):
            target_url, headers = strategy.prepare(url, token or "")
            try:
                response = await upstream_fetcher.fetch(target_url, headers)
            except UpstreamTransportError as e:
                results.append(DebugErrorResult(method=strategy.name, error=e.message))
                continue

            results.append(DebugStatusResult(
                method=strategy.name,
                success=classify(response.status_code, response.content_type) == Verdict.ACCEPT,
                status=response.status_code,
                statusText=response.reason_phrase,
                contentType=response.content_type,
                contentLength=response.content_length or str(len(response.body)),
            ))

        return DebugAuthResponse(url=url, tokenProvided=bool(token), results=results)
    except ClientInputError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        return internal_error_response(e, "debugging auth")
