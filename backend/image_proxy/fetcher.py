"""
Upstream Fetch Adapter

Issues one outbound HTTP request per call. Redirects are not followed by
default: a 3xx to a login page is how the upstream rejects a token, so it
has to reach the classifier as-is. Callers that only check reachability
can opt in to following them.
"""

import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx

from .errors import UpstreamTransportError
from .models import UpstreamResponse

logger = logging.getLogger(__name__)


def redact_url(url: str) -> str:
    """Drop the query string, which may carry a token."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid url>"
    if not parts.query:
        return url
    return urlunsplit(parts._replace(query="<redacted>", fragment=""))


class UpstreamFetcher:
    """
    Thin wrapper around a shared httpx.AsyncClient.

    Usage:
        fetcher = UpstreamFetcher(timeout=15.0)
        response = await fetcher.fetch(url, {"Authorization": "Bearer ..."})
        await fetcher.close()
    """

    def __init__(
        self,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        # Refuse every cookie so an upstream Set-Cookie never reaches
        # another caller's request.
        cookie_jar = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))
        self.http_client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=False,
            cookies=cookie_jar,
            transport=transport,
        )

    async def close(self):
        """Close HTTP client."""
        await self.http_client.aclose()

    async def fetch(
        self,
        url: str,
        headers: Dict[str, str],
        method: str = "GET",
        follow_redirects: bool = False,
    ) -> UpstreamResponse:
        """
        Fetch a URL with the given headers, buffering the whole body.

        Raises:
            UpstreamTransportError: on DNS failure, refused connection,
                timeout or an unusable URL.
        """
        safe_url = redact_url(url)
        logger.debug(f"[Upstream] {method} {safe_url[:80]}")
        try:
            response = await self.http_client.request(
                method, url, headers=headers, follow_redirects=follow_redirects
            )
        except httpx.TimeoutException as e:
            raise UpstreamTransportError(f"Timeout after {self.timeout}s: {e}", safe_url) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamTransportError(str(e) or e.__class__.__name__, safe_url) from e

        return UpstreamResponse(
            url=str(response.url),
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers={k.lower(): v for k, v in response.headers.items()},
            body=response.content if method != "HEAD" else b"",
        )
