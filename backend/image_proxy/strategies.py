"""
Authentication Strategies

The upstream does not document which way of presenting a token it accepts,
so the proxy tries several. Each strategy is a named pair of builders:
one for request headers and, optionally, one that rewrites the URL.

Order matters: PROXY_STRATEGIES is tried front to back and the first
strategy whose response is an image wins.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

# Complete browser-like headers; the upstream serves login pages to
# clients that do not look like a browser.
BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Accept": "image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Connection": "keep-alive",
    "Sec-Ch-Ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Platform": '"Windows"',
    "Sec-Fetch-Dest": "image",
    "Sec-Fetch-Mode": "no-cors",
    "Sec-Fetch-Site": "cross-site",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

TOKEN_QUERY_PARAM = "token"
TOKEN_COOKIE_NAMES = ("token", "auth_token")


@dataclass(frozen=True)
class AuthStrategy:
    """A named way of attaching a token to an upstream request."""
    name: str
    build_headers: Callable[[str], Dict[str, str]]
    build_url: Optional[Callable[[str, str], str]] = None

    @property
    def rewrites_url(self) -> bool:
        return self.build_url is not None

    def prepare(self, url: str, token: str) -> Tuple[str, Dict[str, str]]:
        """Return the (url, headers) pair to send for this strategy."""
        target = self.build_url(url, token) if self.build_url else url
        return target, self.build_headers(token)


# ============================================
# Builders
# ============================================

def append_query_param(url: str, name: str, value: str) -> str:
    """Append a query parameter, keeping the existing query and fragment."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.append((name, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


def bearer_headers(token: str) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def cookie_headers(token: str) -> Dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    if token:
        headers["Cookie"] = "; ".join(f"{name}={token}" for name in TOKEN_COOKIE_NAMES)
    return headers


def plain_headers(token: str) -> Dict[str, str]:
    return dict(BROWSER_HEADERS)


def token_query_url(url: str, token: str) -> str:
    return append_query_param(url, TOKEN_QUERY_PARAM, token)


# ============================================
# Built-in Strategies
# ============================================

BEARER = AuthStrategy(name="bearer", build_headers=bearer_headers)
COOKIE = AuthStrategy(name="cookie", build_headers=cookie_headers)
QUERY_PARAM = AuthStrategy(
    name="query-param",
    build_headers=plain_headers,
    build_url=token_query_url,
)

PROXY_STRATEGIES: Tuple[AuthStrategy, ...] = (BEARER, COOKIE, QUERY_PARAM)


def session_cookie_strategy(cookie_header: str) -> AuthStrategy:
    """
    Forward the caller's own session cookies to the upstream.

    The token argument is ignored; the credential is the cookie string
    captured here.
    """
    def build(token: str) -> Dict[str, str]:
        headers = dict(BROWSER_HEADERS)
        headers["Cookie"] = cookie_header
        return headers

    return AuthStrategy(name="session-cookie", build_headers=build)


def debug_strategies(token_provided: bool) -> List[AuthStrategy]:
    """
    Strategies probed by /debug-auth.

    URL-rewriting strategies need a token to put in the URL, so they are
    only probed when one was given.
    """
    return [
        strategy for strategy in PROXY_STRATEGIES
        if token_provided or not strategy.rewrites_url
    ]
