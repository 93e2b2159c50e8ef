"""
Image Proxy Module

Relays token-protected images from a third-party service to browsers.
The upstream's accepted auth method is undocumented, so each request
tries several strategies in order until one returns a real image.

Features:
- Ordered auth strategies (bearer header, token cookie, token query param)
- Session-cookie forwarding
- Content-type based detection of login pages and redirects
- Permissive caching and CORS headers on proxied images
"""

from .routes_fastapi import router
from .app import create_app
from .sequencer import try_strategies
from .strategies import AuthStrategy, PROXY_STRATEGIES

__all__ = [
    "router",
    "create_app",
    "try_strategies",
    "AuthStrategy",
    "PROXY_STRATEGIES",
]
