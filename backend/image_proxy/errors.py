"""
Image Proxy Errors

Exception taxonomy for the proxy. Each error knows the HTTP status the
front door answers with.
"""

from typing import Optional


class ImageProxyError(Exception):
    """Base class for all image proxy errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(ImageProxyError):
    """A required query parameter is missing."""
    status_code = 400


class UpstreamTransportError(ImageProxyError):
    """Network failure talking to the upstream (DNS, refused, timeout)."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class UpstreamAuthExhausted(ImageProxyError):
    """Every authentication strategy was rejected by the upstream."""
    status_code = 403

    def __init__(
        self,
        last_error: Optional[str],
        received_content_type: Optional[str] = None,
    ):
        super().__init__("All authentication methods failed")
        self.last_error = last_error
        self.received_content_type = received_content_type

    def to_dict(self) -> dict:
        return {
            "error": "Failed to fetch image - all authentication methods failed",
            "suggestion": (
                "Check that the token is valid and has access to this file, "
                "or try /debug-auth to inspect each method"
            ),
            "lastError": self.last_error,
            "receivedContentType": self.received_content_type,
        }
