"""
Upstream Response Classifier

Decides whether an upstream response actually carries an image.

The upstream has no reliable out-of-band signal for a rejected token: it
either redirects to an interactive login flow or answers 200 with an HTML
login page. The status code and content-type are all we can go on.
"""

from enum import Enum
from typing import Optional


class Verdict(str, Enum):
    """Classification of a single upstream response."""
    ACCEPT = "accept"
    REJECT_REDIRECT = "reject_redirect"
    REJECT_OTHER = "reject_other"


def normalize_content_type(content_type: Optional[str]) -> Optional[str]:
    """Strip parameters (e.g. '; charset=utf-8') and lowercase the media type."""
    if not content_type:
        return None
    media_type = content_type.split(";")[0].strip().lower()
    return media_type or None


def is_redirect(status: int) -> bool:
    return 300 <= status <= 399


def classify(status: int, content_type: Optional[str]) -> Verdict:
    """
    Classify an upstream response.

    Returns:
        ACCEPT for a 2xx whose content-type is image/*,
        REJECT_REDIRECT for any 3xx,
        REJECT_OTHER for everything else (HTML login pages included).
    """
    if is_redirect(status):
        return Verdict.REJECT_REDIRECT

    media_type = normalize_content_type(content_type)
    if 200 <= status <= 299 and media_type and media_type.startswith("image/"):
        return Verdict.ACCEPT

    return Verdict.REJECT_OTHER


def describe_rejection(
    verdict: Verdict,
    status: int,
    content_type: Optional[str],
) -> str:
    """Human-readable failure reason for a rejected response."""
    if verdict == Verdict.REJECT_REDIRECT:
        return f"Redirected ({status}) - likely to a login page"
    if 200 <= status <= 299:
        return f"Received {content_type or 'no content-type'} instead of an image"
    return f"HTTP {status}"
