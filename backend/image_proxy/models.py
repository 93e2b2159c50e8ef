"""
Image Proxy Models

Request-scoped dataclasses passed between the fetcher, the sequencer and
the routes, plus the pydantic models for JSON responses.
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Union

from pydantic import BaseModel, Field

from .classifier import Verdict


# ============================================
# Internal Models
# ============================================

@dataclass
class ProxyRequest:
    """The image a caller asked for and the token to fetch it with."""
    remote_url: str
    access_token: str


@dataclass
class UpstreamResponse:
    """Raw result of one outbound request."""
    url: str
    status_code: int
    reason_phrase: str
    headers: Dict[str, str]     # Lowercased header names
    body: bytes = b""

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> Optional[str]:
        return self.headers.get("content-length")

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code <= 299


@dataclass
class AttemptRecord:
    """What happened when one strategy was tried."""
    strategy: str
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    verdict: Optional[Verdict] = None
    error: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return self.verdict == Verdict.ACCEPT


@dataclass
class UpstreamOutcome:
    """Final result of running the strategy sequence for one request."""
    status_code: Optional[int] = None
    content_type: Optional[str] = None
    body: Optional[bytes] = None
    is_acceptable: bool = False
    strategy: Optional[str] = None
    last_error: Optional[str] = None
    attempts: List[AttemptRecord] = field(default_factory=list)


# ============================================
# Response Models
# ============================================

class ServiceStatus(BaseModel):
    """Response model for the root endpoint."""
    status: str


class ImageUrlResponse(BaseModel):
    """Response model for /get-image-url."""
    success: bool
    proxyUrl: str = Field(..., description="Absolute URL to /proxy-image")
    originalUrl: str


class DebugStatusResult(BaseModel):
    """A probed authentication method that got an HTTP response."""
    method: str
    success: bool
    status: int
    statusText: str
    contentType: Optional[str] = None
    contentLength: Optional[str] = None


class DebugErrorResult(BaseModel):
    """A probed authentication method that failed at the network level."""
    method: str
    error: str
    success: bool = False


class DebugAuthResponse(BaseModel):
    """Response model for /debug-auth."""
    url: str
    tokenProvided: bool
    results: List[Union[DebugStatusResult, DebugErrorResult]]
