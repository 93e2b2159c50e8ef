"""
Image Proxy Configuration

All settings come from environment variables and are read once at import.
"""

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ProxyConfig:
    """Runtime settings for the image proxy service."""
    # Server settings
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Upstream settings
    upstream_timeout: float = 15.0      # Per-attempt timeout in seconds

    # Response settings
    cache_max_age: int = 3600           # Browser cache 1h
    default_content_type: str = "image/jpeg"
    expose_error_details: bool = True   # Include exception text in 500 bodies

    @classmethod
    def from_env(cls) -> "ProxyConfig":
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "3000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            upstream_timeout=float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "15")),
            cache_max_age=int(os.getenv("CACHE_MAX_AGE_SECONDS", "3600")),
            default_content_type=os.getenv("DEFAULT_CONTENT_TYPE", "image/jpeg"),
            expose_error_details=_env_bool("EXPOSE_ERROR_DETAILS", True),
        )


settings = ProxyConfig.from_env()
