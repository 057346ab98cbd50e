"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# Default cache settings
DEFAULT_CACHE_EXPIRY_SECONDS = 365 * 24 * 3600  # 12 months
DEFAULT_CACHE_SLIDING = True
DEFAULT_CACHE_MEMORY_MB = 64.0
DEFAULT_CACHE_DISK_MB = 500.0
DEFAULT_CACHE_DISABLED = False

# Default generation settings
DEFAULT_MIN_SOURCE_WIDTH = 0
DEFAULT_WEBP_EXTENSIONS = ["webp"]
DEFAULT_JPEG_QUALITY = 85
DEFAULT_WEBP_QUALITY = 80
DEFAULT_ENCODE_TIMEOUT = 30.0  # seconds per variant

# Default presentation settings
DEFAULT_URL_PREFIX = ""
DEFAULT_SIZES = ""
DEFAULT_THUMB_SIZES = ""

# Default concurrency settings
DEFAULT_MAX_WORKERS = 4

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_expiry_seconds": DEFAULT_CACHE_EXPIRY_SECONDS,
        "cache_sliding": DEFAULT_CACHE_SLIDING,
        "cache_memory_mb": DEFAULT_CACHE_MEMORY_MB,
        "cache_disk_mb": DEFAULT_CACHE_DISK_MB,
        "cache_disabled": DEFAULT_CACHE_DISABLED,
        "min_source_width": DEFAULT_MIN_SOURCE_WIDTH,
        "webp_extensions": list(DEFAULT_WEBP_EXTENSIONS),
        "jpeg_quality": DEFAULT_JPEG_QUALITY,
        "webp_quality": DEFAULT_WEBP_QUALITY,
        "encode_timeout": DEFAULT_ENCODE_TIMEOUT,
        "url_prefix": DEFAULT_URL_PREFIX,
        "default_sizes": DEFAULT_SIZES,
        "default_thumb_sizes": DEFAULT_THUMB_SIZES,
        "max_workers": DEFAULT_MAX_WORKERS,
        "log_level": DEFAULT_LOG_LEVEL,
    }
