"""Cache subsystem — freshness-checked, two-tier (memory + disk) artifact cache."""

from imgvariants.cache.freshness import FreshnessCache
from imgvariants.cache.keys import generate_fingerprint, hash_file
from imgvariants.cache.manager import CacheManager
from imgvariants.cache.stats import CacheStats, FreshnessEntry

__all__ = [
    "CacheManager",
    "CacheStats",
    "FreshnessCache",
    "FreshnessEntry",
    "generate_fingerprint",
    "hash_file",
]
