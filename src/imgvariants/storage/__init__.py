"""Storage: cache path resolution and atomic filesystem access."""

from imgvariants.storage.filesystem import LocalStorage
from imgvariants.storage.paths import cache_directory, resolve_cache_subdir

__all__ = ["LocalStorage", "cache_directory", "resolve_cache_subdir"]
