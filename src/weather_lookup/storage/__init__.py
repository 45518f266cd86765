from .cache import CacheEntry, SnapshotCache, normalize_cache_key

__all__ = [
    "CacheEntry",
    "SnapshotCache",
    "normalize_cache_key",
]
