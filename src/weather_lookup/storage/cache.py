from __future__ import annotations

import threading
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from ..domain.models import WeatherSnapshot

DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ENTRIES = 256

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_cache_key(city: str) -> str:
    return " ".join(city.split()).casefold()


@dataclass(slots=True, frozen=True)
class CacheEntry:
    snapshot: WeatherSnapshot
    fetched_at: datetime

    def is_stale(self, ttl: timedelta, now: datetime) -> bool:
        return now - self.fetched_at > ttl


class SnapshotCache:
    """In-memory snapshot cache with a freshness window and LRU capacity bound."""

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Clock = _utc_now,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be >= 0")
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_entry(self, key: str) -> CacheEntry | None:
        """Return the raw entry for ``key`` whether fresh or stale."""
        with self._lock:
            return self._entries.get(normalize_cache_key(key))

    def get(self, key: str) -> WeatherSnapshot | None:
        """Return the snapshot for ``key`` if it is inside the freshness window."""
        normalized = normalize_cache_key(key)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(normalized)
            if entry is None or entry.is_stale(self._ttl, now):
                return None
            self._entries.move_to_end(normalized)
            return entry.snapshot

    def set(self, key: str, snapshot: WeatherSnapshot) -> None:
        normalized = normalize_cache_key(key)
        entry = CacheEntry(snapshot=snapshot, fetched_at=self._clock())
        with self._lock:
            self._entries[normalized] = entry
            self._entries.move_to_end(normalized)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def prune_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_stale(self._ttl, now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
