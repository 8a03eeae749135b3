# services/outfit_history.py
"""
Recently generated outfit history.

Remembers when each outfit (by key) was last suggested so the scorer can
penalise repeats. Entries expire after RECENT_OUTFITS_TTL_DAYS.

Backends:
- InMemoryOutfitHistory: per-process dict (default)
- RedisOutfitHistory: shared across processes via infra.cache
"""
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, Optional, Tuple

import config
from infra import cache

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryOutfitHistory:
    """
    Outfit key -> last generated timestamp, held in memory.

    Safe to share between worker threads: every read and write of the
    entries happens under one lock.
    """

    def __init__(self, ttl_days: float = None):
        self.ttl = timedelta(days=ttl_days if ttl_days is not None else config.RECENT_OUTFITS_TTL_DAYS)
        self._entries: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def record(self, key: str, when: Optional[datetime] = None):
        with self._lock:
            self._entries[key] = when or _utcnow()

    def last_generated(self, key: str) -> Optional[datetime]:
        with self._lock:
            return self._entries.get(key)

    def entries(self) -> Iterator[Tuple[str, datetime]]:
        with self._lock:
            return iter(list(self._entries.items()))

    def cleanup(self, now: Optional[datetime] = None) -> int:
        """Drops expired entries. Returns how many were removed."""
        now = now or _utcnow()
        with self._lock:
            expired = [k for k, when in self._entries.items() if now - when > self.ttl]
            for k in expired:
                del self._entries[k]
        return len(expired)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisOutfitHistory:
    """
    History persisted as a Redis hash: one field per outfit key holding its
    ISO timestamp.

    Nothing is cached locally. Each record writes only its own field, so
    several processes or instances can share a namespace without
    overwriting each other. The hash expires with the same TTL as its
    entries and is refreshed on every record.
    """

    def __init__(self, namespace: str = None, ttl_days: float = None):
        self.ttl = timedelta(days=ttl_days if ttl_days is not None else config.RECENT_OUTFITS_TTL_DAYS)
        self.namespace = namespace or config.HISTORY_NAMESPACE

    def _read_all(self) -> Dict[str, datetime]:
        raw = cache.hash_get_all(self.namespace)
        return {k: datetime.fromisoformat(v) for k, v in raw.items()}

    def record(self, key: str, when: Optional[datetime] = None):
        when = when or _utcnow()
        cache.hash_set(self.namespace, key, when.isoformat(), ttl=int(self.ttl.total_seconds()))

    def last_generated(self, key: str) -> Optional[datetime]:
        v = cache.hash_get(self.namespace, key)
        return datetime.fromisoformat(v) if v else None

    def entries(self) -> Iterator[Tuple[str, datetime]]:
        return iter(list(self._read_all().items()))

    def cleanup(self, now: Optional[datetime] = None) -> int:
        now = now or _utcnow()
        expired = [k for k, when in self._read_all().items() if now - when > self.ttl]
        if expired:
            cache.hash_delete(self.namespace, *expired)
            logger.debug("Removed %d expired history entries from %s", len(expired), self.namespace)
        return len(expired)

    def clear(self):
        cache.cache_delete(self.namespace)

    def __len__(self) -> int:
        return len(self._read_all())


def get_history(backend: str = None, namespace: str = None):
    """Builds the history backend named by HISTORY_BACKEND (memory or redis)."""
    backend = (backend or config.HISTORY_BACKEND).lower()
    if backend == "redis":
        return RedisOutfitHistory(namespace=namespace)
    if backend != "memory":
        raise ValueError(f"Unknown history backend '{backend}'")
    return InMemoryOutfitHistory()
