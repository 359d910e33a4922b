"""Keyed read cache for order views.

Keys are tuples: ``("order", id)``, ``("order", "tracking", tn)``,
``("orders", page, limit)``. Invalidation is by key prefix, so
``invalidate("orders")`` drops every cached listing page.
"""

import time


class QueryCache:
    def __init__(self, clock=time.monotonic):
        self._clock = clock
        # key -> (stored_at, max_age or None, value)
        self._entries: dict[tuple, tuple[float, float | None, object]] = {}

    def get(self, key: tuple, max_age: float):
        """Cached value for ``key`` if younger than ``max_age`` seconds, else None."""
        hit = self._entries.get(key)
        if hit is None:
            return None
        stored_at, _, value = hit
        if self._clock() - stored_at > max_age:
            del self._entries[key]
            return None
        return value

    def set(self, key: tuple, value, max_age: float | None = None) -> None:
        """Store ``value``. Entries stored with a ``max_age`` are pruned once it has passed."""
        now = self._clock()
        self.prune(now)
        self._entries[key] = (now, max_age, value)

    def prune(self, now: float | None = None) -> int:
        """Drop entries older than the ``max_age`` they were stored with."""
        now = self._clock() if now is None else now
        expired = [
            key
            for key, (stored_at, max_age, _) in self._entries.items()
            if max_age is not None and now - stored_at > max_age
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def invalidate(self, *prefix) -> int:
        """Drop every key starting with ``prefix``. Returns how many were dropped."""
        doomed = [key for key in self._entries if key[: len(prefix)] == prefix]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: tuple) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
