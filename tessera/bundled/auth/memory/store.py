"""Namespaced in-memory key-value store. Each memory provider owns one instance."""

import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import RLock
from typing import Any


@dataclass
class TTLEntry:
    """A stored value with an optional expiry deadline (``time.time()`` based)."""

    value: Any
    ttl_seconds: float | None = None
    created_at: float = field(default_factory=time.time)

    @property
    def expires_at(self) -> float | None:
        if self.ttl_seconds is None:
            return None
        return self.created_at + self.ttl_seconds

    def is_expired(self) -> bool:
        expires_at = self.expires_at
        return expires_at is not None and time.time() > expires_at


class MemoryStore:
    """Thread-safe in-memory store of namespaced entries.

    Expired entries are dropped lazily when they are read. All methods take
    the same re-entrant lock, so a block under ``atomic()`` may combine
    reads and writes across namespaces into one indivisible step. Within a
    namespace, entries keep their insertion order.
    """

    def __init__(self):
        self._namespaces: dict[str, dict[str, TTLEntry]] = {}
        self._lock = RLock()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Hold the store lock for a compound read-modify-write."""
        with self._lock:
            yield

    def _live(self, namespace: str) -> dict[str, TTLEntry]:
        entries = self._namespaces.get(namespace)
        if not entries:
            return {}
        for key in [k for k, entry in entries.items() if entry.is_expired()]:
            del entries[key]
        return entries

    def set(
        self,
        namespace: str,
        key: str,
        value: Any,
        ttl_seconds: float | None = None,
    ) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        with self._lock:
            self._namespaces.setdefault(namespace, {})[key] = TTLEntry(value, ttl_seconds)

    def set_if_absent(
        self,
        namespace: str,
        key: str,
        value: Any,
        ttl_seconds: float | None = None,
    ) -> bool:
        """Store ``value`` unless a live entry exists.

        Returns:
            True if the value was stored
        """
        with self._lock:
            if key in self._live(namespace):
                return False
            self.set(namespace, key, value, ttl_seconds)
            return True

    def get(self, namespace: str, key: str) -> Any | None:
        """Return the live value under ``key``, or None."""
        with self._lock:
            entry = self._live(namespace).get(key)
            return entry.value if entry is not None else None

    def delete(self, namespace: str, key: str) -> bool:
        """Remove ``key``. Returns False if it was not present."""
        with self._lock:
            return self._namespaces.get(namespace, {}).pop(key, None) is not None

    def exists(self, namespace: str, key: str) -> bool:
        with self._lock:
            return key in self._live(namespace)

    def values(self, namespace: str) -> list[Any]:
        """Snapshot of the live values of a namespace, in insertion order."""
        with self._lock:
            return [entry.value for entry in self._live(namespace).values()]

    def size(self, namespace: str) -> int:
        with self._lock:
            return len(self._live(namespace))

    def cleanup_expired(self) -> int:
        """Drop expired entries everywhere.

        Returns:
            Number of entries removed
        """
        with self._lock:
            before = sum(len(entries) for entries in self._namespaces.values())
            for namespace in list(self._namespaces):
                self._live(namespace)
            return before - sum(len(entries) for entries in self._namespaces.values())

    def clear_all(self) -> None:
        with self._lock:
            self._namespaces.clear()
