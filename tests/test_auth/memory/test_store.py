"""Tests for MemoryStore."""

import threading
import time

from tessera.bundled.auth.memory.store import MemoryStore, TTLEntry


class TestTTLEntry:
    def test_no_ttl_never_expires(self):
        assert not TTLEntry("value").is_expired()

    def test_ttl_expires(self):
        entry = TTLEntry("value", ttl_seconds=0.01)
        time.sleep(0.02)
        assert entry.is_expired()


class TestMemoryStore:
    def test_set_get_delete(self):
        store = MemoryStore()
        store.set("ns", "key", "value")
        assert store.get("ns", "key") == "value"
        assert store.exists("ns", "key")
        assert store.delete("ns", "key")
        assert not store.delete("ns", "key")
        assert store.get("ns", "key") is None

    def test_namespaces_are_isolated(self):
        store = MemoryStore()
        store.set("a", "key", 1)
        store.set("b", "key", 2)
        assert store.get("a", "key") == 1
        assert store.get("b", "key") == 2
        assert store.get("c", "key") is None

    def test_set_if_absent(self):
        store = MemoryStore()
        assert store.set_if_absent("ns", "key", "first")
        assert not store.set_if_absent("ns", "key", "second")
        assert store.get("ns", "key") == "first"

    def test_set_if_absent_replaces_expired(self):
        store = MemoryStore()
        store.set("ns", "key", "old", ttl_seconds=0.01)
        time.sleep(0.02)
        assert store.set_if_absent("ns", "key", "new")
        assert store.get("ns", "key") == "new"

    def test_values_keep_insertion_order_and_drop_expired(self):
        store = MemoryStore()
        store.set("ns", "a", 1)
        store.set("ns", "b", 2, ttl_seconds=0.01)
        store.set("ns", "c", 3)
        time.sleep(0.02)
        assert store.values("ns") == [1, 3]
        assert store.size("ns") == 2

    def test_cleanup_expired(self):
        store = MemoryStore()
        store.set("ns", "a", 1, ttl_seconds=0.01)
        store.set("ns", "b", 2)
        time.sleep(0.02)
        assert store.cleanup_expired() == 1
        assert store.size("ns") == 1

    def test_clear_all(self):
        store = MemoryStore()
        store.set("ns", "a", 1)
        store.clear_all()
        assert store.size("ns") == 0

    def test_atomic_section_is_reentrant_and_exclusive(self):
        store = MemoryStore()
        store.set("ns", "counter", 0)

        def increment():
            for _ in range(200):
                with store.atomic():
                    value = store.get("ns", "counter")
                    store.set("ns", "counter", value + 1)

        threads = [threading.Thread(target=increment) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert store.get("ns", "counter") == 800
