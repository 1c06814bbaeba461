# -*- coding: utf-8 -*-
"""In process cache processor.

Entries live in a store shared by every processor the factory creates, so values
survive between resolutions. Keys are namespaced by provider tag. Expiration is
sliding, reading an entry extends its life by the provider's duration.
"""

import logging
import threading
import time

from ..cancellation import raise_if_cancelled
from ..processors import CacheProcessor, provider_duration
from ..registry import cache_processor


class ExpiringStore:
    """Lock protected key value store with sliding expiration.

    Expired entries are dropped when read, and all of them at most every
    purge_interval seconds when a value is set.
    """

    def __init__(self, clock=time.monotonic, purge_interval=60.0):
        self._clock = clock
        self._purge_interval = purge_interval
        self._lock = threading.Lock()
        self._entries = {}
        self._next_purge = clock() + purge_interval

    def get(self, key):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, duration, expires = entry
            now = self._clock()
            if now >= expires:
                del self._entries[key]
                return None
            self._entries[key] = (value, duration, now + duration)
            return value

    def set(self, key, value, duration):
        """Store value for duration seconds."""
        with self._lock:
            now = self._clock()
            if now >= self._next_purge:
                self._purge_expired(now)
            self._entries[key] = (value, duration, now + duration)

    def remove(self, key):
        with self._lock:
            self._entries.pop(key, None)

    def purge(self):
        """Drop expired entries, returns how many were dropped."""
        with self._lock:
            return self._purge_expired(self._clock())

    def _purge_expired(self, now):
        expired = [k for k, (_, _, expires) in self._entries.items() if now >= expires]
        for key in expired:
            del self._entries[key]
        self._next_purge = now + self._purge_interval
        if expired:
            logging.getLogger(__name__).debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self):
        with self._lock:
            return len(self._entries)


shared_store = ExpiringStore()


@cache_processor()
class InMemoryCacheProcessor(CacheProcessor):

    def __init__(self, store=None):
        self._store = store if store is not None else shared_store

    @classmethod
    def create(cls, provider):
        return cls(shared_store)

    @staticmethod
    def _key(provider, key):
        return f"{provider.tag}:{key}"

    def get_value(self, provider, key, cancellation=None):
        raise_if_cancelled(cancellation)
        value = self._store.get(self._key(provider, key))
        if value is None:
            logging.getLogger(__name__).debug(f"Cache miss for {key} in provider {provider.tag}")
        return value

    def set_value(self, provider, key, value, cancellation=None):
        raise_if_cancelled(cancellation)
        if not value:
            self._store.remove(self._key(provider, key))
            return
        duration = provider_duration(provider)
        self._store.set(self._key(provider, key), value, duration.total_seconds())
