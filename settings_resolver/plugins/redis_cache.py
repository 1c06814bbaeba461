# -*- coding: utf-8 -*-
"""Redis cache processor

Provider properties

url       - redis connection url e.g. redis://localhost:6379/0 (required)
prefix    - prepended to every key, defaults to "settings:<tag>:"
duration  - entry lifetime, reads extend it (sliding expiration)
"""

import logging
import threading

import redis

from ..cancellation import raise_if_cancelled
from ..exceptions import MissingConfigurationError, ProcessorError
from ..processors import DURATION_PROPERTY, CacheProcessor, provider_duration
from ..registry import cache_processor

_clients = {}
_clients_lock = threading.Lock()


def client_for(url):
    """One client, and so one connection pool, per url for the whole process."""
    with _clients_lock:
        client = _clients.get(url)
        if client is None:
            client = redis.Redis.from_url(url)
            _clients[url] = client
        return client


def _milliseconds(duration):
    return max(1, int(duration.total_seconds() * 1000))


@cache_processor()
class RedisCacheProcessor(CacheProcessor):

    def __init__(self, client):
        self._client = client

    @classmethod
    def create(cls, provider):
        url = provider.get_property("url")
        if not url:
            raise MissingConfigurationError(provider.tag, "url")
        return cls(client_for(url))

    @staticmethod
    def _key(provider, key):
        prefix = provider.get_property("prefix")
        if prefix is None:
            prefix = f"settings:{provider.tag}:"
        return f"{prefix}{key}"

    def get_value(self, provider, key, cancellation=None):
        raise_if_cancelled(cancellation)
        # reads only slide the expiration when a duration is configured
        duration = None
        if provider.get_property(DURATION_PROPERTY):
            duration = provider_duration(provider)
        try:
            if duration is not None:
                raw = self._client.getex(self._key(provider, key), px=_milliseconds(duration))
            else:
                raw = self._client.get(self._key(provider, key))
        except redis.RedisError as e:
            logging.getLogger(__name__).exception(
                f"Failed to read {key} from redis for provider {provider.tag}")
            raise ProcessorError("read", key) from e
        if raw is None:
            return None
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    def set_value(self, provider, key, value, cancellation=None):
        raise_if_cancelled(cancellation)
        try:
            if not value:
                self._client.delete(self._key(provider, key))
                return
            duration = provider_duration(provider)
            self._client.set(self._key(provider, key), value.encode("utf-8"),
                             px=_milliseconds(duration))
        except redis.RedisError as e:
            logging.getLogger(__name__).exception(
                f"Failed to store {key} in redis for provider {provider.tag}")
            raise ProcessorError("store", key) from e
