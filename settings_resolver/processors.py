# -*- coding: utf-8 -*-
"""
Processor capabilities.

A provider declares which capability it offers through its provider type and
names the concrete processor through its processor type. A processor implements
exactly one of the two capabilities.

secret  - fetches one named secret value from a remote backend.
cache   - gets and sets short lived values by key in a backend cache with an
          expiration taken from the provider's ``duration`` property.
"""

import re
from abc import ABC, abstractmethod
from datetime import timedelta

from .exceptions import MissingConfigurationError, MalformedConfigurationError

DURATION_PROPERTY = "duration"

# [d.]hh:mm[:ss[.fraction]]
_TIMESPAN = re.compile(
    r"^(?:(?P<days>\d+)\.)?(?P<hours>\d{1,2}):(?P<minutes>\d{1,2})"
    r"(?::(?P<seconds>\d{1,2})(?:\.(?P<fraction>\d{1,7}))?)?$")
_SECONDS = re.compile(r"^\d+(?:\.\d+)?$")


class SecretProcessor(ABC):
    """Abstract Base Class for a secret processor.

    Concrete processors are created for a single provider by the
    ProcessorFactory and are configured from that provider's properties.
    """

    @classmethod
    def create(cls, provider):
        """Factory registered for the processor type, builds a processor for provider."""
        return cls(provider)

    @abstractmethod
    def get_secret(self, secret_key, cancellation=None):
        """Return the plain text value of a secret.

        Args:
            secret_key (str): the key of the secret in the backend.
            cancellation (CancellationToken, optional): cooperative cancellation signal.

        Returns:
            str: the secret value.

        Raises:
            SecretNotFoundError: if the backend has no such secret. Any other
                failure is raised as the backend's own exception, retries if
                any are the processor's business.
        """


class CacheProcessor(ABC):
    """Abstract Base Class for a cache processor.

    Unlike secret processors the provider is passed on each call as the
    expiration policy is a property of the provider.
    """

    @classmethod
    def create(cls, provider):
        """Factory registered for the processor type, builds a processor for provider."""
        return cls()

    @abstractmethod
    def get_value(self, provider, key, cancellation=None):
        """Return the cached value for key or None on a miss.

        A miss is not an error.
        """

    @abstractmethod
    def set_value(self, provider, key, value, cancellation=None):
        """Store value under key for the provider's duration.

        Setting an empty value removes the key, callers rely on this to
        invalidate entries.

        Raises:
            MissingConfigurationError: provider has no duration property.
            MalformedConfigurationError: duration cannot be parsed.
        """


def parse_duration(value):
    """
    Parse a duration string.

    :param value: either ``[d.]hh:mm[:ss[.fraction]]`` or a number of seconds
    :return: datetime.timedelta, or None if value is not a duration
    """
    if value is None:
        return None
    value = value.strip()
    if _SECONDS.match(value):
        return timedelta(seconds=float(value))
    match = _TIMESPAN.match(value)
    if not match:
        return None
    parts = match.groupdict()
    hours, minutes = int(parts["hours"]), int(parts["minutes"])
    seconds = int(parts["seconds"] or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    fraction = float(f"0.{parts['fraction']}") if parts["fraction"] else 0.0
    return timedelta(days=int(parts["days"] or 0),
                     hours=hours,
                     minutes=minutes,
                     seconds=seconds + fraction)


def provider_duration(provider):
    """
    The cache entry duration configured for a cache provider.

    A missing or blank duration is a configuration error rather than a silent
    zero length entry.
    """
    raw = provider.get_property(DURATION_PROPERTY)
    if raw is None or not raw.strip():
        raise MissingConfigurationError(provider.tag, DURATION_PROPERTY)
    duration = parse_duration(raw)
    if duration is None or duration <= timedelta(0):
        raise MalformedConfigurationError(provider.tag, DURATION_PROPERTY, raw)
    return duration
