# -*- coding: utf-8 -*-
"""
Provider definitions and setting documents as seen by the resolver.

Persistence of both lives outside this library, these are the immutable
snapshots it is handed.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from .exceptions import ProviderDefinitionError
from .tokens import TOKEN_DELIMITER, TOKEN_SEPARATOR

MAX_NAME_LENGTH = 32
MAX_TAG_LENGTH = 12
MAX_PROCESSOR_TYPE_LENGTH = 2048


class ProviderType(Enum):
    SECRET = "secret"
    CACHE = "cache"


@dataclass(frozen=True)
class Provider:
    """A tagged binding to a pluggable secret or cache backend.

    Attributes:
        provider_type (ProviderType): the capability the bound processor implements.
        name (str): display name.
        tag (str): the short identifier used inside replacement tokens.
        processor_type (str): qualified name of the registered processor type,
            ``<module>.<TypeName>``.
        properties (Mapping[str, str]): backend parameters, e.g. a vault uri
            or a cache entry duration.
        is_disabled (bool): disabled providers are never resolved against.
        id: identifier owned by the persistence layer.
    """

    provider_type: ProviderType
    name: str
    tag: str
    processor_type: str = ""
    properties: dict = field(default_factory=dict)
    is_disabled: bool = False
    id: object = None

    def __post_init__(self):
        if not isinstance(self.provider_type, ProviderType):
            raise ProviderDefinitionError(self.name, f"unknown provider type {self.provider_type!r}")
        if not self.name or len(self.name) > MAX_NAME_LENGTH:
            raise ProviderDefinitionError(
                self.name, f"name must be 1 to {MAX_NAME_LENGTH} characters")
        if not self.tag or len(self.tag) > MAX_TAG_LENGTH:
            raise ProviderDefinitionError(
                self.name, f"tag must be 1 to {MAX_TAG_LENGTH} characters")
        if TOKEN_SEPARATOR in self.tag or "#" in self.tag:
            raise ProviderDefinitionError(
                self.name, f"tag {self.tag} may not contain '{TOKEN_SEPARATOR}' or '{TOKEN_DELIMITER}'")
        if self.processor_type and len(self.processor_type) > MAX_PROCESSOR_TYPE_LENGTH:
            raise ProviderDefinitionError(
                self.name, f"processor type exceeds {MAX_PROCESSOR_TYPE_LENGTH} characters")
        # keep the caller's ordering but never share its dict
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties or {})))

    def get_property(self, key, default=None):
        """Case insensitive property lookup."""
        if key in self.properties:
            return self.properties[key]
        lowered = key.lower()
        for name, value in self.properties.items():
            if name.lower() == lowered:
                return value
        return default

    def unique_property_key(self):
        """Return a property name that is not yet used, for editors adding a property."""
        count = len(self.properties) + 1
        name = f"NewProperty{count}"
        while name in self.properties:
            count += 1
            name = f"NewProperty{count}"
        return name


class ProviderSet:
    """Immutable snapshot of provider definitions keyed by type and tag."""

    def __init__(self, providers=()):
        self._providers = tuple(providers)
        self._index = {}
        for provider in self._providers:
            key = (provider.provider_type, provider.tag)
            if key in self._index:
                raise ProviderDefinitionError(
                    provider.name,
                    f"tag {provider.tag} is already used by {provider.provider_type.value} "
                    f"provider {self._index[key].name}")
            self._index[key] = provider

    def get(self, tag, provider_type):
        """Return the provider for tag and type, enabled or not."""
        return self._index.get((provider_type, tag))

    def find(self, tag, provider_type):
        """Return the enabled provider for tag and type or None."""
        provider = self.get(tag, provider_type)
        if provider is None or provider.is_disabled:
            return None
        return provider

    def enabled(self):
        return ProviderSet(p for p in self._providers if not p.is_disabled)

    def __iter__(self):
        return iter(self._providers)

    def __len__(self):
        return len(self._providers)

    def __repr__(self):
        tags = ", ".join(f"{p.provider_type.value}:{p.tag}" for p in self._providers)
        return f"ProviderSet([{tags}])"


@dataclass(frozen=True)
class SettingDocument:
    """A JSON setting document for an application and optional environment.

    An environment of None denotes the base document shared by every
    environment of the application.
    """

    application: str
    payload: object
    environment: str = None

    @property
    def identity(self):
        if self.environment:
            return f"{self.application}/{self.environment}"
        return self.application
