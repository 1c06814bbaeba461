# -*- coding: utf-8 -*-
"""settings_resolver

Resolves replacement tokens in JSON setting documents into secret values fetched from
pluggable secret backends, optionally through pluggable caches.

A string value such as "##vault:redis:db-password##" is replaced by the secret
"db-password" read through the secret provider tagged "vault", using the cache provider
tagged "redis" to avoid fetching it on every read.
"""

from settings_resolver.cancellation import CancellationToken
from settings_resolver.decorators import InjectKeywordedSettings, InjectSettings
from settings_resolver.director import ConfigurationDirector, InMemorySettingStore, SettingStore
from settings_resolver.engine import EngineOptions, ResolutionContext, ResolutionEngine
from settings_resolver.exceptions import SettingsResolverError, \
    ConfigurationError, \
    ProviderDefinitionError, \
    MissingConfigurationError, \
    MalformedConfigurationError, \
    PluginRegistrationError, \
    ProcessorFactoryError, \
    ProviderTypeMismatchError, \
    ProcessorCapabilityError, \
    SecretNotFoundError, \
    NoActiveSecretVersion, \
    SecretCorruptedError, \
    ProcessorError, \
    TokenResolutionError, \
    BindingError, \
    ProcessorUnavailableError, \
    BackendError, \
    DocumentResolutionError, \
    ResolutionCancelled, \
    SettingDocumentNotFound
from settings_resolver.models import Provider, ProviderSet, ProviderType, SettingDocument
from settings_resolver.processors import CacheProcessor, SecretProcessor
from settings_resolver.registry import ProcessorFactory, \
    ProcessorRegistry, \
    cache_processor, \
    default_registry, \
    secret_processor
from settings_resolver.tokens import ReplacementToken, has_token, try_parse
from ._version import __version__

__all__ = ["__version__",
           "CancellationToken",
           "InjectSettings",
           "InjectKeywordedSettings",
           "ConfigurationDirector",
           "SettingStore",
           "InMemorySettingStore",
           "EngineOptions",
           "ResolutionContext",
           "ResolutionEngine",
           "SettingsResolverError",
           "ConfigurationError",
           "ProviderDefinitionError",
           "MissingConfigurationError",
           "MalformedConfigurationError",
           "PluginRegistrationError",
           "ProcessorFactoryError",
           "ProviderTypeMismatchError",
           "ProcessorCapabilityError",
           "SecretNotFoundError",
           "NoActiveSecretVersion",
           "SecretCorruptedError",
           "ProcessorError",
           "TokenResolutionError",
           "BindingError",
           "ProcessorUnavailableError",
           "BackendError",
           "DocumentResolutionError",
           "ResolutionCancelled",
           "SettingDocumentNotFound",
           "Provider",
           "ProviderSet",
           "ProviderType",
           "SettingDocument",
           "SecretProcessor",
           "CacheProcessor",
           "ProcessorFactory",
           "ProcessorRegistry",
           "secret_processor",
           "cache_processor",
           "default_registry",
           "ReplacementToken",
           "has_token",
           "try_parse"]
