# -*- coding: utf-8 -*-
"""
Plugin registry and processor factory.

Plugins register a factory for the capability they implement when their module
is imported, keyed by the qualified processor type name providers refer to::

    @secret_processor()
    class MySecretProcessor(SecretProcessor):
        ...

registers ``mypackage.mymodule.MySecretProcessor``. The ProcessorFactory turns
a provider definition into a ready to use processor by looking that name up,
importing the module named by the part before the last ``.`` if the name is not
registered yet.
"""

import importlib
import logging
import threading

from .cancellation import raise_if_cancelled
from .exceptions import (MalformedConfigurationError,
                         MissingConfigurationError,
                         PluginRegistrationError,
                         ProcessorCapabilityError,
                         ProcessorFactoryError,
                         ProviderTypeMismatchError,
                         SettingsResolverError)
from .models import ProviderType
from .processors import CacheProcessor, SecretProcessor

CAPABILITIES = {
    ProviderType.SECRET: SecretProcessor,
    ProviderType.CACHE: CacheProcessor,
}

PROCESSOR_TYPE_SETTING = "processor_type"


class ProcessorRegistry:
    """Thread safe mapping of processor type name to (capability, factory)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._factories = {}

    def register(self, name, provider_type, factory):
        """
        Register a processor factory.

        Registering the same name again for the same capability replaces the
        previous factory so re-importing a plugin module is harmless.

        :param name: qualified processor type name
        :param provider_type: ProviderType the processor implements
        :param factory: callable taking a Provider and returning a processor
        """
        with self._lock:
            existing = self._factories.get(name)
            if existing is not None and existing[0] is not provider_type:
                raise PluginRegistrationError(name, existing[0])
            if existing is not None:
                logging.getLogger(__name__).debug(f"Replacing processor registration {name}")
            self._factories[name] = (provider_type, factory)

    def unregister(self, name):
        with self._lock:
            self._factories.pop(name, None)

    def lookup(self, name):
        """Return (provider_type, factory) for name or None."""
        with self._lock:
            return self._factories.get(name)

    def names(self, provider_type=None):
        with self._lock:
            return sorted(name for name, (kind, _) in self._factories.items()
                          if provider_type is None or kind is provider_type)

    def __contains__(self, name):
        return self.lookup(name) is not None


default_registry = ProcessorRegistry()


def _registering(provider_type, name, registry):
    def decorator(cls):
        processor_name = name or f"{cls.__module__}.{cls.__qualname__}"
        (registry or default_registry).register(processor_name, provider_type, cls.create)
        return cls

    return decorator


def secret_processor(name=None, registry=None):
    """Class decorator registering a SecretProcessor subclass."""
    return _registering(ProviderType.SECRET, name, registry)


def cache_processor(name=None, registry=None):
    """Class decorator registering a CacheProcessor subclass."""
    return _registering(ProviderType.CACHE, name, registry)


class ProcessorFactory:
    """Creates processors for provider definitions from a ProcessorRegistry.

    Processors are created fresh on every call, nothing is cached between
    resolutions.
    """

    def __init__(self, registry=None):
        self._registry = registry if registry is not None else default_registry

    @property
    def registry(self):
        return self._registry

    def create_secret_processor(self, provider, cancellation=None):
        """
        Create the secret processor for a secret provider.

        :return: a SecretProcessor, or None if the processor type cannot be found
        :raises ProviderTypeMismatchError: provider is not a secret provider
        :raises MissingConfigurationError: provider has no processor type
        :raises MalformedConfigurationError: processor type is not a qualified name
        :raises ProcessorCapabilityError: processor type is not a secret processor
        """
        return self._create(provider, ProviderType.SECRET, cancellation)

    def create_cache_processor(self, provider, cancellation=None):
        """
        Create the cache processor for a cache provider, see create_secret_processor.
        """
        return self._create(provider, ProviderType.CACHE, cancellation)

    def _create(self, provider, capability, cancellation):
        if provider is None:
            raise ValueError("provider is required")
        if provider.provider_type is not capability:
            raise ProviderTypeMismatchError(provider, capability)
        processor_type = provider.processor_type
        if not processor_type:
            raise MissingConfigurationError(provider.tag, PROCESSOR_TYPE_SETTING)
        module_name, _, type_name = processor_type.rpartition(".")
        if not module_name or module_name.startswith(".") or not type_name:
            raise MalformedConfigurationError(provider.tag, PROCESSOR_TYPE_SETTING, processor_type)

        raise_if_cancelled(cancellation)

        registration = self._find(processor_type)
        if registration is None:
            logging.getLogger(__name__).warning(
                f"Failed to resolve processor type {processor_type} for provider {provider.tag}")
            return None

        registered_type, factory = registration
        if registered_type is not capability:
            raise ProcessorCapabilityError(provider, capability)

        try:
            processor = factory(provider)
        except SettingsResolverError:
            raise
        except Exception as e:
            logging.getLogger(__name__).exception(
                f"Processor factory for {processor_type} failed for provider {provider.tag}")
            raise ProcessorFactoryError(provider, capability, str(e)) from e

        if not isinstance(processor, CAPABILITIES[capability]):
            raise ProcessorCapabilityError(provider, capability)
        return processor

    def _find(self, processor_type):
        registration = self._registry.lookup(processor_type)
        if registration is not None:
            return registration

        module_name = processor_type.rsplit(".", 1)[0]
        try:
            # import_module is a no-op for modules already in sys.modules
            importlib.import_module(module_name)
        except Exception as e:
            logging.getLogger(__name__).warning(
                f"Failed to load processor module {module_name}: {e!r}")
            return None

        return self._registry.lookup(processor_type)
