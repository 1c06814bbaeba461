# -*- coding: utf-8 -*-
"""
Tests for the plugin registry and processor factory

"""
import logging
import unittest
from unittest import mock

from settings_resolver import (CacheProcessor,
                               MalformedConfigurationError,
                               MissingConfigurationError,
                               PluginRegistrationError,
                               ProcessorCapabilityError,
                               ProcessorFactory,
                               ProcessorFactoryError,
                               ProcessorRegistry,
                               Provider,
                               ProviderType,
                               ProviderTypeMismatchError,
                               SecretProcessor,
                               cache_processor,
                               default_registry,
                               secret_processor)
from settings_resolver.plugins.memory import InMemoryCacheProcessor


def setup_module():
    logging.basicConfig(level=logging.DEBUG)


class StaticSecretProcessor(SecretProcessor):

    def __init__(self, provider):
        self.provider = provider

    def get_secret(self, secret_key, cancellation=None):
        return f"{self.provider.tag}:{secret_key}"


class NullCacheProcessor(CacheProcessor):

    def get_value(self, provider, key, cancellation=None):
        return None

    def set_value(self, provider, key, value, cancellation=None):
        pass


def provider(provider_type, processor_type, tag="p"):
    return Provider(provider_type, name=f"provider {tag}", tag=tag, processor_type=processor_type)


class TestProcessorRegistry(unittest.TestCase):

    def setUp(self):
        self.registry = ProcessorRegistry()

    def test_register_and_lookup(self):
        self.registry.register("tests.Secret", ProviderType.SECRET, StaticSecretProcessor.create)
        self.assertIn("tests.Secret", self.registry)
        self.assertEqual(self.registry.lookup("tests.Secret"),
                         (ProviderType.SECRET, StaticSecretProcessor.create))
        self.assertEqual(self.registry.names(ProviderType.SECRET), ["tests.Secret"])
        self.assertEqual(self.registry.names(ProviderType.CACHE), [])
        self.assertIsNone(self.registry.lookup("tests.Other"))

    def test_register_again_replaces(self):
        self.registry.register("tests.Secret", ProviderType.SECRET, StaticSecretProcessor.create)
        self.registry.register("tests.Secret", ProviderType.SECRET, StaticSecretProcessor)
        self.assertEqual(self.registry.lookup("tests.Secret"),
                         (ProviderType.SECRET, StaticSecretProcessor))

    def test_register_for_other_capability_fails(self):
        self.registry.register("tests.Secret", ProviderType.SECRET, StaticSecretProcessor.create)
        with self.assertRaises(PluginRegistrationError):
            self.registry.register("tests.Secret", ProviderType.CACHE, NullCacheProcessor.create)

    def test_unregister(self):
        self.registry.register("tests.Secret", ProviderType.SECRET, StaticSecretProcessor.create)
        self.registry.unregister("tests.Secret")
        self.assertNotIn("tests.Secret", self.registry)

    def test_decorators(self):
        @secret_processor(registry=self.registry)
        class DecoratedSecret(StaticSecretProcessor):
            pass

        @cache_processor(name="tests.NamedCache", registry=self.registry)
        class DecoratedCache(NullCacheProcessor):
            pass

        self.assertEqual(self.registry.names(ProviderType.SECRET),
                         [f"{DecoratedSecret.__module__}.{DecoratedSecret.__qualname__}"])
        self.assertEqual(self.registry.names(ProviderType.CACHE), ["tests.NamedCache"])

    def test_reference_plugins_register_with_default_registry(self):
        self.assertIn("settings_resolver.plugins.memory.InMemoryCacheProcessor", default_registry)


class TestProcessorFactory(unittest.TestCase):

    def setUp(self):
        self.registry = ProcessorRegistry()
        self.registry.register("tests.Secret", ProviderType.SECRET, StaticSecretProcessor.create)
        self.registry.register("tests.Cache", ProviderType.CACHE, NullCacheProcessor.create)
        self.factory = ProcessorFactory(self.registry)

    def test_create_secret_processor(self):
        processor = self.factory.create_secret_processor(
            provider(ProviderType.SECRET, "tests.Secret", tag="vault"))
        self.assertIsInstance(processor, StaticSecretProcessor)
        self.assertEqual(processor.get_secret("k"), "vault:k")

    def test_processors_are_not_reused(self):
        secret = provider(ProviderType.SECRET, "tests.Secret")
        self.assertIsNot(self.factory.create_secret_processor(secret),
                         self.factory.create_secret_processor(secret))

    def test_create_cache_processor(self):
        processor = self.factory.create_cache_processor(provider(ProviderType.CACHE, "tests.Cache"))
        self.assertIsInstance(processor, NullCacheProcessor)

    def test_type_mismatch(self):
        with self.assertRaises(ProviderTypeMismatchError):
            self.factory.create_secret_processor(provider(ProviderType.CACHE, "tests.Cache"))
        with self.assertRaises(ProviderTypeMismatchError):
            self.factory.create_cache_processor(provider(ProviderType.SECRET, "tests.Secret"))

    def test_missing_processor_type(self):
        with self.assertRaises(MissingConfigurationError):
            self.factory.create_secret_processor(provider(ProviderType.SECRET, ""))

    def test_malformed_processor_type(self):
        with self.assertRaises(MalformedConfigurationError):
            self.factory.create_secret_processor(provider(ProviderType.SECRET, "NoModulePart"))

    def test_processor_type_must_be_an_absolute_name(self):
        for processor_type in (".Processor", "..plugins.Processor", "plugins.", "."):
            with self.subTest(processor_type=processor_type):
                with self.assertRaises(MalformedConfigurationError):
                    self.factory.create_secret_processor(
                        provider(ProviderType.SECRET, processor_type))

    @mock.patch("settings_resolver.registry.importlib.import_module",
                side_effect=RuntimeError("plugin failed to initialise"))
    def test_plugin_module_failing_on_import_is_a_soft_failure(self, import_module):
        with self.assertLogs("settings_resolver.registry", level="WARNING"):
            processor = self.factory.create_secret_processor(
                provider(ProviderType.SECRET, "settings_resolver_broken_plugin.Processor"))
        self.assertIsNone(processor)
        import_module.assert_called_once_with("settings_resolver_broken_plugin")

    def test_unknown_module_is_a_soft_failure(self):
        with self.assertLogs("settings_resolver.registry", level="WARNING"):
            processor = self.factory.create_secret_processor(
                provider(ProviderType.SECRET, "settings_resolver_no_such_module.Processor"))
        self.assertIsNone(processor)

    def test_unknown_type_is_a_soft_failure(self):
        with self.assertLogs("settings_resolver.registry", level="WARNING"):
            processor = self.factory.create_cache_processor(
                provider(ProviderType.CACHE, "settings_resolver.plugins.memory.NoSuchProcessor"))
        self.assertIsNone(processor)

    def test_registered_for_other_capability(self):
        with self.assertRaises(ProcessorCapabilityError):
            self.factory.create_secret_processor(provider(ProviderType.SECRET, "tests.Cache"))

    def test_factory_returning_wrong_object(self):
        self.registry.register("tests.Broken", ProviderType.SECRET, lambda p: object())
        with self.assertRaises(ProcessorCapabilityError):
            self.factory.create_secret_processor(provider(ProviderType.SECRET, "tests.Broken"))

    def test_factory_failure_is_wrapped(self):
        def explode(p):
            raise RuntimeError("no backend")

        self.registry.register("tests.Explodes", ProviderType.SECRET, explode)
        with self.assertRaises(ProcessorFactoryError) as context:
            self.factory.create_secret_processor(provider(ProviderType.SECRET, "tests.Explodes"))
        self.assertIsInstance(context.exception.__cause__, RuntimeError)

    def test_default_registry_loads_plugin_modules(self):
        factory = ProcessorFactory()
        cache = provider(ProviderType.CACHE,
                         "settings_resolver.plugins.memory.InMemoryCacheProcessor")
        self.assertIsInstance(factory.create_cache_processor(cache), InMemoryCacheProcessor)
        # loading an already loaded plugin must not fail
        self.assertIsInstance(factory.create_cache_processor(cache), InMemoryCacheProcessor)

    def test_default_registry_imports_on_first_use(self):
        name = "settings_resolver.plugins.environment.EnvironmentSecretProcessor"
        factory = ProcessorFactory()
        processor = factory.create_secret_processor(provider(ProviderType.SECRET, name))
        self.assertEqual(type(processor).__name__, "EnvironmentSecretProcessor")
        self.assertIn(name, default_registry)
