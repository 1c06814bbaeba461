# -*- coding: utf-8 -*-
"""
Tests for reading merged configuration and the injection decorators

"""
import logging
import unittest

from settings_resolver import (ConfigurationDirector,
                               DocumentResolutionError,
                               EngineOptions,
                               InjectKeywordedSettings,
                               InjectSettings,
                               InMemorySettingStore,
                               ProcessorFactory,
                               ProcessorRegistry,
                               Provider,
                               ProviderSet,
                               ProviderType,
                               ResolutionEngine,
                               SecretProcessor,
                               SettingDocument,
                               SettingDocumentNotFound)
from settings_resolver.director import merge


def setup_module():
    logging.basicConfig(level=logging.DEBUG)


SECRETS = {"db-password": "s3cret", "api-key": "k-123"}


class DictSecretProcessor(SecretProcessor):

    reads = []

    def __init__(self, provider):
        self.provider = provider

    def get_secret(self, secret_key, cancellation=None):
        DictSecretProcessor.reads.append(secret_key)
        return SECRETS[secret_key]


class TestMerge(unittest.TestCase):

    def test_objects_merge_recursively(self):
        base = {"db": {"host": "localhost", "port": 5432}, "debug": True}
        override = {"db": {"host": "db.prod"}, "debug": False, "extra": [1]}
        self.assertEqual(merge(base, override),
                         {"db": {"host": "db.prod", "port": 5432}, "debug": False, "extra": [1]})
        self.assertEqual(base, {"db": {"host": "localhost", "port": 5432}, "debug": True})

    def test_other_values_replace(self):
        self.assertEqual(merge({"a": [1, 2, 3]}, {"a": [4]}), {"a": [4]})
        self.assertEqual(merge({"a": {"b": 1}}, {"a": "flat"}), {"a": "flat"})
        self.assertEqual(merge({"a": 1}, {"a": None}), {"a": None})


class DirectorTestCase(unittest.TestCase):

    def setUp(self):
        DictSecretProcessor.reads = []
        registry = ProcessorRegistry()
        registry.register("tests.Dict", ProviderType.SECRET, DictSecretProcessor.create)
        self.engine = ResolutionEngine(ProcessorFactory(registry), EngineOptions(max_workers=1))
        self.providers = ProviderSet([
            Provider(ProviderType.SECRET, name="Dict", tag="dict", processor_type="tests.Dict"),
        ])
        self.store = InMemorySettingStore([
            SettingDocument("billing", {"db": {"host": "localhost",
                                               "password": "##dict::db-password##"},
                                        "api": {"key": "##dict::api-key##"}}),
            SettingDocument("billing", {"db": {"host": "db.prod"},
                                        "api": {"key": "literal-key"}}, environment="prod"),
            SettingDocument("reports", {"token": "##dict::api-key##"}, environment="dev"),
        ])
        self.director = ConfigurationDirector(self.store, self.providers, self.engine)


class TestConfigurationDirector(DirectorTestCase):

    def test_base_only(self):
        self.assertEqual(self.director.read_configuration("billing"),
                         {"db": {"host": "localhost", "password": "s3cret"},
                          "api": {"key": "k-123"}})

    def test_environment_overrides_base(self):
        self.assertEqual(self.director.read_configuration("billing", "prod"),
                         {"db": {"host": "db.prod", "password": "s3cret"},
                          "api": {"key": "literal-key"}})
        self.assertEqual(DictSecretProcessor.reads, ["db-password"])

    def test_unknown_environment_falls_back_to_base(self):
        self.assertEqual(self.director.read_configuration("billing", "qa")["db"]["host"],
                         "localhost")

    def test_environment_only(self):
        self.assertEqual(self.director.read_configuration("reports", "dev"), {"token": "k-123"})

    def test_not_found(self):
        with self.assertRaises(SettingDocumentNotFound):
            self.director.read_configuration("reports")
        with self.assertRaises(SettingDocumentNotFound):
            self.director.read_configuration("unknown", "prod")

    def test_application_required(self):
        with self.assertRaises(ValueError):
            self.director.read_configuration("")

    def test_stored_documents_are_untouched(self):
        self.director.read_configuration("billing", "prod")
        self.assertEqual(self.store.find("billing").payload["db"]["password"],
                         "##dict::db-password##")

    def test_provider_snapshot_per_read(self):
        snapshots = []

        def providers():
            snapshots.append(1)
            return self.providers

        director = ConfigurationDirector(self.store, providers, self.engine)
        director.read_configuration("billing")
        director.read_configuration("billing", "prod")
        self.assertEqual(len(snapshots), 2)

    def test_failures_carry_the_document_identity(self):
        director = ConfigurationDirector(self.store, ProviderSet(), self.engine)
        with self.assertRaises(DocumentResolutionError) as context:
            director.read_configuration("billing", "prod")
        self.assertEqual(context.exception.document_identity, "billing/prod")

    def test_store_remove(self):
        self.store.remove("billing", "prod")
        self.assertIsNone(self.store.find("billing", "prod"))


class TestDecorators(DirectorTestCase):

    def test_inject_settings(self):
        @InjectSettings(self.director, "billing", "prod")
        def connect(settings, timeout=5):
            return settings["db"]["password"], timeout

        self.assertEqual(connect(timeout=10), ("s3cret", 10))

    def test_inject_keyworded_settings(self):
        @InjectKeywordedSettings(self.director, "billing", db="db", api="api")
        def connect(db, api, retries=0):
            return db["password"], api["key"], retries

        self.assertEqual(connect(retries=3), ("s3cret", "k-123", 3))

    def test_inject_keyworded_missing_key(self):
        with self.assertRaises(RuntimeError):
            @InjectKeywordedSettings(self.director, "billing", cache="cache")
            def connect(cache):
                return cache
