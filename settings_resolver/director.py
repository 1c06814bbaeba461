# -*- coding: utf-8 -*-
"""
Configuration director.

Reads the configuration for an application and environment. The base
document of the application, stored without an environment, is merged with
the environment's document, the environment winning, and the merged result is
resolved by the ResolutionEngine.
"""

import logging
import threading
from abc import ABC, abstractmethod

from .engine import ResolutionContext, ResolutionEngine
from .exceptions import SettingDocumentNotFound
from .models import ProviderSet


class SettingStore(ABC):
    """Read side of the setting document persistence."""

    @abstractmethod
    def find(self, application, environment=None):
        """Return the SettingDocument for application and environment or None.

        An environment of None selects the application's base document.
        """


class InMemorySettingStore(SettingStore):

    def __init__(self, documents=()):
        self._lock = threading.Lock()
        self._documents = {}
        for document in documents:
            self.add(document)

    def add(self, document):
        with self._lock:
            self._documents[(document.application, document.environment or None)] = document

    def remove(self, application, environment=None):
        with self._lock:
            return self._documents.pop((application, environment or None), None)

    def find(self, application, environment=None):
        with self._lock:
            return self._documents.get((application, environment or None))


def merge(base, override):
    """
    Merge two parsed JSON documents into a new one.

    Objects are merged key by key recursively, any other value in override
    replaces the value in base.
    """
    if isinstance(base, dict) and isinstance(override, dict):
        merged = dict(base)
        for key, value in override.items():
            merged[key] = merge(base[key], value) if key in base else value
        return merged
    return override


class ConfigurationDirector:
    """Reads fully resolved configuration for applications.

    :param store: SettingStore holding the setting documents
    :param providers: ProviderSet, or a callable returning a fresh ProviderSet
                      snapshot for each read
    :param engine: ResolutionEngine, a default engine if omitted
    """

    def __init__(self, store, providers, engine=None):
        if store is None:
            raise ValueError("store is required")
        if providers is None:
            raise ValueError("providers is required")
        self._store = store
        self._providers = providers
        self._engine = engine if engine is not None else ResolutionEngine()

    @property
    def engine(self):
        return self._engine

    def providers(self):
        if isinstance(self._providers, ProviderSet):
            return self._providers
        return self._providers()

    def read_configuration(self, application, environment=None, cancellation=None):
        """
        Read the resolved configuration of an application.

        :param application: application name
        :param environment: environment name, None or "" for the base document only
        :param cancellation: optional CancellationToken
        :return: the merged document with all replacement tokens resolved
        :raises SettingDocumentNotFound: neither a base nor an environment document exists
        :raises DocumentResolutionError: a token could not be resolved
        """
        if not application:
            raise ValueError("application is required")

        base = self._store.find(application, None)
        env = self._store.find(application, environment) if environment else None

        if base is None and env is None:
            raise SettingDocumentNotFound(application, environment)

        if base is not None and env is not None:
            payload = merge(base.payload, env.payload)
        else:
            payload = (env or base).payload

        logging.getLogger(__name__).debug(
            f"Resolving configuration for {application} environment {environment}")

        context = ResolutionContext(self.providers(),
                                    application=application,
                                    environment=environment,
                                    cancellation=cancellation)
        return self._engine.resolve(payload, context)
