# -*- coding: utf-8 -*-
"""
Token resolution engine.

Walks a parsed JSON document, resolves every string value that is a
replacement token and returns a new document with the tokens replaced by
their plain text values. For each token:

parse       - literals pass through untouched.
bind        - the secret tag, and the cache tag if any, must name enabled
              providers of the right type.
cache probe - a bound cache provider is asked for the key first, a hit ends
              resolution of the token.
fetch       - the secret provider supplies the value which is written through
              to the cache provider. A failed write through is only logged as
              the value already came from the authoritative backend.
substitute  - the value replaces the token text in the output document.

Resolution of a document is all or nothing. Every token is attempted and if
any of them fails a DocumentResolutionError listing each failure is raised,
a partially substituted document is never returned.
"""

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from .cancellation import CancellationToken, raise_if_cancelled
from .exceptions import (BackendError,
                         BindingError,
                         DocumentResolutionError,
                         ProcessorUnavailableError,
                         ResolutionCancelled,
                         SettingsResolverError,
                         TokenResolutionError)
from .models import ProviderType
from .registry import ProcessorFactory
from .tokens import parse

MAX_WORKERS_ENV = "SETTINGS_RESOLVER_MAX_WORKERS"


@dataclass
class EngineOptions:
    # 1 resolves tokens one after another on the calling thread
    max_workers: int = 4

    @classmethod
    def from_environ(cls, environ=None):
        environ = os.environ if environ is None else environ
        options = cls()
        raw = environ.get(MAX_WORKERS_ENV)
        if raw:
            try:
                options.max_workers = max(1, int(raw))
            except ValueError:
                logging.getLogger(__name__).warning(
                    f"Ignoring {MAX_WORKERS_ENV}={raw!r}, expected an integer")
        return options


class ResolutionContext:
    """Everything a resolution needs beyond the document itself.

    :param providers: ProviderSet snapshot to bind tags against
    :param application: application the document belongs to, for diagnostics
    :param environment: environment the document belongs to, for diagnostics
    :param cancellation: CancellationToken, a fresh one is created if omitted
    """

    def __init__(self, providers, application=None, environment=None, cancellation=None):
        self.providers = providers
        self.application = application
        self.environment = environment
        self.cancellation = cancellation if cancellation is not None else CancellationToken()

    @property
    def document_identity(self):
        if not self.application:
            return "document"
        if self.environment:
            return f"{self.application}/{self.environment}"
        return self.application


def iter_tokens(node):
    """Yield the ReplacementToken of every string value in a document, depth first."""
    if isinstance(node, dict):
        for value in node.values():
            yield from iter_tokens(value)
    elif isinstance(node, list):
        for value in node:
            yield from iter_tokens(value)
    elif isinstance(node, str):
        token = parse(node)
        if token is not None:
            yield token


def substitute(node, values):
    """Return a copy of node with every string found in values replaced."""
    if isinstance(node, dict):
        return {key: substitute(value, values) for key, value in node.items()}
    if isinstance(node, list):
        return [substitute(value, values) for value in node]
    if isinstance(node, str) and node in values:
        return values[node]
    return node


class ResolutionEngine:
    """Resolves replacement tokens in documents.

    The engine holds no state between resolutions, processors are obtained
    from the factory for every token.
    """

    def __init__(self, factory=None, options=None):
        self._factory = factory if factory is not None else ProcessorFactory()
        self._options = options if options is not None else EngineOptions()

    @property
    def factory(self):
        return self._factory

    @property
    def options(self):
        return self._options

    def resolve(self, payload, context):
        """
        Resolve all tokens in a parsed JSON document.

        :param payload: dict, list or scalar as produced by json.loads, never mutated
        :param context: ResolutionContext
        :return: a new, fully substituted document
        :raises DocumentResolutionError: one or more tokens failed
        :raises ResolutionCancelled: context.cancellation was signalled
        """
        identity = context.document_identity
        raise_if_cancelled(context.cancellation, identity)

        tokens = {}
        for token in iter_tokens(payload):
            tokens.setdefault(token.text, token)

        if not tokens:
            return substitute(payload, {})

        values, failures = self._resolve_all(list(tokens.values()), context)

        raise_if_cancelled(context.cancellation, identity)
        if failures:
            raise DocumentResolutionError(identity, failures)

        logging.getLogger(__name__).debug(f"Resolved {len(values)} token(s) in {identity}")
        return substitute(payload, values)

    def resolve_json(self, text, context):
        """Resolve a JSON text and return the resolved document as JSON text."""
        return json.dumps(self.resolve(json.loads(text), context))

    def resolve_document(self, document, providers, cancellation=None):
        """Resolve a SettingDocument's payload against a ProviderSet."""
        context = ResolutionContext(providers,
                                    application=document.application,
                                    environment=document.environment,
                                    cancellation=cancellation)
        return self.resolve(document.payload, context)

    def _resolve_all(self, tokens, context):
        values = {}
        failures = []
        workers = min(self._options.max_workers, len(tokens))

        if workers <= 1:
            for token in tokens:
                try:
                    values[token.text] = self.resolve_token(token, context)
                except TokenResolutionError as e:
                    failures.append(e)
            return values, failures

        with ThreadPoolExecutor(max_workers=workers,
                                thread_name_prefix="resolve_token") as executor:
            futures = [(token, executor.submit(self.resolve_token, token, context))
                       for token in tokens]
            for token, future in futures:
                try:
                    values[token.text] = future.result()
                except TokenResolutionError as e:
                    failures.append(e)
                except ResolutionCancelled:
                    for _, pending in futures:
                        pending.cancel()
                    raise
        return values, failures

    def resolve_token(self, token, context):
        """
        Resolve a single ReplacementToken.

        :return: the plain text value
        :raises TokenResolutionError: binding, processor creation or backend failure
        :raises ResolutionCancelled: context.cancellation was signalled
        """
        identity = context.document_identity
        cancellation = context.cancellation
        raise_if_cancelled(cancellation, identity)

        secret_provider = self._bind(token, token.secret_tag, ProviderType.SECRET, context.providers)
        cache_provider = None
        if token.cache_tag:
            cache_provider = self._bind(token, token.cache_tag, ProviderType.CACHE, context.providers)

        key = token.key
        cache = None
        if cache_provider is not None:
            cache = self._processor(token, cache_provider, cancellation)
            raise_if_cancelled(cancellation, identity)
            try:
                value = cache.get_value(cache_provider, key, cancellation)
            except ResolutionCancelled:
                raise
            except Exception as e:
                logging.getLogger(__name__).exception(
                    f"Cache provider {cache_provider.tag} failed reading {key} for {identity}")
                raise BackendError(token, cache_provider, key, "read", e) from e
            if value is not None:
                logging.getLogger(__name__).debug(
                    f"Cache hit for {key} in provider {cache_provider.tag}")
                return value

        processor = self._processor(token, secret_provider, cancellation)
        raise_if_cancelled(cancellation, identity)
        try:
            value = processor.get_secret(key, cancellation)
        except ResolutionCancelled:
            raise
        except Exception as e:
            logging.getLogger(__name__).exception(
                f"Secret provider {secret_provider.tag} failed fetching {key} for {identity}")
            raise BackendError(token, secret_provider, key, "fetch", e) from e

        if cache is not None:
            try:
                cache.set_value(cache_provider, key, value, cancellation)
            except ResolutionCancelled:
                raise
            except Exception:
                logging.getLogger(__name__).warning(
                    f"Cache provider {cache_provider.tag} failed storing {key} for {identity}",
                    exc_info=True)

        return value

    @staticmethod
    def _bind(token, tag, provider_type, providers):
        provider = providers.find(tag, provider_type)
        if provider is not None:
            return provider
        if providers.get(tag, provider_type) is not None:
            raise BindingError(token, tag, provider_type, "disabled")
        raise BindingError(token, tag, provider_type, "not defined")

    def _processor(self, token, provider, cancellation):
        try:
            if provider.provider_type is ProviderType.CACHE:
                processor = self._factory.create_cache_processor(provider, cancellation)
            else:
                processor = self._factory.create_secret_processor(provider, cancellation)
        except ResolutionCancelled:
            raise
        except SettingsResolverError as e:
            raise ProcessorUnavailableError(token, provider, e) from e
        if processor is None:
            raise ProcessorUnavailableError(token, provider)
        return processor
