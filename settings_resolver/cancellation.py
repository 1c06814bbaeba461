# -*- coding: utf-8 -*-
import threading

from .exceptions import ResolutionCancelled


class CancellationToken:
    """Cooperative cancellation signal shared between a caller and the
    threads resolving on its behalf."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self):
        return self._event.is_set()

    def wait(self, timeout=None):
        return self._event.wait(timeout)

    def raise_if_cancelled(self, document_identity=None):
        if self._event.is_set():
            raise ResolutionCancelled(document_identity)


def raise_if_cancelled(cancellation, document_identity=None):
    """Processors accept cancellation=None so tolerate it here."""
    if cancellation is not None:
        cancellation.raise_if_cancelled(document_identity)
