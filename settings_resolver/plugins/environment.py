# -*- coding: utf-8 -*-
"""Secret processor reading secrets from environment variables, for local development
and tests.

Provider properties

prefix  - prepended to the secret key to form the variable name
"""

import os

from ..cancellation import raise_if_cancelled
from ..exceptions import SecretNotFoundError
from ..processors import SecretProcessor
from ..registry import secret_processor


@secret_processor()
class EnvironmentSecretProcessor(SecretProcessor):

    def __init__(self, provider, environ=None):
        self._prefix = provider.get_property("prefix") or ""
        self._environ = os.environ if environ is None else environ

    def get_secret(self, secret_key, cancellation=None):
        raise_if_cancelled(cancellation)
        name = f"{self._prefix}{secret_key}"
        try:
            return self._environ[name]
        except KeyError:
            raise SecretNotFoundError(name) from None
