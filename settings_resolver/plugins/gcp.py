# -*- coding: utf-8 -*-
"""Google Cloud Secret Manager secret processor

Provider properties

project   - project holding the secrets, defaults to the project of the credentials
encoding  - character encoding of the secret payloads, default UTF-8

The secret key is either a bare secret id, resolved within the project, or a full
``projects/<project>/secrets/<secret>[/versions/<n>|latest]`` resource name.

While google best practices state don't use latest because of release could cause
a failure and should be tied to a release, this takes the most recent enabled version
rather than "latest". So roll back can be done by disabling the most recent version.

If a version is specified the version selected is the last enabled version earlier or
equal to that version number.
"""

import logging
import re
import threading

import google.auth
import google_crc32c
from google.api_core import exceptions
from google.cloud import secretmanager, secretmanager_v1

from ..cancellation import raise_if_cancelled
from ..exceptions import (MissingConfigurationError,
                          NoActiveSecretVersion,
                          SecretCorruptedError,
                          SecretNotFoundError)
from ..processors import SecretProcessor
from ..registry import secret_processor

_SECRET_VERSION = re.compile(r'(projects/[^/]+/secrets/[^/]+)/versions/([0-9]+|latest)$')
_VERSION_NUMBER = re.compile(r'projects/[^/]+/secrets/[^/]+/versions/([0-9]+)')


def _version_number(version_name):
    return int(_VERSION_NUMBER.search(version_name).group(1))


@secret_processor()
class GCPSecretProcessor(SecretProcessor):

    def __init__(self, provider, _credentials_callback=None):
        self._provider_tag = provider.tag
        self._project_id = provider.get_property("project")
        self._encoding = provider.get_property("encoding") or "UTF-8"
        self._credentials_callback = _credentials_callback
        self.ns = threading.local()

    @property
    def _credentials(self):
        if not hasattr(self.ns, "_credentials"):
            if self._credentials_callback is not None:
                _credentials, _project_id = self._credentials_callback()
            else:
                _credentials, _project_id = google.auth.default()
            self.ns._credentials = _credentials
            self.ns._project_id = _project_id
        return self.ns._credentials

    def _client(self):
        if not hasattr(self.ns, "client"):
            self.ns.client = secretmanager.SecretManagerServiceClient(credentials=self._credentials)
        return self.ns.client

    @property
    def project_id(self):
        if self._project_id:
            return self._project_id
        _ = self._credentials
        return self.ns._project_id

    def secret_name(self, secret_key):
        """
        The secret resource name and the highest version number allowed, if any.

        :param secret_key: bare secret id or resource name
        :return: tuple of (secret resource name, int or None)
        """
        if secret_key.startswith("projects/"):
            match = _SECRET_VERSION.search(secret_key)
            if not match:
                return secret_key, None
            max_version = match.group(2)
            return match.group(1), None if max_version == "latest" else int(max_version)

        project_id = self.project_id
        if not project_id:
            raise MissingConfigurationError(self._provider_tag, "project")
        return f"projects/{project_id}/secrets/{secret_key}", None

    def get_secret(self, secret_key, cancellation=None):
        secret_name, max_version = self.secret_name(secret_key)

        raise_if_cancelled(cancellation)
        request = secretmanager_v1.ListSecretVersionsRequest(
            parent=secret_name,
            filter="state=ENABLED"
        )
        try:
            versions = self._client().list_secret_versions(request=request)
        except exceptions.NotFound as e:
            raise SecretNotFoundError(secret_name) from e

        latest = None
        for version in sorted(versions, key=lambda d: d.create_time):
            if max_version is not None and _version_number(version.name) > max_version:
                continue
            latest = version

        if not latest:
            raise NoActiveSecretVersion(secret_name)

        raise_if_cancelled(cancellation)
        request = secretmanager_v1.AccessSecretVersionRequest(
            name=latest.name
        )
        payload = self._client().access_secret_version(request=request).payload

        if payload.data_crc32c and google_crc32c.value(payload.data) != payload.data_crc32c:
            raise SecretCorruptedError(latest.name)

        logging.getLogger(__name__).debug(f"Read secret version {latest.name}")
        return payload.data.decode(self._encoding)
