# -*- coding: utf-8 -*-

class SettingsResolverError(Exception):
    """Base Error class."""


class ConfigurationError(SettingsResolverError):
    """A provider definition or its properties cannot be used as declared."""


class ProviderDefinitionError(ConfigurationError, ValueError):
    CUSTOM_ERROR_MESSAGE = "Provider {} is invalid: {}"

    def __init__(self, provider_name, reason):
        super(ProviderDefinitionError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(provider_name, reason))
        self._provider_name = provider_name
        self._reason = reason

    @property
    def provider_name(self):
        return self._provider_name

    @property
    def reason(self):
        return self._reason


class MissingConfigurationError(ConfigurationError):
    CUSTOM_ERROR_MESSAGE = "Provider {} is missing required configuration {}"

    def __init__(self, provider_tag, setting):
        super(MissingConfigurationError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(provider_tag, setting))
        self._provider_tag = provider_tag
        self._setting = setting

    @property
    def provider_tag(self):
        return self._provider_tag

    @property
    def setting(self):
        return self._setting


class MalformedConfigurationError(ConfigurationError):
    CUSTOM_ERROR_MESSAGE = "Provider {} has malformed configuration {} value {!r}"

    def __init__(self, provider_tag, setting, value):
        super(MalformedConfigurationError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(provider_tag, setting, value))
        self._provider_tag = provider_tag
        self._setting = setting
        self._value = value

    @property
    def provider_tag(self):
        return self._provider_tag

    @property
    def setting(self):
        return self._setting

    @property
    def value(self):
        return self._value


class PluginRegistrationError(SettingsResolverError):
    CUSTOM_ERROR_MESSAGE = "Processor type {} is already registered as a {} processor"

    def __init__(self, processor_type, provider_type):
        super(PluginRegistrationError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(processor_type, provider_type.value))
        self._processor_type = processor_type


class ProcessorFactoryError(SettingsResolverError):
    CUSTOM_ERROR_MESSAGE = "Failed to create a {} processor for provider {}: {}"

    def __init__(self, provider, capability, reason):
        super(ProcessorFactoryError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(capability.value, provider.tag, reason))
        self._provider = provider
        self._capability = capability

    @property
    def provider(self):
        return self._provider

    @property
    def capability(self):
        return self._capability


class ProviderTypeMismatchError(ProcessorFactoryError, ConfigurationError):

    def __init__(self, provider, capability):
        super(ProviderTypeMismatchError, self).__init__(
            provider, capability,
            f"provider is a {provider.provider_type.value} provider")


class ProcessorCapabilityError(ProcessorFactoryError):
    """The registered processor type does not implement the requested capability."""

    def __init__(self, provider, capability):
        super(ProcessorCapabilityError, self).__init__(
            provider, capability,
            f"{provider.processor_type} does not implement the {capability.value} capability")


class SecretNotFoundError(SettingsResolverError, KeyError):
    CUSTOM_ERROR_MESSAGE = "Secret {} was not found"

    def __init__(self, secret_key):
        super(SecretNotFoundError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_key))
        self._secret_key = secret_key

    @property
    def secret_key(self):
        return self._secret_key

    def __str__(self):
        return self.args[0]


class NoActiveSecretVersion(SecretNotFoundError):
    CUSTOM_ERROR_MESSAGE = "Secret {} has no active enabled versions"


class SecretCorruptedError(SettingsResolverError):
    CUSTOM_ERROR_MESSAGE = "Secret {} payload failed its checksum"

    def __init__(self, secret_version):
        super(SecretCorruptedError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(secret_version))
        self._secret_version = secret_version

    @property
    def secret_version(self):
        return self._secret_version


class ProcessorError(SettingsResolverError):
    CUSTOM_ERROR_MESSAGE = "Failed to {} key {} in the cache"

    def __init__(self, operation, key):
        super(ProcessorError, self).__init__(self.CUSTOM_ERROR_MESSAGE.format(operation, key))
        self._operation = operation
        self._key = key

    @property
    def operation(self):
        return self._operation

    @property
    def key(self):
        return self._key


class TokenResolutionError(SettingsResolverError):
    """Base class for the failure of a single replacement token."""

    def __init__(self, message, token):
        super(TokenResolutionError, self).__init__(message)
        self._token = token

    @property
    def token(self):
        return self._token


class BindingError(TokenResolutionError):
    CUSTOM_ERROR_MESSAGE = "Token {} references {} provider tag {} which is {}"

    def __init__(self, token, tag, provider_type, reason):
        super(BindingError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(token.text, provider_type.value, tag, reason),
            token)
        self._tag = tag
        self._provider_type = provider_type

    @property
    def tag(self):
        return self._tag

    @property
    def provider_type(self):
        return self._provider_type


class ProcessorUnavailableError(TokenResolutionError):
    CUSTOM_ERROR_MESSAGE = "Token {} has no {} processor available for provider {} ({})"

    def __init__(self, token, provider, error=None):
        message = self.CUSTOM_ERROR_MESSAGE.format(token.text,
                                                   provider.provider_type.value,
                                                   provider.tag,
                                                   provider.processor_type or "no processor type")
        if error is not None:
            message = f"{message}: {error}"
        super(ProcessorUnavailableError, self).__init__(message, token)
        self._provider = provider
        self._error = error

    @property
    def provider(self):
        return self._provider

    @property
    def error(self):
        """The factory error, None when the processor type could not be found."""
        return self._error


class BackendError(TokenResolutionError):
    CUSTOM_ERROR_MESSAGE = "Token {} failed to {} key {} using provider {}: {}"

    def __init__(self, token, provider, key, operation, error):
        super(BackendError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(token.text, operation, key, provider.tag, str(error)),
            token)
        self._provider = provider
        self._key = key
        self._operation = operation
        self._error = error

    @property
    def provider(self):
        return self._provider

    @property
    def key(self):
        return self._key

    @property
    def operation(self):
        return self._operation

    @property
    def error(self):
        return self._error


class DocumentResolutionError(SettingsResolverError):
    CUSTOM_ERROR_MESSAGE = "Document {} has {} unresolved token(s): {}"

    def __init__(self, document_identity, failures):
        super(DocumentResolutionError, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(document_identity,
                                             len(failures),
                                             "; ".join(str(f) for f in failures)))
        self._document_identity = document_identity
        self._failures = tuple(failures)

    @property
    def document_identity(self):
        return self._document_identity

    @property
    def failures(self):
        return self._failures


class ResolutionCancelled(SettingsResolverError):
    CUSTOM_ERROR_MESSAGE = "Resolution of {} was cancelled"

    def __init__(self, document_identity=None):
        super(ResolutionCancelled, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(document_identity or "document"))
        self._document_identity = document_identity

    @property
    def document_identity(self):
        return self._document_identity


class SettingDocumentNotFound(SettingsResolverError, LookupError):
    CUSTOM_ERROR_MESSAGE = "No setting document found for application {} environment {}"

    def __init__(self, application, environment):
        super(SettingDocumentNotFound, self).__init__(
            self.CUSTOM_ERROR_MESSAGE.format(application, environment))
        self._application = application
        self._environment = environment

    @property
    def application(self):
        return self._application

    @property
    def environment(self):
        return self._environment
