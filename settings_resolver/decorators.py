"""Decorators injecting resolved configuration into functions"""


class InjectSettings:
    """Decorator injecting an application's resolved configuration"""

    def __init__(self, director, application, environment=None):
        """
        Constructs a decorator to inject the resolved configuration as the first non-keyworded
        argument of a given function.

        :type director: settings_resolver.ConfigurationDirector
        :param director: The director reading the configuration

        :type application: str
        :param application: The application name

        :type environment: str
        :param environment: The environment name, None for the base configuration only
        """

        self.director = director
        self.application = application
        self.environment = environment

    def __call__(self, func):
        """
        Return a function with the resolved configuration injected as first argument.

        :type func: object
        :param func: The function for injecting a single non-keyworded argument too.
        :return The function with the injected argument.
        """
        settings = self.director.read_configuration(self.application, self.environment)

        def _wrapped_func(*args, **kwargs):
            """
            Internal function to execute wrapped function
            """
            return func(settings, *args, **kwargs)

        return _wrapped_func


class InjectKeywordedSettings:
    """Decorator injecting top level values of an application's resolved configuration"""

    def __init__(self, director, application, environment=None, **kwargs):
        """
        Construct a decorator to inject a variable list of keyword arguments to a given function
        with values from the resolved configuration.

        :type kwargs: dict
        :param kwargs: dictionary mapping keyword argument of wrapped function to top level
                       configuration key

        :type director: settings_resolver.ConfigurationDirector
        :param director: The director reading the configuration
        """

        self.director = director
        self.application = application
        self.environment = environment
        self.kwarg_map = kwargs

    def __call__(self, func):
        """
        Return a function with injected keyword arguments from the resolved configuration.

        :type func: object
        :param func: function for injecting keyword arguments.
        :return The original function with injected keyword arguments
        """

        settings = self.director.read_configuration(self.application, self.environment)
        if not isinstance(settings, dict):
            raise RuntimeError('Resolved configuration is not a JSON object')

        resolved_kwargs = dict()
        for orig_kwarg in self.kwarg_map:
            settings_key = self.kwarg_map[orig_kwarg]
            try:
                resolved_kwargs[orig_kwarg] = settings[settings_key]
            except KeyError:
                raise RuntimeError('Resolved configuration does not contain key {0}'.format(
                    settings_key)) from None

        def _wrapped_func(*args, **kwargs):
            """
            Internal function to execute wrapped function
            """
            return func(*args, **resolved_kwargs, **kwargs)

        return _wrapped_func
