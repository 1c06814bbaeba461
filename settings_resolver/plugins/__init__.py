# -*- coding: utf-8 -*-
"""Reference processor plugins.

Each module registers its processor when imported, the ProcessorFactory imports them on
first use so providers only need the qualified processor type:

settings_resolver.plugins.gcp.GCPSecretProcessor                  secret
settings_resolver.plugins.environment.EnvironmentSecretProcessor  secret
settings_resolver.plugins.memory.InMemoryCacheProcessor           cache
settings_resolver.plugins.redis_cache.RedisCacheProcessor         cache
"""
