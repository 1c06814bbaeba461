# -*- coding: utf-8 -*-
"""Replacement token grammar.

A replacement token is a whole string value of the form::

    ##<secretTag>[:<cacheTag>[:<altKey>]]##

The secret tag selects the secret provider that supplies the value, the
optional cache tag selects a cache provider used to avoid re-fetching it and
the optional alternate key overrides the key passed to both processors. A
string that does not follow the delimiter rule is an ordinary literal.
"""

from dataclasses import dataclass

TOKEN_DELIMITER = "##"
TOKEN_SEPARATOR = ":"


@dataclass(frozen=True)
class ReplacementToken:
    text: str
    secret_tag: str
    cache_tag: str = None
    alt_key: str = None

    @property
    def key(self):
        """The key handed to the secret and cache processors."""
        return self.alt_key or self.secret_tag


def has_token(value):
    """
    Test whether a value is a replacement token.

    :param value: the value to test, anything that is not a str is never a token
    :return: True if the value both starts and ends with the token delimiter and
             something remains between the two delimiters
    """
    if not isinstance(value, str) or not value:
        return False
    # the delimiters may not overlap, so "###" and "####" are literals
    return (len(value) > 2 * len(TOKEN_DELIMITER) and
            value.startswith(TOKEN_DELIMITER) and
            value.endswith(TOKEN_DELIMITER))


def try_parse(value):
    """
    Parse a replacement token.

    :param value: the candidate token text
    :return: tuple of (ok, secret_tag, cache_tag, alt_key). When the value is not
             a token ok is False and the remaining items are None. Parts beyond
             the alternate key are ignored.
    """
    if not has_token(value):
        return False, None, None, None

    body = value[len(TOKEN_DELIMITER):-len(TOKEN_DELIMITER)]
    parts = body.split(TOKEN_SEPARATOR)

    secret_tag = parts[0]
    cache_tag = parts[1] or None if len(parts) > 1 else None
    alt_key = parts[2] or None if len(parts) > 2 else None

    return True, secret_tag, cache_tag, alt_key


def parse(value):
    """Return a ReplacementToken for value or None when value is a literal."""
    ok, secret_tag, cache_tag, alt_key = try_parse(value)
    if not ok:
        return None
    return ReplacementToken(text=value,
                            secret_tag=secret_tag,
                            cache_tag=cache_tag,
                            alt_key=alt_key)
