#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Provides a YAML/JSON config file reader with type-checked values.

## Overview

`Config` wraps the dict loaded from an event source configuration file and
reads values from it by key path, with defaults, mandatory values, and type
checking. `YAMLConfig` and `JSONConfig` are registered by file extension, so
`Config.from_file` picks the right parser for a filename.

## Type Checking

Values are checked against the type objects defined in this module: `Str`,
`Any`, `ARN`, `Region`, and `SecretKey`, plus the type classes
`Scalar`, `Const`, `Choice`, `StrMatch`, `Dict`, and `Or`. For example, given
the YAML:

    AWS:
      region: us-east-1
      credsFrom: volume
      accessKey:
        name: aws-secret
        key: accesskey

the values are read with:

    c = Config.from_file('source.yaml')

    assert c.get('AWS', 'region', type=Region, must_exist=True) == 'us-east-1'
    assert c.get('AWS', 'credsFrom', type=Choice('env', 'volume')) == 'volume'
    assert c.get('AWS', 'accessKey', type=SecretKey) == {
        'name': 'aws-secret', 'key': 'accesskey'}

A value that does not match its type raises a `TypeError`. A missing value
that must exist raises a `ValueError`.
"""

import json
import logging
import re
from functools import reduce
from pathlib import Path

import yaml

LOG = logging.getLogger(__name__)

# pylint: disable=unidiomatic-typecheck
#
# Exact types are compared rather than using isinstance, as True is an int.


class Config:
    """A `Config` reads type-checked values from a Python dictionary.

    The class keeps a registry of parsers keyed by file extension, so
    configurations can be loaded with `Config.from_file`.
    """

    _filetypes = {}

    @classmethod
    def register_filetype(cls, config_class, *extensions):
        """Register a parser for files with one of the `extensions`.

        Extensions are given as '.ext'. A later registration for the same
        extension replaces the earlier one.
        """
        for ext in extensions:
            cls._filetypes[ext] = config_class

    @classmethod
    def from_file(cls, filename, must_exist=False):
        """Factory method to load a `Config` from `filename`.

        The parser is chosen by the file extension. If the file does not exist,
        an empty `Config` is returned unless `must_exist` is true, in which case
        a `FileNotFoundError` is raised.
        """
        path = Path(filename)

        if not path.is_file():
            if must_exist:
                raise FileNotFoundError(f"Config file not found: {filename}")
            LOG.info("config file %s not found, using empty config", filename)
            return Config({})

        if path.suffix not in cls._filetypes:
            raise ValueError(f"Unregistered file type extension: {path.suffix}")

        with path.open(encoding="utf-8") as f:
            return cls._filetypes[path.suffix](f)

    def __init__(self, d):
        self.conf = d or {}

    def get(self, *keys, default=None, type=None, must_exist=False):
        """Return the value found by following `keys` into the `Config`.

        If no value exists at the key path, `default` is returned, unless
        `must_exist` is true, in which case a `ValueError` is raised. If `type`
        is given, the value (or default) must match it or a `TypeError` is
        raised:

            c.get('AWS', 'region', type=Region)
            c.get('AWS', 'roleARN', type=ARN)
            c.get('AWS', 'credsFrom', type=Choice('env', 'volume'))
            c.get('AWS', 'secretKey', type=SecretKey)
        """
        # pylint: disable=redefined-builtin
        try:
            value = reduce(lambda a, k: a.get(k, {}), keys, self.conf)
        except AttributeError as e:
            raise ValueError(
                f"Error in config: {'->'.join(keys[:-1])}: not a dictionary"
            ) from e

        # An empty dict marks a missing key.
        if value == {}:
            if must_exist:
                raise ValueError(f"Error in config: {'->'.join(keys)}: must be set")
            value = default

        if value is None or not type:
            return value

        if type.type_check(value):
            return value

        raise TypeError(
            f"Error in config: {'->'.join(keys)}: not a {type}: {repr(value)}"
        )

    def section(self, *keys):
        """Returns a `Config` rooted at the dict found by following `keys`."""
        return Config(self.get(*keys, type=Dict(Str, Any), default={}))


class YAMLConfig(Config):
    """Loads a YAML configuration from a stream."""

    def __init__(self, stream):
        super().__init__(yaml.safe_load(stream))


class JSONConfig(Config):
    """Loads a JSON configuration from a stream."""

    def __init__(self, stream):
        super().__init__(json.load(stream))


Config.register_filetype(JSONConfig, ".json")
Config.register_filetype(YAMLConfig, ".yaml", ".yml")


class Type:
    """Represents a type that can be used in type-check comparisons."""

    def type_check(self, obj):
        """Returns true if obj is a type matching this `Type`."""
        raise NotImplementedError

    def __str__(self):
        """Returns a string representing this `Type`."""
        raise NotImplementedError


class Or(Type):
    """Represents a type that is one of the `config_types`."""

    def __init__(self, *config_types):
        self.config_types = config_types

    def type_check(self, obj):
        return any(t.type_check(obj) for t in self.config_types)

    def __str__(self):
        return "(" + " or ".join(str(t) for t in self.config_types) + ")"


class Const(Type):
    """Represents a constant value of the same exact type."""

    def __init__(self, const):
        self.const = const

    def type_check(self, obj):
        if type(obj) != type(self.const):  # noqa: E721
            return False
        return obj == self.const

    def __str__(self):
        return f"constant '{self.const}'"


class Choice(Or):
    """Represents a choice of constants."""

    def __init__(self, *constants):
        super().__init__(*[Const(c) for c in constants])


class Scalar(Type):
    """Represents a scalar of the builtin type `type_`."""

    def __init__(self, type_):
        self.type = type_

    def type_check(self, obj):
        return type(obj) == self.type  # noqa: E721

    def __str__(self):
        return self.type.__name__


class StrMatch(Type):
    """Represents a string matching `pattern` via `re.search`."""

    def __init__(self, pattern, description=None):
        self.pattern = pattern
        self.description = description

    def type_check(self, obj):
        if type(obj) != str:  # noqa: E721
            return False
        return bool(re.search(self.pattern, obj))

    def __str__(self):
        return self.description or f"str matching '{self.pattern}'"


class AnyType(Type):
    """Represents any type."""

    def type_check(self, obj):
        return True

    def __str__(self):
        return "any type"


class Dict(Type):
    """Represents a dict with keys of `key_type` and values of `value_type`."""

    def __init__(self, key_type, value_type):
        self.key_type = key_type
        self.value_type = value_type

    def type_check(self, obj):
        if type(obj) != dict:  # noqa: E721
            return False
        return all(self.key_type.type_check(k) for k in obj.keys()) and all(
            self.value_type.type_check(v) for v in obj.values()
        )

    def __str__(self):
        return f"dict with {self.key_type} keys and {self.value_type} values"


class SecretKeyType(Type):
    """Represents a reference to a key of a Kubernetes secret.

    The value must be a dict with non-empty string `name` and `key` entries.
    Other entries, such as `optional`, are permitted and ignored.
    """

    def type_check(self, obj):
        if type(obj) != dict:  # noqa: E721
            return False
        return all(type(obj.get(k)) == str and obj[k] for k in ("name", "key"))

    def __str__(self):
        return "secret key reference with name and key"


Str = Scalar(str)
"""Singleton representing a str."""

Any = AnyType()
"""Singleton representing any type."""

ARN = StrMatch(r"^arn:[^:]+:[^:]*:", "AWS ARN")
"""Singleton representing an Amazon Resource Name."""

Region = StrMatch(r"^[a-z]{2}(-[a-z]+)+-\d+$", "AWS region name")
"""Singleton representing an AWS region name such as us-east-1."""

SecretKey = SecretKeyType()
"""Singleton representing a `{name: ..., key: ...}` secret reference."""
