#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Locate secret values exposed to a pod.

## Overview

A Kubernetes secret can be handed to a pod in two ways. With `envFrom`, every
key of the secret becomes an environment variable. With a secret volume, every
key becomes a file under a mount directory. This module defines a locator for
each case along with the lookup that resolves it:

`EnvRef`
:  Names an environment variable. Resolved by `lookup_env_secret`.

`VolumeRef`
:  Names a file in a mounted secret volume. Resolved by `lookup_volume_secret`.

A locator never holds the secret itself, so it is safe to log. Both locators
provide a `from_secret` factory that derives the variable name or file path
from the secret name and key, mirroring how the cluster exposes them:

    >>> EnvRef.from_secret('aws-secret', 'access-key')
    EnvRef(name='AWS_SECRET_ACCESS_KEY')
    >>> VolumeRef.from_secret('aws-secret', 'accesskey')
    VolumeRef(path='/argo-events/secrets/aws-secret/accesskey')
"""

import logging
import os
from collections import namedtuple
from pathlib import Path

LOG = logging.getLogger(__name__)

DEFAULT_SECRETS_DIR = "/argo-events/secrets"
"""Directory where secret volumes are mounted by default."""


class SecretLocator:
    """Base class for all locators.

    Locators compare equal only to locators of the same class holding the same
    values, so an `EnvRef` never equals a `VolumeRef` with the same string.
    """

    __slots__ = ()

    def __eq__(self, other):
        if not isinstance(other, SecretLocator):
            return NotImplemented
        return type(self) is type(other) and tuple(self) == tuple(other)

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __hash__(self):
        return hash((type(self).__name__, tuple(self)))


# SecretLocator comes first so its comparisons take precedence over tuple's.
class EnvRef(SecretLocator, namedtuple("EnvRef", ["name"])):
    """Locator for a secret exposed as the environment variable `name`."""

    __slots__ = ()

    @classmethod
    def from_secret(cls, secret, key):
        """Returns the locator for `key` of a secret injected via `envFrom`.

        The variable name is `<secret>_<key>` in upper case with dashes
        replaced by underscores.
        """
        return cls(f"{secret}_{key}".replace("-", "_").upper())


class VolumeRef(SecretLocator, namedtuple("VolumeRef", ["path"])):
    """Locator for a secret stored in the file at `path`."""

    __slots__ = ()

    @classmethod
    def from_secret(cls, secret, key, secrets_dir=DEFAULT_SECRETS_DIR):
        """Returns the locator for `key` of a secret mounted under `secrets_dir`.

        Each secret is mounted in its own directory named after the secret, and
        each key is a file within it.
        """
        return cls(str(Path(secrets_dir, secret, key)))


def lookup_env_secret(locator, environ=None):
    """Returns a `(value, found)` tuple for an `EnvRef` locator.

    The variable is read from `environ`, which defaults to `os.environ`. A
    variable that is unset or empty is reported as not found, as is a `None`
    locator or one that is not an `EnvRef`.
    """
    if not isinstance(locator, EnvRef):
        return "", False

    environ = os.environ if environ is None else environ
    value = environ.get(locator.name, "")
    LOG.debug("looked up env var %s: found=%s", locator.name, bool(value))
    return value, bool(value)


def lookup_volume_secret(locator):
    """Returns the contents of the file referenced by a `VolumeRef` locator.

    A single trailing newline is removed as editors often append one when
    secrets are written by hand. An `OSError` is raised if the file cannot be
    read, and a `ValueError` is raised if `locator` is `None` or is not a
    `VolumeRef`.
    """
    if locator is None:
        raise ValueError("secret locator is nil")
    if not isinstance(locator, VolumeRef):
        raise ValueError(f"not a volume locator: {locator!r}")

    LOG.debug("reading secret file %s", locator.path)
    data = Path(locator.path).read_text(encoding="utf-8")
    return data[:-1] if data.endswith("\n") else data
