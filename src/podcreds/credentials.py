#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Resolve locators into AWS credential material.

## Overview

Event sources are configured with locators pointing at the AWS access key, the
secret key and, optionally, a session token. This module reads the values
behind those locators and returns a `CredentialMaterial`. Two strategies are
provided, one per way a secret can be exposed to a pod:

`resolve_env_credential`
:  Reads `podcreds.secrets.EnvRef` locators from the environment.

`resolve_volume_credential`
:  Reads `podcreds.secrets.VolumeRef` locators from a mounted secret volume.
Unlike the environment strategy, it also accepts a session token locator.

Resolution is all or nothing: either every requested value is found, or an
exception is raised for the first one that is not. Lookups are never retried.

## Exceptions

`LocatorNotFound`
:  Raised if an environment locator does not resolve.

`VolumeReadFailed`
:  Raised if a volume locator cannot be read.
"""

import logging
from collections import namedtuple

from podcreds.secrets import lookup_env_secret, lookup_volume_secret

LOG = logging.getLogger(__name__)


class CredentialMaterial(
    namedtuple(
        "CredentialMaterial",
        ["access_key_id", "secret_access_key", "session_token"],
        defaults=[""],
    )
):
    """The resolved values of an AWS access key, secret key and session token.

    The session token is an empty string when none was requested or found.
    """

    __slots__ = ()

    def __repr__(self):
        # Never leak the secret parts into logs or tracebacks.
        token = "****" if self.session_token else ""
        return (
            f"CredentialMaterial(access_key_id={self.access_key_id!r}, "
            f"secret_access_key='****', session_token={token!r})"
        )


def resolve_env_credential(access, secret, lookup=lookup_env_secret):
    """Returns a `CredentialMaterial` from environment-bound locators.

    `access` and `secret` are `podcreds.secrets.EnvRef` locators. They are
    resolved with `lookup`, which must return a `(value, found)` tuple. The
    access key is looked up first, so its failure is the one reported when
    neither is found. `LocatorNotFound` is raised if either does not resolve,
    including when a locator is `None`.

    Session tokens are not supported by this strategy, so the returned token
    is always empty.
    """
    access_key, found = lookup(access)
    if not found:
        raise LocatorNotFound("access key", access)

    secret_key, found = lookup(secret)
    if not found:
        raise LocatorNotFound("secret key", secret)

    LOG.debug("resolved credentials from env %s", access)
    return CredentialMaterial(access_key, secret_key)


def resolve_volume_credential(
    access, secret, session_token=None, lookup=lookup_volume_secret
):
    """Returns a `CredentialMaterial` from volume-bound locators.

    `access` and `secret` are mandatory `podcreds.secrets.VolumeRef` locators.
    `session_token` is optional; when it is `None` the returned token is empty.
    Each locator is resolved with `lookup`, which returns the value or raises.
    Any failure, including an empty access or secret key, is raised as a
    `VolumeReadFailed` naming the field that could not be read.
    """
    access_key = _read_volume("access key", access, lookup, required=True)
    secret_key = _read_volume("secret key", secret, lookup, required=True)

    token = ""
    if session_token is not None:
        token = _read_volume("session token", session_token, lookup)

    LOG.debug("resolved credentials from volume %s", access)
    return CredentialMaterial(access_key, secret_key, token)


def _read_volume(field, locator, lookup, required=False):
    try:
        value = lookup(locator)
    except (OSError, ValueError) as e:
        raise VolumeReadFailed(field, locator, e) from e

    if required and not value:
        cause = ValueError(f"empty value in {locator}")
        raise VolumeReadFailed(field, locator, cause)

    return value


class LocatorNotFound(Exception):
    """Raised if an environment-bound locator does not resolve."""

    def __init__(self, field, locator):
        super().__init__(f"can not find {field}: envFrom {locator} not found")
        self.field = field
        self.locator = locator


class VolumeReadFailed(Exception):
    """Raised if a volume-bound locator cannot be read."""

    def __init__(self, field, locator, cause):
        super().__init__(f"can not find {field}: {cause}")
        self.field = field
        self.locator = locator
        self.cause = cause
