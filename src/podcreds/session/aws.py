#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Obtain boto3 sessions from secret locators or an assumed role.

## Overview

This module provides `SessionProvider` implementations that build a boto3
Session for an event source from the locators it was configured with. The
providers differ only in how locators are resolved:

`CredsViaEnvironment`
:  Credentials are read from environment variables injected via `envFrom`.

`CredsViaVolume`
:  Credentials are read from files in a mounted secret volume.

Both apply the same precedence when a session is requested:

1. If a role ARN was provided, the session assumes that role. Any locators are
   ignored.
2. If neither an access key nor a secret key locator was provided, the session
   is bound to the region only and boto3 discovers credentials through its
   default chain (environment, shared files, instance or pod metadata, etc.).
3. Otherwise the locators are resolved and the session is loaded with those
   static credentials. Providing only one of the two locators lands here and
   fails when the missing one cannot be resolved.

The functions `create_session_from_env` and `create_session_from_volume` are
one-shot forms of the providers:

    session = create_session_from_env(
        'us-east-1',
        access=EnvRef('AWS_ACCESS_KEY_ID'),
        secret=EnvRef('AWS_SECRET_ACCESS_KEY'))

The lower level builders `build_session`, `build_session_without_credentials`,
and `build_assumed_role_session` can also be used directly.

## Assumed Roles

A session for an assumed role does not call STS when it is built. It is loaded
with an `AssumeRoleProvider`, a botocore credential provider whose credentials
are fetched the first time they are needed, typically when the first client
call is signed. Errors from STS, such as access denied, are therefore raised
from that first call as a `DeferredCredentialFailure` rather than from
`build_assumed_role_session`. The base identity used to call STS comes from the
default credential chain. Retries and timeouts are botocore's defaults.

## Exceptions

`SessionConstructionFailed`
:  Raised if a session cannot be built for the requested region.

`DeferredCredentialFailure`
:  Raised on first use of an assumed-role session if the role cannot be
assumed.

The resolution errors of `podcreds.credentials` propagate unchanged.

## Thread Safety

Providers keep no state besides the locators they were given, so a single
provider may be shared between threads. Each call returns a new boto3 Session,
which should not be shared between threads per the [Boto3 Multithreading /
Multiprocessing
Notes](https://boto3.amazonaws.com/v1/documentation/api/latest/guide/resources.html?highlight=multithreading#multithreading-multiprocessing).
"""

import logging
import random

import boto3
import botocore.exceptions
import botocore.session
from botocore.credentials import (
    CredentialProvider,
    CredentialResolver,
    DeferredRefreshableCredentials,
)
from botocore.utils import validate_region_name

from podcreds.credentials import resolve_env_credential, resolve_volume_credential
from podcreds.secrets import lookup_env_secret, lookup_volume_secret
from podcreds.session import SessionProvider

LOG = logging.getLogger(__name__)


def build_session(credential, region):
    """Returns a boto3 Session loaded with static credentials.

    `credential` is a `podcreds.credentials.CredentialMaterial`. If it is
    `None`, the session is built as `build_session_without_credentials` would.
    """
    if credential is None:
        return build_session_without_credentials(region)

    return _new_session(
        region,
        aws_access_key_id=credential.access_key_id,
        aws_secret_access_key=credential.secret_access_key,
        aws_session_token=credential.session_token or None,
    )


def build_session_without_credentials(region):
    """Returns a boto3 Session bound only to `region`.

    Credentials are discovered by boto3's default chain when first needed.
    """
    return _new_session(region)


def build_assumed_role_session(role_arn, region, base_session=None):
    """Returns a boto3 Session that assumes `role_arn` on first use.

    STS is called with `base_session`, which defaults to a boto3 Session using
    the default credential chain. No network call is made here.
    """
    if base_session is None:
        base_session = _new_session(None)

    provider = AssumeRoleProvider(base_session, role_arn, region)
    botocore_session = botocore.session.Session()
    botocore_session.register_component(
        "credential_provider", CredentialResolver([provider])
    )
    return _new_session(region, botocore_session=botocore_session)


def _new_session(region, **kwargs):
    # A region of None is only used internally for the base session of an
    # assumed role, which must keep whatever region the environment sets.
    try:
        if region is not None:
            if not region:
                raise botocore.exceptions.InvalidRegionError(region_name=region)
            validate_region_name(region)
        return boto3.Session(region_name=region, **kwargs)

    except botocore.exceptions.BotoCoreError as e:
        raise SessionConstructionFailed(region, e) from e


class AssumeRoleProvider(CredentialProvider):
    """A botocore credential provider that lazily assumes a role.

    `load` returns deferred credentials that invoke `fetch` the first time they
    are read and again whenever they are about to expire. `fetch` calls STS
    AssumeRole for `role_arn` via an STS client for `region` created from
    `base_session`.
    """

    METHOD = "assume-role"
    CANONICAL_NAME = "podcreds-assume-role"

    def __init__(self, base_session, role_arn, region):
        super().__init__()
        self._base_session = base_session
        self._role_arn = role_arn
        self._region = region

    def load(self):
        return DeferredRefreshableCredentials(
            refresh_using=self.fetch, method=self.METHOD
        )

    def fetch(self):
        """Returns credential metadata for the assumed role.

        Raises `DeferredCredentialFailure` if STS rejects the request or cannot
        be reached.
        """
        LOG.info("Assuming role %s in %s", self._role_arn, self._region)
        try:
            sts = self._base_session.client("sts", region_name=self._region)
            assumed_role = sts.assume_role(
                RoleArn=self._role_arn,
                RoleSessionName=f"PodCredsSession{random.randint(10000, 99999)}",
            )
        except (
            botocore.exceptions.BotoCoreError,
            botocore.exceptions.ClientError,
        ) as e:
            raise DeferredCredentialFailure(self._role_arn, str(e)) from e

        if not assumed_role:
            raise DeferredCredentialFailure(self._role_arn, "empty response")

        creds = assumed_role["Credentials"]
        return {
            "access_key": creds["AccessKeyId"],
            "secret_key": creds["SecretAccessKey"],
            "token": creds["SessionToken"],
            "expiry_time": creds["Expiration"].isoformat(),
        }


class LocatorSessionProvider(SessionProvider):
    """Abstract base class for session providers configured with locators.

    This class cannot be instantiated directly. Subclasses must provide an
    implementation for `credentials`. The `role_arn`, if not empty, takes
    priority over the `access` and `secret` locators.
    """

    source = None
    """Name of the place the locators are resolved from, used in logs."""

    def __init__(self, role_arn=None, access=None, secret=None):
        self._role_arn = role_arn
        self._access = access
        self._secret = secret

    @property
    def method(self):
        """Returns the strategy `session` will use.

        One of "assume-role", "default-chain", or the `source` of the provider
        when static credentials are resolved from locators.
        """
        if self._role_arn:
            return "assume-role"
        if self._access is None and self._secret is None:
            return "default-chain"
        return self.source

    def session(self, region):
        """Returns a boto3 Session for `region`.

        Refer to the module documentation for the order in which the role and
        locators are considered and the exceptions that may be raised.
        """
        method = self.method

        if method == "assume-role":
            LOG.info("using assumed role %s for %s", self._role_arn, region)
            return build_assumed_role_session(self._role_arn, region)

        if method == "default-chain":
            LOG.info("no credential locators, using default chain for %s", region)
            return build_session_without_credentials(region)

        LOG.info("using static credentials from %s for %s", self.source, region)
        return build_session(self.credentials(), region)

    def credentials(self):
        """Returns the `podcreds.credentials.CredentialMaterial` for the locators.

        Refer to `podcreds.credentials` for the exceptions that may be raised.
        """
        raise NotImplementedError


class CredsViaEnvironment(LocatorSessionProvider):
    """A session provider that reads credentials from environment variables.

    `access` and `secret` are `podcreds.secrets.EnvRef` locators. Values are
    looked up with `lookup`, which defaults to
    `podcreds.secrets.lookup_env_secret`. Session tokens are not supported when
    credentials come from the environment.
    """

    source = "env"

    def __init__(self, role_arn=None, access=None, secret=None, lookup=None):
        super().__init__(role_arn, access, secret)
        self._lookup = lookup or lookup_env_secret

    def credentials(self):
        return resolve_env_credential(self._access, self._secret, self._lookup)


class CredsViaVolume(LocatorSessionProvider):
    """A session provider that reads credentials from a mounted secret volume.

    `access`, `secret` and the optional `session_token` are
    `podcreds.secrets.VolumeRef` locators. Values are read with `lookup`, which
    defaults to `podcreds.secrets.lookup_volume_secret`.
    """

    source = "volume"

    def __init__(
        self, role_arn=None, access=None, secret=None, session_token=None, lookup=None
    ):
        super().__init__(role_arn, access, secret)
        self._session_token = session_token
        self._lookup = lookup or lookup_volume_secret

    def credentials(self):
        return resolve_volume_credential(
            self._access, self._secret, self._session_token, self._lookup
        )


def create_session_from_env(region, role_arn=None, access=None, secret=None):
    """Returns a boto3 Session using credentials found in the environment.

    This is shorthand for `CredsViaEnvironment(...).session(region)`.
    """
    return CredsViaEnvironment(role_arn, access, secret).session(region)


def create_session_from_volume(
    region, role_arn=None, access=None, secret=None, session_token=None
):
    """Returns a boto3 Session using credentials found in a secret volume.

    This is shorthand for `CredsViaVolume(...).session(region)`.
    """
    return CredsViaVolume(role_arn, access, secret, session_token).session(region)


class SessionConstructionFailed(Exception):
    """Raised if a boto3 session cannot be built for the region."""

    def __init__(self, region, reason):
        super().__init__(f"cannot create session for region {region!r}: {reason}")
        self.region = region
        self.reason = reason


class DeferredCredentialFailure(Exception):
    """Raised on first use of an assumed-role session if STS rejects the role."""

    def __init__(self, role_arn, reason):
        super().__init__(f"Cannot assume role: {role_arn}: {reason}")
        self.role_arn = role_arn
        self.reason = reason
