#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Build session providers from an event source configuration.

Event sources describe how they reach AWS in an `AWS` block of their
configuration file:

    AWS:
      region: STRING*
      roleARN: STRING
      credsFrom: ("env" | "volume")
      secretsDir: STRING
      accessKey:
        name: STRING
        key: STRING
      secretKey:
        name: STRING
        key: STRING
      sessionToken:
        name: STRING
        key: STRING

`region`
: The AWS region the session is bound to. This value **must** be provided.

`roleARN`
: An IAM role to assume. When set, the secret references are ignored.

`credsFrom`
: Where the secret referenced by `accessKey`, `secretKey` and `sessionToken`
is exposed to the pod. With `env`, the secret is injected via `envFrom` and the
variable names are derived from the secret name and key. With `volume`, the
default, the secret is mounted as a volume under `secretsDir`.

`secretsDir`
: Mount directory of secret volumes. Defaults to `/argo-events/secrets`.

`accessKey`, `secretKey`
: References to the secret keys holding the AWS access and secret keys. When
both are omitted, the default boto3 credential chain is used.

`sessionToken`
: Reference to the secret key holding a session token. Only used with
`volume`.
"""

import logging

from podcreds.config import ARN, Choice, Config, Region, SecretKey, Str
from podcreds.secrets import DEFAULT_SECRETS_DIR, EnvRef, VolumeRef
from podcreds.session.aws import CredsViaEnvironment, CredsViaVolume

LOG = logging.getLogger(__name__)

CREDS_FROM = ("env", "volume")


def session_provider(cfg, creds_from=None, secrets_dir=None, role_arn=None):
    """Returns a session provider for the `AWS` block of `cfg`.

    `cfg` is a `podcreds.config.Config`. `creds_from`, `secrets_dir` and
    `role_arn` override the configured values when not `None`.
    """
    get = cfg.section("AWS").get

    if role_arn is None:
        role_arn = get("roleARN", type=ARN)
    if creds_from is None:
        creds_from = get("credsFrom", type=Choice(*CREDS_FROM), default="volume")
    if secrets_dir is None:
        secrets_dir = get("secretsDir", type=Str, default=DEFAULT_SECRETS_DIR)

    refs = {k: get(k, type=SecretKey) for k in ("accessKey", "secretKey")}

    if creds_from == "env":
        if get("sessionToken", type=SecretKey) is not None:
            LOG.warning("sessionToken is not supported with credsFrom env, ignoring")
        locators = {
            k: EnvRef.from_secret(v["name"], v["key"]) if v else None
            for k, v in refs.items()
        }
        return CredsViaEnvironment(
            role_arn, locators["accessKey"], locators["secretKey"]
        )

    if creds_from != "volume":
        raise ValueError(f"credsFrom must be one of {CREDS_FROM}: {creds_from!r}")

    refs["sessionToken"] = get("sessionToken", type=SecretKey)
    locators = {
        k: VolumeRef.from_secret(v["name"], v["key"], secrets_dir) if v else None
        for k, v in refs.items()
    }
    return CredsViaVolume(
        role_arn,
        locators["accessKey"],
        locators["secretKey"],
        locators["sessionToken"],
    )


def region(cfg):
    """Returns the mandatory region of the `AWS` block of `cfg`."""
    return cfg.get("AWS", "region", type=Region, must_exist=True)


def session_from_file(filename):
    """Returns a boto3 Session described by the configuration in `filename`.

    Refer to `podcreds.config` and `podcreds.credentials` for the exceptions
    that may be raised.
    """
    cfg = Config.from_file(filename, must_exist=True)
    return session_provider(cfg).session(region(cfg))
