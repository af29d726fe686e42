#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Check the AWS session an event source configuration resolves to.

## Overview

The `podcreds` command loads an event source configuration (see
`podcreds.source` for the `AWS` block), builds the boto3 Session it describes,
and prints the region and credential strategy in use:

    $ podcreds --config source.yaml
    region: us-east-1
    method: volume

By default no network calls are made. Secrets are resolved, so a missing
environment variable or secret file is reported, but STS is never called. Pass
`--verify` to call STS GetCallerIdentity with the session and print the
identity it authenticates as:

    $ podcreds --config source.yaml --verify
    region: us-east-1
    method: assume-role
    identity: arn:aws:sts::123456789012:assumed-role/reader/PodCredsSession12345

## Options

`--config FILE`
: The configuration file to load. Defaults to the value of the
`PODCREDS_CONFIG` environment variable, or `podcreds.yaml`.

`--region REGION`, `--role-arn ARN`, `--creds-from {env,volume}`,
`--secrets-dir DIR`
: Override the corresponding values of the `AWS` block.

`--log-level {DEBUG,INFO,WARN,ERROR}`
: Set the logging level. Defaults to `ERROR`.

Errors are printed to standard error without a stack trace. Set the
`PODCREDS_TRACE` environment variable to include one.
"""

import argparse
import logging
import os
import sys
import traceback

from podcreds import __version__
from podcreds.config import Config
from podcreds.source import CREDS_FROM, region, session_provider

LOG = logging.getLogger(__name__)


# setup.py establishes this as the entry point for the podcreds CLI.
def main():
    """The main entry point for the `podcreds` CLI tool.

    Exits with a `0` status code upon success. Upon error, prints the error
    message to standard error and exits with `1`.
    """
    try:
        _cli(sys.argv[1:])

    except Exception as e:  # pylint: disable=broad-except
        if os.getenv("PODCREDS_TRACE"):
            traceback.print_exc(file=sys.stderr)

        print(e, file=sys.stderr)
        sys.exit(1)


def _cli(argv, out=sys.stdout):
    """Parses command line arguments and reports the resolved session."""
    parser = argparse.ArgumentParser(
        description="Report the AWS session built from an event source config.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        default=os.getenv("PODCREDS_CONFIG", "podcreds.yaml"),
        help="event source configuration file",
    )
    parser.add_argument("--region", help="override the configured region")
    parser.add_argument("--role-arn", metavar="ARN", help="role to assume")
    parser.add_argument(
        "--creds-from", choices=CREDS_FROM, help="where secrets are exposed"
    )
    parser.add_argument(
        "--secrets-dir", metavar="DIR", help="mount directory of secret volumes"
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="call STS GetCallerIdentity with the session",
    )
    parser.add_argument(
        "--log-level",
        default="ERROR",
        choices=["DEBUG", "INFO", "WARN", "ERROR"],
        help="set the logging level",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s " + __version__
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(name)s %(levelname)s [%(threadName)s] %(message)s",
    )

    cfg = Config.from_file(args.config, must_exist=args.region is None)
    provider = session_provider(
        cfg,
        creds_from=args.creds_from,
        secrets_dir=args.secrets_dir,
        role_arn=args.role_arn,
    )

    session_region = args.region or region(cfg)
    session = provider.session(session_region)
    print(f"region: {session.region_name}", file=out)
    print(f"method: {provider.method}", file=out)

    if args.verify:
        LOG.info("calling sts get-caller-identity")
        identity = session.client("sts").get_caller_identity()
        print(f"identity: {identity['Arn']}", file=out)
