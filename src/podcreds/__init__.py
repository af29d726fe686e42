#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Resolve AWS credentials for workloads running inside a Kubernetes pod.

## Overview

`podcreds` is a small library (and diagnostic CLI) used by event-source
components that must talk to AWS but are not allowed to embed credentials.
Instead of keys, those components are handed *locators*: references to values
stored in a Kubernetes secret that has been exposed to the pod either through
environment variables (`envFrom`) or through a mounted secret volume. This
package turns those locators into a boto3 Session bound to a region.

### Library Usage

The available [submodules](#header-submodules) are listed at the bottom of this
page. Of particular interest to library users:

`podcreds.secrets`
: Defines the `podcreds.secrets.EnvRef` and `podcreds.secrets.VolumeRef`
locators and the lookups used to read the values they point to.

`podcreds.credentials`
: Resolves a pair (or triple) of locators into a
`podcreds.credentials.CredentialMaterial`.

`podcreds.session`
: Contains the definition of the `podcreds.session.SessionProvider` and the
AWS implementations `podcreds.session.aws.CredsViaEnvironment` and
`podcreds.session.aws.CredsViaVolume`, which decide whether a session uses an
assumed role, the ambient credential chain, or static credentials.

`podcreds.source`
: Builds a session provider from the `AWS` block of an event source
configuration file.

A typical event source only needs a single call:

    from podcreds.secrets import VolumeRef
    from podcreds.session.aws import create_session_from_volume

    session = create_session_from_volume(
        'us-east-1',
        access=VolumeRef.from_secret('aws-secret', 'accesskey'),
        secret=VolumeRef.from_secret('aws-secret', 'secretkey'))

    sqs = session.client('sqs')

### CLI Usage

The `podcreds` command builds a session from a configuration file and reports
which credential strategy it is bound to. Refer to `podcreds.cli` for details.
"""

name = "podcreds"
__version__ = "1.0.0"
