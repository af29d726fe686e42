#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#
"""Obtain region-bound sessions with credentials.

## Overview

This module provides a `SessionProvider` interface. Regardless of where the
credentials come from, a session provider is responsible for returning a
session bound to a requested region and loaded with (or able to discover) the
credentials it was configured with.

`podcreds.session.aws`
:  Sessions obtained for AWS are boto3 Session objects that can be used to
obtain boto3 clients and resources.
"""


class SessionProvider:
    """A session provider is used to obtain sessions for a region.

    This is an abstract base class and cannot be instantiated directly.
    """

    def session(self, region):
        """Returns a session bound to the requested region.

        The `region` is a string such as "us-east-1". A new session is returned
        on every call, so callers own it and need not coordinate with others.
        """
        raise NotImplementedError
