#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest

_AWS_ENV_VARS = [
    "AWS_PROFILE",
    "AWS_DEFAULT_PROFILE",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "AWS_SESSION_TOKEN",
    "AWS_REGION",
    "AWS_DEFAULT_REGION",
    "AWS_ROLE_ARN",
    "AWS_WEB_IDENTITY_TOKEN_FILE",
    "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI",
    "AWS_CONTAINER_CREDENTIALS_FULL_URI",
]


# Keep the developer's own AWS setup out of the default credential chain so
# tests never reach a real account or the instance metadata service.
@pytest.fixture(autouse=True)
def isolated_aws_env(monkeypatch, tmp_path):
    for var in _AWS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws_config"))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws_creds"))
    monkeypatch.setenv("AWS_EC2_METADATA_DISABLED", "true")


@pytest.fixture
def secrets_dir(tmp_path):
    """Mimics a secret volume mount holding an `aws-secret` secret."""
    root = tmp_path / "secrets"
    secret = root / "aws-secret"
    secret.mkdir(parents=True)
    (secret / "accesskey").write_text("AKIA123\n")
    (secret / "secretkey").write_text("s3cr3t\n")
    (secret / "token").write_text("t0k3n")
    return root
