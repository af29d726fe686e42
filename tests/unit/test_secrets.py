#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import pytest

from podcreds import secrets


@pytest.mark.parametrize(
    "secret, key, expected",
    [
        ("aws-secret", "access-key", "AWS_SECRET_ACCESS_KEY"),
        ("creds", "accesskey", "CREDS_ACCESSKEY"),
        ("my-aws-creds", "secret_key", "MY_AWS_CREDS_SECRET_KEY"),
    ],
)
def test_env_ref_from_secret(secret, key, expected):
    assert secrets.EnvRef.from_secret(secret, key) == secrets.EnvRef(expected)


def test_volume_ref_from_secret():
    ref = secrets.VolumeRef.from_secret("aws-secret", "accesskey")
    assert ref.path == "/argo-events/secrets/aws-secret/accesskey"

    ref = secrets.VolumeRef.from_secret("aws-secret", "accesskey", "/mnt")
    assert ref.path == "/mnt/aws-secret/accesskey"


def test_locators_are_secret_locators():
    assert isinstance(secrets.EnvRef("A"), secrets.SecretLocator)
    assert isinstance(secrets.VolumeRef("/a"), secrets.SecretLocator)


@pytest.mark.parametrize(
    "locator, expected",
    [
        (secrets.EnvRef("ACCESS"), ("AKIA123", True)),
        (secrets.EnvRef("EMPTY"), ("", False)),
        (secrets.EnvRef("MISSING"), ("", False)),
        (secrets.VolumeRef("ACCESS"), ("", False)),
        (None, ("", False)),
    ],
)
def test_lookup_env_secret(locator, expected):
    environ = {"ACCESS": "AKIA123", "EMPTY": ""}
    assert secrets.lookup_env_secret(locator, environ) == expected


def test_lookup_env_secret_defaults_to_os_environ(monkeypatch):
    monkeypatch.setenv("PODCREDS_TEST_ACCESS", "AKIA123")
    locator = secrets.EnvRef("PODCREDS_TEST_ACCESS")
    assert secrets.lookup_env_secret(locator) == ("AKIA123", True)


@pytest.mark.parametrize(
    "contents, expected",
    [
        ("s3cr3t", "s3cr3t"),
        ("s3cr3t\n", "s3cr3t"),
        ("s3cr3t\n\n", "s3cr3t\n"),
        ("", ""),
    ],
)
def test_lookup_volume_secret(tmp_path, contents, expected):
    path = tmp_path / "value"
    path.write_text(contents)
    assert secrets.lookup_volume_secret(secrets.VolumeRef(str(path))) == expected


def test_lookup_volume_secret_missing_file(tmp_path):
    with pytest.raises(OSError):
        secrets.lookup_volume_secret(secrets.VolumeRef(str(tmp_path / "nope")))


@pytest.mark.parametrize("locator", [None, secrets.EnvRef("ACCESS")])
def test_lookup_volume_secret_invalid_locator(locator):
    with pytest.raises(ValueError):
        secrets.lookup_volume_secret(locator)


def test_locator_equality_includes_kind():
    assert secrets.EnvRef("X") == secrets.EnvRef("X")
    assert secrets.EnvRef("X") != secrets.VolumeRef("X")
    assert secrets.VolumeRef("X") != secrets.EnvRef("X")
    assert secrets.EnvRef("X") != secrets.EnvRef("Y")
    assert len({secrets.EnvRef("X"), secrets.EnvRef("X"), secrets.VolumeRef("X")}) == 2
