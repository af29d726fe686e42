#
# Copyright 2019 FMR LLC <opensource@fidelity.com>
#
# SPDX-License-Identifier: MIT
#

# pylint: disable=redefined-outer-name,missing-docstring

import io

import boto3
import pytest
import yaml

from podcreds import cli


@pytest.fixture
def config_file(tmp_path, secrets_dir):
    path = tmp_path / "source.yaml"
    conf = {
        "AWS": {
            "region": "us-east-1",
            "secretsDir": str(secrets_dir),
            "accessKey": {"name": "aws-secret", "key": "accesskey"},
            "secretKey": {"name": "aws-secret", "key": "secretkey"},
        }
    }
    path.write_text(yaml.dump(conf))
    return path


def _run(*argv):
    out = io.StringIO()
    cli._cli(list(argv), out=out)
    return out.getvalue().splitlines()


def test_report(config_file):
    assert _run("--config", str(config_file)) == ["region: us-east-1", "method: volume"]


def test_overrides(config_file):
    lines = _run(
        "--config",
        str(config_file),
        "--region",
        "eu-west-1",
        "--role-arn",
        "arn:aws:iam::123:role/x",
    )
    assert lines == ["region: eu-west-1", "method: assume-role"]


def test_config_from_environment(monkeypatch, config_file):
    monkeypatch.setenv("PODCREDS_CONFIG", str(config_file))
    assert _run()[1] == "method: volume"


def test_region_without_config_file(tmp_path):
    lines = _run("--config", str(tmp_path / "nope.yaml"), "--region", "us-west-2")
    assert lines == ["region: us-west-2", "method: default-chain"]


def test_verify(mocker, config_file):
    client = mocker.patch.object(boto3.session.Session, "client")
    client.return_value.get_caller_identity.return_value = {
        "Arn": "arn:aws:iam::123:user/reader"
    }

    lines = _run("--config", str(config_file), "--verify")
    assert lines[-1] == "identity: arn:aws:iam::123:user/reader"
    client.assert_called_once_with("sts")


def test_main_reports_errors(monkeypatch, capsys, tmp_path):
    monkeypatch.setattr(
        "sys.argv", ["podcreds", "--config", str(tmp_path / "nope.yaml")]
    )
    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1
    assert "Config file not found" in capsys.readouterr().err


def test_main_reports_resolution_errors(monkeypatch, capsys, config_file):
    monkeypatch.setattr(
        "sys.argv", ["podcreds", "--config", str(config_file), "--secrets-dir", "/no"]
    )
    with pytest.raises(SystemExit):
        cli.main()

    assert "can not find access key" in capsys.readouterr().err
