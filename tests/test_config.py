"""Tests for configuration loading and validation."""

import os

import pytest
from pydantic import ValidationError

from config import DeployConfig, build_deploy_config, load_config, resolve_hook


def test_defaults(work_dir):
    config = DeployConfig.from_options({"directory": str(work_dir)})

    assert config.branch == "master"
    assert config.remote == "origin"
    assert config.timezone == "Europe/Minsk"
    assert config.date_format == "%Y-%m-%d %H:%M:%S%:z"
    assert config.timeout == 300
    assert config.post_deploy is None
    assert os.path.isabs(config.directory)


def test_unknown_and_empty_options_are_ignored(work_dir):
    config = DeployConfig.from_options({
        "directory": str(work_dir),
        "branch": "",
        "remote": None,
        "colour": "blue",
    })

    assert config.branch == "master"
    assert config.remote == "origin"
    assert not hasattr(config, "colour")


def test_branch_override(work_dir):
    assert DeployConfig.from_options({"directory": str(work_dir), "branch": "release"}).branch == "release"


def test_directory_is_resolved(work_dir):
    nested = work_dir / "sub"
    nested.mkdir()

    config = DeployConfig.from_options({"directory": f"{nested}/.."})

    assert config.directory == os.path.realpath(str(work_dir))


def test_missing_directory_fails(tmp_path):
    with pytest.raises(ValidationError):
        DeployConfig.from_options({"directory": str(tmp_path / "nope")})


def test_unknown_timezone_fails(work_dir):
    with pytest.raises(ValidationError):
        DeployConfig.from_options({"directory": str(work_dir), "timezone": "Mars/Olympus"})


def test_zero_timeout_disables_it(work_dir):
    assert DeployConfig.from_options({"directory": str(work_dir), "command_timeout": 0}).timeout is None


def test_config_is_immutable(work_dir):
    config = DeployConfig.from_options({"directory": str(work_dir)})

    with pytest.raises(ValidationError):
        config.branch = "other"


def test_post_deploy_hook_is_imported(work_dir):
    config = DeployConfig.from_options({"directory": str(work_dir), "post_deploy": "os.path:basename"})

    assert config.post_deploy is os.path.basename


def test_resolve_hook_rejects_bad_targets():
    with pytest.raises(ValueError):
        resolve_hook("os.path")
    with pytest.raises(ValueError):
        resolve_hook("os:sep")


def test_load_config_reads_yaml(tmp_path, work_dir):
    path = tmp_path / "config.yaml"
    path.write_text(f"deploy:\n  directory: {work_dir}\n  branch: release\n")

    raw = load_config(str(path))
    config = build_deploy_config(raw)

    assert config.branch == "release"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(str(path)) == {}
