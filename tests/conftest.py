"""Shared fixtures: a temporary working copy, fake git commands and a recording notifier."""

import os

# Keep the test run from creating logs.db; must happen before main is imported.
os.environ["LOG_DB_PATH"] = ""

import pytest
from fastapi.testclient import TestClient

import deployer
from config import DeployConfig
from dependencies import get_deploy_config, get_notifier
from main import app
from models.deploy_step import StepResult
from notifications import Notifications


class RecordingNotifier:
    """Stands in for Notifications and remembers every report it was asked to send."""

    def __init__(self):
        self.reports = []

    def send_report(self, run_log, config, server_name):
        self.reports.append({
            "subject": Notifications.build_subject(config, server_name),
            "lines": run_log.lines(),
            "run_log": run_log,
        })
        return True


class FakeCommands:
    """Replaces run_command; commands starting with a prefix in `failing` exit with status 1."""

    def __init__(self, failing=()):
        self.calls = []
        self.failing = tuple(failing)

    def __call__(self, command, cwd, timeout=None):
        self.calls.append(command)
        joined = " ".join(command)
        returncode = 1 if self.failing and joined.startswith(self.failing) else 0
        return StepResult(command=command, output=f"output of {joined}", returncode=returncode)


@pytest.fixture
def work_dir(tmp_path):
    directory = tmp_path / "site"
    directory.mkdir()
    return directory


@pytest.fixture
def deploy_config(work_dir) -> DeployConfig:
    return DeployConfig.from_options({
        "directory": str(work_dir),
        "email": "ops@example.com",
        "timezone": "Europe/Minsk",
    })


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def fake_commands(monkeypatch) -> FakeCommands:
    commands = FakeCommands()
    monkeypatch.setattr(deployer, "run_command", commands)
    return commands


@pytest.fixture
def make_push():
    """Build a push payload in the shape the hosting service sends."""

    def _make_push(branch="master", commits=None, change_type="branch", extra_changes=()):
        if commits is None:
            commits = [
                {
                    "type": "commit",
                    "author": {"raw": "Jane Doe <jane@example.com>"},
                    "message": "Fix header\n",
                    "date": "2024-03-01T09:30:00+00:00",
                }
            ]
        changes = [{"new": {"type": change_type, "name": branch}, "commits": commits}]
        changes.extend(extra_changes)
        return {
            "repository": {"full_name": "acme/site"},
            "actor": {"display_name": "Jane Doe", "username": "jdoe"},
            "push": {"changes": changes},
        }

    return _make_push


@pytest.fixture
def client(deploy_config, notifier):
    app.dependency_overrides[get_deploy_config] = lambda: deploy_config
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()
