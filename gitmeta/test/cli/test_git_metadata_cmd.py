"""Tests for the git-metadata CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar

import pytest
from typer.testing import CliRunner

from gitmeta import __version__
from gitmeta.cli.app import app
from gitmeta.cli.commands import git_metadata
from gitmeta.core.config import UploadConfig
from gitmeta.output.console import ConsoleProtocol
from gitmeta.upload.orchestrator import ChannelOutcome, RunResult

runner = CliRunner()


class RecordingOrchestrator:
    """Replaces UploadOrchestrator; remembers the config it was built with."""

    seen: ClassVar[list[UploadConfig]] = []
    outcome: ClassVar[ChannelOutcome] = ChannelOutcome.SUCCESS

    def __init__(self, *, config: UploadConfig, console: ConsoleProtocol) -> None:
        self.config = config
        self.console = console

    def run(self) -> RunResult:
        self.seen.append(self.config)
        return RunResult(tracked_files=self.outcome, gitdb=ChannelOutcome.SUCCESS, elapsed=0.0)


@pytest.fixture
def recorded(monkeypatch: pytest.MonkeyPatch) -> list[UploadConfig]:
    seen: list[UploadConfig] = []
    monkeypatch.setattr(RecordingOrchestrator, "seen", seen)
    monkeypatch.setattr(RecordingOrchestrator, "outcome", ChannelOutcome.SUCCESS)
    monkeypatch.setattr(git_metadata, "UploadOrchestrator", RecordingOrchestrator)
    monkeypatch.setenv("DATADOG_API_KEY", "secret")
    monkeypatch.delenv("DATADOG_SITE", raising=False)
    monkeypatch.delenv("DATADOG_SOURCEMAP_INTAKE_URL", raising=False)
    return seen


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_upload_defaults(recorded: list[UploadConfig]) -> None:
    result = runner.invoke(app, ["git-metadata", "upload"])

    assert result.exit_code == 0
    assert len(recorded) == 1
    config = recorded[0]
    assert config.api_key == "secret"
    assert config.site == "datadoghq.com"
    assert config.dry_run is False
    assert config.gitdb_sync is True
    assert config.directory is None


def test_upload_flags(recorded: list[UploadConfig], tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        [
            "git-metadata",
            "upload",
            "--dry-run",
            "--verbose",
            "--no-gitsync",
            "--git-sync",
            "--directory",
            str(tmp_path),
            "--repository-url",
            "https://github.com/org/repo.git",
        ],
    )

    assert result.exit_code == 0
    config = recorded[0]
    assert config.dry_run is True
    assert config.verbose is True
    assert config.gitdb_sync is False
    assert config.git_sync is True
    assert config.directory == tmp_path
    assert config.repository_url == "https://github.com/org/repo.git"


def test_failed_run_exits_one(
    recorded: list[UploadConfig], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(RecordingOrchestrator, "outcome", ChannelOutcome.FAILED)

    result = runner.invoke(app, ["git-metadata", "upload"])

    assert result.exit_code == 1
    assert len(recorded) == 1


def test_site_from_environment(
    recorded: list[UploadConfig], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DATADOG_SITE", "datadoghq.eu")

    runner.invoke(app, ["git-metadata", "upload"])

    assert recorded[0].site == "datadoghq.eu"


def test_invalid_site_exits_before_run(
    recorded: list[UploadConfig], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("DATADOG_SITE", "https://datadoghq.com/")

    result = runner.invoke(app, ["git-metadata", "upload"])

    assert result.exit_code == 1
    assert recorded == []
    assert "invalid DATADOG_SITE" in result.output


def test_missing_api_key_exits_one(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATADOG_API_KEY", raising=False)
    monkeypatch.delenv("DATADOG_SITE", raising=False)

    result = runner.invoke(app, ["git-metadata", "upload"])

    assert result.exit_code == 1
    assert "DATADOG_API_KEY" in result.output
