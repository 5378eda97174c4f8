"""Tests for gitmeta.core.config module."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitmeta import __version__
from gitmeta.core.config import (
    DEFAULT_SITE,
    GOV_SITE,
    UploadConfig,
    load_config,
)
from gitmeta.core.result import Err, Ok


class TestUploadConfig:
    def test_defaults(self) -> None:
        config = UploadConfig()
        assert config.api_key is None
        assert config.site == DEFAULT_SITE
        assert config.dry_run is False
        assert config.gitdb_sync is True
        assert config.repository_url is None
        assert config.directory is None
        assert config.cli_version == __version__

    def test_frozen(self) -> None:
        config = UploadConfig()
        with pytest.raises(AttributeError):
            config.dry_run = True  # type: ignore[misc]

    def test_is_gov(self) -> None:
        assert UploadConfig(site=GOV_SITE).is_gov is True
        assert UploadConfig(site="datadoghq.eu").is_gov is False


class TestLoadConfig:
    def test_reads_environment(self) -> None:
        result = load_config({"DATADOG_API_KEY": " abc ", "DATADOG_SITE": "datadoghq.eu"})

        assert isinstance(result, Ok)
        assert result.value.api_key == "abc"
        assert result.value.site == "datadoghq.eu"

    def test_missing_api_key_is_not_an_error(self) -> None:
        result = load_config({})

        assert isinstance(result, Ok)
        assert result.value.api_key is None

    def test_blank_api_key_is_missing(self) -> None:
        result = load_config({"DATADOG_API_KEY": "   "})

        assert isinstance(result, Ok)
        assert result.value.api_key is None

    def test_flags(self, tmp_path: Path) -> None:
        result = load_config(
            {},
            dry_run=True,
            verbose=True,
            git_sync=True,
            no_gitsync=True,
            directory=tmp_path,
            repository_url="https://github.com/org/repo",
        )

        assert isinstance(result, Ok)
        config = result.value
        assert config.dry_run is True
        assert config.verbose is True
        assert config.git_sync is True
        assert config.gitdb_sync is False
        assert config.directory == tmp_path
        assert config.repository_url == "https://github.com/org/repo"

    def test_invalid_site(self) -> None:
        result = load_config({"DATADOG_SITE": "https://datadoghq.com/"})

        assert isinstance(result, Err)
        assert "DATADOG_SITE" in result.error.message
        assert result.error.hint is not None

    def test_intake_override_must_be_http(self) -> None:
        result = load_config({"DATADOG_SOURCEMAP_INTAKE_URL": "intake.local"})

        assert isinstance(result, Err)

    def test_intake_override(self) -> None:
        result = load_config({"DATADOG_SOURCEMAP_INTAKE_URL": "http://localhost:8080"})

        assert isinstance(result, Ok)
        assert result.value.intake_url == "http://localhost:8080"

    def test_empty_repository_url(self) -> None:
        result = load_config({}, repository_url="  ")

        assert isinstance(result, Err)
