"""Run configuration for the upload command.

Settings come from two places: the environment (API key, site, intake
override) and the command-line flags. They are merged once at startup into a
frozen UploadConfig that every later step reads from.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from gitmeta import __version__

from .result import Err, Ok, Result

__all__ = [
    "API_KEY_ENV",
    "DEFAULT_SITE",
    "GOV_SITE",
    "INTAKE_URL_ENV",
    "SITE_ENV",
    "ConfigError",
    "UploadConfig",
    "load_config",
]

API_KEY_ENV = "DATADOG_API_KEY"
SITE_ENV = "DATADOG_SITE"
INTAKE_URL_ENV = "DATADOG_SOURCEMAP_INTAKE_URL"

DEFAULT_SITE = "datadoghq.com"
GOV_SITE = "ddog-gov.com"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when flags or environment values are unusable."""

    message: str
    hint: str | None = None


@dataclass(frozen=True, slots=True)
class UploadConfig:
    """Immutable settings for one upload run.

    Attributes:
        api_key: Credential sent with every request. None when not set; the
            orchestrator reports that as a configuration error.
        site: Backend site, e.g. "datadoghq.com".
        intake_url: Explicit srcmap intake base URL, overriding the site.
        dry_run: Compute everything but skip writes.
        verbose: Show debug output.
        git_sync: Legacy flag, now inert.
        gitdb_sync: Whether the GitDB sync channel runs.
        repository_url: Override for the remote URL reported upstream.
        directory: Directory to run in instead of the current one.
        cli_version: Version reported in headers and metric tags.
    """

    api_key: str | None = None
    site: str = DEFAULT_SITE
    intake_url: str | None = None
    dry_run: bool = False
    verbose: bool = False
    git_sync: bool = False
    gitdb_sync: bool = True
    repository_url: str | None = None
    directory: Path | None = None
    cli_version: str = __version__

    @property
    def is_gov(self) -> bool:
        return self.site == GOV_SITE


def _env_value(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(
    env: Mapping[str, str],
    *,
    dry_run: bool = False,
    verbose: bool = False,
    git_sync: bool = False,
    no_gitsync: bool = False,
    directory: Path | None = None,
    repository_url: str | None = None,
) -> Result[UploadConfig, ConfigError]:
    """Merge environment and flags into an UploadConfig.

    A missing API key is not an error here: it is checked by the
    orchestrator after the working directory has been resolved.
    """
    site = _env_value(env, SITE_ENV) or DEFAULT_SITE
    if "/" in site or " " in site:
        return Err(
            ConfigError(
                f"invalid {SITE_ENV}: {site!r}",
                hint="Use a bare domain such as datadoghq.com or datadoghq.eu",
            )
        )

    intake_url = _env_value(env, INTAKE_URL_ENV)
    if intake_url is not None and not intake_url.startswith(("http://", "https://")):
        return Err(ConfigError(f"{INTAKE_URL_ENV} must be an http(s) URL: {intake_url!r}"))

    if repository_url is not None:
        repository_url = repository_url.strip()
        if not repository_url:
            return Err(ConfigError("--repository-url must not be empty"))

    return Ok(
        UploadConfig(
            api_key=_env_value(env, API_KEY_ENV),
            site=site,
            intake_url=intake_url,
            dry_run=dry_run,
            verbose=verbose,
            git_sync=git_sync,
            gitdb_sync=not no_gitsync,
            repository_url=repository_url,
            directory=directory,
        )
    )
