"""Upload orchestration.

Runs the two upload channels in a fixed order and turns their outcomes into
one exit code:

1. enter the requested directory (fatal on failure)
2. require an API key (fatal when missing, nothing else runs)
3. tracked-files upload; a failure marks the run as failed but does not stop it
4. GitDB sync unless disabled; a failure is only a warning
5. flush metrics; a failure is only a warning

Each channel's error is captured as a Result and recorded; the exit code is
decided after both channels have had their turn.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Protocol, TypeVar

from gitmeta.api.apikey import ApiKeyValidator
from gitmeta.api.http import HttpClient, RealHttpClient
from gitmeta.api.request import RequestBuilder
from gitmeta.api.site import SRCMAP_PATH, api_base_url, intake_base_url
from gitmeta.core.config import API_KEY_ENV, UploadConfig
from gitmeta.core.errors import ErrorCode
from gitmeta.core.result import Err, Ok, Result
from gitmeta.git.repository import CommitInfo, Repository
from gitmeta.metrics.sink import MetricsSink, SeriesMetricsSink
from gitmeta.output.console import ConsoleProtocol, Style

from .errors import UploadError
from .gitdb import GitDBSync, GitDBSyncer
from .render import (
    GOV_GITDB_MESSAGE,
    render_channel_success,
    render_configuration_error,
    render_dry_run_warning,
    render_successful_command,
)
from .srcmap import SrcmapSender, TrackedFilesChannel
from .timeouts import HTTP_TIMEOUT_SECONDS

__all__ = [
    "ChannelOutcome",
    "Channels",
    "ChannelsFactory",
    "RunResult",
    "UploadOrchestrator",
    "build_channels",
]

T = TypeVar("T")

ORIGIN = "gitmeta git-metadata"


class ChannelOutcome(Enum):
    SUCCESS = auto()
    FAILED = auto()
    SKIPPED = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True, slots=True)
class RunResult:
    """Aggregate of one run.

    Attributes:
        tracked_files: Outcome of the tracked-files upload
        gitdb: Outcome of the GitDB sync
        elapsed: Wall-clock seconds for the whole run
        aborted: A precondition failed before any channel ran
    """

    tracked_files: ChannelOutcome
    gitdb: ChannelOutcome
    elapsed: float
    aborted: bool = False

    @property
    def exit_code(self) -> ErrorCode:
        if self.aborted or self.tracked_files is ChannelOutcome.FAILED:
            return ErrorCode.FAILURE
        return ErrorCode.OK


@dataclass(frozen=True, slots=True)
class Channels:
    """Capabilities for one run, built once the API key is known."""

    tracked_files: TrackedFilesChannel
    gitdb: GitDBSyncer
    metrics: MetricsSink


class ChannelsFactory(Protocol):
    def __call__(
        self, config: UploadConfig, api_key: str, console: ConsoleProtocol
    ) -> Channels: ...


def build_channels(
    config: UploadConfig,
    api_key: str,
    console: ConsoleProtocol,
    client: HttpClient | None = None,
) -> Channels:
    """Wire the real collaborators.

    The intake and the public API get separate request builders: different
    hosts, and only the intake receives the origin headers.
    """
    http = client or RealHttpClient(timeout=HTTP_TIMEOUT_SECONDS)
    api = RequestBuilder(client=http, base_url=api_base_url(config.site), api_key=api_key)
    intake = RequestBuilder(
        client=http,
        base_url=intake_base_url(config),
        api_key=api_key,
        headers={
            "DD-EVP-ORIGIN": ORIGIN,
            "DD-EVP-ORIGIN-VERSION": config.cli_version,
        },
        override_path=SRCMAP_PATH,
    )
    metrics = SeriesMetricsSink(requests=api, tags=(f"cli_version:{config.cli_version}",))
    repository = Repository(Path.cwd())

    def produce() -> Result[CommitInfo, UploadError]:
        return repository.commit_info(config.repository_url).map_err(
            lambda e: UploadError.retrieval(e.message)
        )

    return Channels(
        tracked_files=TrackedFilesChannel(
            produce=produce,
            sender=SrcmapSender(
                requests=intake,
                validator=ApiKeyValidator(api),
                cli_version=config.cli_version,
            ),
            console=console,
            metrics=metrics,
            dry_run=config.dry_run,
        ),
        gitdb=GitDBSync(
            repository=repository,
            requests=api,
            console=console,
            dry_run=config.dry_run,
            repository_url=config.repository_url,
        ),
        metrics=metrics,
    )


def _timed(fn: Callable[[], T], clock: Callable[[], float]) -> tuple[T, float]:
    start = clock()
    value = fn()
    return value, round(clock() - start, 3)


class UploadOrchestrator:
    """Runs one `git-metadata upload` invocation."""

    def __init__(
        self,
        *,
        config: UploadConfig,
        console: ConsoleProtocol,
        channels_factory: ChannelsFactory = build_channels,
        chdir: Callable[[Path], None] = os.chdir,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._config = config
        self._console = console
        self._channels_factory = channels_factory
        self._chdir = chdir
        self._clock = clock

    def run(self) -> RunResult:
        started = self._clock()
        config = self._config

        if config.dry_run:
            self._console.warning(render_dry_run_warning())

        if config.directory is not None:
            try:
                self._chdir(config.directory)
            except OSError as e:
                self._console.error(
                    f"Could not change directory to {config.directory}: {e.strerror or e}"
                )
                return self._aborted(started)

        if not config.api_key:
            self._console.error(
                render_configuration_error(f"Missing {API_KEY_ENV} in your environment")
            )
            return self._aborted(started)

        if config.git_sync:
            self._console.warning("Option --git-sync is deprecated as it is now the default behavior")

        channels = self._channels_factory(config, config.api_key, self._console)

        tracked_files = self._run_tracked_files(channels)
        gitdb = self._run_gitdb(channels)

        match channels.metrics.flush():
            case Err(e):
                self._console.warning(f"Could not flush metrics: {e.message}")
            case Ok(_):
                pass

        result = RunResult(
            tracked_files=tracked_files,
            gitdb=gitdb,
            elapsed=round(self._clock() - started, 3),
        )
        if result.exit_code.is_error:
            self._console.print("Command failed. See messages above for more details.", Style.DIM)
        else:
            self._console.success(render_successful_command(result.elapsed, config.dry_run))
        return result

    def _run_tracked_files(self, channels: Channels) -> ChannelOutcome:
        self._console.info("Uploading list of tracked files...")
        result, elapsed = _timed(channels.tracked_files.run, self._clock)
        match result:
            case Ok(_):
                channels.metrics.increment("sci.success")
                self._console.info(
                    render_channel_success("uploaded tracked files", elapsed, self._config.dry_run)
                )
                return ChannelOutcome.SUCCESS
            case Err(e):
                self._console.debug(f"tracked files upload failed after {elapsed} seconds: {e.kind}")
                return ChannelOutcome.FAILED

    def _run_gitdb(self, channels: Channels) -> ChannelOutcome:
        if not self._config.gitdb_sync:
            return ChannelOutcome.SKIPPED

        self._console.info("Syncing GitDB...")
        result, elapsed = _timed(channels.gitdb.sync, self._clock)
        match result:
            case Ok(_):
                channels.metrics.increment("gitdb.success")
                self._console.info(
                    render_channel_success("synced git DB", elapsed, self._config.dry_run)
                )
                return ChannelOutcome.SUCCESS
            case Err(e):
                if self._config.is_gov:
                    self._console.warning(GOV_GITDB_MESSAGE)
                else:
                    self._console.warning(f"Could not write to GitDB: {e.pretty()}")
                return ChannelOutcome.FAILED

    def _aborted(self, started: float) -> RunResult:
        return RunResult(
            tracked_files=ChannelOutcome.SKIPPED,
            gitdb=ChannelOutcome.SKIPPED,
            elapsed=round(self._clock() - started, 3),
            aborted=True,
        )
