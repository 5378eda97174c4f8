"""Tracked-files upload channel.

Reports HEAD and the list of tracked file paths to the source map intake.
Payload generation runs once and is never retried; only the send is, through
the retry executor.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from time import sleep as _sleep
from typing import Protocol

from gitmeta.api.apikey import ApiKeyValidator
from gitmeta.api.http import HttpError
from gitmeta.api.multipart import MultipartForm
from gitmeta.api.request import RequestBuilder
from gitmeta.core.result import Err, Ok, Result
from gitmeta.git.repository import CommitInfo
from gitmeta.metrics.sink import MetricsSink
from gitmeta.output.console import ConsoleProtocol

from .errors import UploadError
from .render import (
    render_command_info,
    render_failed_upload,
    render_retried_upload,
)
from .retry import RetryListeners, execute_with_retry
from .timeouts import SRCMAP_MAX_ATTEMPTS, SRCMAP_RETRY_DELAY_SECONDS

__all__ = [
    "PayloadProducer",
    "Sender",
    "SrcmapSender",
    "TrackedFilesChannel",
    "build_repository_form",
]

# The intake answers these when the request itself is wrong; resending the
# same payload cannot help.
_STOP_STATUSES = frozenset({400, 403, 413})


class PayloadProducer(Protocol):
    def __call__(self) -> Result[CommitInfo, UploadError]: ...


class Sender(Protocol):
    def send(self, commit: CommitInfo) -> Result[None, UploadError]: ...


def build_repository_form(commit: CommitInfo, cli_version: str) -> MultipartForm:
    form = MultipartForm()
    form.add_field(
        "event",
        json.dumps({"type": "repository_metadata", "cli_version": cli_version}),
        content_type="application/json",
    )
    repository = {
        "data": [
            {
                "type": "repository",
                "hash": commit.hash,
                "repository_url": commit.repository_url,
                "files": list(commit.tracked_files),
            }
        ],
        "version": 1,
    }
    form.add_file(
        "repository",
        json.dumps(repository).encode("utf-8"),
        filename="repository",
        content_type="application/json",
    )
    form.add_field("git_repository_url", commit.repository_url)
    form.add_field("git_commit_sha", commit.hash)
    return form


class SrcmapSender:
    """Sends one repository payload to the intake.

    A 403 triggers API key validation; an invalid key is reported as a
    non-retryable configuration error.
    """

    def __init__(
        self,
        *,
        requests: RequestBuilder,
        validator: ApiKeyValidator,
        cli_version: str,
    ) -> None:
        self._requests = requests
        self._validator = validator
        self._cli_version = cli_version

    def send(self, commit: CommitInfo) -> Result[None, UploadError]:
        form = build_repository_form(commit, self._cli_version)
        result = self._requests.post_form("", form)
        match result:
            case Ok(_):
                return Ok(None)
            case Err(e):
                return Err(self._classify(e))

    def _classify(self, error: HttpError) -> UploadError:
        if error.status == 403:
            match self._validator.is_valid():
                case Ok(False):
                    return UploadError.configuration(
                        "the API key is invalid",
                        hint="Check DATADOG_API_KEY and DATADOG_SITE",
                    )
                case _:
                    pass
        return UploadError.transport(str(error), retryable=error.status not in _STOP_STATUSES)


class TrackedFilesChannel:
    """GeneratePayload -> SendPayload, with dry-run short-circuit.

    Counters:
        sci.retries: one per retried attempt
        sci.failed: once when the send gives up
    """

    def __init__(
        self,
        *,
        produce: PayloadProducer,
        sender: Sender,
        console: ConsoleProtocol,
        metrics: MetricsSink,
        dry_run: bool = False,
        max_attempts: int = SRCMAP_MAX_ATTEMPTS,
        retry_delay_seconds: float = SRCMAP_RETRY_DELAY_SECONDS,
        sleep: Callable[[float], None] = _sleep,
    ) -> None:
        self._produce = produce
        self._sender = sender
        self._console = console
        self._metrics = metrics
        self._dry_run = dry_run
        self._max_attempts = max_attempts
        self._retry_delay_seconds = retry_delay_seconds
        self._sleep = sleep

    def run(self) -> Result[CommitInfo, UploadError]:
        payload = self._produce()
        if isinstance(payload, Err):
            self._console.error(render_failed_upload(payload.error.message))
            return payload

        commit = payload.value
        self._console.info(render_command_info(commit))
        for path in commit.tracked_files:
            self._console.debug(path)

        if self._dry_run:
            return Ok(commit)

        sent = execute_with_retry(
            lambda: self._sender.send(commit),
            self._max_attempts,
            RetryListeners(on_retry=self._on_retry, on_exhausted=self._on_exhausted),
            is_retryable=lambda error: error.retryable,
            delay_seconds=self._retry_delay_seconds,
            sleep=self._sleep,
        )
        if isinstance(sent, Err):
            return sent
        return Ok(commit)

    def _on_retry(self, error: UploadError, attempt: int) -> None:
        self._console.warning(render_retried_upload(error.message, attempt))
        self._metrics.increment("sci.retries")

    def _on_exhausted(self, error: UploadError) -> None:
        self._console.error(render_failed_upload(error.pretty()))
        self._metrics.increment("sci.failed")
