"""GitDB sync channel.

Links recent commits of the repository to the backend's git store:

1. list commits from the last month
2. ask the API which of them it already knows
3. pack the objects of the missing ones into packfiles
4. upload each packfile (skipped in dry-run)

Commit data is read from the working tree on every call, independently of
the tracked-files channel.
"""

from __future__ import annotations

import json
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Protocol

from gitmeta.api.multipart import MultipartForm
from gitmeta.api.request import RequestBuilder
from gitmeta.core.result import Err, Ok, Result
from gitmeta.core.structured import as_str_dict, get_list, get_str
from gitmeta.git.repository import GitError, Repository, strip_credentials
from gitmeta.output.console import ConsoleProtocol

from .errors import UploadError
from .render import DRY_RUN_PREFIX
from .timeouts import GITDB_COMMIT_WINDOW, GITDB_MAX_COMMITS

__all__ = [
    "PACKFILE_PATH",
    "SEARCH_COMMITS_PATH",
    "GitDBReport",
    "GitDBSync",
    "GitDBSyncer",
]

SEARCH_COMMITS_PATH = "api/v2/git/repository/search_commits"
PACKFILE_PATH = "api/v2/git/repository/packfile"


@dataclass(frozen=True, slots=True)
class GitDBReport:
    """What one sync did.

    Attributes:
        local: Commits considered locally
        known: Of those, commits the backend already had
        packfiles: Packfiles built for the missing commits
        uploaded: Packfiles actually sent (0 in dry-run)
    """

    local: int
    known: int
    packfiles: int = 0
    uploaded: int = 0

    @property
    def missing(self) -> int:
        return self.local - self.known


class GitDBSyncer(Protocol):
    def sync(self) -> Result[GitDBReport, UploadError]: ...


def _retrieval(error: GitError) -> UploadError:
    return UploadError.retrieval(f"git {error.command}: {error.message}")


def _commit_refs(shas: list[str]) -> list[dict[str, str]]:
    return [{"id": sha, "type": "commit"} for sha in shas]


class GitDBSync:
    """Single-shot GitDB sync. The caller decides what a failure means."""

    def __init__(
        self,
        *,
        repository: Repository,
        requests: RequestBuilder,
        console: ConsoleProtocol,
        dry_run: bool = False,
        repository_url: str | None = None,
        temp_dir: Callable[[], tempfile.TemporaryDirectory[str]] = tempfile.TemporaryDirectory,
    ) -> None:
        self._repository = repository
        self._requests = requests
        self._console = console
        self._dry_run = dry_run
        self._repository_url = repository_url
        self._temp_dir = temp_dir

    def sync(self) -> Result[GitDBReport, UploadError]:
        url = self._resolve_url()
        if isinstance(url, Err):
            return url
        repository_url = url.value

        head = self._repository.head_sha()
        if isinstance(head, Err):
            return Err(_retrieval(head.error))

        commits = self._repository.recent_commits(
            since=GITDB_COMMIT_WINDOW, limit=GITDB_MAX_COMMITS
        )
        if isinstance(commits, Err):
            return Err(_retrieval(commits.error))
        local = commits.value

        known_result = self._search_commits(repository_url, local)
        if isinstance(known_result, Err):
            return known_result
        known = known_result.value

        missing = [sha for sha in local if sha not in known]
        self._console.debug(
            f"{len(local)} local commits, {len(known)} already known, {len(missing)} to sync"
        )
        if not missing:
            return Ok(GitDBReport(local=len(local), known=len(local)))

        objects = self._repository.objects_to_pack(
            missing, sorted(known), since=GITDB_COMMIT_WINDOW
        )
        if isinstance(objects, Err):
            return Err(_retrieval(objects.error))

        report = GitDBReport(local=len(local), known=len(local) - len(missing))
        try:
            with self._temp_dir() as tmp:
                return self._pack_and_upload(
                    objects.value, Path(tmp), repository_url, head.value, report
                )
        except OSError as e:
            return Err(UploadError.retrieval(f"could not create packfile directory: {e}"))

    def _pack_and_upload(
        self,
        objects: list[str],
        workdir: Path,
        repository_url: str,
        head_sha: str,
        report: GitDBReport,
    ) -> Result[GitDBReport, UploadError]:
        packs = self._repository.pack_objects(objects, workdir / "gitmeta")
        if isinstance(packs, Err):
            return Err(_retrieval(packs.error))
        report = replace(report, packfiles=len(packs.value))

        if self._dry_run:
            self._console.info(
                f"{DRY_RUN_PREFIX}Would upload {report.packfiles} packfile(s) "
                f"for {report.missing} commit(s)."
            )
            return Ok(report)

        for pack in packs.value:
            sent = self._upload_packfile(repository_url, head_sha, pack)
            if isinstance(sent, Err):
                return sent
            report = replace(report, uploaded=report.uploaded + 1)
        return Ok(report)

    def _resolve_url(self) -> Result[str, UploadError]:
        if self._repository_url is not None:
            return Ok(strip_credentials(self._repository_url))
        remote = self._repository.remote_url()
        if isinstance(remote, Err):
            return Err(_retrieval(remote.error))
        return Ok(remote.value)

    def _search_commits(
        self, repository_url: str, shas: list[str]
    ) -> Result[set[str], UploadError]:
        payload = {"meta": {"repository_url": repository_url}, "data": _commit_refs(shas)}
        result = self._requests.post_json(SEARCH_COMMITS_PATH, payload)
        if isinstance(result, Err):
            return Err(UploadError.transport(f"search_commits: {result.error}"))

        try:
            body = as_str_dict(result.value.json())
        except ValueError as e:
            return Err(UploadError.transport(f"search_commits: invalid response: {e}"))
        entries = get_list(body, "data") if body is not None else None
        if entries is None:
            return Err(UploadError.transport("search_commits: response has no 'data' list"))

        known: set[str] = set()
        for entry in entries:
            item = as_str_dict(entry)
            if item is None or get_str(item, "type") != "commit":
                continue
            sha = get_str(item, "id")
            if sha:
                known.add(sha)
        return Ok(known)

    def _upload_packfile(
        self, repository_url: str, head_sha: str, pack: Path
    ) -> Result[None, UploadError]:
        try:
            content = pack.read_bytes()
        except OSError as e:
            return Err(UploadError.retrieval(f"could not read packfile {pack.name}: {e}"))

        form = MultipartForm()
        form.add_field(
            "pushedSha",
            json.dumps(
                {
                    "data": {"id": head_sha, "type": "commit"},
                    "meta": {"repository_url": repository_url},
                }
            ),
            content_type="application/json",
        )
        form.add_file("packfile", content, filename=pack.name)

        result = self._requests.post_form(PACKFILE_PATH, form)
        if isinstance(result, Err):
            return Err(UploadError.transport(f"packfile upload: {result.error}"))
        return Ok(None)
