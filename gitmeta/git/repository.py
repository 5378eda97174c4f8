"""Read commit metadata from a git working tree.

All operations shell out to `git` and return Result types.

Usage:
    repo = Repository(Path.cwd())

    match repo.commit_info():
        case Ok(info):
            print(f"{info.hash} on {info.branch}: {len(info.tracked_files)} files")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from gitmeta.core.result import Err, Ok, Result
from gitmeta.platform.process import ProcessError
from gitmeta.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_PACK_TIMEOUT_SECONDS = 3 * 60.0

_FIELD_SEP = "\x1f"
_CREDENTIALS_RE = re.compile(r"^(?P<scheme>https?://)[^/@]+@", re.IGNORECASE)

__all__ = [
    "CommitInfo",
    "GitError",
    "Repository",
    "strip_credentials",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class CommitInfo:
    """Identity of the checked-out commit plus the files it tracks.

    Attributes:
        hash: Full commit SHA of HEAD
        repository_url: Remote URL, credentials stripped
        branch: Current branch, None on a detached HEAD
        author_name / author_email / author_date: Author fields
        committer_name / committer_email / committer_date: Committer fields
        message: Full commit message
        tracked_files: Paths from `git ls-files`, relative to the repo root
    """

    hash: str
    repository_url: str
    branch: str | None = None
    author_name: str = ""
    author_email: str = ""
    author_date: str = ""
    committer_name: str = ""
    committer_email: str = ""
    committer_date: str = ""
    message: str = ""
    tracked_files: tuple[str, ...] = field(default_factory=tuple)


def strip_credentials(url: str) -> str:
    """Remove `user:password@` from an http(s) URL."""
    return _CREDENTIALS_RE.sub(r"\g<scheme>", url.strip())


class Repository:
    """Git repository rooted at `path`.

    Attributes:
        path: Any directory inside the working tree
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def head_sha(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse HEAD", e, "could not read HEAD"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def remote_url(self) -> Result[str, GitError]:
        """URL of `origin`, or of the first remote when there is no origin."""
        result = self._run(["remote", "-v"])
        if isinstance(result, Err):
            return Err(self._error("remote -v", result.error, "could not list remotes"))

        remotes: dict[str, str] = {}
        for line in result.value.splitlines():
            parts = line.split()
            if len(parts) >= 2 and parts[0] not in remotes:
                remotes[parts[0]] = parts[1]

        if not remotes:
            return Err(
                GitError(
                    command="remote -v",
                    message="no git remote configured, use --repository-url to set one",
                )
            )
        url = remotes.get("origin") or next(iter(remotes.values()))
        return Ok(strip_credentials(url))

    def tracked_files(self) -> Result[tuple[str, ...], GitError]:
        result = self._run(["ls-files", "-z"])
        match result:
            case Err(e):
                return Err(self._error("ls-files", e, "could not list tracked files"))
            case Ok(stdout):
                return Ok(tuple(p for p in stdout.split("\0") if p))

    def commit_info(self, repository_url: str | None = None) -> Result[CommitInfo, GitError]:
        """Collect everything the tracked-files upload needs about HEAD.

        Args:
            repository_url: Reported instead of the remote URL when given
        """
        if repository_url is None:
            remote = self.remote_url()
            if isinstance(remote, Err):
                return remote
            repository_url = remote.value
        else:
            repository_url = strip_credentials(repository_url)

        log = self._run(
            [
                "log",
                "-1",
                "--format=" + _FIELD_SEP.join(["%H", "%an", "%ae", "%aI", "%cn", "%ce", "%cI", "%B"]),
            ]
        )
        if isinstance(log, Err):
            return Err(self._error("log -1", log.error, "could not read HEAD commit"))

        fields = log.value.split(_FIELD_SEP, 7)
        if len(fields) != 8:
            return Err(GitError(command="log -1", message="unexpected git log output"))

        files = self.tracked_files()
        if isinstance(files, Err):
            return files

        sha, an, ae, ad, cn, ce, cd, message = fields
        return Ok(
            CommitInfo(
                hash=sha.strip(),
                repository_url=repository_url,
                branch=self.current_branch(),
                author_name=an,
                author_email=ae,
                author_date=ad,
                committer_name=cn,
                committer_email=ce,
                committer_date=cd,
                message=message.strip(),
                tracked_files=files.value,
            )
        )

    def recent_commits(
        self, *, since: str = "1 month ago", limit: int = 1000
    ) -> Result[list[str], GitError]:
        """SHAs of commits reachable from HEAD within the time window."""
        result = self._run(["log", "--format=%H", "-n", str(limit), f"--since={since}"])
        match result:
            case Err(e):
                return Err(self._error("log", e, "could not list recent commits"))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def objects_to_pack(
        self, include: list[str], exclude: list[str], *, since: str = "1 month ago"
    ) -> Result[list[str], GitError]:
        """Object ids reachable from `include` but not from `exclude`.

        Blobs are left out; trees and commits are enough to link commits to
        files upstream.
        """
        args = [
            "rev-list",
            "--objects",
            "--no-object-names",
            "--filter=blob:none",
            f"--since={since}",
            *include,
            *(f"^{sha}" for sha in exclude),
        ]
        result = self._run(args)
        match result:
            case Err(e):
                return Err(self._error("rev-list", e, "could not list objects"))
            case Ok(stdout):
                return Ok([ln.strip() for ln in stdout.splitlines() if ln.strip()])

    def pack_objects(self, objects: list[str], prefix: Path) -> Result[list[Path], GitError]:
        """Write `objects` into packfiles named `<prefix>-<hash>.pack`.

        Packs are split at 3 MB so each one fits a single upload request.
        """
        result = run_process(
            [
                "git",
                "-C",
                str(self.path),
                "pack-objects",
                "--compression=9",
                "--max-pack-size=3m",
                str(prefix),
            ],
            cwd=self.path,
            timeout=_GIT_PACK_TIMEOUT_SECONDS,
            stdin="\n".join(objects) + "\n",
        )
        match result:
            case Err(e):
                return Err(self._error("pack-objects", e, "could not build packfiles"))
            case Ok(stdout):
                hashes = [ln.strip() for ln in stdout.splitlines() if ln.strip()]
                return Ok([prefix.with_name(f"{prefix.name}-{h}.pack") for h in hashes])

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )

    def _error(self, command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or fallback,
            returncode=error.returncode,
        )
