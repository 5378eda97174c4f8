"""Run external commands, returning Result values instead of raising.

Only `git` goes through here. Output is decoded as UTF-8; undecodable bytes
are replaced so a stray non-UTF-8 file name never aborts a run.

Usage:
    match run(["git", "rev-parse", "HEAD"], cwd=Path(".")):
        case Ok(stdout):
            sha = stdout.strip()
        case Err(error):
            console.error(error.stderr)
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from gitmeta.core.result import Err, Ok, Result

__all__ = ["NOT_STARTED", "ProcessError", "run"]

# returncode for commands that timed out or could not be launched
NOT_STARTED = -1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, timed out, or could not be started.

    Attributes:
        command: argv as executed
        returncode: Exit status, NOT_STARTED when no status is available
        stdout: Whatever the command printed before failing
        stderr: The command's error output, or the launch/timeout reason
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        shown = " ".join(self.command[:3])
        if len(self.command) > 3:
            shown += " ..."
        return f"{shown} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    stdin: str | None = None,
) -> Result[str, ProcessError]:
    """Run `cmd` in `cwd` and return its standard output.

    Args:
        cmd: argv, program first
        cwd: Working directory
        env: Full environment, None to inherit
        timeout: Seconds before the command is killed
        stdin: Text written to the command's standard input
    """
    command = tuple(cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            env=env,
            input=stdin,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(ProcessError(command, NOT_STARTED, stderr=f"Command timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError(command, NOT_STARTED, stderr=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command, proc.returncode, proc.stdout, proc.stderr))
    return Ok(proc.stdout)
