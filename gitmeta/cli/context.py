"""Per-invocation CLI context: the console and the loaded upload configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from gitmeta.core.config import UploadConfig, load_config
from gitmeta.core.errors import ErrorCode
from gitmeta.core.result import Err
from gitmeta.output.console import ConsoleProtocol, RichConsole, Style


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: UploadConfig
    console: ConsoleProtocol


def build_context(
    *,
    dry_run: bool = False,
    verbose: bool = False,
    git_sync: bool = False,
    no_gitsync: bool = False,
    directory: Path | None = None,
    repository_url: str | None = None,
) -> CLIContext:
    console = RichConsole(verbose=verbose)
    config_result = load_config(
        os.environ,
        dry_run=dry_run,
        verbose=verbose,
        git_sync=git_sync,
        no_gitsync=no_gitsync,
        directory=directory,
        repository_url=repository_url,
    )
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        if config_result.error.hint:
            console.print(f"hint: {config_result.error.hint}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.FAILURE))

    return CLIContext(config=config_result.value, console=console)
