"""git-metadata commands - report commit details upstream."""

from __future__ import annotations

from pathlib import Path

import typer

from gitmeta.cli.context import build_context
from gitmeta.upload.orchestrator import UploadOrchestrator

git_metadata_app = typer.Typer(
    no_args_is_help=True,
    help="Report git metadata for the source code integration.",
)


@git_metadata_app.command("upload")
def upload(
    dry_run: bool = typer.Option(False, "--dry-run", help="Compute everything, upload nothing"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug output"),
    git_sync: bool = typer.Option(
        False,
        "--git-sync",
        help="DEPRECATED: GitDB sync is now the default",
        hidden=True,
    ),
    no_gitsync: bool = typer.Option(False, "--no-gitsync", help="Skip the GitDB sync"),
    directory: Path | None = typer.Option(
        None,
        "--directory",
        help="Run from this directory instead of the current one",
    ),
    repository_url: str | None = typer.Option(
        None,
        "--repository-url",
        help="Repository URL to report instead of the git remote",
    ),
) -> None:
    """Report the current commit details.

    Uploads the list of tracked files for HEAD, then syncs recent commits to
    GitDB so the UI can link telemetry to source code.
    """
    ctx = build_context(
        dry_run=dry_run,
        verbose=verbose,
        git_sync=git_sync,
        no_gitsync=no_gitsync,
        directory=directory,
        repository_url=repository_url,
    )
    result = UploadOrchestrator(config=ctx.config, console=ctx.console).run()
    raise typer.Exit(code=int(result.exit_code))
