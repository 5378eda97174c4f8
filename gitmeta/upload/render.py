"""User-facing messages for the upload command."""

from __future__ import annotations

from gitmeta.git.repository import CommitInfo

DRY_RUN_PREFIX = "[DRYRUN] "
GOV_GITDB_MESSAGE = "Not writing to GitDB: not available for gov"


def dry_run_prefix(dry_run: bool) -> str:
    return DRY_RUN_PREFIX if dry_run else ""


def render_dry_run_warning() -> str:
    return "DRY-RUN MODE ENABLED. WILL NOT UPLOAD COMMIT DETAILS"


def render_configuration_error(message: str) -> str:
    return f"Configuration error: {message}."


def render_command_info(commit: CommitInfo) -> str:
    branch = f" (branch {commit.branch})" if commit.branch else ""
    return (
        f"Reporting commit {commit.hash}{branch} from repository {commit.repository_url}.\n"
        f"{len(commit.tracked_files)} tracked file paths will be reported."
    )


def render_failed_upload(message: str) -> str:
    return f"Failed upload: {message}"


def render_retried_upload(message: str, attempt: int) -> str:
    return f"[attempt {attempt}] Retrying upload: {message}"


def render_channel_success(action: str, elapsed: float, dry_run: bool) -> str:
    return f"{dry_run_prefix(dry_run)}Successfully {action} in {elapsed:.3f} seconds."


def render_successful_command(elapsed: float, dry_run: bool) -> str:
    return f"{dry_run_prefix(dry_run)}Handled in {elapsed:.3f} seconds."
