"""Git operations module.

Usage:
    from gitmeta.git import Repository

    repo = Repository(Path.cwd())
    match repo.commit_info():
        case Ok(info):
            print(f"HEAD: {info.hash}")
        case Err(e):
            print(e.message)
"""

from gitmeta.git.repository import (
    CommitInfo,
    GitError,
    Repository,
    strip_credentials,
)

__all__ = [
    "CommitInfo",
    "GitError",
    "Repository",
    "strip_credentials",
]
