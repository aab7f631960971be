"""Git operations.

Usage:
    from relkit.git import Repository

    repo = Repository(Path("/path/to/repo"))
    branch = repo.current_branch()
"""

from relkit.git.repository import (
    GitError,
    GitStatus,
    LogEntry,
    Repository,
    StatusEntry,
)

__all__ = [
    "GitError",
    "GitStatus",
    "LogEntry",
    "Repository",
    "StatusEntry",
]
