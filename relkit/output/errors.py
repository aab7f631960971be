"""Error presentation.

Maps every release error variant to a message, the command(s) that fix or
resume it, and a process exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relkit.core.config import ConfigError
from relkit.core.errors import ErrorCode
from relkit.output.console import Style
from relkit.release.errors import (
    BranchMismatch,
    ChangelogUnreadable,
    ComposeFailed,
    DirtyTree,
    HistoryUnavailable,
    InvalidVersionFormat,
    MissingUnreleasedMarker,
    OutOfSyncWithUpstream,
    PushFailed,
    ReleaseError,
    TagAlreadyExists,
    TestsFailing,
    UserDeclinedChangelog,
)

if TYPE_CHECKING:
    from relkit.output.console import ConsoleProtocol

__all__ = ["describe_error", "error_exit_code", "print_release_error"]

_MAX_LISTED_PATHS = 10


def describe_error(error: ReleaseError | ConfigError) -> tuple[str, list[str]]:
    """Return (message, corrective commands) for an error."""
    match error:
        case BranchMismatch(expected=expected, actual=actual):
            current = actual if actual is not None else "detached HEAD"
            return (
                f"Not on {expected} branch. Currently on: {current}",
                [f"git checkout {expected}"],
            )
        case DirtyTree(reason=reason) if reason is not None:
            return (f"Cannot check working tree: {reason}", ["git status"])
        case DirtyTree(paths=paths):
            hints = [f"  {p}" for p in paths[:_MAX_LISTED_PATHS]]
            if len(paths) > _MAX_LISTED_PATHS:
                hints.append(f"  ... and {len(paths) - _MAX_LISTED_PATHS} more")
            hints.append("git stash   (or commit the changes)")
            return ("Working tree is not clean. Commit or stash changes first.", hints)
        case InvalidVersionFormat(value=value):
            return (
                f"Invalid version format: {value}",
                ["Expected format: X.Y.Z (e.g., 1.2.3)"],
            )
        case TagAlreadyExists(tag=tag, remote=remote):
            return (
                f"Tag {tag} already exists",
                [
                    "Use a different version or delete the existing tag:",
                    f"git tag -d {tag}",
                    f"git push {remote} :refs/tags/{tag}",
                ],
            )
        case OutOfSyncWithUpstream(reason=reason) if reason is not None:
            return (
                f"Cannot compare with {error.upstream_ref}: {reason}",
                [f"git fetch {error.remote}", f"git pull {error.remote} {error.branch}"],
            )
        case OutOfSyncWithUpstream():
            return (
                f"Local branch is not up to date with {error.upstream_ref}",
                [f"git pull {error.remote} {error.branch}"],
            )
        case TestsFailing(command=command, returncode=rc):
            return (
                f"Tests failed (exit {rc}). Fix tests before releasing.",
                [" ".join(command)],
            )
        case MissingUnreleasedMarker(path=path):
            return (
                f"{path} doesn't have a '## [Unreleased]' section",
                [f"add a '## [Unreleased]' heading to {path}"],
            )
        case ChangelogUnreadable(path=path, reason=reason):
            return (f"Cannot read {path}: {reason}", [f"create {path} with a '## [Unreleased]' heading"])
        case HistoryUnavailable(reason=reason):
            return (f"Cannot read commit history: {reason}", ["git log"])
        case UserDeclinedChangelog(path=path):
            return (
                f"Release cancelled; {path} restored",
                ["re-run the release when the commit history is ready"],
            )
        case ComposeFailed(step=step, reason=reason, restored=restored):
            hints = ["git status", "git log -1"]
            if not restored:
                hints.insert(0, "the changelog was not restored; inspect it before retrying")
            return (f"{step} failed: {reason}", hints)
        case PushFailed(ref=ref, reason=reason, retry_commands=commands):
            return (
                f"Push of {ref} failed: {reason}. The local commit and tag are kept.",
                ["Retry manually:", *commands],
            )
        case ConfigError(message=message, hint=hint):
            return (message, [hint] if hint else [])


def error_exit_code(error: ReleaseError | ConfigError) -> int:
    match error:
        case BranchMismatch():
            return int(ErrorCode.BRANCH_MISMATCH)
        case DirtyTree():
            return int(ErrorCode.DIRTY_TREE)
        case InvalidVersionFormat():
            return int(ErrorCode.INVALID_VERSION)
        case TagAlreadyExists():
            return int(ErrorCode.TAG_EXISTS)
        case OutOfSyncWithUpstream():
            return int(ErrorCode.OUT_OF_SYNC)
        case TestsFailing():
            return int(ErrorCode.TESTS_FAILING)
        case MissingUnreleasedMarker() | ChangelogUnreadable() | HistoryUnavailable():
            return int(ErrorCode.MISSING_UNRELEASED)
        case UserDeclinedChangelog():
            return int(ErrorCode.USER_DECLINED)
        case ComposeFailed():
            return int(ErrorCode.COMPOSE_FAILED)
        case PushFailed():
            return int(ErrorCode.PUSH_FAILED)
        case ConfigError():
            return int(ErrorCode.CONFIG_ERROR)


def print_release_error(error: ReleaseError | ConfigError, console: ConsoleProtocol) -> None:
    message, hints = describe_error(error)
    console.error(message)
    for hint in hints:
        console.print(hint, Style.DIM)
