"""Error variants for each release stage.

Each failure is its own frozen dataclass; stage functions return them inside
``Err``. ``relkit.output.errors`` turns them into messages, corrective
commands and exit codes.
"""

from __future__ import annotations

from dataclasses import dataclass


# -- PreconditionError: nothing has been modified -----------------------------


@dataclass(frozen=True, slots=True)
class BranchMismatch:
    expected: str
    actual: str | None  # None on detached HEAD


@dataclass(frozen=True, slots=True)
class DirtyTree:
    paths: tuple[str, ...] = ()
    # Set when git status itself failed and cleanliness is unknown.
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class InvalidVersionFormat:
    value: str


@dataclass(frozen=True, slots=True)
class TagAlreadyExists:
    tag: str
    remote: str


@dataclass(frozen=True, slots=True)
class OutOfSyncWithUpstream:
    remote: str
    branch: str
    local_sha: str | None = None
    upstream_sha: str | None = None
    reason: str | None = None

    @property
    def upstream_ref(self) -> str:
        return f"{self.remote}/{self.branch}"


@dataclass(frozen=True, slots=True)
class TestsFailing:
    command: tuple[str, ...]
    returncode: int

    __test__ = False  # not a pytest class


PreconditionError = (
    BranchMismatch
    | DirtyTree
    | InvalidVersionFormat
    | TagAlreadyExists
    | OutOfSyncWithUpstream
    | TestsFailing
)


# -- GenerationError ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MissingUnreleasedMarker:
    path: str


@dataclass(frozen=True, slots=True)
class ChangelogUnreadable:
    path: str
    reason: str


@dataclass(frozen=True, slots=True)
class HistoryUnavailable:
    reason: str


GenerationError = MissingUnreleasedMarker | ChangelogUnreadable | HistoryUnavailable


# -- ComposeError: local mutation stopped -------------------------------------


@dataclass(frozen=True, slots=True)
class UserDeclinedChangelog:
    path: str


@dataclass(frozen=True, slots=True)
class ComposeFailed:
    step: str
    reason: str
    restored: bool  # changelog backup written back


ComposeError = UserDeclinedChangelog | ComposeFailed


# -- Push gate ----------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PushFailed:
    ref: str
    reason: str
    retry_commands: tuple[str, ...]


ReleaseError = PreconditionError | GenerationError | ComposeError | PushFailed
