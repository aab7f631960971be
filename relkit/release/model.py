from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from relkit.git.repository import LogEntry
from relkit.release.semver import version_tag

__all__ = [
    "Aborted",
    "ChangelogSection",
    "CommitRecord",
    "GateOutcome",
    "LogEntry",
    "Pushed",
    "ReleaseArtifact",
    "ReleaseState",
]


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A commit whose header follows ``type(scope): subject``."""

    sha: str
    type: str
    scope: str | None
    subject: str
    body: str | None
    breaking: bool
    # One entry per BREAKING CHANGE footer, or the subject for ``type!:``.
    breaking_notes: tuple[str, ...] = ()

    @property
    def short_sha(self) -> str:
        return self.sha[:8]


@dataclass(frozen=True, slots=True)
class ChangelogSection:
    """A generated release section, ready to be rendered."""

    version: str
    date: dt.date
    breaking: tuple[str, ...]
    groups: tuple[tuple[str, tuple[str, ...]], ...]
    # Free text carried over from the Unreleased section.
    notes: tuple[str, ...] = ()

    @property
    def heading(self) -> str:
        return f"## [{self.version}] - {self.date.isoformat()}"

    @property
    def is_empty(self) -> bool:
        return not self.breaking and not self.groups and not self.notes


@dataclass(frozen=True, slots=True)
class ReleaseState:
    """Repository facts gathered by the validator for one release attempt."""

    branch: str
    clean: bool
    version: str
    tag_exists: bool
    local_sha: str
    upstream_sha: str
    tests_passed: bool

    @property
    def tag(self) -> str:
        return version_tag(self.version)

    @property
    def diverged(self) -> bool:
        return self.local_sha != self.upstream_sha


@dataclass(frozen=True, slots=True)
class ReleaseArtifact:
    """Local release commit and tag, not yet published."""

    version: str
    tag: str
    changelog_text: str
    commit_sha: str
    tag_sha: str
    branch: str


@dataclass(frozen=True, slots=True)
class Pushed:
    artifact: ReleaseArtifact


@dataclass(frozen=True, slots=True)
class Aborted:
    """Push declined; the artifact stays local."""

    artifact: ReleaseArtifact
    resume_commands: tuple[str, ...]


GateOutcome = Pushed | Aborted
