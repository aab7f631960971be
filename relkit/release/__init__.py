"""Release workflow: validate, generate changelog, compose, push."""

from relkit.release.errors import (
    GenerationError,
    PreconditionError,
    PushFailed,
    ReleaseError,
)
from relkit.release.model import (
    Aborted,
    ChangelogSection,
    CommitRecord,
    GateOutcome,
    Pushed,
    ReleaseArtifact,
    ReleaseState,
)
from relkit.release.service import Previewed, ReleaseOutcome, ReleaseService

__all__ = [
    "Aborted",
    "ChangelogSection",
    "CommitRecord",
    "GateOutcome",
    "GenerationError",
    "PreconditionError",
    "Previewed",
    "PushFailed",
    "Pushed",
    "ReleaseArtifact",
    "ReleaseError",
    "ReleaseOutcome",
    "ReleaseService",
    "ReleaseState",
]
