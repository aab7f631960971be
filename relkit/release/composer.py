"""Local release composition: changelog update, commit, annotated tag.

The changelog is backed up in memory before it is rewritten. The backup is
written back verbatim when the user rejects the diff or when git fails before
a commit exists. Once the release commit exists it is never undone here.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, Style
from relkit.release.changelog import parse_changelog
from relkit.release.errors import ComposeError, ComposeFailed, UserDeclinedChangelog
from relkit.release.model import ChangelogSection, ReleaseArtifact, ReleaseState
from relkit.release.semver import release_commit_message, release_tag_message

Confirm = Callable[[str], bool]

CHANGELOG_PROMPT = "Does this look correct?"


def _restore(path: Path, backup: bytes) -> bool:
    try:
        path.write_bytes(backup)
    except OSError:
        return False
    return True


def compose(
    repo: Repository,
    state: ReleaseState,
    section: ChangelogSection,
    config: ReleaseConfig,
    *,
    confirm: Confirm,
    console: ConsoleProtocol,
) -> Result[ReleaseArtifact, ComposeError]:
    """Write the release section, confirm the diff, then commit and tag.

    Args:
        repo: Repository being released
        state: Validated release state
        section: Generated changelog section for ``state.version``
        config: Release configuration
        confirm: Decision callback for the changelog diff
        console: Progress output
    """
    rel_path = config.changelog
    path = repo.path / rel_path

    console.step(f"Updating {rel_path}")
    try:
        backup = path.read_bytes()
    except OSError as e:
        return Err(ComposeFailed(step="read changelog", reason=str(e), restored=False))

    try:
        text = backup.decode("utf-8")
    except UnicodeDecodeError as e:
        return Err(ComposeFailed(step="read changelog", reason=str(e), restored=False))

    doc = parse_changelog(text, path=rel_path)
    if isinstance(doc, Err):
        return Err(
            ComposeFailed(
                step="parse changelog",
                reason=f"{rel_path} has no '## [Unreleased]' section",
                restored=False,
            )
        )

    updated = doc.value.with_release(section).render()
    try:
        path.write_bytes(updated.encode("utf-8"))
    except OSError as e:
        return Err(
            ComposeFailed(step="write changelog", reason=str(e), restored=_restore(path, backup))
        )

    diff = repo.diff(rel_path)
    if isinstance(diff, Err):
        return Err(
            ComposeFailed(
                step="diff changelog", reason=diff.error.message, restored=_restore(path, backup)
            )
        )
    console.info(f"Please review the changes in {rel_path}")
    console.diff(diff.value)

    if not confirm(CHANGELOG_PROMPT):
        console.info(f"Restoring {rel_path}...")
        if not _restore(path, backup):
            return Err(
                ComposeFailed(step="restore changelog", reason="write failed", restored=False)
            )
        return Err(UserDeclinedChangelog(path=rel_path))

    console.step(f"Creating release {state.tag}")

    added = repo.add(rel_path)
    if isinstance(added, Err):
        return Err(
            ComposeFailed(step="git add", reason=added.error.message, restored=_restore(path, backup))
        )

    committed = repo.commit(release_commit_message(state.version))
    if isinstance(committed, Err):
        repo.unstage(rel_path)
        return Err(
            ComposeFailed(
                step="git commit",
                reason=committed.error.message,
                restored=_restore(path, backup),
            )
        )
    console.print(f"commit {committed.value[:12]}", Style.DIM)

    console.info("Creating annotated tag...")
    tagged = repo.create_annotated_tag(state.tag, release_tag_message(state.version))
    if isinstance(tagged, Err):
        return Err(ComposeFailed(step="git tag", reason=tagged.error.message, restored=False))

    console.success(f"Release {state.tag} prepared locally")
    return Ok(
        ReleaseArtifact(
            version=state.version,
            tag=state.tag,
            changelog_text=updated,
            commit_sha=committed.value,
            tag_sha=tagged.value,
            branch=state.branch,
        )
    )
