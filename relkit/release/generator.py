"""Changelog section generation from commit history.

Entries are listed oldest first within each category, matching the order
``git log --reverse`` yields them; ``newest_first=True`` flips that. No other
ordering is applied, so the same commit range and mapping always render the
same bytes.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping, Sequence

from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import GitError, Repository
from relkit.release.changelog import has_unreleased_marker
from relkit.release.commits import parse_log
from relkit.release.errors import GenerationError, HistoryUnavailable, MissingUnreleasedMarker
from relkit.release.model import ChangelogSection, CommitRecord, LogEntry
from relkit.release.semver import TAG_PREFIX


def format_entry(record: CommitRecord) -> str:
    if record.scope:
        return f"**{record.scope}:** {record.subject}"
    return record.subject


def group_by_category(
    records: Sequence[CommitRecord], categories: Mapping[str, str]
) -> tuple[tuple[str, tuple[str, ...]], ...]:
    """Group entries by category title, in the mapping's category order.

    Types missing from ``categories`` are skipped; empty categories are
    left out.
    """
    buckets: dict[str, list[str]] = {}
    for title in categories.values():
        buckets.setdefault(title, [])

    for record in records:
        title = categories.get(record.type)
        if title is None:
            continue
        buckets[title].append(format_entry(record))

    return tuple((title, tuple(entries)) for title, entries in buckets.items() if entries)


def generate_section(
    entries: Sequence[LogEntry],
    *,
    version: str,
    changelog_text: str,
    categories: Mapping[str, str],
    release_date: dt.date,
    newest_first: bool = False,
    changelog_path: str = "CHANGELOG.md",
) -> Result[ChangelogSection, MissingUnreleasedMarker]:
    """Build the changelog section for ``version``.

    Args:
        entries: Raw commits since the last release, oldest first
        version: Release version (``X.Y.Z``)
        changelog_text: Current changelog content; must have an Unreleased heading
        categories: Commit type to category title
        release_date: Date printed in the section heading
        newest_first: List entries newest first instead of oldest first
        changelog_path: Path used in error reports
    """
    if not has_unreleased_marker(changelog_text):
        return Err(MissingUnreleasedMarker(path=changelog_path))

    records = parse_log(entries)
    if newest_first:
        records.reverse()

    breaking = tuple(note for r in records for note in r.breaking_notes)

    return Ok(
        ChangelogSection(
            version=version,
            date=release_date,
            breaking=breaking,
            groups=group_by_category(records, categories),
        )
    )


def commits_since_last_release(repo: Repository) -> Result[list[LogEntry], GitError]:
    """Raw commits after the latest ``v*`` tag, or the whole history if untagged."""
    last_tag = repo.latest_tag(f"{TAG_PREFIX}*")
    return repo.log(since=last_tag)


def generate_for_repo(
    repo: Repository,
    *,
    version: str,
    changelog_text: str,
    config: ReleaseConfig,
    release_date: dt.date | None = None,
) -> Result[ChangelogSection, GenerationError]:
    """Generate the section for ``version`` from the repository's history."""
    if not has_unreleased_marker(changelog_text):
        return Err(MissingUnreleasedMarker(path=config.changelog))

    log = commits_since_last_release(repo)
    if isinstance(log, Err):
        return Err(HistoryUnavailable(reason=log.error.message))

    return generate_section(
        log.value,
        version=version,
        changelog_text=changelog_text,
        categories=config.category_map(),
        release_date=release_date or dt.date.today(),
        newest_first=config.newest_first,
        changelog_path=config.changelog,
    )
