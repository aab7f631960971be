"""Structured CHANGELOG.md model.

The file is split into a preamble plus an ordered list of ``## `` sections.
Every line is kept as read, line ending included, so rendering an unchanged
document gives back the original bytes:

    <preamble>

    ## [Unreleased]

    ## [1.1.0] - 2024-05-02
    ### Added
    - ...

``with_release`` only rewrites the Unreleased section and inserts the new
release below it, using the newline style of the file. ``## `` lines inside
fenced code blocks are not headings.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace

from relkit.core.result import Err, Ok, Result
from relkit.release.errors import MissingUnreleasedMarker
from relkit.release.model import ChangelogSection

UNRELEASED_HEADING = "## [Unreleased]"
BREAKING_TITLE = "Breaking Changes"

_SECTION_PREFIX = "## "
_CATEGORY_PREFIX = "### "
_BULLETS = ("- ", "* ")
_FENCES = ("```", "~~~")


@dataclass(frozen=True, slots=True)
class CategoryBlock:
    title: str
    entries: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class VersionSection:
    """One ``## `` section. ``heading`` and ``body`` hold raw lines."""

    heading: str
    body: tuple[str, ...]

    @property
    def is_unreleased(self) -> bool:
        return self.heading.rstrip() == UNRELEASED_HEADING

    def split_blocks(self) -> tuple[tuple[str, ...], tuple[CategoryBlock, ...]]:
        """Split the body into free text and ``### Category`` blocks."""
        free: list[str] = []
        blocks: list[CategoryBlock] = []
        title: str | None = None
        entries: list[str] = []

        def flush() -> None:
            if title is not None and entries:
                blocks.append(CategoryBlock(title=title, entries=tuple(entries)))

        for raw in self.body:
            line = raw.rstrip()
            if line.startswith(_CATEGORY_PREFIX):
                flush()
                title = line[len(_CATEGORY_PREFIX) :].strip()
                entries = []
                continue
            if not line.strip():
                continue
            if title is None:
                free.append(line)
            elif line.startswith(_BULLETS):
                entries.append(line[2:].strip())
            elif entries:
                # Continuation of the previous bullet.
                entries[-1] = f"{entries[-1]}\n{line}"
            else:
                entries.append(line.strip())
        flush()
        return (tuple(free), tuple(blocks))


@dataclass(frozen=True, slots=True)
class ChangelogDocument:
    preamble: tuple[str, ...]
    sections: tuple[VersionSection, ...]
    # Line ending used for generated lines.
    newline: str = "\n"

    @property
    def unreleased_index(self) -> int:
        for i, section in enumerate(self.sections):
            if section.is_unreleased:
                return i
        raise ValueError("changelog has no Unreleased section")

    @property
    def unreleased(self) -> VersionSection:
        return self.sections[self.unreleased_index]

    def with_release(self, section: ChangelogSection) -> ChangelogDocument:
        """Insert a release directly below Unreleased, leaving Unreleased empty.

        Entries already collected under Unreleased move into the release.
        The blank lines that closed Unreleased now close the release.
        """
        nl = self.newline
        idx = self.unreleased_index
        current = self.sections[idx]
        merged = merge_unreleased(section, current)

        gap = _trailing_blank(current.body)
        if not gap and idx + 1 < len(self.sections):
            gap = (nl,)

        lines = section_lines(merged)
        released = VersionSection(
            heading=f"{lines[0]}{nl}",
            body=tuple(f"{part}{nl}" for line in lines[1:] for part in line.split("\n")) + gap,
        )
        heading = current.heading if current.heading.endswith("\n") else f"{current.heading}{nl}"
        emptied = VersionSection(heading=heading, body=(nl,))

        sections = list(self.sections)
        sections[idx] = emptied
        sections.insert(idx + 1, released)
        return replace(self, sections=tuple(sections))

    def render(self) -> str:
        out: list[str] = list(self.preamble)
        for section in self.sections:
            out.append(section.heading)
            out.extend(section.body)
        return "".join(out)


def has_unreleased_marker(text: str) -> bool:
    return any(
        is_heading and line.rstrip() == UNRELEASED_HEADING
        for line, is_heading in _scan(_raw_lines(text))
    )


def parse_changelog(
    text: str, *, path: str = "CHANGELOG.md"
) -> Result[ChangelogDocument, MissingUnreleasedMarker]:
    """Parse changelog text; it must contain a ``## [Unreleased]`` heading."""
    if not has_unreleased_marker(text):
        return Err(MissingUnreleasedMarker(path=path))

    preamble: list[str] = []
    sections: list[VersionSection] = []
    heading: str | None = None
    body: list[str] = []

    for line, is_heading in _scan(_raw_lines(text)):
        if is_heading:
            if heading is not None:
                sections.append(VersionSection(heading=heading, body=tuple(body)))
            heading = line
            body = []
        elif heading is None:
            preamble.append(line)
        else:
            body.append(line)

    if heading is not None:
        sections.append(VersionSection(heading=heading, body=tuple(body)))

    return Ok(
        ChangelogDocument(
            preamble=tuple(preamble),
            sections=tuple(sections),
            newline="\r\n" if "\r\n" in text else "\n",
        )
    )


def merge_unreleased(section: ChangelogSection, unreleased: VersionSection) -> ChangelogSection:
    """Fold entries written by hand under Unreleased into a generated section.

    Hand-written entries follow generated ones within a category; categories
    that were not generated are appended after the generated ones.
    """
    free, blocks = unreleased.split_blocks()
    if not free and not blocks:
        return section

    breaking = list(section.breaking)
    groups: dict[str, list[str]] = {title: list(entries) for title, entries in section.groups}
    for block in blocks:
        if block.title == BREAKING_TITLE:
            breaking.extend(block.entries)
            continue
        groups.setdefault(block.title, []).extend(block.entries)

    return replace(
        section,
        breaking=tuple(breaking),
        groups=tuple((title, tuple(entries)) for title, entries in groups.items()),
        notes=section.notes + free,
    )


def section_lines(section: ChangelogSection) -> list[str]:
    lines = [section.heading]
    lines.extend(section.notes)
    if section.breaking:
        lines.append(f"{_CATEGORY_PREFIX}{BREAKING_TITLE}")
        lines.extend(f"- {entry}" for entry in section.breaking)
    for title, entries in section.groups:
        lines.append(f"{_CATEGORY_PREFIX}{title}")
        lines.extend(f"- {entry}" for entry in entries)
    return lines


def render_section(section: ChangelogSection) -> str:
    return "\n".join(section_lines(section)) + "\n"


def _raw_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, keeping each line's ending (``\\r\\n`` stays whole)."""
    lines = [f"{line}\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def _scan(lines: list[str]) -> Iterator[tuple[str, bool]]:
    """Yield each line with whether it is a ``## `` heading outside a code fence."""
    fence: str | None = None
    for line in lines:
        marker = line.lstrip()[:3]
        if fence is None and marker in _FENCES:
            fence = marker
        elif fence is not None and marker == fence:
            fence = None
        elif fence is None and line.startswith(_SECTION_PREFIX):
            yield (line, True)
            continue
        yield (line, False)


def _trailing_blank(lines: tuple[str, ...]) -> tuple[str, ...]:
    end = len(lines)
    start = end
    while start > 0 and not lines[start - 1].strip():
        start -= 1
    return lines[start:end]
