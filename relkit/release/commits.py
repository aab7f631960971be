"""Conventional commit parsing.

Only the header (first line) decides whether a commit takes part in the
changelog. Anything that does not look like ``type(scope): subject`` is
dropped; merge commits and free-form messages are expected in real history.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from relkit.release.model import CommitRecord, LogEntry

_HEADER_RE = re.compile(
    r"^(?P<type>[A-Za-z][A-Za-z0-9_-]*)"
    r"(?:\((?P<scope>[^()\r\n]*)\))?"
    r"(?P<bang>!)?"
    r": (?P<subject>\S.*)$"
)

_BREAKING_RE = re.compile(r"^BREAKING[ -]CHANGE:\s*(?P<note>.*)$")
# Any git trailer: "Token: value" or "Token #value".
_FOOTER_RE = re.compile(r"^(?:BREAKING[ -]CHANGE|[A-Za-z0-9-]+)(?:: | #)")


def parse_commit(entry: LogEntry) -> CommitRecord | None:
    """Parse one raw commit, or return None if its header is not conventional."""
    lines = entry.message.strip().splitlines()
    if not lines:
        return None

    m = _HEADER_RE.match(lines[0].strip())
    if m is None:
        return None

    body = "\n".join(lines[1:]).strip() or None
    notes = _breaking_notes(lines[1:])
    bang = m.group("bang") is not None
    subject = m.group("subject").strip()
    scope = (m.group("scope") or "").strip() or None

    if not notes and bang:
        notes = (subject,)

    return CommitRecord(
        sha=entry.sha,
        type=m.group("type").lower(),
        scope=scope,
        subject=subject,
        body=body,
        breaking=bang or bool(notes),
        breaking_notes=notes,
    )


def parse_log(entries: Iterable[LogEntry]) -> list[CommitRecord]:
    """Parse commits in the given order, skipping non-conventional ones."""
    out: list[CommitRecord] = []
    for entry in entries:
        record = parse_commit(entry)
        if record is not None:
            out.append(record)
    return out


def _breaking_notes(lines: list[str]) -> tuple[str, ...]:
    """Every BREAKING CHANGE footer, with its continuation lines joined.

    A footer runs until the next trailer token; blank lines inside it are
    dropped and the remaining lines are folded into one line.
    """
    notes: list[str] = []
    current: list[str] | None = None

    def flush() -> None:
        if current:
            notes.append(" ".join(current))

    for line in lines:
        text = line.strip()
        m = _BREAKING_RE.match(text)
        if m is not None:
            flush()
            first = m.group("note").strip()
            current = [first] if first else []
        elif _FOOTER_RE.match(text):
            flush()
            current = None
        elif current is not None and text:
            current.append(text)
    flush()
    return tuple(notes)
