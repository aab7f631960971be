from __future__ import annotations

import re

TAG_PREFIX = "v"

_VERSION_RE = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


def is_valid_version(value: str) -> bool:
    """True for plain ``X.Y.Z``; prefixes and pre-release suffixes are rejected."""
    return _VERSION_RE.fullmatch(value) is not None


def normalize_version(value: str) -> str:
    """Strip surrounding whitespace and one leading ``v`` from CLI input."""
    s = value.strip()
    if s[:1] in {"v", "V"}:
        return s[1:]
    return s


def version_tag(version: str) -> str:
    return f"{TAG_PREFIX}{version}"


def release_commit_message(version: str) -> str:
    return f"chore: prepare release {version_tag(version)}"


def release_tag_message(version: str) -> str:
    return f"Release version {version}"
