"""Shared fixtures: throwaway git repositories with an ``upstream`` remote."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pytest

from relkit.git.repository import Repository

CHANGELOG = """# Changelog

All notable changes to this project will be documented in this file.

## [Unreleased]

## [1.0.0] - 2024-01-10

### Added

- Initial release
"""


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
    )
    if result.returncode != 0:
        raise RuntimeError(
            f"git {' '.join(args)} failed (code {result.returncode}): {result.stderr.strip()}"
        )
    return result.stdout.strip()


@dataclass
class GitSandbox:
    """A working clone on ``main`` plus the bare repository it pushes to."""

    root: Path
    remote: Path

    @property
    def repo(self) -> Repository:
        return Repository(self.root)

    def git(self, *args: str) -> str:
        return git(self.root, *args)

    def commit(self, message: str, filename: str = "src.txt") -> str:
        path = self.root / filename
        previous = path.read_text(encoding="utf-8") if path.exists() else ""
        path.write_text(previous + message + "\n", encoding="utf-8")
        self.git("add", filename)
        self.git("commit", "-q", "-m", message)
        return self.git("rev-parse", "HEAD")

    def sync(self) -> None:
        self.git("push", "-q", "upstream", "main")

    def remote_git(self, *args: str) -> str:
        return git(self.remote, *args)

    def push_from_clone(self, message: str) -> str:
        """Advance upstream/main from a second clone, leaving this one behind."""
        other = self.root.parent / "elsewhere"
        if not other.exists():
            git(self.root.parent, "clone", "-q", self.remote.as_uri(), str(other))
        (other / "elsewhere.txt").write_text(message + "\n", encoding="utf-8")
        git(other, "add", "elsewhere.txt")
        git(other, "commit", "-q", "-m", message)
        git(other, "push", "-q", "origin", "main")
        return git(other, "rev-parse", "HEAD")


@pytest.fixture
def git_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Isolate git from the user's global and system config."""
    if shutil.which("git") is None:
        pytest.skip("git not available")
    home_config = tmp_path / "gitconfig"
    home_config.write_text("", encoding="utf-8")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(home_config))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Release Bot")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "release@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Release Bot")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "release@example.com")


@pytest.fixture
def sandbox(tmp_path: Path, git_env: None) -> GitSandbox:
    """Repository on ``main`` with a changelog, in sync with ``upstream/main``."""
    remote = tmp_path / "upstream.git"
    root = tmp_path / "work"
    git(tmp_path, "init", "-q", "--bare", "-b", "main", str(remote))
    root.mkdir()
    git(root, "init", "-q", "-b", "main")
    git(root, "remote", "add", "upstream", remote.as_uri())

    (root / "CHANGELOG.md").write_text(CHANGELOG, encoding="utf-8")
    git(root, "add", "CHANGELOG.md")
    git(root, "commit", "-q", "-m", "chore: prepare release v1.0.0")
    git(root, "tag", "-a", "v1.0.0", "-m", "Release version 1.0.0")
    git(root, "push", "-q", "upstream", "main")
    git(root, "push", "-q", "upstream", "v1.0.0")
    return GitSandbox(root=root, remote=remote)
