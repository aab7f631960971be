"""Tests for git/repository.py."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from relkit.core.result import Err, Ok, Result
from relkit.git.repository import GitStatus, LogEntry, Repository, StatusEntry
from relkit.platform.process import ProcessError

if TYPE_CHECKING:
    from relkit.test.conftest import GitSandbox


class TestGitStatus:
    def test_clean(self) -> None:
        assert GitStatus(branch="main").is_clean

    def test_dirty(self) -> None:
        status = GitStatus(branch="main", entries=(StatusEntry(xy=" M", path="a.py"),))
        assert not status.is_clean


class TestParsing:
    """Output parsers, fed with captured git output."""

    def test_parse_status_strips_upstream_from_branch(self) -> None:
        repo = Repository(Path("."))
        status = repo._parse_status(  # pyright: ignore[reportPrivateUsage]
            "## main...upstream/main [ahead 2, behind 1]\n M CHANGELOG.md\nA  src/new.py\n"
        )
        assert status.branch == "main"
        assert [e.path for e in status.entries] == ["CHANGELOG.md", "src/new.py"]

    def test_parse_status_without_upstream_is_clean(self) -> None:
        repo = Repository(Path("."))
        status = repo._parse_status("## main\n")  # pyright: ignore[reportPrivateUsage]
        assert status.branch == "main"
        assert status.is_clean

    def test_parse_log_keeps_multiline_messages(self) -> None:
        repo = Repository(Path("."))
        output = (
            "aaa\x1ffeat(api): add endpoint\n\nBREAKING CHANGE: v1 removed\n\x1e\n"
            "bbb\x1ffix: typo\n\x1e\n"
        )
        entries = repo._parse_log(output)  # pyright: ignore[reportPrivateUsage]
        assert entries == [
            LogEntry(sha="aaa", message="feat(api): add endpoint\n\nBREAKING CHANGE: v1 removed"),
            LogEntry(sha="bbb", message="fix: typo"),
        ]

    def test_parse_log_empty(self) -> None:
        assert Repository(Path("."))._parse_log("") == []  # pyright: ignore[reportPrivateUsage]


class TestCommandConstruction:
    def test_runs_git_with_dash_c(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        import relkit.git.repository as repository

        seen: list[tuple[list[str], float | None]] = []

        def fake_run(
            cmd: list[str],
            cwd: Path,
            env: dict[str, str] | None = None,
            *,
            timeout: float | None = None,
        ) -> Result[str, ProcessError]:
            seen.append((cmd, timeout))
            return Ok("")

        monkeypatch.setattr(repository, "run_process", fake_run)

        repo = Repository(tmp_path)
        repo.push("upstream", "v1.2.3")
        repo.diff("CHANGELOG.md")

        push_cmd, push_timeout = seen[0]
        diff_cmd, diff_timeout = seen[1]
        assert push_cmd == ["git", "-C", str(tmp_path), "push", "upstream", "v1.2.3"]
        assert diff_cmd[3:] == ["--no-pager", "diff", "--", "CHANGELOG.md"]
        assert push_timeout is not None and diff_timeout is not None
        assert push_timeout > diff_timeout

    def test_error_prefers_stderr(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        import relkit.git.repository as repository

        def fake_run(
            cmd: list[str],
            cwd: Path,
            env: dict[str, str] | None = None,
            *,
            timeout: float | None = None,
        ) -> Result[str, ProcessError]:
            return Err(ProcessError(tuple(cmd), 128, "", "fatal: unable to access remote\n"))

        monkeypatch.setattr(repository, "run_process", fake_run)

        result = Repository(tmp_path).push("upstream", "main")
        assert isinstance(result, Err)
        assert result.error.message == "fatal: unable to access remote"
        assert result.error.returncode == 128
        assert result.error.command == "push upstream main"


class TestRepositoryWithGit:
    """Against a real throwaway repository."""

    def test_toplevel_from_subdirectory(self, sandbox: GitSandbox) -> None:
        sub = sandbox.root / "docs"
        sub.mkdir()
        result = Repository(sub).toplevel()
        assert isinstance(result, Ok)
        assert result.value.resolve() == sandbox.root.resolve()

    def test_toplevel_outside_repo(self, tmp_path: Path, git_env: None) -> None:
        outside = tmp_path / "plain"
        outside.mkdir()
        assert isinstance(Repository(outside).toplevel(), Err)

    def test_branch_and_clean_status(self, sandbox: GitSandbox) -> None:
        assert sandbox.repo.current_branch() == "main"
        status = sandbox.repo.status()
        assert isinstance(status, Ok)
        assert status.value.is_clean

    def test_untracked_files_do_not_dirty_status(self, sandbox: GitSandbox) -> None:
        (sandbox.root / "scratch.txt").write_text("x", encoding="utf-8")
        status = sandbox.repo.status()
        assert isinstance(status, Ok)
        assert status.value.is_clean

    def test_modified_file_dirties_status(self, sandbox: GitSandbox) -> None:
        (sandbox.root / "CHANGELOG.md").write_text("changed\n", encoding="utf-8")
        status = sandbox.repo.status()
        assert isinstance(status, Ok)
        assert [e.path for e in status.value.entries] == ["CHANGELOG.md"]

    def test_detached_head_has_no_branch(self, sandbox: GitSandbox) -> None:
        sandbox.git("checkout", "-q", "--detach")
        assert sandbox.repo.current_branch() is None

    def test_tags(self, sandbox: GitSandbox) -> None:
        assert sandbox.repo.tag_exists("v1.0.0")
        assert not sandbox.repo.tag_exists("v9.9.9")
        assert sandbox.repo.latest_tag("v*") == "v1.0.0"
        assert sandbox.repo.latest_tag("release-*") is None

    def test_log_since_tag_oldest_first(self, sandbox: GitSandbox) -> None:
        sandbox.commit("feat: first")
        sandbox.commit("fix: second\n\nbody line")
        result = sandbox.repo.log("v1.0.0")
        assert isinstance(result, Ok)
        assert [e.message for e in result.value] == ["feat: first", "fix: second\n\nbody line"]

    def test_log_whole_history(self, sandbox: GitSandbox) -> None:
        result = sandbox.repo.log()
        assert isinstance(result, Ok)
        assert [e.message for e in result.value] == ["chore: prepare release v1.0.0"]

    def test_rev_parse_remote_tracking_ref(self, sandbox: GitSandbox) -> None:
        head = sandbox.repo.rev_parse("HEAD")
        upstream = sandbox.repo.rev_parse("upstream/main")
        assert isinstance(head, Ok) and isinstance(upstream, Ok)
        assert head.value == upstream.value
        assert isinstance(sandbox.repo.rev_parse("upstream/nope"), Err)

    def test_commit_tag_and_push(self, sandbox: GitSandbox) -> None:
        repo = sandbox.repo
        (sandbox.root / "CHANGELOG.md").write_text("# Changelog\n", encoding="utf-8")
        assert repo.add("CHANGELOG.md") == Ok(None)

        sha = repo.commit("chore: prepare release v1.1.0")
        assert isinstance(sha, Ok)
        assert sha.value == sandbox.git("rev-parse", "HEAD")

        tag = repo.create_annotated_tag("v1.1.0", "Release version 1.1.0")
        assert isinstance(tag, Ok)
        assert sandbox.git("cat-file", "-t", tag.value) == "tag"
        assert sandbox.git("tag", "-l", "--format=%(contents:subject)", "v1.1.0") == (
            "Release version 1.1.0"
        )

        assert isinstance(repo.push("upstream", "main"), Ok)
        assert isinstance(repo.push("upstream", "v1.1.0"), Ok)
        assert sandbox.remote_git("rev-parse", "main") == sha.value
        assert sandbox.remote_git("tag", "-l", "v1.1.0") == "v1.1.0"

    def test_unstage(self, sandbox: GitSandbox) -> None:
        (sandbox.root / "CHANGELOG.md").write_text("staged\n", encoding="utf-8")
        sandbox.repo.add("CHANGELOG.md")
        assert sandbox.repo.unstage("CHANGELOG.md") == Ok(None)
        assert sandbox.git("diff", "--cached", "--name-only") == ""

    def test_diff(self, sandbox: GitSandbox) -> None:
        path = sandbox.root / "CHANGELOG.md"
        path.write_text(path.read_text(encoding="utf-8") + "extra\n", encoding="utf-8")
        diff = sandbox.repo.diff("CHANGELOG.md")
        assert isinstance(diff, Ok)
        assert "+extra" in diff.value

    def test_fetch_unknown_remote(self, sandbox: GitSandbox) -> None:
        result = sandbox.repo.fetch("nowhere")
        assert isinstance(result, Err)
        assert result.error.command == "fetch nowhere"
