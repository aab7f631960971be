"""Tests for the relkit command line."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from typer.testing import CliRunner

from relkit import __version__
from relkit.cli.app import app
from relkit.core.errors import ErrorCode

if TYPE_CHECKING:
    from relkit.test.conftest import GitSandbox

runner = CliRunner()


def _configure(sandbox: GitSandbox) -> None:
    # Untracked, so it does not dirty the tree.
    (sandbox.root / ".relkit.toml").write_text(
        'test_command = ["git", "--version"]\n', encoding="utf-8"
    )


class TestHelpAndVersion:
    def test_no_arguments_prints_usage(self) -> None:
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_help_flags(self) -> None:
        for flag in ("--help", "-h"):
            result = runner.invoke(app, [flag])
            assert result.exit_code == 0
            assert "VERSION" in result.output

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == __version__


class TestRelease:
    def test_full_release_with_leading_v(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        sandbox.commit("feat: add login")
        sandbox.sync()

        result = runner.invoke(app, ["--repo", str(sandbox.root), "--yes", "--push", "v1.1.0"])

        assert result.exit_code == 0, result.output
        assert sandbox.remote_git("tag", "-l", "v1.1.0") == "v1.1.0"
        changelog = (sandbox.root / "CHANGELOG.md").read_text(encoding="utf-8")
        assert "### Added\n- add login\n" in changelog

    def test_interactive_prompts(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        sandbox.commit("fix: crash on start")
        sandbox.sync()

        result = runner.invoke(app, ["--repo", str(sandbox.root), "1.0.1"], input="y\nn\n")

        assert result.exit_code == 0, result.output
        assert "Does this look correct?" in result.output
        assert "Push release to upstream?" in result.output
        assert "git push upstream v1.0.1" in result.output
        assert sandbox.repo.tag_exists("v1.0.1")
        assert sandbox.remote_git("tag", "-l", "v1.0.1") == ""

    def test_declined_changelog_exit_code(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        before = (sandbox.root / "CHANGELOG.md").read_bytes()

        result = runner.invoke(app, ["--repo", str(sandbox.root), "1.0.1"], input="n\n")

        assert result.exit_code == int(ErrorCode.USER_DECLINED)
        assert (sandbox.root / "CHANGELOG.md").read_bytes() == before

    def test_invalid_version(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        result = runner.invoke(app, ["--repo", str(sandbox.root), "1.2"])
        assert result.exit_code == int(ErrorCode.INVALID_VERSION)
        assert "Invalid version format: 1.2" in result.output

    def test_tag_exists(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        result = runner.invoke(app, ["--repo", str(sandbox.root), "1.0.0"])
        assert result.exit_code == int(ErrorCode.TAG_EXISTS)
        assert "git tag -d v1.0.0" in result.output

    def test_dirty_tree(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        (sandbox.root / "CHANGELOG.md").write_text("edited\n", encoding="utf-8")
        result = runner.invoke(app, ["--repo", str(sandbox.root), "1.2"])
        assert result.exit_code == int(ErrorCode.DIRTY_TREE)

    def test_dry_run(self, sandbox: GitSandbox) -> None:
        _configure(sandbox)
        sandbox.commit("feat: preview me")
        sandbox.sync()
        before = (sandbox.root / "CHANGELOG.md").read_bytes()

        result = runner.invoke(app, ["--repo", str(sandbox.root), "--dry-run", "1.1.0"])

        assert result.exit_code == 0, result.output
        assert "- preview me" in result.output
        assert (sandbox.root / "CHANGELOG.md").read_bytes() == before

    def test_bad_config(self, sandbox: GitSandbox) -> None:
        (sandbox.root / ".relkit.toml").write_text("test_command = 3\n", encoding="utf-8")
        result = runner.invoke(app, ["--repo", str(sandbox.root), "1.1.0"])
        assert result.exit_code == int(ErrorCode.CONFIG_ERROR)

    def test_not_a_repository(self, tmp_path: Path, git_env: None) -> None:
        result = runner.invoke(app, ["--repo", str(tmp_path), "1.1.0"])
        assert result.exit_code == int(ErrorCode.USAGE_ERROR)
