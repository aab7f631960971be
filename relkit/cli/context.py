from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relkit.core.config import ReleaseConfig, load_repo_config
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, RichConsole
from relkit.output.errors import error_exit_code, print_release_error


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo: Repository
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(repo_path: Path | None, config_path: Path | None) -> CLIContext:
    """Resolve the repository root once and load its config."""
    console = RichConsole()

    start = repo_path if repo_path is not None else Path.cwd()
    try:
        start = start.expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --repo: {e}")
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    if not start.is_dir():
        console.error(f"not a directory: {start}")
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    root = Repository(start).toplevel()
    if isinstance(root, Err):
        console.error(root.error.message)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    repo = Repository(root.value)
    config = load_repo_config(repo.path, config_path)
    if isinstance(config, Err):
        print_release_error(config.error, console)
        raise typer.Exit(code=error_exit_code(config.error))

    return CLIContext(repo=repo, config=config.value, console=console)
