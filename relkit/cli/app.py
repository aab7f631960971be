from __future__ import annotations

from pathlib import Path

import typer

from relkit import __version__
from relkit.cli.context import build_context
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import Style
from relkit.output.errors import error_exit_code, print_release_error
from relkit.release.semver import normalize_version
from relkit.release.service import Previewed, ReleaseService

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _prompt(message: str) -> bool:
    return typer.confirm(message, default=False)


@app.command()
def release(
    ctx: typer.Context,
    version: str | None = typer.Argument(
        None, metavar="VERSION", help="Version to release: X.Y.Z (a leading v is accepted)."
    ),
    repo: Path | None = typer.Option(
        None, "--repo", help="Repository root (defaults to the current directory)."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (defaults to <repo>/.relkit.toml)."
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept the changelog diff."),
    push: bool | None = typer.Option(
        None, "--push/--no-push", help="Answer the push prompt up front."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the changelog section only."),
    skip_fetch: bool = typer.Option(
        False, "--skip-fetch", help="Use the existing remote-tracking ref."
    ),
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Prepare a release: validate, update [bold]CHANGELOG.md[/bold], commit, tag, push.

    Nothing is pushed without confirmation. Run with no arguments for this help.
    """
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if version is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    cli = build_context(repo, config)
    service = ReleaseService(
        repo=cli.repo,
        config=cli.config,
        console=cli.console,
        confirm_changelog=(lambda _msg: True) if yes else _prompt,
        confirm_push=_prompt if push is None else (lambda _msg: push),
    )

    result = service.release(normalize_version(version), dry_run=dry_run, fetch=not skip_fetch)
    if isinstance(result, Err):
        print_release_error(result.error, cli.console)
        raise typer.Exit(code=error_exit_code(result.error))

    if isinstance(result.value, Previewed):
        cli.console.print("dry run: nothing was written", Style.DIM)
    raise typer.Exit(code=int(ErrorCode.OK))


def main() -> None:
    app()
