from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass

from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, Style
from relkit.release.changelog import merge_unreleased, parse_changelog, render_section
from relkit.release.composer import compose
from relkit.release.errors import ChangelogUnreadable, ReleaseError
from relkit.release.gate import push_gate
from relkit.release.generator import generate_for_repo
from relkit.release.model import ChangelogSection, GateOutcome, Pushed
from relkit.release.semver import version_tag
from relkit.release.validator import TestRunner, validate

Confirm = Callable[[str], bool]


@dataclass(frozen=True, slots=True)
class Previewed:
    """Dry run result: what would be inserted into the changelog."""

    section: ChangelogSection
    text: str


ReleaseOutcome = GateOutcome | Previewed


class ReleaseService:
    """Runs validate -> generate -> compose -> push for one version."""

    def __init__(
        self,
        *,
        repo: Repository,
        config: ReleaseConfig,
        console: ConsoleProtocol,
        confirm_changelog: Confirm,
        confirm_push: Confirm,
        run_tests: TestRunner | None = None,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self._repo = repo
        self._config = config
        self._console = console
        self._confirm_changelog = confirm_changelog
        self._confirm_push = confirm_push
        self._run_tests = run_tests
        self._today = today

    def release(
        self, version: str, *, dry_run: bool = False, fetch: bool = True
    ) -> Result[ReleaseOutcome, ReleaseError]:
        console = self._console
        config = self._config
        console.info(f"Preparing release {version_tag(version)}...")

        state = validate(
            self._repo,
            version,
            config,
            console=console,
            run_tests=self._run_tests,
            fetch=fetch,
        )
        if isinstance(state, Err):
            return state

        console.step("Generating changelog")
        changelog_path = self._repo.path / config.changelog
        try:
            changelog_text = changelog_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(ChangelogUnreadable(path=config.changelog, reason=str(e)))

        section = generate_for_repo(
            self._repo,
            version=version,
            changelog_text=changelog_text,
            config=config,
            release_date=self._today(),
        )
        if isinstance(section, Err):
            return section
        if section.value.is_empty:
            console.warning("No conventional commits map to a changelog category")

        if dry_run:
            return Ok(self._preview(changelog_text, section.value))

        artifact = compose(
            self._repo,
            state.value,
            section.value,
            config,
            confirm=self._confirm_changelog,
            console=console,
        )
        if isinstance(artifact, Err):
            return artifact

        outcome = push_gate(
            self._repo,
            artifact.value,
            config,
            confirm=self._confirm_push,
            console=console,
        )
        if isinstance(outcome, Err):
            return outcome

        if isinstance(outcome.value, Pushed):
            self._print_next_steps()
        return outcome

    def _preview(self, changelog_text: str, section: ChangelogSection) -> Previewed:
        doc = parse_changelog(changelog_text, path=self._config.changelog)
        if isinstance(doc, Ok):
            section = merge_unreleased(section, doc.value.unreleased)
        text = render_section(section)
        self._console.info("Dry run: the following section would be added")
        self._console.print(text.rstrip("\n"))
        return Previewed(section=section, text=text)

    def _print_next_steps(self) -> None:
        url = self._config.monitor_url
        if url is None:
            return
        self._console.newline()
        self._console.info("Monitor the release workflow:")
        self._console.print(f"  {url}", Style.DIM)
