"""Release preconditions.

Checks run in a fixed order and stop at the first failure:

1. on the release branch
2. clean working tree (tracked files)
3. version is ``X.Y.Z``
4. tag ``vX.Y.Z`` does not exist
5. HEAD matches ``<remote>/<branch>`` after a fetch
6. the test command passes

Nothing here writes to the working tree. Fetching updates remote-tracking
refs only.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol, Style
from relkit.platform.process import ProcessError, run_silent
from relkit.release.errors import (
    BranchMismatch,
    DirtyTree,
    InvalidVersionFormat,
    OutOfSyncWithUpstream,
    PreconditionError,
    TagAlreadyExists,
    TestsFailing,
)
from relkit.release.model import ReleaseState
from relkit.release.semver import is_valid_version, version_tag

TestRunner = Callable[[list[str], Path], Result[None, ProcessError]]


def _default_test_runner(cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
    return run_silent(cmd, cwd=cwd)


def check_branch(repo: Repository, config: ReleaseConfig) -> Result[str, BranchMismatch]:
    branch = repo.current_branch()
    if branch != config.release_branch:
        return Err(BranchMismatch(expected=config.release_branch, actual=branch))
    return Ok(branch)


def check_clean(repo: Repository) -> Result[None, DirtyTree]:
    status = repo.status()
    if isinstance(status, Err):
        return Err(DirtyTree(reason=status.error.message))
    if not status.value.is_clean:
        return Err(DirtyTree(paths=tuple(e.path for e in status.value.entries)))
    return Ok(None)


def check_version(version: str) -> Result[str, InvalidVersionFormat]:
    if not is_valid_version(version):
        return Err(InvalidVersionFormat(value=version))
    return Ok(version)


def check_tag_absent(
    repo: Repository, version: str, config: ReleaseConfig
) -> Result[None, TagAlreadyExists]:
    tag = version_tag(version)
    if repo.tag_exists(tag):
        return Err(TagAlreadyExists(tag=tag, remote=config.remote))
    return Ok(None)


def check_upstream(
    repo: Repository, config: ReleaseConfig, *, fetch: bool
) -> Result[tuple[str, str], OutOfSyncWithUpstream]:
    """Compare HEAD with the upstream tracking ref; returns (local, upstream) shas."""
    remote = config.remote
    branch = config.release_branch

    if fetch:
        fetched = repo.fetch(remote)
        if isinstance(fetched, Err):
            return Err(
                OutOfSyncWithUpstream(
                    remote=remote, branch=branch, reason=f"fetch failed: {fetched.error.message}"
                )
            )

    local = repo.rev_parse("HEAD")
    if isinstance(local, Err):
        return Err(OutOfSyncWithUpstream(remote=remote, branch=branch, reason=local.error.message))

    upstream = repo.rev_parse(config.upstream_ref)
    if isinstance(upstream, Err):
        return Err(
            OutOfSyncWithUpstream(
                remote=remote,
                branch=branch,
                local_sha=local.value,
                reason=upstream.error.message,
            )
        )

    if local.value != upstream.value:
        return Err(
            OutOfSyncWithUpstream(
                remote=remote,
                branch=branch,
                local_sha=local.value,
                upstream_sha=upstream.value,
            )
        )
    return Ok((local.value, upstream.value))


def check_tests(
    repo: Repository, config: ReleaseConfig, *, run_tests: TestRunner
) -> Result[None, TestsFailing]:
    result = run_tests(list(config.test_command), repo.path)
    if isinstance(result, Err):
        return Err(TestsFailing(command=config.test_command, returncode=result.error.returncode))
    return Ok(None)


def validate(
    repo: Repository,
    version: str,
    config: ReleaseConfig,
    *,
    console: ConsoleProtocol,
    run_tests: TestRunner | None = None,
    fetch: bool = True,
) -> Result[ReleaseState, PreconditionError]:
    """Run all preconditions for releasing ``version`` from ``repo``.

    Args:
        repo: Repository to release from
        version: Candidate version, already stripped of any leading ``v``
        config: Release configuration
        console: Progress output
        run_tests: Test command runner (defaults to running it in the foreground)
        fetch: Fetch the remote before comparing with it

    Returns:
        Ok(ReleaseState) when every check passes, otherwise the first failure
    """
    branch = check_branch(repo, config)
    if isinstance(branch, Err):
        return branch

    clean = check_clean(repo)
    if isinstance(clean, Err):
        return clean

    valid = check_version(version)
    if isinstance(valid, Err):
        return valid

    absent = check_tag_absent(repo, version, config)
    if isinstance(absent, Err):
        return absent

    if fetch:
        console.step(f"Fetching {config.remote}")
    synced = check_upstream(repo, config, fetch=fetch)
    if isinstance(synced, Err):
        return synced
    local_sha, upstream_sha = synced.value

    console.step("Running tests")
    console.print(f"$ {' '.join(config.test_command)}", Style.DIM)
    tests = check_tests(repo, config, run_tests=run_tests or _default_test_runner)
    if isinstance(tests, Err):
        return tests

    return Ok(
        ReleaseState(
            branch=branch.value,
            clean=True,
            version=version,
            tag_exists=False,
            local_sha=local_sha,
            upstream_sha=upstream_sha,
            tests_passed=True,
        )
    )
