"""Push gate: the only step that makes a release visible to others.

``Prepared -> Pushed`` when confirmed and both pushes succeed,
``Prepared -> Aborted`` when declined. The branch is pushed first and the tag
only after the branch push succeeded. Failed pushes are reported with the
commands to finish by hand and never retried here.
"""

from __future__ import annotations

from collections.abc import Callable

from relkit.core.config import ReleaseConfig
from relkit.core.result import Err, Ok, Result
from relkit.git.repository import Repository
from relkit.output.console import ConsoleProtocol
from relkit.release.errors import PushFailed
from relkit.release.model import Aborted, GateOutcome, Pushed, ReleaseArtifact

PUSH_PROMPT = "Push release to upstream?"


def push_commands(artifact: ReleaseArtifact, config: ReleaseConfig) -> tuple[str, str]:
    return (
        f"git push {config.remote} {artifact.branch}",
        f"git push {config.remote} {artifact.tag}",
    )


def push_gate(
    repo: Repository,
    artifact: ReleaseArtifact,
    config: ReleaseConfig,
    *,
    confirm: Callable[[str], bool],
    console: ConsoleProtocol,
) -> Result[GateOutcome, PushFailed]:
    """Ask once, then push branch and tag to ``config.remote``."""
    branch_cmd, tag_cmd = push_commands(artifact, config)

    console.warning("Review the commit and tag before pushing:")
    console.info("  git log -1")
    console.info(f"  git show {artifact.tag}")
    console.newline()

    if not confirm(PUSH_PROMPT):
        console.info("Release not pushed. To push later, run:")
        console.info(f"  {branch_cmd}")
        console.info(f"  {tag_cmd}")
        return Ok(Aborted(artifact=artifact, resume_commands=(branch_cmd, tag_cmd)))

    console.step(f"Pushing to {config.remote}")

    branch_push = repo.push(config.remote, artifact.branch)
    if isinstance(branch_push, Err):
        return Err(
            PushFailed(
                ref=artifact.branch,
                reason=branch_push.error.message,
                retry_commands=(branch_cmd, tag_cmd),
            )
        )

    tag_push = repo.push(config.remote, artifact.tag)
    if isinstance(tag_push, Err):
        return Err(
            PushFailed(ref=artifact.tag, reason=tag_push.error.message, retry_commands=(tag_cmd,))
        )

    console.success(f"Release {artifact.tag} created successfully!")
    return Ok(Pushed(artifact=artifact))
