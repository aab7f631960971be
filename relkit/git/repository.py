"""Git repository abstraction.

``Repository`` wraps a repository root path. Every git call runs as
``git -C <path>``, so nothing depends on the process working directory.
All operations that can fail return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.status():
        case Ok(status):
            print(f"Branch: {status.branch}")
            if status.is_clean:
                print("Working tree clean")
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from relkit.core.result import Err, Ok, Result
from relkit.platform.process import ProcessError
from relkit.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

# Unit/record separators keep multi-line commit messages intact in one stream.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"

__all__ = [
    "GitError",
    "GitStatus",
    "LogEntry",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One raw commit from ``git log``: sha plus the full message."""

    sha: str
    message: str


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M")
        path: File path
    """

    xy: str
    path: str


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1 -b`` output for tracked files.

    Attributes:
        branch: Current branch name
        entries: Modified, staged, deleted or renamed tracked files
    """

    branch: str
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        return len(self.entries) == 0


class Repository:
    """A single git repository.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    # -- queries ----------------------------------------------------------

    def status(self) -> Result[GitStatus, GitError]:
        """Get repository status, ignoring untracked files."""
        result = self._run(["status", "--porcelain=v1", "-b", "--untracked-files=no"])
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(self._parse_status(stdout))

    def current_branch(self) -> str | None:
        """Get current branch name.

        Returns None if detached HEAD or error.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def toplevel(self) -> Result[Path, GitError]:
        """Root of the work tree containing ``path``."""
        result = self._run(["rev-parse", "--show-toplevel"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse", e, f"not a git repository: {self.path}"))
            case Ok(stdout):
                return Ok(Path(stdout.strip()))

    def rev_parse(self, ref: str) -> Result[str, GitError]:
        """Resolve a ref to a full commit sha."""
        result = self._run(["rev-parse", "--verify", f"{ref}^{{commit}}"])
        match result:
            case Err(e):
                return Err(self._error(f"rev-parse {ref}", e, f"unknown revision: {ref}"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def tag_exists(self, tag: str) -> bool:
        result = self._run(["rev-parse", "-q", "--verify", f"refs/tags/{tag}"])
        return isinstance(result, Ok)

    def latest_tag(self, pattern: str) -> str | None:
        """Most recent tag reachable from HEAD matching a glob, if any."""
        result = self._run(["describe", "--tags", "--abbrev=0", "--match", pattern])
        match result:
            case Ok(stdout):
                return stdout.strip() or None
            case Err(_):
                return None

    def log(self, since: str | None = None) -> Result[list[LogEntry], GitError]:
        """Commits after ``since`` up to HEAD, oldest first.

        With ``since=None`` the whole history from the root commit is listed.
        """
        rev_range = f"{since}..HEAD" if since else "HEAD"
        fmt = f"%H{_FIELD_SEP}%B{_RECORD_SEP}"
        result = self._run(["log", "--reverse", f"--format={fmt}", rev_range])
        match result:
            case Err(e):
                return Err(self._error("log", e, "git log failed"))
            case Ok(stdout):
                return Ok(self._parse_log(stdout))

    def diff(self, path: str) -> Result[str, GitError]:
        result = self._run(["--no-pager", "diff", "--", path])
        match result:
            case Err(e):
                return Err(self._error("diff", e, "git diff failed"))
            case Ok(stdout):
                return Ok(stdout)

    # -- mutations --------------------------------------------------------

    def fetch(self, remote: str) -> Result[str, GitError]:
        result = self._run(["fetch", remote])
        match result:
            case Err(e):
                return Err(self._error(f"fetch {remote}", e, "fetch failed"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def add(self, path: str) -> Result[None, GitError]:
        result = self._run(["add", "--", path])
        match result:
            case Err(e):
                return Err(self._error("add", e, "git add failed"))
            case Ok(_):
                return Ok(None)

    def unstage(self, path: str) -> Result[None, GitError]:
        result = self._run(["reset", "-q", "HEAD", "--", path])
        match result:
            case Err(e):
                return Err(self._error("reset", e, "git reset failed"))
            case Ok(_):
                return Ok(None)

    def commit(self, message: str) -> Result[str, GitError]:
        """Commit the index and return the new commit sha."""
        result = self._run(["commit", "-m", message])
        if isinstance(result, Err):
            return Err(self._error("commit", result.error, "git commit failed"))
        return self.rev_parse("HEAD")

    def create_annotated_tag(self, tag: str, message: str) -> Result[str, GitError]:
        """Create an annotated tag on HEAD and return the tag object sha."""
        result = self._run(["tag", "-a", tag, "-m", message])
        if isinstance(result, Err):
            return Err(self._error(f"tag {tag}", result.error, "git tag failed"))

        obj = self._run(["rev-parse", f"refs/tags/{tag}"])
        match obj:
            case Err(e):
                return Err(self._error(f"rev-parse {tag}", e, "tag lookup failed"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def push(self, remote: str, ref: str) -> Result[str, GitError]:
        result = self._run(["push", remote, ref])
        match result:
            case Err(e):
                return Err(self._error(f"push {remote} {ref}", e, "push failed"))
            case Ok(stdout):
                return Ok(stdout.strip())

    # -- internals --------------------------------------------------------

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = next((a for a in args if not a.startswith("-")), "")
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "clone"}
            else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    @staticmethod
    def _error(command: str, e: ProcessError, fallback: str) -> GitError:
        message = e.stderr.strip() or e.stdout.strip() or fallback
        return GitError(command=command, message=message, returncode=e.returncode)

    def _parse_log(self, output: str) -> list[LogEntry]:
        entries: list[LogEntry] = []
        for record in output.split(_RECORD_SEP):
            record = record.strip("\n")
            if not record.strip():
                continue
            sha, _, message = record.partition(_FIELD_SEP)
            entries.append(LogEntry(sha=sha.strip(), message=message.strip()))
        return entries

    def _parse_status(self, output: str) -> GitStatus:
        lines = [ln for ln in output.splitlines() if ln.strip()]
        if not lines:
            return GitStatus(branch="")

        # First line is branch info: ## branch...upstream [ahead N, behind M]
        branch = self._parse_branch_line(lines[0])

        entries = tuple(
            StatusEntry(xy=line[:2], path=line[3:]) for line in lines[1:] if len(line) >= 4
        )
        return GitStatus(branch=branch, entries=entries)

    def _parse_branch_line(self, line: str) -> str:
        s = line.strip()
        if s.startswith("##"):
            s = s[2:].lstrip()
        s = s.split(" [", 1)[0].strip()
        return s.split("...", 1)[0].strip()
