"""Git subprocess operations."""

import logging
import os
import subprocess
from pathlib import Path
from typing import Sequence

from gg.models import AheadBehind

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git command failed."""

    def __init__(self, cmd: Sequence[str], stderr: str, returncode: int | None = None) -> None:
        self.cmd = cmd
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(f"git {' '.join(cmd)}: {stderr}")

    @property
    def summary(self) -> str:
        """First non-empty line of git's error output."""
        for line in self.stderr.splitlines():
            if line.strip():
                return line.strip()
        return f"git {' '.join(self.cmd)} exited with status {self.returncode}"


def git_env() -> dict[str, str]:
    """Environment for git children: never prompt on the terminal curses owns."""
    env = dict(os.environ)
    env["GIT_TERMINAL_PROMPT"] = "0"
    env.setdefault("GIT_PAGER", "cat")
    return env


def run(args: Sequence[str], cwd: Path | None = None) -> str:
    """Run a git command and return stdout without its trailing newline."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            check=False,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            env=git_env(),
        )
    except OSError as exc:
        raise GitError(args, str(exc)) from exc
    if result.returncode != 0:
        raise GitError(args, result.stderr.strip() or result.stdout.strip(), result.returncode)
    return result.stdout.rstrip("\n")


def try_run(args: Sequence[str], cwd: Path | None = None) -> str | None:
    """Run a git command, returning None on failure."""
    try:
        return run(args, cwd=cwd)
    except GitError as exc:
        logger.debug("%s", exc)
        return None


def get_repo_root(cwd: Path | None = None) -> Path:
    """Get the top level of the working tree containing cwd."""
    return Path(run(["rev-parse", "--show-toplevel"], cwd=cwd))


def get_current_branch(repo_root: Path) -> str | None:
    branch = try_run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo_root)
    return branch or None


def get_upstream(repo_root: Path, ref_name: str) -> str | None:
    """Get the upstream tracking branch for a ref."""
    return try_run(["rev-parse", "--abbrev-ref", f"{ref_name}@{{upstream}}"], cwd=repo_root) or None


def list_remotes(repo_root: Path) -> list[str]:
    out = try_run(["remote"], cwd=repo_root) or ""
    return [line.strip() for line in out.splitlines() if line.strip()]


def ref_exists(repo_root: Path, ref: str) -> bool:
    return try_run(["show-ref", "--verify", "--quiet", ref], cwd=repo_root) is not None


def rev_count(repo_root: Path, spec: str) -> int:
    out = try_run(["rev-list", "--count", spec], cwd=repo_root)
    return int(out) if out and out.isdigit() else 0


def count_ahead_behind(repo_root: Path, left: str, right: str) -> AheadBehind:
    """Count commits ahead and behind between two refs."""
    out = try_run(["rev-list", "--left-right", "--count", f"{left}...{right}"], cwd=repo_root)
    if not out:
        return AheadBehind(0, 0)
    parts = out.split()
    if len(parts) != 2:
        return AheadBehind(0, 0)
    return AheadBehind(ahead=int(parts[0]), behind=int(parts[1]))


def is_tracked(repo_root: Path, path: str) -> bool:
    """Check whether git knows about a path at all."""
    return try_run(["ls-files", "--error-unmatch", "--", path], cwd=repo_root) is not None


def head_message(repo_root: Path) -> tuple[str, str]:
    """Subject and body of the HEAD commit."""
    subject = try_run(["log", "-1", "--pretty=format:%s"], cwd=repo_root) or ""
    body = try_run(["log", "-1", "--pretty=format:%b"], cwd=repo_root) or ""
    return subject, body.strip()


def spawn(args: Sequence[str], cwd: Path | None = None, stderr=subprocess.DEVNULL) -> subprocess.Popen:
    """Start a git command without waiting for it."""
    try:
        return subprocess.Popen(
            ["git", *args],
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=stderr,
            env=git_env(),
        )
    except OSError as exc:
        raise GitError(args, str(exc)) from exc
