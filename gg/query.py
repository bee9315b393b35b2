"""Read-only repository queries.

Every query returns an empty result when git is missing, the directory is not
a repository or the command fails; an empty list is not an error signal.
"""

import logging
from itertools import islice
from pathlib import Path
from typing import TypeVar

from gg import git_ops, parsers
from gg.config import Limits
from gg.models import Branch, Commit, ContentLine, Stash, WorkspaceFile

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMOTE_REFS = ("origin/HEAD", "origin/main", "origin/master")


def _cap(items: list[T], limit: int, what: str) -> list[T]:
    if len(items) > limit:
        logger.debug("dropping %d %s past the limit of %d", len(items) - limit, what, limit)
        return items[:limit]
    return items


def list_changed_files(repo_root: Path, limits: Limits) -> list[WorkspaceFile]:
    out = git_ops.try_run(
        ["-c", "core.quotePath=false", "status", "--porcelain"], cwd=repo_root
    ) or ""
    return _cap(parsers.parse_status(out), limits.files, "files")


def unpushed_hashes(repo_root: Path) -> set[str] | None:
    """Short hashes on HEAD missing from the first remote ref that resolves."""
    for ref in REMOTE_REFS:
        out = git_ops.try_run(["log", f"{ref}..HEAD", "--format=%h"], cwd=repo_root)
        if out is not None:
            return set(out.split())
    return None


def list_commits(repo_root: Path, limits: Limits) -> list[Commit]:
    out = git_ops.try_run(
        ["log", f"-{limits.commit_log_depth}", "--format=%h|%an|%s"], cwd=repo_root
    )
    if not out:
        return []
    commits = parsers.parse_log(out, unpushed_hashes(repo_root))
    return _cap(commits, limits.commits, "commits")


def list_branches(repo_root: Path, limits: Limits) -> list[Branch]:
    out = git_ops.try_run(["branch", "--no-color"], cwd=repo_root) or ""
    branches: list[Branch] = []
    for name, current in _cap(parsers.parse_branches(out), limits.branches, "branches"):
        ahead = behind = 0
        if git_ops.ref_exists(repo_root, f"refs/remotes/origin/{name}"):
            behind = git_ops.rev_count(repo_root, f"{name}..origin/{name}")
            ahead = git_ops.rev_count(repo_root, f"origin/{name}..{name}")
        branches.append(parsers.make_branch(name, current, ahead, behind))
    return branches


def list_stashes(repo_root: Path, limits: Limits) -> list[Stash]:
    out = git_ops.try_run(["stash", "list"], cwd=repo_root) or ""
    return _cap(parsers.parse_stashes(out), limits.stashes, "stashes")


def _read_head_lines(path: Path, count: int) -> str:
    try:
        with path.open(encoding="utf-8", errors="replace") as handle:
            return "".join(islice(handle, count))
    except OSError as exc:
        logger.debug("cannot read %s: %s", path, exc)
        return ""


def load_diff_for_file(repo_root: Path, path: str, limits: Limits) -> list[ContentLine]:
    if not git_ops.is_tracked(repo_root, path):
        text = _read_head_lines(repo_root / path, limits.untracked_preview_lines)
        return parsers.parse_untracked(text, limits.untracked_preview_lines)
    out = git_ops.try_run(["diff", "--no-color", "HEAD", "--", path], cwd=repo_root) or ""
    return _cap(parsers.parse_file_diff(out), limits.content_lines, "diff lines")


def load_commit_detail(repo_root: Path, commit_hash: str, limits: Limits) -> list[ContentLine]:
    out = git_ops.try_run(
        ["show", "--no-color", "--stat", "--patch", commit_hash, "--"], cwd=repo_root
    ) or ""
    return _cap(parsers.parse_content(out), limits.content_lines, "commit lines")


def stash_ref(index: int) -> str:
    return f"stash@{{{index}}}"


def load_stash_detail(repo_root: Path, index: int, limits: Limits) -> list[ContentLine]:
    out = git_ops.try_run(
        ["stash", "show", "--no-color", "--stat", "--patch", stash_ref(index)], cwd=repo_root
    ) or ""
    return _cap(parsers.parse_content(out), limits.content_lines, "stash lines")


def load_branch_commits(repo_root: Path, name: str, limits: Limits) -> list[ContentLine]:
    out = git_ops.try_run(
        ["log", "--no-color", "--decorate=short", f"-{limits.branch_log_depth}", name, "--"],
        cwd=repo_root,
    ) or ""
    return _cap(parsers.parse_content(out), limits.content_lines, "branch log lines")
