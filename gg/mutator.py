"""State-changing git operations.

Each operation raises :class:`gg.git_ops.GitError` when git refuses, and on
success refreshes the lists it may have changed.
"""

import logging

from gg import animation, git_ops, services, tasks
from gg.models import DeleteScope, SyncKind
from gg.query import stash_ref
from gg.state import Context, current_branch

logger = logging.getLogger(__name__)


class RefusedError(Exception):
    """An operation was refused before reaching git."""


def _run(ctx: Context, args: list[str]) -> str:
    try:
        return git_ops.run(args, cwd=ctx.repo_root)
    except git_ops.GitError as exc:
        logger.warning("%s", exc)
        raise


def marked_paths(ctx: Context) -> list[str]:
    return [f.path for f in ctx.state.files if f.marked]


def stage(ctx: Context, paths: list[str]) -> None:
    for path in paths:
        _run(ctx, ["add", "--", path])


def _message_args(title: str, message: str) -> list[str]:
    args = ["-m", title]
    if message:
        args += ["-m", message]
    return args


def commit(ctx: Context, title: str, message: str = "") -> None:
    """Stage every marked file, then commit them."""
    stage(ctx, marked_paths(ctx))
    _run(ctx, ["commit", *_message_args(title, message)])
    for item in ctx.state.files:
        item.marked = False
    services.refresh(ctx, files=True, commits=True, branches=True)


def amend(ctx: Context, title: str, message: str = "") -> None:
    stage(ctx, marked_paths(ctx))
    _run(ctx, ["commit", "--amend", *_message_args(title, message)])
    for item in ctx.state.files:
        item.marked = False
    services.refresh(ctx, files=True, commits=True, branches=True)


def can_reset(index: int) -> bool:
    """Only the most recent commit may be undone."""
    return index == 0


def reset(ctx: Context, index: int, hard: bool = False) -> None:
    if not can_reset(index):
        return
    _run(ctx, ["reset", "--hard" if hard else "--soft", "HEAD~1"])
    services.refresh(ctx, files=True, commits=True, branches=True)


def needs_upstream(ctx: Context) -> bool:
    branch = git_ops.get_current_branch(ctx.repo_root)
    return branch is not None and git_ops.get_upstream(ctx.repo_root, branch) is None


def is_diverged(ctx: Context) -> tuple[int, int] | None:
    """(ahead, behind) when both are positive, else None."""
    ab = git_ops.count_ahead_behind(ctx.repo_root, "HEAD", "@{upstream}")
    if ab.ahead > 0 and ab.behind > 0:
        return ab.ahead, ab.behind
    return None


def _supervised(ctx: Context, kind: SyncKind, args: list[str]) -> None:
    anim = ctx.state.animation
    branch = current_branch(ctx.state)
    animation.start(anim, kind, branch.name if branch else None)
    ctx.state.critical = True
    try:
        tasks.run_supervised(args, ctx.repo_root, ctx.on_wait, ctx.settings.tick_interval)
    except git_ops.GitError as exc:
        logger.warning("%s", exc)
        animation.fail(anim, kind)
        raise
    finally:
        ctx.state.critical = False
    animation.finish(anim, kind)


def push(ctx: Context, force: bool = False, upstream: tuple[str, str] | None = None) -> None:
    """Push the current branch.

    Callers must have checked :func:`needs_upstream` and :func:`is_diverged`
    first: ``upstream`` sets tracking on the first push and ``force`` uses a
    lease-protected force push.
    """
    if upstream is not None:
        remote, name = upstream
        args = ["push", "--set-upstream", remote, name]
    elif force:
        args = ["push", "--force-with-lease"]
    else:
        args = ["push"]
    _supervised(ctx, SyncKind.PUSHING, args)
    services.refresh(ctx, commits=True, branches=True)


def pull(ctx: Context) -> None:
    _supervised(ctx, SyncKind.PULLING, ["pull"])
    services.refresh(ctx, files=True, commits=True, branches=True)


def sanitize_branch_name(name: str) -> str:
    return "-".join(name.split())


def create_branch(ctx: Context, name: str) -> str:
    name = sanitize_branch_name(name)
    _run(ctx, ["checkout", "-b", name])
    services.refresh(ctx, files=True, commits=True, branches=True)
    select_branch(ctx, name)
    return name


def rename_branch(ctx: Context, old: str, new: str) -> str:
    new = sanitize_branch_name(new)
    _run(ctx, ["branch", "-m", old, new])
    services.refresh(ctx, branches=True)
    select_branch(ctx, new)
    return new


def delete_branch(ctx: Context, name: str, scope: DeleteScope) -> None:
    branch = current_branch(ctx.state)
    if branch is not None and branch.name == name:
        raise RefusedError("Cannot delete current branch!")
    if scope in (DeleteScope.REMOTE, DeleteScope.BOTH):
        upstream = git_ops.get_upstream(ctx.repo_root, name)
        if upstream is None or "/" not in upstream:
            raise RefusedError("The selected branch has no upstream (tip: delete the branch locally)")
        remote, remote_branch = upstream.split("/", 1)
        _run(ctx, ["push", remote, "--delete", remote_branch])
    if scope in (DeleteScope.LOCAL, DeleteScope.BOTH):
        _run(ctx, ["branch", "-D", name])
    services.refresh(ctx, branches=True)


def checkout(ctx: Context, name: str) -> None:
    _run(ctx, ["checkout", name])
    services.refresh(ctx, files=True, commits=True, branches=True)


def select_branch(ctx: Context, name: str) -> None:
    state = ctx.state
    for idx, branch in enumerate(state.branches):
        if branch.name == name:
            state.selected_branch = idx
            services.reload_content(ctx, preserve=True)
            return


def stash_create(ctx: Context, name: str = "") -> None:
    args = ["stash", "push", "--include-untracked"]
    if name:
        args += ["-m", name]
    _run(ctx, args)
    services.refresh(ctx, files=True, stashes=True)


def stash_apply(ctx: Context, index: int) -> None:
    _run(ctx, ["stash", "apply", stash_ref(index)])
    services.refresh(ctx, files=True)


def stash_pop(ctx: Context, index: int) -> None:
    _run(ctx, ["stash", "pop", stash_ref(index)])
    services.refresh(ctx, files=True, stashes=True)


def stash_drop(ctx: Context, index: int) -> None:
    _run(ctx, ["stash", "drop", stash_ref(index)])
    services.refresh(ctx, stashes=True)
