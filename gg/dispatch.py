"""Key handling: maps (mode, key) to a state change or a repository call."""

import logging
from typing import Callable

from gg import git_ops, keys, mutator, services
from gg.dialogs import (
    CommitEditor,
    ConfirmPrompt,
    DeleteBranchPrompt,
    Dialog,
    ErrorPopup,
    Outcome,
    TextPrompt,
    TypedConfirm,
    UpstreamPrompt,
)
from gg.models import ViewMode, WorkspaceFile
from gg.state import Context, move_cursor, move_selection, scroll_lines

logger = logging.getLogger(__name__)

DIRECT_JUMP = {
    ord("1"): ViewMode.FILE_LIST,
    ord("3"): ViewMode.BRANCH_LIST,
    ord("4"): ViewMode.COMMIT_LIST,
    ord("5"): ViewMode.STASH_LIST,
}

HARD_RESET_LINES = [
    "This will permanently delete the most recent commit",
    "and ALL uncommitted changes!",
    "",
    "Type 'yes' to confirm or ESC to cancel:",
]


def handle_key(ctx: Context, key: int) -> None:
    state = ctx.state
    if state.dialog is not None:
        _dialog_key(ctx, key)
        return
    if key in DIRECT_JUMP:
        services.switch_mode(ctx, DIRECT_JUMP[key])
        return
    if key == ord("2"):
        if state.files:
            services.switch_mode(ctx, ViewMode.FILE_VIEW)
        return
    if state.mode.is_view:
        _view_key(ctx, key)
        return
    _LIST_HANDLERS[state.mode](ctx, key)


def open_dialog(ctx: Context, dialog: Dialog) -> None:
    ctx.state.dialog = dialog
    ctx.state.critical = dialog.critical


def show_error(ctx: Context, message: str) -> None:
    logger.info("error shown: %s", message)
    open_dialog(ctx, ErrorPopup(message))


def attempt(ctx: Context, label: str, action: Callable[[], None]) -> None:
    """Run a user-initiated mutation, turning failures into an error popup."""
    try:
        action()
    except git_ops.GitError as exc:
        show_error(ctx, f"{label} failed: {exc.summary}")
    except mutator.RefusedError as exc:
        show_error(ctx, str(exc))


def _dialog_key(ctx: Context, key: int) -> None:
    state = ctx.state
    dialog = state.dialog
    assert dialog is not None
    outcome = dialog.handle_key(key)
    if outcome is Outcome.PENDING:
        return
    state.dialog = None
    if outcome is Outcome.SUBMITTED:
        dialog.submit()
    state.critical = state.dialog is not None and state.dialog.critical


def toggle_mark_all(files: list[WorkspaceFile]) -> None:
    """Unmark everything if everything is marked, otherwise mark everything."""
    marked = not all(f.marked for f in files)
    for item in files:
        item.marked = marked


def _navigate(ctx: Context, key: int) -> bool:
    if key in keys.UP:
        delta = -1
    elif key in keys.DOWN:
        delta = 1
    else:
        return False
    if move_selection(ctx.state, delta):
        services.reload_content(ctx)
    return True


def _back_to_files(ctx: Context, key: int) -> bool:
    if key in (keys.ESC, keys.TAB, ord("q")):
        services.switch_mode(ctx, ViewMode.FILE_LIST)
        return True
    return False


def _open_view(ctx: Context, key: int, count: int) -> bool:
    if key in keys.ENTER:
        if count:
            services.switch_mode(ctx, ctx.state.mode.view_mode)
        return True
    return False


def _file_list(ctx: Context, key: int) -> None:
    state = ctx.state
    if _navigate(ctx, key) or _open_view(ctx, key, len(state.files)):
        return
    if key in (ord("q"), keys.ESC):
        state.running = False
    elif key == keys.TAB:
        services.switch_mode(ctx, ViewMode.COMMIT_LIST)
    elif key == keys.SPACE:
        if state.files:
            item = state.files[state.selected_file]
            item.marked = not item.marked
    elif key in (ord("a"), ord("A")):
        toggle_mark_all(state.files)
    elif key in (ord("s"), ord("S")):
        open_dialog(
            ctx,
            TextPrompt(
                "Create Stash",
                "Stash name (optional):",
                lambda name: attempt(ctx, "Stash", lambda: mutator.stash_create(ctx, name)),
                allow_empty=True,
            ),
        )
    elif key in (ord("c"), ord("C")):
        open_dialog(
            ctx,
            CommitEditor(
                " Title (Tab to switch, Enter to commit) ",
                lambda title, message: attempt(
                    ctx, "Commit", lambda: mutator.commit(ctx, title, message)
                ),
            ),
        )


def start_push(ctx: Context) -> None:
    """Push the current branch, asking for an upstream or a force confirmation first."""
    if mutator.needs_upstream(ctx):
        branch = git_ops.get_current_branch(ctx.repo_root) or "HEAD"
        open_dialog(
            ctx,
            UpstreamPrompt(
                branch,
                git_ops.list_remotes(ctx.repo_root),
                lambda remote, name: attempt(
                    ctx, "Push", lambda: mutator.push(ctx, upstream=(remote, name))
                ),
            ),
        )
        return
    diverged = mutator.is_diverged(ctx)
    if diverged is not None:
        ahead, behind = diverged
        open_dialog(
            ctx,
            ConfirmPrompt(
                "Branch has diverged!",
                [
                    f"Local: {ahead} commit(s) ahead",
                    f"Remote: {behind} commit(s) ahead",
                    "",
                    "Force push anyway? (y/N):",
                ],
                lambda: attempt(ctx, "Push", lambda: mutator.push(ctx, force=True)),
            ),
        )
        return
    attempt(ctx, "Push", lambda: mutator.push(ctx))


def start_pull(ctx: Context) -> None:
    attempt(ctx, "Pull", lambda: mutator.pull(ctx))


def _commit_list(ctx: Context, key: int) -> None:
    state = ctx.state
    if _navigate(ctx, key) or _open_view(ctx, key, len(state.commits)) or _back_to_files(ctx, key):
        return
    index = state.selected_commit
    if key == ord("P"):
        start_push(ctx)
    elif key == ord("p"):
        start_pull(ctx)
    elif key == ord("r"):
        if state.commits and mutator.can_reset(index):
            attempt(ctx, "Reset", lambda: mutator.reset(ctx, index))
    elif key == ord("R"):
        if state.commits and mutator.can_reset(index):
            open_dialog(
                ctx,
                TypedConfirm(
                    "HARD RESET WARNING!",
                    HARD_RESET_LINES,
                    lambda: attempt(ctx, "Reset", lambda: mutator.reset(ctx, index, hard=True)),
                ),
            )
    elif key in (ord("a"), ord("A")):
        if state.commits:
            subject, body = git_ops.head_message(ctx.repo_root)
            open_dialog(
                ctx,
                CommitEditor(
                    " Amend title (Tab to switch, Enter to amend) ",
                    lambda title, message: attempt(
                        ctx, "Amend", lambda: mutator.amend(ctx, title, message)
                    ),
                    title=subject,
                    message=body,
                ),
            )


def _branch_list(ctx: Context, key: int) -> None:
    state = ctx.state
    if _navigate(ctx, key) or _open_view(ctx, key, len(state.branches)) or _back_to_files(ctx, key):
        return
    if key == ord("n"):
        open_dialog(
            ctx,
            TextPrompt(
                "New Branch",
                "Branch name:",
                lambda name: attempt(ctx, "Create branch", lambda: mutator.create_branch(ctx, name)),
            ),
        )
        return
    if not state.branches:
        return
    branch = state.branches[state.selected_branch]
    if key == ord("c"):
        attempt(ctx, "Checkout", lambda: mutator.checkout(ctx, branch.name))
    elif key == ord("r"):
        open_dialog(
            ctx,
            TextPrompt(
                "Rename Branch",
                f"New name for {branch.name}:",
                lambda name: attempt(
                    ctx, "Rename", lambda: mutator.rename_branch(ctx, branch.name, name)
                ),
                buffer=branch.name,
            ),
        )
    elif key == ord("d"):
        if branch.current:
            show_error(ctx, "Cannot delete current branch!")
            return
        open_dialog(
            ctx,
            DeleteBranchPrompt(
                branch.name,
                lambda scope: attempt(
                    ctx, "Delete branch", lambda: mutator.delete_branch(ctx, branch.name, scope)
                ),
            ),
        )
    elif key == ord("p"):
        if branch.behind > 0:
            start_pull(ctx)
        else:
            show_error(ctx, "No commits to pull from remote")


def _stash_list(ctx: Context, key: int) -> None:
    state = ctx.state
    if _navigate(ctx, key) or _open_view(ctx, key, len(state.stashes)) or _back_to_files(ctx, key):
        return
    if not state.stashes:
        return
    index = state.selected_stash
    if key == keys.SPACE:
        attempt(ctx, "Stash apply", lambda: mutator.stash_apply(ctx, index))
    elif key in (ord("g"), ord("G")):
        attempt(ctx, "Stash pop", lambda: mutator.stash_pop(ctx, index))
    elif key in (ord("d"), ord("D")):
        attempt(ctx, "Stash drop", lambda: mutator.stash_drop(ctx, index))


def _view_key(ctx: Context, key: int) -> None:
    state = ctx.state
    page = max(1, state.content_height)
    if key in keys.UP:
        move_cursor(state, -1)
    elif key in keys.DOWN:
        move_cursor(state, 1)
    elif key == keys.CTRL_U:
        scroll_lines(state, -(page // 2) or -1)
    elif key == keys.CTRL_D:
        scroll_lines(state, page // 2 or 1)
    elif key in (keys.PAGE_DOWN, keys.SPACE):
        scroll_lines(state, page)
    elif key == keys.PAGE_UP:
        scroll_lines(state, -page)
    elif key in (keys.ESC, ord("q")):
        services.switch_mode(ctx, state.mode.list_mode)


_LIST_HANDLERS: dict[ViewMode, Callable[[Context, int], None]] = {
    ViewMode.FILE_LIST: _file_list,
    ViewMode.COMMIT_LIST: _commit_list,
    ViewMode.BRANCH_LIST: _branch_list,
    ViewMode.STASH_LIST: _stash_list,
}
