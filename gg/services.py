"""Refreshing panel lists and the content panel from the repository."""

import logging

from gg import query
from gg.models import ContentLine, ViewMode
from gg.state import Context, clamp_selections, empty_content, set_content

logger = logging.getLogger(__name__)


def refresh(
    ctx: Context,
    *,
    files: bool = False,
    commits: bool = False,
    branches: bool = False,
    stashes: bool = False,
) -> None:
    """Re-query the named lists, replace them wholesale and reload the content panel.

    Selections are clamped rather than reset, and the content cursor survives
    when the same entity is still on display.
    """
    state, root, limits = ctx.state, ctx.repo_root, ctx.settings.limits
    if files:
        marked = {f.path for f in state.files if f.marked}
        state.files = query.list_changed_files(root, limits)
        for item in state.files:
            item.marked = item.path in marked
    if commits:
        state.commits = query.list_commits(root, limits)
    if branches:
        state.branches = query.list_branches(root, limits)
    if stashes:
        state.stashes = query.list_stashes(root, limits)
    clamp_selections(state)
    reload_content(ctx, preserve=True)


def refresh_all(ctx: Context) -> None:
    refresh(ctx, files=True, commits=True, branches=True, stashes=True)


def _content_for_mode(ctx: Context) -> tuple[tuple[str, str] | None, list[ContentLine]]:
    state, root, limits = ctx.state, ctx.repo_root, ctx.settings.limits
    mode = state.mode.list_mode
    if mode is ViewMode.FILE_LIST:
        if not state.files:
            return None, empty_content("No changes in the working tree")
        path = state.files[state.selected_file].path
        return ("file", path), query.load_diff_for_file(root, path, limits)
    if mode is ViewMode.BRANCH_LIST:
        if not state.branches:
            return None, empty_content("No branches")
        name = state.branches[state.selected_branch].name
        return ("branch", name), query.load_branch_commits(root, name, limits)
    if mode is ViewMode.COMMIT_LIST:
        if not state.commits:
            return None, empty_content("No commits")
        commit_hash = state.commits[state.selected_commit].hash
        return ("commit", commit_hash), query.load_commit_detail(root, commit_hash, limits)
    if not state.stashes:
        return None, empty_content("No stashes")
    ref = query.stash_ref(state.selected_stash)
    return ("stash", ref), query.load_stash_detail(root, state.selected_stash, limits)


def reload_content(ctx: Context, preserve: bool = False) -> None:
    """Load the content panel for the entity selected in the current mode."""
    key, lines = _content_for_mode(ctx)
    set_content(ctx.state, key, lines, preserve)


def switch_mode(ctx: Context, mode: ViewMode) -> None:
    ctx.state.mode = mode
    reload_content(ctx)
