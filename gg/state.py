"""Application state for one TUI session."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from gg.config import Settings
from gg.models import (
    BackgroundTask,
    Branch,
    Commit,
    ContentLine,
    LineKind,
    Stash,
    SyncAnimation,
    ViewMode,
    WorkspaceFile,
)

if TYPE_CHECKING:
    from gg.dialogs import Dialog

SCROLL_MARGIN = 3

# Which selection index each list mode drives.
SELECTION_ATTR = {
    ViewMode.FILE_LIST: "selected_file",
    ViewMode.BRANCH_LIST: "selected_branch",
    ViewMode.COMMIT_LIST: "selected_commit",
    ViewMode.STASH_LIST: "selected_stash",
}


@dataclass
class AppState:
    files: list[WorkspaceFile] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    branches: list[Branch] = field(default_factory=list)
    stashes: list[Stash] = field(default_factory=list)
    selected_file: int = 0
    selected_commit: int = 0
    selected_branch: int = 0
    selected_stash: int = 0
    mode: ViewMode = ViewMode.FILE_LIST
    content: list[ContentLine] = field(default_factory=list)
    content_key: tuple[str, str] | None = None
    content_cursor: int = 0
    content_scroll: int = 0
    content_height: int = 20
    animation: SyncAnimation = field(default_factory=SyncAnimation)
    fetch: BackgroundTask = field(default_factory=BackgroundTask)
    critical: bool = False
    dialog: "Dialog | None" = None
    running: bool = True


@dataclass
class Context:
    """Everything a component needs: where the repo is, how to behave, and the state.

    ``on_wait`` is called repeatedly while a push or pull worker runs so the
    screen can keep animating.
    """

    repo_root: Path
    settings: Settings
    state: AppState
    on_wait: Callable[[], None] = lambda: None


def clamp_index(index: int, count: int) -> int:
    if count <= 0:
        return 0
    return max(0, min(index, count - 1))


def list_length(state: AppState, mode: ViewMode) -> int:
    items = {
        ViewMode.FILE_LIST: state.files,
        ViewMode.BRANCH_LIST: state.branches,
        ViewMode.COMMIT_LIST: state.commits,
        ViewMode.STASH_LIST: state.stashes,
    }[mode.list_mode]
    return len(items)


def clamp_selections(state: AppState) -> None:
    for mode, attr in SELECTION_ATTR.items():
        setattr(state, attr, clamp_index(getattr(state, attr), list_length(state, mode)))


def move_selection(state: AppState, delta: int) -> bool:
    """Move the current list's selection; returns True if it changed."""
    attr = SELECTION_ATTR[state.mode.list_mode]
    old = getattr(state, attr)
    new = clamp_index(old + delta, list_length(state, state.mode))
    setattr(state, attr, new)
    return new != old


def current_branch(state: AppState) -> Branch | None:
    return next((branch for branch in state.branches if branch.current), None)


def _is_blank(line: ContentLine) -> bool:
    return not line.text.strip()


def _max_scroll(state: AppState) -> int:
    return max(0, len(state.content) - state.content_height)


def keep_cursor_visible(state: AppState) -> None:
    """Scroll so the cursor stays at least SCROLL_MARGIN lines from either edge."""
    total = len(state.content)
    state.content_cursor = clamp_index(state.content_cursor, total)
    height = max(1, state.content_height)
    margin = min(SCROLL_MARGIN, (height - 1) // 2)
    if state.content_cursor < state.content_scroll + margin:
        state.content_scroll = state.content_cursor - margin
    elif state.content_cursor > state.content_scroll + height - 1 - margin:
        state.content_scroll = state.content_cursor - height + 1 + margin
    state.content_scroll = max(0, min(state.content_scroll, _max_scroll(state)))


def move_cursor(state: AppState, direction: int) -> None:
    """Move one line up or down, skipping whitespace-only lines."""
    target = state.content_cursor + direction
    while 0 <= target < len(state.content) and _is_blank(state.content[target]):
        target += direction
    if 0 <= target < len(state.content):
        state.content_cursor = target
    keep_cursor_visible(state)


def scroll_lines(state: AppState, amount: int) -> None:
    """Move cursor and viewport together by ``amount`` lines (half or full page)."""
    state.content_scroll = max(0, min(state.content_scroll + amount, _max_scroll(state)))
    state.content_cursor = clamp_index(state.content_cursor + amount, len(state.content))
    keep_cursor_visible(state)


def set_content(state: AppState, key: tuple[str, str] | None, lines: list[ContentLine], preserve: bool) -> None:
    """Replace the content panel, keeping cursor and scroll when the same entity is still shown."""
    same = preserve and key is not None and key == state.content_key
    cursor, scroll = state.content_cursor, state.content_scroll
    state.content = lines
    state.content_key = key
    if same and cursor < len(lines):
        state.content_cursor = cursor
        state.content_scroll = min(scroll, _max_scroll(state))
    else:
        state.content_cursor = 0
        state.content_scroll = 0


def empty_content(message: str) -> list[ContentLine]:
    return [ContentLine(message, LineKind.CONTEXT)]
