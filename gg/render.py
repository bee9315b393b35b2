"""Projection of AppState onto panels, a header and a status bar.

Nothing here touches curses or mutates state: :func:`render_frame` builds a
:class:`Frame` that ``tui`` paints.
"""

from dataclasses import dataclass, field

from gg import animation
from gg.dialogs import (
    DELETE_OPTIONS,
    CommitEditor,
    ConfirmPrompt,
    DeleteBranchPrompt,
    Dialog,
    ErrorPopup,
    TextPrompt,
    TypedConfirm,
    UpstreamPrompt,
)
from gg.models import Branch, Commit, ContentLine, LineKind, Stash, SyncKind, ViewMode, WorkspaceFile
from gg.state import AppState

MIN_HEIGHT = 10
MIN_WIDTH = 40

HEADER = "gg: 1=files 2=view 3=branches 4=commits 5=stashes | q=quit"

VIEW_HINTS = "Scroll: j/k | Page: Ctrl+U/D | Back: Esc"
MODE_HINTS = {
    ViewMode.FILE_LIST: "Stage: <space> | Stage All: a | Stash: s | Commit: c",
    ViewMode.COMMIT_LIST: "Push: P | Pull: p | Reset: r/R | Amend: a | Nav: j/k",
    ViewMode.STASH_LIST: "Apply: <space> | Pop: g | Drop: d | Nav: j/k",
    ViewMode.BRANCH_LIST: "View: Enter | Checkout: c | New: n | Rename: r | Delete: d | Pull: p | Nav: j/k",
}

LINE_STYLES = {
    LineKind.CONTEXT: "normal",
    LineKind.ADDITION: "addition",
    LineKind.DELETION: "deletion",
    LineKind.HUNK_HEADER: "header",
    LineKind.COMMIT_HEADER: "commit_header",
    LineKind.COMMIT_INFO: "info",
    LineKind.STAT_LINE: "info",
}

BRANCH_SYNC_KINDS = (SyncKind.PUSHING, SyncKind.PUSHED, SyncKind.PULLING, SyncKind.PULLED)


@dataclass(frozen=True)
class Rect:
    y: int
    x: int
    height: int
    width: int


@dataclass(frozen=True)
class Layout:
    height: int
    width: int
    files: Rect
    branches: Rect
    commits: Rect
    stashes: Rect
    content: Rect
    status: Rect

    @property
    def too_small(self) -> bool:
        return self.height < MIN_HEIGHT or self.width < MIN_WIDTH

    @property
    def content_rows(self) -> int:
        return max(1, self.content.height - 2)


@dataclass(frozen=True)
class Span:
    text: str
    style: str = "normal"


Row = tuple[Span, ...]


@dataclass(frozen=True)
class PanelView:
    title: str
    rows: list[Row]
    selected: int | None = None
    active: bool = False


@dataclass(frozen=True)
class DialogView:
    title: str
    lines: list[Row]
    selected: int | None = None
    style: str = "normal"


@dataclass(frozen=True)
class Frame:
    header: str
    panels: dict[str, PanelView] = field(default_factory=dict)
    status: Row = ()
    dialog: DialogView | None = None
    notice: str | None = None


def compute_layout(height: int, width: int) -> Layout:
    """Left column is 40% wide: files 30%, branches 20%, commits 30%, stashes the rest."""
    status_height = max(1, int(height * 0.05))
    available = max(0, height - 1 - status_height)
    left = int(width * 0.4)
    files_h = int(available * 0.3)
    branches_h = int(available * 0.2)
    commits_h = int(available * 0.3)
    stashes_h = available - files_h - branches_h - commits_h
    y = 1
    files = Rect(y, 0, files_h, left)
    y += files_h
    branches = Rect(y, 0, branches_h, left)
    y += branches_h
    commits = Rect(y, 0, commits_h, left)
    y += commits_h
    stashes = Rect(y, 0, stashes_h, left)
    return Layout(
        height=height,
        width=width,
        files=files,
        branches=branches,
        commits=commits,
        stashes=stashes,
        content=Rect(1, left, available, width - left),
        status=Rect(height - status_height, 0, status_height, width),
    )


def window_start(selected: int, visible: int) -> int:
    """First row to draw so that ``selected`` is on screen."""
    if visible <= 0:
        return 0
    return max(0, selected - visible + 1)


def _windowed(rows: list[Row], selected: int, visible: int) -> tuple[list[Row], int | None]:
    start = window_start(selected, visible)
    shown = rows[start : start + max(0, visible)]
    if not shown:
        return shown, None
    return shown, selected - start


def file_row(item: WorkspaceFile) -> Row:
    return (
        Span(f" {item.status} ", "status"),
        Span(item.path, "marked" if item.marked else "normal"),
    )


def commit_row(commit: Commit) -> Row:
    return (
        Span(commit.hash, "hash_pushed" if commit.pushed else "hash_local"),
        Span(" "),
        Span(commit.initials, "author"),
        Span(" "),
        Span(commit.title),
    )


def branch_row(branch: Branch, state: AppState) -> Row:
    spans = [
        Span("* " if branch.current else "  "),
        Span(branch.name, "current_branch" if branch.current else "branch"),
    ]
    if branch.ahead:
        spans.append(Span(f" ↑{branch.ahead}", "ahead"))
    if branch.behind:
        spans.append(Span(f" ↓{branch.behind}", "behind"))
    anim = state.animation
    if anim.branch == branch.name and anim.kind in BRANCH_SYNC_KINDS:
        text = animation.display_text(anim)
        if text:
            spans.append(Span(f" {text}", "success" if animation.is_success(anim) else "busy"))
    return tuple(spans)


def stash_row(stash: Stash) -> Row:
    return (Span(stash.text, "stash"),)


def content_row(line: ContentLine) -> Row:
    return (Span(line.text.expandtabs(4), LINE_STYLES[line.kind]),)


def _list_panel(
    title: str, rows: list[Row], selected: int, rect: Rect, active: bool, empty: str
) -> PanelView:
    visible = max(0, rect.height - 2)
    if not rows:
        return PanelView(title, [(Span(empty, "dim"),)], None, active)
    shown, sel = _windowed(rows, selected, visible)
    return PanelView(title, shown, sel, active)


def content_title(state: AppState) -> str:
    mode = state.mode
    suffix = "(Scrollable)" if mode.is_view else "(Preview)"
    key = state.content_key
    if key is None:
        return " 2. Content "
    kind, name = key
    label = {"file": name, "branch": f"Branch {name}", "commit": f"Commit {name}", "stash": name}[kind]
    return f" 2. {label} {suffix} "


def content_panel(state: AppState, rect: Rect) -> PanelView:
    visible = max(0, rect.height - 2)
    start = state.content_scroll
    shown = [content_row(line) for line in state.content[start : start + visible]]
    selected = None
    if state.mode.is_view and shown:
        selected = state.content_cursor - start
        if not 0 <= selected < len(shown):
            selected = None
    return PanelView(content_title(state), shown, selected, state.mode.is_view)


def status_row(state: AppState, width: int) -> Row:
    hints = VIEW_HINTS if state.mode.is_view else MODE_HINTS[state.mode]
    anim_text = animation.display_text(state.animation)
    if not anim_text:
        return (Span(hints, "hint"),)
    gap = max(1, width - len(hints) - len(anim_text) - 1)
    style = "success" if animation.is_success(state.animation) else "busy"
    return (Span(hints, "hint"), Span(" " * gap), Span(anim_text, style))


def dialog_view(dialog: Dialog) -> DialogView:
    """Stateless drawing description of a dialog, derived from its fields only."""
    if isinstance(dialog, ErrorPopup):
        return DialogView(
            "Error:",
            [(Span(dialog.message),), (), (Span("Press any key to continue...", "hint"),)],
            style="error",
        )
    if isinstance(dialog, TypedConfirm):
        lines: list[Row] = [(Span(text),) for text in dialog.lines]
        lines.append((Span(f"> {dialog.buffer}_", "input"),))
        return DialogView(dialog.title, lines, style="error")
    if isinstance(dialog, ConfirmPrompt):
        return DialogView(dialog.title, [(Span(text),) for text in dialog.lines], style="warning")
    if isinstance(dialog, TextPrompt):
        return DialogView(
            dialog.title,
            [
                (Span(dialog.prompt),),
                (Span(f"> {dialog.buffer}_", "input"),),
                (),
                (Span("Enter: confirm | Esc: cancel", "hint"),),
            ],
        )
    if isinstance(dialog, CommitEditor):
        return _commit_editor_view(dialog)
    if isinstance(dialog, UpstreamPrompt):
        lines = [
            (Span("Enter upstream as <remote> <branchname>"),),
            (Span(f"> {dialog.buffer}_", "input"),),
            (),
        ]
        suggestions = dialog.suggestions
        for suggestion in suggestions:
            lines.append((Span(f"  {suggestion}"),))
        lines += [(), (Span("Tab: use suggestion | Enter: push | Esc: cancel", "hint"),)]
        selected = 3 + dialog.selected if suggestions else None
        return DialogView("Set Upstream Branch", lines, selected)
    if isinstance(dialog, DeleteBranchPrompt):
        lines = [(Span(f"  {label}"),) for _, label in DELETE_OPTIONS]
        lines += [(), (Span("Enter: select | Esc: cancel", "hint"),)]
        return DialogView(f"Delete branch '{dialog.branch}'", lines, dialog.selected)
    return DialogView(type(dialog).__name__, [])


def _commit_editor_view(dialog: CommitEditor) -> DialogView:
    title_marker = ">" if not dialog.editing_message else " "
    message_marker = ">" if dialog.editing_message else " "
    lines: list[Row] = [
        (Span(f"{title_marker} Title:", "label"),),
        (Span(f"  {dialog.title}" + ("" if dialog.editing_message else "_"), "input"),),
        (),
        (Span(f"{message_marker} Message (Enter for new line):", "label"),),
    ]
    message_lines = dialog.message.split("\n")
    if dialog.editing_message:
        message_lines[-1] += "_"
    lines += [(Span(f"  {text}", "input"),) for text in message_lines]
    lines += [(), (Span("Tab: switch field | Esc: cancel", "hint"),)]
    return DialogView(dialog.heading, lines)


def render_frame(state: AppState, layout: Layout) -> Frame:
    if layout.too_small:
        return Frame(HEADER, notice=f"Terminal too small (need {MIN_WIDTH}x{MIN_HEIGHT})")
    active = state.mode.list_mode
    panels = {
        "files": _list_panel(
            " 1. Files ",
            [file_row(item) for item in state.files],
            state.selected_file,
            layout.files,
            active is ViewMode.FILE_LIST,
            "No changes",
        ),
        "branches": _list_panel(
            " 3. Branches ",
            [branch_row(branch, state) for branch in state.branches],
            state.selected_branch,
            layout.branches,
            active is ViewMode.BRANCH_LIST,
            "No branches",
        ),
        "commits": _list_panel(
            " 4. Commits ",
            [commit_row(commit) for commit in state.commits],
            state.selected_commit,
            layout.commits,
            active is ViewMode.COMMIT_LIST,
            "No commits",
        ),
        "stashes": _list_panel(
            " 5. Stashes ",
            [stash_row(stash) for stash in state.stashes],
            state.selected_stash,
            layout.stashes,
            active is ViewMode.STASH_LIST,
            "No stashes",
        ),
        "content": content_panel(state, layout.content),
    }
    dialog = dialog_view(state.dialog) if state.dialog is not None else None
    return Frame(HEADER, panels, status_row(state, layout.width), dialog)
