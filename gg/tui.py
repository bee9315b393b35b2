"""Curses main loop and painter."""

import curses
import locale
import logging
import os
import signal
import time
from pathlib import Path

from gg import animation, dispatch, keys, services, tasks
from gg.config import Settings
from gg.render import Frame, Layout, PanelView, Rect, Row, compute_layout, render_frame
from gg.state import AppState, Context

logger = logging.getLogger(__name__)

# style name -> (colour pair number, foreground, extra attributes)
_STYLES = {
    "normal": (0, -1, 0),
    "addition": (1, curses.COLOR_GREEN, 0),
    "marked": (1, curses.COLOR_GREEN, curses.A_BOLD),
    "success": (1, curses.COLOR_GREEN, curses.A_BOLD),
    "ahead": (1, curses.COLOR_GREEN, 0),
    "current_branch": (1, curses.COLOR_GREEN, curses.A_BOLD),
    "deletion": (2, curses.COLOR_RED, 0),
    "hash_local": (2, curses.COLOR_RED, 0),
    "behind": (2, curses.COLOR_RED, 0),
    "error": (2, curses.COLOR_RED, curses.A_BOLD),
    "header": (3, curses.COLOR_CYAN, 0),
    "info": (3, curses.COLOR_CYAN, 0),
    "author": (3, curses.COLOR_CYAN, 0),
    "label": (3, curses.COLOR_CYAN, curses.A_BOLD),
    "hash_pushed": (4, curses.COLOR_YELLOW, 0),
    "commit_header": (4, curses.COLOR_YELLOW, curses.A_BOLD),
    "branch": (4, curses.COLOR_YELLOW, 0),
    "busy": (4, curses.COLOR_YELLOW, curses.A_BOLD),
    "warning": (4, curses.COLOR_YELLOW, curses.A_BOLD),
    "stash": (5, curses.COLOR_MAGENTA, 0),
    "status": (5, curses.COLOR_MAGENTA, 0),
    "hint": (0, -1, curses.A_DIM),
    "dim": (0, -1, curses.A_DIM),
    "input": (0, -1, curses.A_BOLD),
}
_SELECTED_PAIR = 6


class Screen:
    """Owns the curses windows for one terminal size."""

    def __init__(self, stdscr: "curses.window") -> None:
        self.stdscr = stdscr
        self.colors = False
        self.layout = compute_layout(*stdscr.getmaxyx())
        self.windows: dict[str, "curses.window"] = {}

    def init_colors(self) -> None:
        if not curses.has_colors():
            return
        curses.start_color()
        curses.use_default_colors()
        for pair, fg, _ in _STYLES.values():
            if pair:
                curses.init_pair(pair, fg, -1)
        curses.init_pair(_SELECTED_PAIR, curses.COLOR_BLACK, curses.COLOR_WHITE)
        self.colors = True

    def rebuild(self) -> Layout:
        """Recreate every panel window for the current terminal size."""
        height, width = self.stdscr.getmaxyx()
        self.layout = compute_layout(height, width)
        self.windows = {}
        if not self.layout.too_small:
            for name in ("files", "branches", "commits", "stashes", "content"):
                rect: Rect = getattr(self.layout, name)
                if rect.height > 0 and rect.width > 0:
                    self.windows[name] = curses.newwin(rect.height, rect.width, rect.y, rect.x)
        self.stdscr.clear()
        return self.layout

    def attr(self, style: str) -> int:
        pair, _, extra = _STYLES.get(style, _STYLES["normal"])
        if self.colors and pair:
            return curses.color_pair(pair) | extra
        return extra

    def paint(self, frame: Frame) -> None:
        self.stdscr.erase()
        height, width = self.stdscr.getmaxyx()
        _safe_addnstr(self.stdscr, 0, 0, frame.header, width - 1, curses.A_BOLD)
        if frame.notice is not None:
            _safe_addnstr(self.stdscr, 2, 0, frame.notice, width - 1)
            self.stdscr.refresh()
            return
        status = self.layout.status
        self._draw_row(self.stdscr, status.y, 0, frame.status, width - 1)
        self.stdscr.noutrefresh()
        for name, view in frame.panels.items():
            win = self.windows.get(name)
            if win is not None:
                self._draw_panel(win, view)
        if frame.dialog is not None:
            self._draw_dialog(frame)
        curses.doupdate()

    def highlight_attr(self, style: str) -> int:
        """Attribute for a span on the selected row of the focused panel."""
        pair, _, extra = _STYLES.get(style, _STYLES["normal"])
        if self.colors and pair:
            return curses.color_pair(pair) | extra | curses.A_REVERSE
        if self.colors:
            return curses.color_pair(_SELECTED_PAIR) | extra
        return curses.A_REVERSE | extra

    def _draw_row(
        self, win: "curses.window", y: int, x: int, row: Row, max_width: int, highlight: int = 0
    ) -> None:
        """Draw spans left to right; ``highlight`` is 0, 1 (selected) or 2 (selected, focused)."""
        for span in row:
            if max_width <= 0:
                break
            if highlight == 2:
                attr = self.highlight_attr(span.style)
            else:
                attr = self.attr(span.style) | (curses.A_BOLD if highlight else 0)
            _safe_addnstr(win, y, x, span.text, max_width, attr)
            x += len(span.text)
            max_width -= len(span.text)

    def _draw_panel(self, win: "curses.window", view: PanelView) -> None:
        win.erase()
        win.box()
        height, width = win.getmaxyx()
        title_attr = curses.A_BOLD if view.active else 0
        _safe_addnstr(win, 0, 2, view.title, width - 4, title_attr)
        inner = width - 2
        for idx, row in enumerate(view.rows[: max(0, height - 2)]):
            highlight = 0
            if idx == view.selected:
                highlight = 2 if view.active else 1
                if view.active:
                    _safe_addnstr(win, idx + 1, 1, " " * inner, inner, self.highlight_attr("normal"))
            self._draw_row(win, idx + 1, 1, row, inner, highlight)
        win.noutrefresh()

    def _draw_dialog(self, frame: Frame) -> None:
        dialog = frame.dialog
        assert dialog is not None
        height, width = self.stdscr.getmaxyx()
        text_width = max([len(dialog.title)] + [sum(len(s.text) for s in row) for row in dialog.lines])
        box_w = min(width - 2, max(40, text_width + 4))
        box_h = min(height - 2, len(dialog.lines) + 4)
        if box_w < 10 or box_h < 3:
            return
        win = curses.newwin(box_h, box_w, (height - box_h) // 2, (width - box_w) // 2)
        win.erase()
        win.attron(self.attr(dialog.style))
        win.box()
        win.attroff(self.attr(dialog.style))
        _safe_addnstr(win, 0, 2, f" {dialog.title} ", box_w - 4, self.attr(dialog.style) | curses.A_BOLD)
        for idx, row in enumerate(dialog.lines[: box_h - 4]):
            self._draw_row(win, idx + 2, 2, row, box_w - 4, 2 if idx == dialog.selected else 0)
        win.noutrefresh()


def _safe_addnstr(win: "curses.window", y: int, x: int, text: str, max_width: int, attr: int = 0) -> None:
    height, width = win.getmaxyx()
    if y < 0 or y >= height or x < 0 or x >= width or max_width <= 0:
        return
    try:
        win.addnstr(y, x, text, min(max_width, width - x), attr)
    except curses.error:
        return


def _run(stdscr: "curses.window", repo_root: Path, settings: Settings) -> None:
    curses.curs_set(0)
    stdscr.keypad(True)
    stdscr.nodelay(True)
    screen = Screen(stdscr)
    screen.init_colors()
    screen.rebuild()

    state = AppState(content_height=screen.layout.content_rows)
    state.fetch.last_started = time.monotonic()

    def _wait_frame() -> None:
        animation.advance(state.animation)
        screen.paint(render_frame(state, screen.layout))

    ctx = Context(repo_root, settings, state, on_wait=_wait_frame)
    services.refresh_all(ctx)

    resized = [False]

    def _on_winch(signum: int, frame: object) -> None:
        resized[0] = True

    previous = signal.signal(signal.SIGWINCH, _on_winch)
    try:
        while state.running:
            if resized[0]:
                resized[0] = False
                size = os.get_terminal_size()
                curses.resizeterm(size.lines, size.columns)
                screen.rebuild()
                state.content_height = screen.layout.content_rows
                logger.debug("resized to %dx%d", size.columns, size.lines)
            tasks.tick(ctx, time.monotonic())
            animation.advance(state.animation)
            screen.paint(render_frame(state, screen.layout))
            key = stdscr.getch()
            if key == keys.RESIZE:
                resized[0] = True
            elif key != -1:
                dispatch.handle_key(ctx, key)
            time.sleep(settings.tick_interval)
    finally:
        signal.signal(signal.SIGWINCH, previous)
        tasks.shutdown(ctx)


def run_tui(repo_root: Path, settings: Settings) -> None:
    """Run the interactive client until the user quits."""
    locale.setlocale(locale.LC_ALL, "")
    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(_run, repo_root, settings)
