"""Modal dialogs.

A dialog owns its own input buffer and turns keys into an :class:`Outcome`.
When a dialog is submitted its callback runs; drawing is done separately by
``render.dialog_view`` from the dialog's fields alone.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from gg import keys
from gg.models import DeleteScope


class Outcome(Enum):
    PENDING = "pending"
    CANCELLED = "cancelled"
    SUBMITTED = "submitted"


class Dialog:
    """Base class; ``critical`` dialogs block the background fetch while open."""

    critical = True

    def handle_key(self, key: int) -> Outcome:
        raise NotImplementedError

    def submit(self) -> None:
        pass


def _edit(buffer: str, key: int, max_length: int) -> str:
    if key in keys.BACKSPACE:
        return buffer[:-1]
    if keys.is_printable(key) and len(buffer) < max_length:
        return buffer + chr(key)
    return buffer


@dataclass
class ErrorPopup(Dialog):
    message: str

    critical = False

    def handle_key(self, key: int) -> Outcome:
        return Outcome.SUBMITTED


@dataclass
class TextPrompt(Dialog):
    """Single-line text entry (branch names, stash names)."""

    title: str
    prompt: str
    on_submit: Callable[[str], None]
    buffer: str = ""
    allow_empty: bool = False
    max_length: int = 100

    def handle_key(self, key: int) -> Outcome:
        if key == keys.ESC:
            return Outcome.CANCELLED
        if key in keys.ENTER:
            if self.buffer.strip() or self.allow_empty:
                return Outcome.SUBMITTED
            return Outcome.PENDING
        self.buffer = _edit(self.buffer, key, self.max_length)
        return Outcome.PENDING

    def submit(self) -> None:
        self.on_submit(self.buffer.strip())


@dataclass
class ConfirmPrompt(Dialog):
    """y/N question; anything but ``y`` declines."""

    title: str
    lines: list[str]
    on_confirm: Callable[[], None]

    def handle_key(self, key: int) -> Outcome:
        if key in (ord("y"), ord("Y")):
            return Outcome.SUBMITTED
        if key in (ord("n"), ord("N"), ord("q"), keys.ESC, *keys.ENTER):
            return Outcome.CANCELLED
        return Outcome.PENDING

    def submit(self) -> None:
        self.on_confirm()


@dataclass
class TypedConfirm(Dialog):
    """Confirmation that only proceeds once ``word`` is typed (case-insensitive)."""

    title: str
    lines: list[str]
    on_confirm: Callable[[], None]
    word: str = "yes"
    buffer: str = ""
    max_length: int = 8

    def handle_key(self, key: int) -> Outcome:
        if key == keys.ESC:
            return Outcome.CANCELLED
        if key in keys.ENTER:
            if self.buffer.strip().lower() == self.word:
                return Outcome.SUBMITTED
            self.buffer = ""
            return Outcome.PENDING
        self.buffer = _edit(self.buffer, key, self.max_length)
        return Outcome.PENDING

    def submit(self) -> None:
        self.on_confirm()


@dataclass
class CommitEditor(Dialog):
    """Title plus multi-line message; Tab switches between the two fields."""

    heading: str
    on_submit: Callable[[str, str], None]
    title: str = ""
    message: str = ""
    editing_message: bool = False

    def handle_key(self, key: int) -> Outcome:
        if key == keys.ESC:
            return Outcome.CANCELLED
        if key == keys.TAB:
            self.editing_message = not self.editing_message
            return Outcome.PENDING
        if key in keys.ENTER:
            if self.editing_message:
                if len(self.message) < 2000:
                    self.message += "\n"
                return Outcome.PENDING
            return Outcome.SUBMITTED if self.title.strip() else Outcome.PENDING
        if self.editing_message:
            self.message = _edit(self.message, key, 2000)
        else:
            self.title = _edit(self.title, key, 200)
        return Outcome.PENDING

    def submit(self) -> None:
        self.on_submit(self.title.strip(), self.message.strip())


@dataclass
class UpstreamPrompt(Dialog):
    """Ask for ``<remote> <branch>`` before the first push of a branch."""

    branch: str
    remotes: list[str]
    on_submit: Callable[[str, str], None]
    buffer: str = ""
    selected: int = 0
    max_length: int = 100

    def __post_init__(self) -> None:
        if not self.buffer:
            remote = self.remotes[0] if self.remotes else "origin"
            self.buffer = f"{remote} {self.branch}"

    @property
    def suggestions(self) -> list[str]:
        return [f"{remote} {self.branch}" for remote in self.remotes[:3]]

    def handle_key(self, key: int) -> Outcome:
        if key == keys.ESC:
            return Outcome.CANCELLED
        if key in keys.ENTER:
            return Outcome.SUBMITTED if len(self.buffer.split()) == 2 else Outcome.PENDING
        suggestions = self.suggestions
        if key == keys.TAB:
            if suggestions:
                self.buffer = suggestions[self.selected]
        elif key == keys.UP[0]:
            self.selected = max(0, self.selected - 1)
        elif key == keys.DOWN[0]:
            self.selected = max(0, min(self.selected + 1, len(suggestions) - 1))
        else:
            self.buffer = _edit(self.buffer, key, self.max_length)
        return Outcome.PENDING

    def submit(self) -> None:
        remote, branch = self.buffer.split()
        self.on_submit(remote, branch)


DELETE_OPTIONS = [
    (DeleteScope.LOCAL, "Delete local (l)"),
    (DeleteScope.REMOTE, "Delete remote (r)"),
    (DeleteScope.BOTH, "Delete both (b)"),
]

_SCOPE_KEYS = {ord("l"): 0, ord("r"): 1, ord("b"): 2}


@dataclass
class DeleteBranchPrompt(Dialog):
    branch: str
    on_choose: Callable[[DeleteScope], None]
    selected: int = field(default=0)

    def handle_key(self, key: int) -> Outcome:
        if key in (keys.ESC, ord("q")):
            return Outcome.CANCELLED
        if key in _SCOPE_KEYS:
            self.selected = _SCOPE_KEYS[key]
            return Outcome.SUBMITTED
        if key in keys.ENTER:
            return Outcome.SUBMITTED
        if key in keys.UP:
            self.selected = max(0, self.selected - 1)
        elif key in keys.DOWN:
            self.selected = min(len(DELETE_OPTIONS) - 1, self.selected + 1)
        return Outcome.PENDING

    def submit(self) -> None:
        self.on_choose(DELETE_OPTIONS[self.selected][0])
