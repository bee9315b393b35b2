"""Data models for gg."""

from dataclasses import dataclass
from enum import Enum
from subprocess import Popen


class LineKind(Enum):
    """Semantic kind of one line in the content panel."""

    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"
    HUNK_HEADER = "hunk-header"
    COMMIT_HEADER = "commit-header"
    COMMIT_INFO = "commit-info"
    STAT_LINE = "stat-line"


class ViewMode(Enum):
    FILE_LIST = "file-list"
    FILE_VIEW = "file-view"
    BRANCH_LIST = "branch-list"
    BRANCH_VIEW = "branch-view"
    COMMIT_LIST = "commit-list"
    COMMIT_VIEW = "commit-view"
    STASH_LIST = "stash-list"
    STASH_VIEW = "stash-view"

    @property
    def is_view(self) -> bool:
        return self in _VIEW_OF.values()

    @property
    def list_mode(self) -> "ViewMode":
        """The list mode paired with this mode (itself for list modes)."""
        for list_mode, view_mode in _VIEW_OF.items():
            if self in (list_mode, view_mode):
                return list_mode
        return ViewMode.FILE_LIST

    @property
    def view_mode(self) -> "ViewMode":
        """The scrollable view paired with this mode (itself for views)."""
        return _VIEW_OF.get(self.list_mode, ViewMode.FILE_VIEW)


_VIEW_OF = {
    ViewMode.FILE_LIST: ViewMode.FILE_VIEW,
    ViewMode.BRANCH_LIST: ViewMode.BRANCH_VIEW,
    ViewMode.COMMIT_LIST: ViewMode.COMMIT_VIEW,
    ViewMode.STASH_LIST: ViewMode.STASH_VIEW,
}


class SyncKind(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    PUSHING = "pushing"
    PULLING = "pulling"
    SYNCED = "synced"
    PUSHED = "pushed"
    PULLED = "pulled"


class Phase(Enum):
    APPEARING = "appearing"
    VISIBLE = "visible"
    DISAPPEARING = "disappearing"


class DeleteScope(Enum):
    LOCAL = "local"
    REMOTE = "remote"
    BOTH = "both"


@dataclass
class WorkspaceFile:
    """A path that differs from HEAD, as reported by git status."""

    path: str
    status: str
    marked: bool = False


@dataclass(frozen=True)
class Commit:
    hash: str
    initials: str
    title: str
    pushed: bool


@dataclass(frozen=True)
class Branch:
    name: str
    current: bool = False
    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class Stash:
    text: str


@dataclass(frozen=True)
class ContentLine:
    text: str
    kind: LineKind = LineKind.CONTEXT


@dataclass(frozen=True)
class AheadBehind:
    """Commit counts ahead/behind a reference."""

    ahead: int
    behind: int


@dataclass
class SyncAnimation:
    """Status-line animation: which text, how far revealed, and where in its lifecycle.

    ``held`` keeps an in-progress animation in its visible phase until the
    operation it reports on finishes. ``branch`` names the branch row that
    mirrors the text in the branch panel, if any.
    """

    kind: SyncKind = SyncKind.IDLE
    phase: Phase = Phase.APPEARING
    revealed: int = 0
    frame: int = 0
    spinner: int = 0
    held: bool = False
    branch: str | None = None


@dataclass
class BackgroundTask:
    """The single outstanding background fetch, if any."""

    process: Popen | None = None
    in_progress: bool = False
    last_started: float = 0.0
