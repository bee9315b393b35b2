"""Adapters from git's text output to gg models.

Each parser handles exactly one output shape and skips lines it does not
understand instead of raising.
"""

import re

from gg.models import Branch, Commit, ContentLine, LineKind, Stash, WorkspaceFile

NO_CHANGES = "No changes in this file"

_FILE_HEADERS = ("diff --git", "index ", "--- ", "+++ ")
_DIFF_BODY = ("@@", "+", "-", " ")
_STAT_SUMMARY = re.compile(r"\d+ files? changed|\d+ insertions?\(\+\)|\d+ deletions?\(-\)")

_ESCAPES = {"a": 7, "b": 8, "t": 9, "n": 10, "v": 11, "f": 12, "r": 13, '"': 34, "\\": 92}


def _unquote(path: str) -> str:
    """Undo git's C-style path quoting (``"caf\\303\\251.txt"`` is ``café.txt``)."""
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    raw = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 == len(body):
            raw += ch.encode("utf-8")
            i += 1
            continue
        nxt = body[i + 1]
        octal = body[i + 1 : i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            raw.append(int(octal, 8) & 0xFF)
            i += 4
        elif nxt in _ESCAPES:
            raw.append(_ESCAPES[nxt])
            i += 2
        else:
            raw += ch.encode("utf-8")
            i += 1
    return raw.decode("utf-8", errors="replace")


def parse_status(output: str) -> list[WorkspaceFile]:
    """Parse ``git status --porcelain`` lines (``XY path``)."""
    files: list[WorkspaceFile] = []
    for line in output.splitlines():
        if len(line) < 4 or line[2] != " ":
            continue
        status = line[0] if line[0] != " " else line[1]
        path = line[3:]
        if " -> " in path:
            path = path.split(" -> ", 1)[1]
        files.append(WorkspaceFile(path=_unquote(path), status=status))
    return files


def author_initials(author: str) -> str:
    author = author.strip()
    return (author[:2] if author else "").ljust(2, "?")


def parse_log(output: str, unpushed: set[str] | None) -> list[Commit]:
    """Parse ``hash|author|title`` lines.

    ``unpushed`` is the set of hashes reachable from HEAD but not from the
    remote tracking ref; ``None`` means no remote ref could be resolved.
    """
    commits: list[Commit] = []
    for line in output.splitlines():
        parts = line.split("|", 2)
        if len(parts) != 3 or not parts[0]:
            continue
        short_hash, author, title = parts
        pushed = unpushed is not None and short_hash not in unpushed
        commits.append(Commit(short_hash, author_initials(author), title, pushed))
    return commits


def parse_branches(output: str) -> list[tuple[str, bool]]:
    """Parse ``git branch`` into (name, is_current) pairs for local branches."""
    branches: list[tuple[str, bool]] = []
    for line in output.splitlines():
        if len(line) < 3 or "->" in line:
            continue
        current = line[0] == "*"
        name = line[2:].strip()
        if not name or name.startswith("remotes/") or name.startswith("("):
            continue
        branches.append((name, current))
    return branches


def make_branch(name: str, current: bool, ahead: int = 0, behind: int = 0) -> Branch:
    return Branch(name=name, current=current, ahead=ahead, behind=behind)


def parse_stashes(output: str) -> list[Stash]:
    return [Stash(line) for line in output.splitlines() if line.strip()]


def classify_diff_line(line: str) -> LineKind:
    if line.startswith("@@"):
        return LineKind.HUNK_HEADER
    if line.startswith("+"):
        return LineKind.ADDITION
    if line.startswith("-"):
        return LineKind.DELETION
    return LineKind.CONTEXT


def parse_file_diff(output: str) -> list[ContentLine]:
    """Classify ``git diff HEAD -- <path>`` output, keeping only hunk lines."""
    lines: list[ContentLine] = []
    found_changes = False
    for line in output.splitlines():
        if line.startswith(_FILE_HEADERS) or not line.startswith(_DIFF_BODY):
            continue
        kind = classify_diff_line(line)
        if kind is not LineKind.CONTEXT:
            found_changes = True
        lines.append(ContentLine(line, kind))
    if not found_changes:
        return [ContentLine(NO_CHANGES)]
    return lines


def parse_untracked(text: str, limit: int) -> list[ContentLine]:
    """Every line of a file git does not know about is an addition."""
    return [ContentLine(line, LineKind.ADDITION) for line in text.splitlines()[:limit]]


def classify_content_line(line: str) -> LineKind:
    """Classify a line of ``git show`` / ``git stash show`` / ``git log`` output."""
    if line.startswith(_FILE_HEADERS) or line.startswith("@@"):
        return LineKind.HUNK_HEADER
    if line.startswith("+"):
        return LineKind.ADDITION
    if line.startswith("-"):
        return LineKind.DELETION
    if " | " in line and ("+" in line or "-" in line or "Bin" in line):
        return LineKind.STAT_LINE
    if _STAT_SUMMARY.search(line):
        return LineKind.STAT_LINE
    if line.startswith("commit "):
        return LineKind.COMMIT_HEADER
    if line.startswith(("Author: ", "Date: ", "Merge: ")):
        return LineKind.COMMIT_INFO
    return LineKind.CONTEXT


def parse_content(output: str) -> list[ContentLine]:
    return [ContentLine(line, classify_content_line(line)) for line in output.splitlines()]
