from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from gg.config import Settings
from gg.state import AppState, Context

GIT_AVAILABLE = subprocess.run(["git", "--version"], capture_output=True).returncode == 0

requires_git = pytest.mark.skipif(not GIT_AVAILABLE, reason="git missing")


def run(cmd: list[str], cwd: Path | None = None) -> str:
    result = subprocess.run(
        cmd, cwd=str(cwd) if cwd else None, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


def configure(repo: Path) -> None:
    run(["git", "config", "user.email", "test@example.com"], cwd=repo)
    run(["git", "config", "user.name", "Test User"], cwd=repo)
    run(["git", "config", "commit.gpgsign", "false"], cwd=repo)


def init_repo(root: Path) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    run(["git", "init", "-q"], cwd=root)
    run(["git", "symbolic-ref", "HEAD", "refs/heads/main"], cwd=root)
    configure(root)
    (root / "README.md").write_text("hello\n")
    run(["git", "add", "."], cwd=root)
    run(["git", "commit", "-q", "-m", "init"], cwd=root)
    return root


def commit_file(repo: Path, name: str, text: str, message: str) -> None:
    (repo / name).write_text(text)
    run(["git", "add", name], cwd=repo)
    run(["git", "commit", "-q", "-m", message], cwd=repo)


def add_remote(repo: Path, tmp_path: Path) -> Path:
    """Create a bare origin for ``repo`` and push main to it with tracking."""
    remote = tmp_path / "origin.git"
    run(["git", "init", "-q", "--bare", str(remote)])
    run(["git", "--git-dir", str(remote), "symbolic-ref", "HEAD", "refs/heads/main"])
    run(["git", "remote", "add", "origin", str(remote)], cwd=repo)
    run(["git", "push", "-q", "-u", "origin", "main"], cwd=repo)
    return remote


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    if not GIT_AVAILABLE:
        pytest.skip("git missing")
    return init_repo(tmp_path / "repo")


@pytest.fixture
def ctx(repo: Path) -> Context:
    return Context(repo, Settings(background_fetch=False), AppState())


@pytest.fixture
def offline_ctx(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Context:
    """A context whose content reloads never reach git."""
    from gg import services

    monkeypatch.setattr(services, "reload_content", lambda ctx, preserve=False: None)
    return Context(tmp_path, Settings(background_fetch=False), AppState())
