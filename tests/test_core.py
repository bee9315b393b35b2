from __future__ import annotations

from pathlib import Path

import pytest

from conftest import add_remote, commit_file, requires_git, run
from gg import dispatch, git_ops, keys, mutator, query, services
from gg.config import Limits
from gg.dialogs import UpstreamPrompt
from gg.models import DeleteScope, LineKind, SyncKind, ViewMode
from gg.parsers import NO_CHANGES
from gg.state import Context


def _make_mad(repo: Path) -> None:
    commit_file(repo, "1-mod.txt", "one\n", "add mod")
    commit_file(repo, "3-del.txt", "three\n", "add del")
    (repo / "1-mod.txt").write_text("one\nchanged\n")
    (repo / "3-del.txt").unlink()
    (repo / "2-add.txt").write_text("two\n")
    run(["git", "add", "2-add.txt"], cwd=repo)


@requires_git
def test_list_changed_files_statuses(repo: Path) -> None:
    _make_mad(repo)
    (repo / "new.txt").write_text("x\n")
    files = query.list_changed_files(repo, Limits())
    assert [(f.path, f.status) for f in files] == [
        ("1-mod.txt", "M"),
        ("2-add.txt", "A"),
        ("3-del.txt", "D"),
        ("new.txt", "?"),
    ]


@requires_git
def test_commit_stages_only_marked_file(ctx: Context) -> None:
    _make_mad(ctx.repo_root)
    services.refresh_all(ctx)
    assert [f.status for f in ctx.state.files] == ["M", "A", "D"]

    dispatch.handle_key(ctx, keys.DOWN[0])
    dispatch.handle_key(ctx, keys.SPACE)
    assert ctx.state.files[1].marked
    mutator.commit(ctx, "fix")

    committed = run(["git", "show", "--name-only", "--format=%s", "HEAD"], cwd=ctx.repo_root)
    assert committed.splitlines() == ["fix", "", "2-add.txt"]
    assert [(f.path, f.marked) for f in ctx.state.files] == [
        ("1-mod.txt", False),
        ("3-del.txt", False),
    ]
    assert ctx.state.commits[0].title == "fix"


@requires_git
def test_non_ascii_path_previews_and_commits(ctx: Context) -> None:
    (ctx.repo_root / "café.txt").write_text("a\nb\n")
    services.refresh_all(ctx)
    assert [f.path for f in ctx.state.files] == ["café.txt"]
    assert [line.text for line in ctx.state.content] == ["a", "b"]

    dispatch.handle_key(ctx, keys.SPACE)
    mutator.commit(ctx, "accent")
    committed = run(
        ["git", "-c", "core.quotePath=false", "show", "--name-only", "--format=%s", "HEAD"],
        cwd=ctx.repo_root,
    )
    assert committed.splitlines() == ["accent", "", "café.txt"]
    assert ctx.state.files == []


@requires_git
def test_untracked_file_preview_is_capped(repo: Path) -> None:
    (repo / "big.txt").write_text("".join(f"line {i}\n" for i in range(80)))
    lines = query.load_diff_for_file(repo, "big.txt", Limits())
    assert len(lines) == 50
    assert all(line.kind is LineKind.ADDITION for line in lines)
    assert lines[0].text == "line 0"


@requires_git
def test_tracked_diff_drops_headers(repo: Path) -> None:
    (repo / "README.md").write_text("hello\nworld\n")
    lines = query.load_diff_for_file(repo, "README.md", Limits())
    assert lines[0].kind is LineKind.HUNK_HEADER
    assert ("+world", LineKind.ADDITION) in [(line.text, line.kind) for line in lines]
    assert not any(line.text.startswith(("diff --git", "index ", "+++", "---")) for line in lines)


@requires_git
def test_tracked_diff_drops_no_newline_marker(repo: Path) -> None:
    commit_file(repo, "tail.txt", "x", "no newline")
    (repo / "tail.txt").write_text("y")
    lines = query.load_diff_for_file(repo, "tail.txt", Limits())
    assert [line.text for line in lines] == ["@@ -1 +1 @@", "-x", "+y"]


@requires_git
def test_unchanged_tracked_file_has_placeholder(repo: Path) -> None:
    lines = query.load_diff_for_file(repo, "README.md", Limits())
    assert [(line.text, line.kind) for line in lines] == [(NO_CHANGES, LineKind.CONTEXT)]


@requires_git
def test_commits_without_remote_are_local(repo: Path) -> None:
    commits = query.list_commits(repo, Limits())
    assert [c.title for c in commits] == ["init"]
    assert commits[0].initials == "Te"
    assert not commits[0].pushed


@requires_git
def test_commits_pushed_flag_follows_origin(repo: Path, tmp_path: Path) -> None:
    add_remote(repo, tmp_path)
    commit_file(repo, "a.txt", "a\n", "local work")
    commits = query.list_commits(repo, Limits())
    assert [(c.title, c.pushed) for c in commits] == [("local work", False), ("init", True)]


@requires_git
def test_branches_ahead_behind(repo: Path, tmp_path: Path) -> None:
    add_remote(repo, tmp_path)
    run(["git", "branch", "topic"], cwd=repo)
    commit_file(repo, "a.txt", "a\n", "ahead")
    branches = {b.name: b for b in query.list_branches(repo, Limits())}
    assert branches["main"].current
    assert (branches["main"].ahead, branches["main"].behind) == (1, 0)
    assert (branches["topic"].ahead, branches["topic"].behind) == (0, 0)
    assert not branches["topic"].current


@requires_git
def test_branch_create_rename_delete(ctx: Context) -> None:
    services.refresh_all(ctx)
    ctx.state.mode = ViewMode.BRANCH_LIST
    name = mutator.create_branch(ctx, "my feature")
    assert name == "my-feature"
    assert ctx.state.branches[ctx.state.selected_branch].name == "my-feature"
    assert git_ops.get_current_branch(ctx.repo_root) == "my-feature"

    mutator.checkout(ctx, "main")
    mutator.rename_branch(ctx, "my-feature", "renamed")
    assert ctx.state.branches[ctx.state.selected_branch].name == "renamed"

    mutator.delete_branch(ctx, "renamed", DeleteScope.LOCAL)
    assert [b.name for b in ctx.state.branches] == ["main"]


@requires_git
def test_delete_current_or_remote_without_upstream_is_refused(ctx: Context) -> None:
    services.refresh_all(ctx)
    run(["git", "branch", "topic"], cwd=ctx.repo_root)
    services.refresh(ctx, branches=True)
    with pytest.raises(mutator.RefusedError, match="current branch"):
        mutator.delete_branch(ctx, "main", DeleteScope.LOCAL)
    with pytest.raises(mutator.RefusedError, match="no upstream"):
        mutator.delete_branch(ctx, "topic", DeleteScope.BOTH)
    assert "topic" in [b.name for b in ctx.state.branches]


@requires_git
def test_stash_lifecycle(ctx: Context) -> None:
    (ctx.repo_root / "README.md").write_text("stashed\n")
    services.refresh_all(ctx)
    mutator.stash_create(ctx, "wip")
    assert ctx.state.files == []
    assert len(ctx.state.stashes) == 1
    assert "wip" in ctx.state.stashes[0].text

    ctx.state.mode = ViewMode.STASH_LIST
    services.reload_content(ctx)
    assert any(line.kind is LineKind.ADDITION for line in ctx.state.content)

    mutator.stash_apply(ctx, 0)
    assert [f.path for f in ctx.state.files] == ["README.md"]
    run(["git", "checkout", "--", "README.md"], cwd=ctx.repo_root)
    mutator.stash_pop(ctx, 0)
    assert ctx.state.stashes == []

    mutator.stash_create(ctx)
    mutator.stash_drop(ctx, 0)
    assert ctx.state.stashes == []


@requires_git
def test_soft_reset_keeps_changes(ctx: Context) -> None:
    commit_file(ctx.repo_root, "a.txt", "a\n", "second")
    services.refresh_all(ctx)
    mutator.reset(ctx, 0)
    assert [c.title for c in ctx.state.commits] == ["init"]
    assert [(f.path, f.status) for f in ctx.state.files] == [("a.txt", "A")]


@requires_git
def test_hard_reset_needs_typed_yes(ctx: Context) -> None:
    commit_file(ctx.repo_root, "a.txt", "a\n", "second")
    services.refresh_all(ctx)
    services.switch_mode(ctx, ViewMode.COMMIT_LIST)
    dispatch.handle_key(ctx, ord("R"))
    for ch in "no":
        dispatch.handle_key(ctx, ord(ch))
    dispatch.handle_key(ctx, keys.ENTER[0])
    assert ctx.state.dialog is not None
    assert len(ctx.state.commits) == 2
    for ch in "YES":
        dispatch.handle_key(ctx, ord(ch))
    dispatch.handle_key(ctx, keys.ENTER[0])
    assert ctx.state.dialog is None
    assert [c.title for c in ctx.state.commits] == ["init"]
    assert ctx.state.files == []


@requires_git
def test_amend_prefills_and_rewrites(ctx: Context) -> None:
    services.refresh_all(ctx)
    services.switch_mode(ctx, ViewMode.COMMIT_LIST)
    dispatch.handle_key(ctx, ord("a"))
    editor = ctx.state.dialog
    assert editor.title == "init"
    dispatch.handle_key(ctx, ord("!"))
    dispatch.handle_key(ctx, keys.ENTER[0])
    assert [c.title for c in ctx.state.commits] == ["init!"]


@requires_git
def test_push_without_upstream_prompts_then_sets_it(ctx: Context, tmp_path: Path) -> None:
    remote = tmp_path / "origin.git"
    run(["git", "init", "-q", "--bare", str(remote)])
    run(["git", "remote", "add", "origin", str(remote)], cwd=ctx.repo_root)
    services.refresh_all(ctx)
    services.switch_mode(ctx, ViewMode.COMMIT_LIST)

    dispatch.handle_key(ctx, ord("P"))
    prompt = ctx.state.dialog
    assert isinstance(prompt, UpstreamPrompt)
    assert prompt.buffer == "origin main"
    assert ctx.state.critical
    assert git_ops.try_run(["rev-parse", "origin/main"], cwd=ctx.repo_root) is None

    dispatch.handle_key(ctx, keys.ENTER[0])
    assert ctx.state.dialog is None
    assert not ctx.state.critical
    assert git_ops.get_upstream(ctx.repo_root, "main") == "origin/main"
    assert ctx.state.commits[0].pushed
    assert ctx.state.animation.kind is SyncKind.PUSHING
    assert not ctx.state.animation.held


@requires_git
def test_failed_pull_shows_error(ctx: Context) -> None:
    services.refresh_all(ctx)
    dispatch.start_pull(ctx)
    assert ctx.state.dialog is not None
    assert ctx.state.dialog.message.startswith("Pull failed")
    assert ctx.state.animation.kind is SyncKind.IDLE


@requires_git
def test_pull_brings_remote_commits(ctx: Context, tmp_path: Path) -> None:
    remote = add_remote(ctx.repo_root, tmp_path)
    other = tmp_path / "other"
    run(["git", "clone", "-q", "-b", "main", str(remote), str(other)])
    run(["git", "config", "user.email", "o@example.com"], cwd=other)
    run(["git", "config", "user.name", "Other"], cwd=other)
    run(["git", "config", "commit.gpgsign", "false"], cwd=other)
    commit_file(other, "b.txt", "b\n", "from elsewhere")
    run(["git", "push", "-q", "origin", "HEAD:main"], cwd=other)

    services.refresh_all(ctx)
    mutator.pull(ctx)
    assert [c.title for c in ctx.state.commits][:1] == ["from elsewhere"]
    assert ctx.state.animation.kind is SyncKind.PULLING
