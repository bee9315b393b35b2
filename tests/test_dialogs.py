from __future__ import annotations

from gg import keys
from gg.dialogs import (
    CommitEditor,
    ConfirmPrompt,
    DeleteBranchPrompt,
    ErrorPopup,
    Outcome,
    TextPrompt,
    TypedConfirm,
    UpstreamPrompt,
)
from gg.models import DeleteScope

ENTER = keys.ENTER[0]


def _type(dialog, text: str) -> None:
    for ch in text:
        assert dialog.handle_key(ord(ch)) is Outcome.PENDING


def test_commit_editor_fields() -> None:
    submitted = []
    editor = CommitEditor("Commit", lambda title, message: submitted.append((title, message)))
    assert editor.handle_key(ENTER) is Outcome.PENDING
    _type(editor, "fix")
    editor.handle_key(keys.TAB)
    _type(editor, "line one")
    assert editor.handle_key(ENTER) is Outcome.PENDING
    _type(editor, "line two")
    editor.handle_key(keys.BACKSPACE[0])
    editor.handle_key(keys.TAB)
    assert editor.handle_key(ENTER) is Outcome.SUBMITTED
    editor.submit()
    assert submitted == [("fix", "line one\nline tw")]


def test_commit_editor_escape_cancels() -> None:
    editor = CommitEditor("Commit", lambda title, message: None, title="x")
    assert editor.handle_key(keys.ESC) is Outcome.CANCELLED


def test_text_prompt_requires_text_unless_optional() -> None:
    names = []
    prompt = TextPrompt("New Branch", "Branch name:", names.append)
    assert prompt.handle_key(ENTER) is Outcome.PENDING
    _type(prompt, " topic ")
    assert prompt.handle_key(ENTER) is Outcome.SUBMITTED
    prompt.submit()
    assert names == ["topic"]

    optional = TextPrompt("Create Stash", "Stash name (optional):", names.append, allow_empty=True)
    assert optional.handle_key(ENTER) is Outcome.SUBMITTED


def test_confirm_defaults_to_no() -> None:
    prompt = ConfirmPrompt("Branch has diverged!", [], lambda: None)
    assert prompt.handle_key(ord("x")) is Outcome.PENDING
    assert prompt.handle_key(ENTER) is Outcome.CANCELLED
    assert prompt.handle_key(ord("y")) is Outcome.SUBMITTED


def test_typed_confirm_clears_wrong_input() -> None:
    confirm = TypedConfirm("HARD RESET WARNING!", [], lambda: None)
    _type(confirm, "nope")
    assert confirm.handle_key(ENTER) is Outcome.PENDING
    assert confirm.buffer == ""
    _type(confirm, "yesyesyesyes")
    assert confirm.buffer == "yesyesye"
    confirm.buffer = ""
    _type(confirm, "Yes")
    assert confirm.handle_key(ENTER) is Outcome.SUBMITTED


def test_upstream_prompt_suggestions() -> None:
    chosen = []
    prompt = UpstreamPrompt(
        "feature", ["origin", "fork", "backup", "extra"], lambda r, b: chosen.append((r, b))
    )
    assert prompt.buffer == "origin feature"
    assert prompt.suggestions == ["origin feature", "fork feature", "backup feature"]
    prompt.handle_key(keys.DOWN[0])
    prompt.handle_key(keys.DOWN[0])
    prompt.handle_key(keys.DOWN[0])
    assert prompt.selected == 2
    prompt.handle_key(keys.TAB)
    assert prompt.buffer == "backup feature"
    assert prompt.handle_key(ENTER) is Outcome.SUBMITTED
    prompt.submit()
    assert chosen == [("backup", "feature")]


def test_upstream_prompt_needs_remote_and_branch() -> None:
    prompt = UpstreamPrompt("main", [], lambda r, b: None)
    assert prompt.buffer == "origin main"
    while prompt.buffer:
        prompt.handle_key(keys.BACKSPACE[1])
    _type(prompt, "origin")
    assert prompt.handle_key(ENTER) is Outcome.PENDING


def test_delete_prompt_scopes() -> None:
    scopes = []
    prompt = DeleteBranchPrompt("topic", scopes.append)
    assert prompt.handle_key(ord("b")) is Outcome.SUBMITTED
    prompt.submit()
    prompt = DeleteBranchPrompt("topic", scopes.append)
    prompt.handle_key(ord("j"))
    assert prompt.handle_key(ENTER) is Outcome.SUBMITTED
    prompt.submit()
    assert scopes == [DeleteScope.BOTH, DeleteScope.REMOTE]
    assert DeleteBranchPrompt("topic", scopes.append).handle_key(keys.ESC) is Outcome.CANCELLED


def test_error_popup_closes_on_any_key() -> None:
    popup = ErrorPopup("boom")
    assert not popup.critical
    assert popup.handle_key(ord("z")) is Outcome.SUBMITTED
