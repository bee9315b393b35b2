"""Status-line animations, advanced once per tick."""

from dataclasses import dataclass

from gg.models import Phase, SyncAnimation, SyncKind

SPINNER = "|/-\\"


@dataclass(frozen=True)
class AnimationSpec:
    """Timing for one animation kind, in ticks.

    ``step`` is the number of ticks per revealed or retracted character and
    ``visible`` the minimum number of ticks the full text stays on screen.
    """

    text: str
    step: int
    visible: int
    spinner: bool = False
    successor: SyncKind | None = None
    success: bool = False


SPECS: dict[SyncKind, AnimationSpec] = {
    SyncKind.FETCHING: AnimationSpec("Fetching", 2, 48, spinner=True, successor=SyncKind.SYNCED),
    SyncKind.PUSHING: AnimationSpec("Pushing", 1, 0, spinner=True, successor=SyncKind.PUSHED),
    SyncKind.PULLING: AnimationSpec("Pulling", 2, 24, spinner=True, successor=SyncKind.PULLED),
    SyncKind.SYNCED: AnimationSpec("Synced!", 2, 60, success=True),
    SyncKind.PUSHED: AnimationSpec("Pushed!", 1, 100, success=True),
    SyncKind.PULLED: AnimationSpec("Pulled!", 2, 40, success=True),
}

IN_PROGRESS = (SyncKind.FETCHING, SyncKind.PUSHING, SyncKind.PULLING)


def reset(anim: SyncAnimation) -> None:
    anim.kind = SyncKind.IDLE
    anim.phase = Phase.APPEARING
    anim.revealed = 0
    anim.frame = 0
    anim.held = False
    anim.branch = None


def start(anim: SyncAnimation, kind: SyncKind, branch: str | None = None) -> None:
    """Begin showing ``kind``; in-progress kinds hold until :func:`finish`."""
    if kind is SyncKind.IDLE:
        reset(anim)
        return
    anim.kind = kind
    anim.phase = Phase.APPEARING
    anim.revealed = 0
    anim.frame = 0
    anim.held = kind in IN_PROGRESS
    anim.branch = branch


def finish(anim: SyncAnimation, kind: SyncKind) -> None:
    """Release the hold on ``kind`` so it can retract into its successor."""
    if anim.kind is kind:
        anim.held = False


def fail(anim: SyncAnimation, kind: SyncKind) -> None:
    """Drop straight to idle if ``kind`` is the animation on screen."""
    if anim.kind is kind:
        reset(anim)


def advance(anim: SyncAnimation) -> None:
    anim.spinner = (anim.spinner + 1) % len(SPINNER)
    if anim.kind is SyncKind.IDLE:
        return
    spec = SPECS[anim.kind]
    length = len(spec.text)
    anim.frame += 1

    if anim.phase is Phase.APPEARING:
        anim.revealed = min(length, anim.frame // spec.step)
        if anim.revealed == length:
            anim.phase = Phase.VISIBLE
            anim.frame = 0
    elif anim.phase is Phase.VISIBLE:
        if anim.frame >= spec.visible and not anim.held:
            anim.phase = Phase.DISAPPEARING
            anim.frame = 0
    else:
        anim.revealed = max(0, length - anim.frame // spec.step)
        if anim.revealed == 0:
            if spec.successor is not None:
                start(anim, spec.successor, anim.branch)
            else:
                reset(anim)


def display_text(anim: SyncAnimation) -> str:
    """The part of the status text currently on screen, with spinner glyph."""
    if anim.kind is SyncKind.IDLE:
        return ""
    spec = SPECS[anim.kind]
    text = spec.text[: anim.revealed]
    if spec.spinner and anim.phase is Phase.VISIBLE:
        text = f"{text} {SPINNER[anim.spinner]}"
    return text


def is_success(anim: SyncAnimation) -> bool:
    return anim.kind is not SyncKind.IDLE and SPECS[anim.kind].success
