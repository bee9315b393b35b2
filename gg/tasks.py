"""Background git workers: the periodic fetch and supervised push/pull."""

import logging
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Callable, Sequence

from gg import animation, git_ops, services
from gg.models import SyncKind
from gg.state import Context

logger = logging.getLogger(__name__)

FETCH_ARGS = ("fetch", "--all", "--quiet")


def supervise(process: subprocess.Popen, on_wait: Callable[[], None], interval: float) -> int:
    """Wait for a worker, calling ``on_wait`` every ``interval`` seconds until it exits."""
    while process.poll() is None:
        on_wait()
        time.sleep(interval)
    return process.returncode


def run_supervised(
    args: Sequence[str], cwd: Path, on_wait: Callable[[], None], interval: float
) -> None:
    """Run git in a worker process while the UI keeps animating.

    Raises GitError when the worker exits non-zero.
    """
    with tempfile.TemporaryFile(mode="w+", encoding="utf-8", errors="replace") as err:
        process = git_ops.spawn(args, cwd=cwd, stderr=err)
        logger.info("started git %s (pid %d)", " ".join(args), process.pid)
        returncode = supervise(process, on_wait, interval)
        err.seek(0)
        stderr = err.read().strip()
    if returncode != 0:
        raise git_ops.GitError(args, stderr, returncode)
    logger.info("git %s finished", " ".join(args))


def fetch_due(ctx: Context, now: float) -> bool:
    state = ctx.state
    return (
        ctx.settings.background_fetch
        and not state.fetch.in_progress
        and not state.critical
        and now - state.fetch.last_started >= ctx.settings.fetch_interval
    )


def start_fetch(ctx: Context, now: float) -> None:
    task = ctx.state.fetch
    task.last_started = now
    try:
        task.process = git_ops.spawn(FETCH_ARGS, cwd=ctx.repo_root)
    except git_ops.GitError as exc:
        logger.debug("background fetch not started: %s", exc)
        return
    task.in_progress = True
    logger.debug("background fetch started (pid %d)", task.process.pid)
    if ctx.state.animation.kind is SyncKind.IDLE:
        animation.start(ctx.state.animation, SyncKind.FETCHING)


def poll_fetch(ctx: Context) -> None:
    """Non-blocking completion check; refreshes in place when the fetch is done.

    Completion is not processed while a critical operation is in progress so
    that the refresh never races a user's mutation.
    """
    state, task = ctx.state, ctx.state.fetch
    if not task.in_progress or task.process is None or state.critical:
        return
    returncode = task.process.poll()
    if returncode is None:
        return
    task.process = None
    task.in_progress = False
    if returncode != 0:
        logger.debug("background fetch failed with status %d", returncode)
        animation.fail(state.animation, SyncKind.FETCHING)
        return
    logger.debug("background fetch finished")
    services.refresh(ctx, files=True, commits=True, branches=True)
    animation.finish(state.animation, SyncKind.FETCHING)


def tick(ctx: Context, now: float) -> None:
    poll_fetch(ctx)
    if fetch_due(ctx, now):
        start_fetch(ctx, now)


def shutdown(ctx: Context) -> None:
    """Terminate and reap an outstanding fetch."""
    task = ctx.state.fetch
    if task.process is None:
        return
    if task.process.poll() is None:
        logger.debug("terminating background fetch (pid %d)", task.process.pid)
        task.process.terminate()
        try:
            task.process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            task.process.kill()
            task.process.wait()
    task.process = None
    task.in_progress = False

