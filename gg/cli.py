import logging
import os
import sys
from dataclasses import replace
from pathlib import Path

import click

from gg import git_ops, query
from gg.config import ConfigError, load_settings
from gg.tui import run_tui

logger = logging.getLogger("gg")


def _configure_logging(log_file: str | None, verbose: bool) -> None:
    """Log to a file or nowhere: the terminal belongs to curses."""
    if not log_file:
        logger.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-C",
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Run as if started in this directory.",
)
@click.option("--no-fetch", is_flag=True, help="Disable the periodic background fetch.")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=lambda: os.environ.get("GG_LOG_FILE"),
    help="Write a debug log here (default: $GG_LOG_FILE).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log at debug level.")
def main(directory: Path | None, no_fetch: bool, log_file: str | None, verbose: bool) -> None:
    """gg: interactive git workspace."""
    _configure_logging(log_file, verbose)
    try:
        repo_root = git_ops.get_repo_root(directory)
    except git_ops.GitError:
        click.echo("gg: not inside a git repository", err=True)
        raise SystemExit(1)

    try:
        settings = load_settings(repo_root)
    except ConfigError as exc:
        click.echo(f"gg: {exc}", err=True)
        raise SystemExit(1)
    if no_fetch:
        settings = replace(settings, background_fetch=False)

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        for item in query.list_changed_files(repo_root, settings.limits):
            click.echo(f"{item.status} {item.path}")
        return

    logger.info("starting in %s", repo_root)
    run_tui(repo_root, settings)


if __name__ == "__main__":
    main()
