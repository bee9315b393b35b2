"""Settings and capacity limits."""

import json
import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import cast

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Settings file is unreadable or malformed."""


@dataclass(frozen=True)
class Limits:
    """Caps on how many entries are kept from each query.

    Entries past a cap are dropped (and logged at debug level) so that a huge
    repository cannot make every frame expensive to draw.
    """

    files: int = 100
    commits: int = 50
    commit_log_depth: int = 20
    branches: int = 50
    stashes: int = 50
    content_lines: int = 2000
    branch_log_depth: int = 20
    untracked_preview_lines: int = 50


@dataclass(frozen=True)
class Settings:
    tick_interval: float = 0.02
    fetch_interval: float = 30.0
    background_fetch: bool = True
    limits: Limits = field(default_factory=Limits)


def user_settings_path() -> Path:
    return Path.home() / ".config" / "gg" / "settings.json"


def repo_settings_path(repo_root: Path) -> Path:
    return repo_root / ".gg" / "settings.json"


def _read_settings_file(path: Path) -> dict[str, object]:
    if not path.is_file():
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid JSON in {path}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid settings format in {path}")
    logger.debug("loaded settings from %s", path)
    return cast(dict[str, object], raw)


def _expect_number(value: object, key: str, path: Path) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigError(f"{key} must be a positive number in {path}")
    return float(value)


def _expect_count(value: object, key: str, path: Path) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key} must be a positive integer in {path}")
    return value


def _apply(settings: Settings, raw: dict[str, object], path: Path) -> Settings:
    updates: dict[str, object] = {}
    for key, value in raw.items():
        if key == "tick_interval_ms":
            updates["tick_interval"] = _expect_number(value, key, path) / 1000
        elif key == "fetch_interval_seconds":
            updates["fetch_interval"] = _expect_number(value, key, path)
        elif key == "background_fetch":
            if not isinstance(value, bool):
                raise ConfigError(f"background_fetch must be true or false in {path}")
            updates["background_fetch"] = value
        elif key == "limits":
            updates["limits"] = _apply_limits(settings.limits, value, path)
        else:
            raise ConfigError(f"Unknown setting {key!r} in {path}")
    return replace(settings, **updates)


def _apply_limits(limits: Limits, value: object, path: Path) -> Limits:
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid limits section in {path}")
    known = {f.name for f in fields(Limits)}
    updates: dict[str, int] = {}
    for key, count in cast(dict[str, object], value).items():
        if key not in known:
            raise ConfigError(f"Unknown limit {key!r} in {path}")
        updates[key] = _expect_count(count, f"limits.{key}", path)
    return replace(limits, **updates)


def load_settings(repo_root: Path, user_path: Path | None = None) -> Settings:
    """Load user settings, then repository settings on top of them."""
    settings = Settings()
    for path in (user_path or user_settings_path(), repo_settings_path(repo_root)):
        settings = _apply(settings, _read_settings_file(path), path)
    return settings
