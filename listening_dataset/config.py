"""Runtime settings read from the environment (and a local .env file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

DEFAULT_TOP_SONGS_LIMIT = 10
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


@dataclass
class Settings:
    """Settings for the command-line tools.

    Attributes:
        history_path: Default triplets file (LISTENING_HISTORY_PATH).
        top_songs_limit: Default N for `top-songs` (TOP_SONGS_LIMIT).
        log_level: Root logging level name (LOG_LEVEL).
    """

    history_path: Path | None
    top_songs_limit: int
    log_level: str


def _int_from_env(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {value}")
    return value


def get_history_path() -> Path | None:
    history_env = os.getenv("LISTENING_HISTORY_PATH")
    return Path(history_env) if history_env else None


def get_top_songs_limit() -> int:
    return _int_from_env("TOP_SONGS_LIMIT", DEFAULT_TOP_SONGS_LIMIT, minimum=0)


def get_log_level() -> str:
    level = (os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level


def get_settings() -> Settings:
    """Read every setting at once; raises ValueError on the first invalid one."""
    return Settings(
        history_path=get_history_path(),
        top_songs_limit=get_top_songs_limit(),
        log_level=get_log_level(),
    )
