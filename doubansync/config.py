"""
doubansync/config.py

Environment-driven settings for the request scheduler and transform pipeline.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/115.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT_LANGUAGE = "zh-CN,zh;q=0.9"
ENV_FILENAMES: tuple[str, ...] = (".env", ".env.local")


def _parse_env_line(raw_line: str) -> tuple[str, str] | None:
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export ") :].lstrip()
    if not line or line.startswith("#") or "=" not in line:
        return None
    key, value = line.split("=", 1)
    key = key.strip()
    if not key:
        return None
    return key, value.strip().strip('"').strip("'")


def load_env_files(root: Path | None = None) -> dict[str, str]:
    """
    Apply KEY=VALUE pairs from `.env` then `.env.local` under ``root``.

    Variables already present in the process environment are left untouched.
    Returns the pairs actually applied.
    """

    base = root or Path(__file__).resolve().parents[1]
    applied: dict[str, str] = {}
    for filename in ENV_FILENAMES:
        env_path = base / filename
        if not env_path.is_file():
            continue
        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            pair = _parse_env_line(raw_line)
            if pair is None or pair[0] in os.environ:
                continue
            os.environ[pair[0]] = pair[1]
            applied[pair[0]] = pair[1]
    return applied


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Pacing, retry and header settings for one crawl session.
    """

    base_delay_ms: float = 4000.0
    random_delay_ms: float = 4000.0
    slow_mode_threshold: int = 200
    slow_delay_ms: float = 10000.0
    slow_random_delay_ms: float = 5000.0
    max_retries: int = 3
    retry_backoff_min_ms: float = 5000.0
    retry_backoff_max_ms: float = 10000.0
    timeout_seconds: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE


@dataclass(frozen=True)
class TransformSettings:
    """
    Runtime settings for batch transformation.
    """

    batch_size: int = 100


@lru_cache(maxsize=1)
def get_scheduler_settings() -> SchedulerSettings:
    """
    Return cached scheduler settings from environment variables.
    """

    backoff_min = max(0.0, _get_float_env("DOUBAN_SCRAPE_RETRY_BACKOFF_MIN_MS", 5000.0))
    return SchedulerSettings(
        base_delay_ms=max(0.0, _get_float_env("DOUBAN_SCRAPE_BASE_DELAY_MS", 4000.0)),
        random_delay_ms=max(0.0, _get_float_env("DOUBAN_SCRAPE_RANDOM_DELAY_MS", 4000.0)),
        slow_mode_threshold=max(0, _get_int_env("DOUBAN_SCRAPE_SLOW_MODE_THRESHOLD", 200)),
        slow_delay_ms=max(0.0, _get_float_env("DOUBAN_SCRAPE_SLOW_DELAY_MS", 10000.0)),
        slow_random_delay_ms=max(0.0, _get_float_env("DOUBAN_SCRAPE_SLOW_RANDOM_DELAY_MS", 5000.0)),
        max_retries=max(1, _get_int_env("DOUBAN_SCRAPE_MAX_RETRIES", 3)),
        retry_backoff_min_ms=backoff_min,
        retry_backoff_max_ms=max(
            backoff_min,
            _get_float_env("DOUBAN_SCRAPE_RETRY_BACKOFF_MAX_MS", 10000.0),
        ),
        timeout_seconds=max(1.0, _get_float_env("DOUBAN_SCRAPE_TIMEOUT_SECONDS", 30.0)),
        user_agent=_get_str_env("DOUBAN_SCRAPE_USER_AGENT", DEFAULT_USER_AGENT),
        accept_language=_get_str_env("DOUBAN_SCRAPE_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
    )


@lru_cache(maxsize=1)
def get_transform_settings() -> TransformSettings:
    """
    Return cached transform settings from environment variables.
    """

    return TransformSettings(
        batch_size=min(1000, max(1, _get_int_env("DOUBAN_TRANSFORM_BATCH_SIZE", 100))),
    )
