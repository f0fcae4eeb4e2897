"""Persistent JSON config helpers.

Stores the sidecar and ignore file names, the highlight style, log level, and
watch interval. All access is defensive: malformed or missing config falls
back safely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .gitignore import DEFAULT_IGNORE_FILE_NAME
from .highlight import DEFAULT_STYLE
from .store import DEFAULT_POLL_INTERVAL_SECONDS, DEFAULT_SIDECAR_NAME

logger = logging.getLogger(__name__)

APP_NAME = "codebasenotes"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL = "WARNING"


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored so a read-only config
    directory never breaks note editing.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not write config %s: %s", CONFIG_PATH, exc)


def _is_plain_file_name(value: str) -> bool:
    return bool(value) and value not in {".", ".."} and "/" not in value and "\\" not in value


def _load_file_name(key: str, default: str) -> str:
    value = load_config().get(key)
    if not isinstance(value, str):
        return default
    stripped = value.strip()
    return stripped if _is_plain_file_name(stripped) else default


def _save_file_name(key: str, name: str) -> None:
    stripped = str(name).strip()
    if not _is_plain_file_name(stripped):
        raise ValueError(f"expected a plain file name, got {name!r}")
    config = load_config()
    config[key] = stripped
    save_config(config)


def load_sidecar_name() -> str:
    """Return the annotation file name stored at each project root."""
    return _load_file_name("sidecar_name", DEFAULT_SIDECAR_NAME)


def save_sidecar_name(name: str) -> None:
    _save_file_name("sidecar_name", name)


def load_ignore_file_name() -> str:
    """Return the root ignore file consulted for excluded paths."""
    return _load_file_name("ignore_file_name", DEFAULT_IGNORE_FILE_NAME)


def save_ignore_file_name(name: str) -> None:
    _save_file_name("ignore_file_name", name)


def load_style() -> str:
    """Load the Pygments style name, returning the default when unset/invalid."""
    value = load_config().get("style")
    if not isinstance(value, str):
        return DEFAULT_STYLE
    stripped = value.strip()
    return stripped if stripped else DEFAULT_STYLE


def save_style(style: str) -> None:
    stripped = str(style).strip()
    if not stripped:
        return
    config = load_config()
    config["style"] = stripped
    save_config(config)


def load_log_level() -> str:
    """Return the persisted log level name; only standard names are accepted."""
    value = load_config().get("log_level")
    if not isinstance(value, str):
        return DEFAULT_LOG_LEVEL
    upper = value.strip().upper()
    return upper if upper in LOG_LEVELS else DEFAULT_LOG_LEVEL


def save_log_level(level: str) -> None:
    upper = str(level).strip().upper()
    if upper not in LOG_LEVELS:
        raise ValueError(f"unknown log level: {level!r}")
    config = load_config()
    config["log_level"] = upper
    save_config(config)


def load_watch_interval() -> float:
    """Return the sidecar poll interval in seconds.

    Booleans, non-numbers, and non-positive values fall back to the default.
    """
    value = load_config().get("watch_interval")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_POLL_INTERVAL_SECONDS
    if value <= 0:
        return DEFAULT_POLL_INTERVAL_SECONDS
    return float(value)


def save_watch_interval(seconds: float) -> None:
    if seconds <= 0:
        raise ValueError("watch interval must be positive")
    config = load_config()
    config["watch_interval"] = round(float(seconds), 3)
    save_config(config)


@dataclass(frozen=True)
class Settings:
    """Effective configuration after applying persisted values."""

    sidecar_name: str = DEFAULT_SIDECAR_NAME
    ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME
    style: str = DEFAULT_STYLE
    log_level: str = DEFAULT_LOG_LEVEL
    watch_interval: float = DEFAULT_POLL_INTERVAL_SECONDS


def load_settings() -> Settings:
    return Settings(
        sidecar_name=load_sidecar_name(),
        ignore_file_name=load_ignore_file_name(),
        style=load_style(),
        log_level=load_log_level(),
        watch_interval=load_watch_interval(),
    )


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_STYLE",
    "LOG_LEVELS",
    "DEFAULT_LOG_LEVEL",
    "load_config",
    "save_config",
    "load_sidecar_name",
    "save_sidecar_name",
    "load_ignore_file_name",
    "save_ignore_file_name",
    "load_style",
    "save_style",
    "load_log_level",
    "save_log_level",
    "load_watch_interval",
    "save_watch_interval",
    "Settings",
    "load_settings",
]
