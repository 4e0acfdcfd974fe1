"""Persistent JSON config helpers.

Provides defaults for the theme, Pygments style, frame rate and fetch
timeout. Malformed or missing config falls back to the defaults.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "codeshow"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_FRAMES_PER_SECOND = 30
DEFAULT_FETCH_TIMEOUT_SECONDS = 15.0


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _load_string(key: str) -> str | None:
    value = load_config().get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def load_theme_path() -> Path | None:
    """Return the configured theme file path, expanding ``~``."""
    value = _load_string("theme")
    return Path(value).expanduser() if value is not None else None


def load_style_name() -> str | None:
    """Return the configured Pygments style name, if any."""
    return _load_string("style")


def load_frames_per_second() -> int:
    """Frame rate for the tick loop, clamped to ``[1, 120]``."""
    value = load_config().get("frames_per_second")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_FRAMES_PER_SECOND
    return max(1, min(120, int(value)))


def load_fetch_timeout_seconds() -> float:
    """Gist request timeout; non-positive or invalid values use the default."""
    value = load_config().get("fetch_timeout_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return DEFAULT_FETCH_TIMEOUT_SECONDS
    return float(value)
