"""Persistent JSON config helpers.

Stores the default theme, color scheme and engine timeout.
Malformed or missing config falls back to built-in defaults.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from ..colors import DEFAULT_THEME_ID, THEME_PRESETS, ColorScheme

logger = logging.getLogger(__name__)

APP_NAME = "codetext"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError):
        logger.warning("ignoring unreadable config at %s", CONFIG_PATH)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem and serialization errors are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        logger.warning("could not write config to %s", CONFIG_PATH)


def load_theme_id() -> str:
    """Load persisted preset theme id, falling back to the default for unknown ids."""
    value = load_config().get("theme")
    if not isinstance(value, str):
        return DEFAULT_THEME_ID
    candidate = value.strip().lower()
    return candidate if candidate in THEME_PRESETS else DEFAULT_THEME_ID


def save_theme_id(theme_id: str) -> None:
    """Persist selected preset theme id."""
    stripped = str(theme_id).strip().lower()
    if not stripped:
        return
    config = load_config()
    config["theme"] = stripped
    save_config(config)


def load_color_scheme() -> ColorScheme:
    """Load persisted color scheme; anything but ``"dark"`` means light."""
    value = load_config().get("color_scheme")
    return ColorScheme.parse(value if isinstance(value, str) else None)


def save_color_scheme(scheme: ColorScheme) -> None:
    config = load_config()
    config["color_scheme"] = scheme.value
    save_config(config)


def load_timeout_seconds() -> float | None:
    """Return the engine timeout in seconds, or ``None`` for no timeout.

    Only positive numbers are accepted; booleans and other types mean unset.
    """
    value = load_config().get("timeout_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def save_timeout_seconds(timeout_seconds: float | None) -> None:
    config = load_config()
    if timeout_seconds is None or timeout_seconds <= 0:
        config.pop("timeout_seconds", None)
    else:
        config["timeout_seconds"] = float(timeout_seconds)
    save_config(config)
