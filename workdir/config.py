"""Persistent JSON config helpers.

Stores listing defaults: hidden-entry visibility, name-only rendering, and
color. All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "workdir"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


@dataclass(frozen=True)
class ListingDefaults:
    """Listing options resolved from config before CLI overrides."""

    show_hidden: bool = False
    name_only: bool = False
    color: bool = True


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


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored so a read-only config directory never
    breaks a listing.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_bool(data: dict[str, object], key: str, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else yields ``default``."""
    value = data.get(key)
    return value if isinstance(value, bool) else default


def color_disabled_by_env() -> bool:
    """Honour the ``NO_COLOR`` convention (any non-empty value)."""
    return bool(os.environ.get("NO_COLOR"))


def load_listing_defaults() -> ListingDefaults:
    """Read all listing defaults with a single config load."""
    data = load_config()
    color = False if color_disabled_by_env() else _load_bool(data, "color", True)
    return ListingDefaults(
        show_hidden=_load_bool(data, "show_hidden", False),
        name_only=_load_bool(data, "name_only", False),
        color=color,
    )


def save_listing_defaults(defaults: ListingDefaults) -> None:
    """Persist listing defaults, keeping unrelated keys already in the file."""
    config = load_config()
    config["show_hidden"] = bool(defaults.show_hidden)
    config["name_only"] = bool(defaults.name_only)
    config["color"] = bool(defaults.color)
    save_config(config)


__all__ = [
    "CONFIG_PATH",
    "ListingDefaults",
    "load_config",
    "save_config",
    "load_listing_defaults",
    "save_listing_defaults",
]
