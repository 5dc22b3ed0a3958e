"""
User configuration persistence.

Stores runner settings (save directory, start location, log level) in a
JSON file next to the saves.
"""

import json
from pathlib import Path
from typing import TypedDict


class Config(TypedDict, total=False):
    """User configuration."""
    saves_dir: str
    start_location: str | None  # None = the story's own start
    start_time: int | None  # Simulated seconds since the epoch
    player_name: str | None
    debug: bool  # Enables the `debug` predicate in content
    log_level: str  # DEBUG, INFO, WARNING, ERROR
    pretty: bool  # Render scenes with rich instead of JSON only


DEFAULT_CONFIG: Config = {
    "saves_dir": "saves",
    "start_location": None,
    "start_time": None,
    "player_name": None,
    "debug": False,
    "log_level": "WARNING",
    "pretty": False,
}


def get_config_path(saves_dir: Path | str = "saves") -> Path:
    """Get path to config file."""
    return Path(saves_dir) / ".clockwork_config.json"


def load_config(saves_dir: Path | str = "saves") -> Config:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(saves_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        # Merge with defaults to handle missing keys
        config = DEFAULT_CONFIG.copy()
        config.update(saved)
        return config
    except (json.JSONDecodeError, IOError):
        return DEFAULT_CONFIG.copy()


def save_config(config: Config, saves_dir: Path | str = "saves") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(saves_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except IOError:
        return False


def _set(key: str, value, saves_dir: Path | str) -> None:
    config = load_config(saves_dir)
    config[key] = value
    save_config(config, saves_dir)


def set_log_level(level: str, saves_dir: Path | str = "saves") -> None:
    """Save logging level preference."""
    _set("log_level", level.upper(), saves_dir)


def set_debug(debug: bool, saves_dir: Path | str = "saves") -> None:
    _set("debug", debug, saves_dir)


def set_pretty(pretty: bool, saves_dir: Path | str = "saves") -> None:
    """Save rich rendering preference."""
    _set("pretty", pretty, saves_dir)


def set_start_location(location: str | None, saves_dir: Path | str = "saves") -> None:
    _set("start_location", location, saves_dir)


def set_player_name(name: str | None, saves_dir: Path | str = "saves") -> None:
    _set("player_name", name, saves_dir)
