"""Runners and rendering for Clockwork."""

from .config import Config, load_config, save_config
from .headless import HeadlessRunner, run_headless

__all__ = [
    "Config",
    "load_config",
    "save_config",
    "HeadlessRunner",
    "run_headless",
]
