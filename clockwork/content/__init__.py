"""Content loading: YAML world definitions."""

from .loader import load_world, load_world_data

__all__ = ["load_world", "load_world_data"]
