"""Instruction registry, builders and the core script library."""

from .registry import SCRIPTS, ScriptRegistry, is_instruction, is_page, make_scripts, script
from . import core  # noqa: F401  registers the core scripts

__all__ = [
    "SCRIPTS",
    "ScriptRegistry",
    "is_instruction",
    "is_page",
    "make_scripts",
    "script",
]
