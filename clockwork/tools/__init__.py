"""Clockwork tools: dice."""

from .dice import RollResult, roll_d100, skill_test

__all__ = ["RollResult", "roll_d100", "skill_test"]
