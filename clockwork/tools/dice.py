"""
Dice rolling for Clockwork skill tests.

A test rolls a d100 against base + skill - difficulty. A natural 1 always
succeeds and a natural 100 always fails, so no stat makes a test certain.
"""

import random
from dataclasses import dataclass

CRITICAL_SUCCESS = 1
CRITICAL_FAILURE = 100


@dataclass
class RollResult:
    """Result of a skill test."""
    roll: int  # The d100 rolled
    base: int  # Main stat value (the skill's based_on stat)
    skill: int  # Skill value, 0 when testing a main stat directly
    difficulty: int
    target: int  # Roll must be strictly below this
    success: bool

    @property
    def margin(self) -> int:
        """Positive = under the target, negative = over."""
        return self.target - self.roll

    @property
    def narrative(self) -> str:
        if self.roll == CRITICAL_SUCCESS:
            return "lucky break"
        if self.roll == CRITICAL_FAILURE:
            return "disaster"
        if self.success:
            return "solid success" if self.margin >= 20 else "narrow success"
        return "clear failure" if self.margin <= -20 else "near miss"


def roll_d100() -> int:
    """Roll a single d100 (1..100)."""
    return random.randint(1, 100)


def skill_test(base: int, skill: int = 0, difficulty: int = 0) -> RollResult:
    """
    Roll a skill test.

    Args:
        base: Value of the governing main stat
        skill: Value of the skill itself (0 for a straight stat test)
        difficulty: Subtracted from the target; negative makes it easier

    Returns:
        RollResult with the roll and outcome
    """
    roll = roll_d100()
    target = base + skill - difficulty

    if roll == CRITICAL_SUCCESS:
        success = True
    elif roll == CRITICAL_FAILURE:
        success = False
    else:
        success = roll < target

    return RollResult(
        roll=roll,
        base=base,
        skill=skill,
        difficulty=difficulty,
        target=target,
        success=success,
    )
