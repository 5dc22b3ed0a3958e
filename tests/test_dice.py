"""Tests for skill test dice."""

from clockwork.tools import dice


class TestSkillTest:
    """d100 under base + skill - difficulty."""

    def test_success_below_target(self, fixed_roll):
        fixed_roll(44)
        result = dice.skill_test(35, 10, 0)
        assert result.target == 45
        assert result.success
        assert result.margin == 1

    def test_target_itself_fails(self, fixed_roll):
        fixed_roll(45)
        assert not dice.skill_test(35, 10, 0).success

    def test_natural_one_always_succeeds(self, fixed_roll):
        fixed_roll(1)
        result = dice.skill_test(0, 0, 500)
        assert result.success
        assert result.narrative == "lucky break"

    def test_natural_hundred_always_fails(self, fixed_roll):
        fixed_roll(100)
        result = dice.skill_test(100, 100, -100)
        assert not result.success
        assert result.narrative == "disaster"

    def test_narratives(self, fixed_roll):
        fixed_roll(20)
        assert dice.skill_test(50).narrative == "solid success"
        fixed_roll(45)
        assert dice.skill_test(50).narrative == "narrow success"
        fixed_roll(55)
        assert dice.skill_test(50).narrative == "near miss"
        fixed_roll(90)
        assert dice.skill_test(50).narrative == "clear failure"

    def test_roll_range(self):
        rolls = {dice.roll_d100() for _ in range(500)}
        assert min(rolls) >= 1
        assert max(rolls) <= 100


class TestGameSkillTest:
    """Skills roll against their governing stat."""

    def test_skill_adds_base(self, game, fixed_roll):
        fixed_roll(50)
        result = game.skill_test("Flirtation")
        assert result.base == 35
        assert result.skill == 10
        assert result.target == 45

    def test_main_stat(self, game, fixed_roll):
        fixed_roll(50)
        result = game.skill_test("Wits", 5)
        assert (result.base, result.skill, result.target) == (35, 0, 30)

    def test_derived_value_used(self, game, fixed_roll):
        """Wearing goggles raises the Perception tested against."""
        fixed_roll(50)
        game.run("wearItem", {"item": "brass-goggles"})
        assert game.skill_test("Perception").target == 35
