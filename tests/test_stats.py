"""Tests for player stats, reputation, items, travel and waiting."""

import pytest

from clockwork.errors import DefinitionNotFoundError
from clockwork.script import core
from clockwork.script.dsl import add_npc_stat, add_reputation, add_stat, go, wait
from clockwork.state import EventType

from helpers import option_labels, scene_text


@pytest.fixture
def free_game(game):
    """Opening dismissed: no options, nothing queued."""
    game.take_action("calcStats")
    return game


class TestAddStat:
    """Clamped stat changes with coloured feedback."""

    def test_gain(self, free_game, bus):
        free_game.clear_scene()
        free_game.run(add_stat("Charm", 5))
        assert free_game.player.stat("Charm") == 40
        assert scene_text(free_game) == ["Charm +5"]
        assert free_game.scene.content[0].color == "#10b981"
        assert bus.get_history(EventType.STAT_CHANGED)[-1].data["after"] == 40

    def test_clamped_to_max(self, free_game):
        free_game.run(add_stat("Charm", 100))
        assert free_game.player.base_stats["Charm"] == 100

    def test_no_change_says_nothing(self, free_game):
        """A change clamped to zero is silent."""
        free_game.player.base_stats["Charm"] = 100
        free_game.clear_scene()
        free_game.run(add_stat("Charm", 5))
        assert free_game.scene.content == []

    def test_against_direction_ignored(self, free_game):
        """A gain capped below the current value never lowers the stat."""
        free_game.clear_scene()
        free_game.run(add_stat("Charm", 5, max=20))
        assert free_game.player.base_stats["Charm"] == 35
        assert free_game.scene.content == []

    def test_meter_colours(self, free_game):
        """Stress going up is bad news."""
        free_game.clear_scene()
        free_game.run(add_stat("Stress", 5))
        assert free_game.scene.content[0].color == "#ef4444"

    def test_hidden_and_custom_text(self, free_game):
        free_game.clear_scene()
        free_game.run(add_stat("Wits", 1, hidden=True))
        free_game.run(add_stat("Wits", 1, text="You feel sharper."))
        assert scene_text(free_game) == ["You feel sharper."]
        assert free_game.player.base_stats["Wits"] == 37

    def test_chance(self, free_game, monkeypatch):
        monkeypatch.setattr(core.random, "random", lambda: 0.9)
        free_game.run(add_stat("Wits", 1, chance=0.5))
        assert free_game.player.base_stats["Wits"] == 35

    def test_unknown_stat(self, free_game):
        with pytest.raises(DefinitionNotFoundError):
            free_game.run(add_stat("Luck", 1))


class TestReputation:

    def test_track_colours(self, free_game):
        free_game.clear_scene()
        free_game.run(add_reputation("socialite", 4))
        assert scene_text(free_game) == ["Socialite +4"]
        assert free_game.scene.content[0].color == "#ec4899"
        assert free_game.player.reputation["socialite"] == 4

    def test_floor(self, free_game):
        free_game.clear_scene()
        free_game.run(add_reputation("socialite", -4))
        assert free_game.scene.content == []


class TestNpcStats:

    def test_bounds(self, free_game):
        free_game.run(add_npc_stat("affection", 8, npc="porter", max=5))
        assert free_game.get_npc("porter").affection == 5

    def test_needs_an_npc(self, free_game):
        from clockwork.errors import InvalidParameterError

        with pytest.raises(InvalidParameterError):
            free_game.run(add_npc_stat("affection", 1))


class TestItems:

    def test_stackable(self, free_game):
        free_game.run("gainItem", {"item": "crown", "number": 5})
        assert free_game.player.count_item("crown") == 15
        assert len([i for i in free_game.player.inventory if i.id == "crown"]) == 1

    def test_lose_more_than_held(self, free_game):
        free_game.run("loseItem", {"item": "crown", "number": 50})
        assert free_game.player.count_item("crown") == 0

    def test_lose_unheld_is_quiet(self, free_game, bus):
        free_game.run("loseItem", {"item": "room-key"})
        assert bus.get_history(EventType.ITEM_LOST) == []

    def test_unknown_item(self, free_game):
        with pytest.raises(DefinitionNotFoundError):
            free_game.run("gainItem", {"item": "unicorn"})

    def test_consume_without_hook(self, free_game):
        free_game.clear_scene()
        free_game.run("consumeItem", {"item": "crown"})
        assert scene_text(free_game) == ["You cannot use that."]
        assert free_game.player.count_item("crown") == 10

    def test_examine(self, free_game):
        free_game.clear_scene()
        free_game.run("examineItem", {"item": "pocket-watch"})
        assert "engraved an E" in scene_text(free_game)[0]

    def test_wearing_applies_modifiers(self, free_game):
        assert free_game.player.stat("Perception") == 30
        free_game.run("wearItem", {"item": "brass-goggles"})
        assert free_game.player.stat("Perception") == 35
        free_game.run("unwearItem", {"item": "brass-goggles"})
        assert free_game.player.stat("Perception") == 30

    def test_locked_item_needs_force(self, free_game):
        free_game.run("wearItem", {"item": "brass-goggles"})
        free_game.player.inventory[-1].locked = True
        free_game.run("unwearItem", {"item": "brass-goggles"})
        assert free_game.player.is_wearing("brass-goggles")
        free_game.run("unwearItem", {"item": "brass-goggles", "force": True})
        assert not free_game.player.is_wearing("brass-goggles")

    def test_outfits(self, free_game):
        free_game.run("wearItem", {"item": "brass-goggles"})
        free_game.run("saveOutfit", {"name": "work"})
        free_game.run("unwearItem", {"item": "brass-goggles"})
        free_game.run("wearOutfit", {"name": "work", "delete": True})
        assert free_game.player.is_wearing("brass-goggles")
        assert "work" not in free_game.player.outfits


class TestTravel:
    """go follows links; move teleports."""

    def test_go_along_link(self, free_game):
        start = free_game.time
        free_game.take_action("go", {"location": "default"})
        assert free_game.current_location == "default"
        assert free_game.time - start == 10 * 60
        state = free_game.get_location("default")
        assert state.num_visits == 1
        assert state.discovered

    def test_first_arrival_only_once(self, free_game):
        free_game.take_action("go", {"location": "default"})
        assert "every tower telling a slightly different time" in scene_text(free_game)[0]
        free_game.take_action("go", {"location": "station"})
        free_game.take_action("go", {"location": "default"})
        assert scene_text(free_game) == []

    def test_no_link(self, free_game):
        free_game.take_action("go", {"location": "lake"})
        assert free_game.current_location == "station"
        assert scene_text(free_game) == ["You can't see a way to Steam Lake."]

    def test_access_check(self, free_game):
        """The lake gate is shut at night."""
        free_game.run("move", {"location": "school"})
        free_game.run("timeLapse", {"untilTime": 23})
        free_game.take_action("go", {"location": "lake"})
        assert free_game.current_location == "school"
        assert scene_text(free_game) == ["The lake gate is locked for the night."]

    def test_arrival_hook_discovers(self, free_game):
        free_game.run("move", {"location": "default"})
        free_game.take_action("go", {"location": "school"})
        assert free_game.get_location("lake").discovered
        assert "A path behind the Academy leads down to the lake." in scene_text(free_game)

    def test_arrival_hook_offers_option(self, free_game):
        free_game.run("move", {"location": "default"})
        free_game.take_action("go", {"location": "backstreets"})
        assert option_labels(free_game) == ["Rent a room (5 crowns)"]
        free_game.choose(0)
        assert free_game.player.count_item("room-key") == 1
        assert free_game.player.count_item("crown") == 5

    def test_move_unknown_location(self, free_game):
        with pytest.raises(DefinitionNotFoundError):
            free_game.run("move", {"location": "atlantis"})

    def test_dsl_go(self, free_game):
        free_game.take_action("seq", {"instructions": [go("default", 2)]})
        assert free_game.current_location == "default"


class TestWait:

    def test_plain_wait(self, free_game):
        free_game.run("move", {"location": "default"})
        start = free_game.time
        free_game.take_action("wait", {"minutes": 25, "text": "You watch the clocks."})
        assert free_game.time - start == 25 * 60
        assert scene_text(free_game) == ["You watch the clocks."]

    def test_location_hook(self, free_game):
        free_game.run("move", {"location": "lake"})
        free_game.take_action("wait", {"minutes": 10})
        assert len(free_game.scene.content) == 1

    def test_npc_interrupts(self, free_game):
        """The guide walks up to a stranger; the wait ends early."""
        start = free_game.time
        free_game.take_action("wait", {"minutes": 60})
        assert free_game.time - start == 10 * 60
        assert free_game.scene.npc == "tour-guide"
        assert option_labels(free_game) == ["Accept", "Decline"]

    def test_then(self, free_game):
        free_game.run("move", {"location": "default"})
        free_game.take_action("seq", {"instructions": [
            wait(10, then={"script": "move", "params": {"location": "station"}}),
        ]})
        assert free_game.current_location == "station"
