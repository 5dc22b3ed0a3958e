"""Tests for the scene continuation stack."""

import pytest

from clockwork import Game
from clockwork.script.dsl import (
    branch,
    choice,
    has_item,
    menu,
    menu_exit,
    menu_item,
    replace_scene,
    say,
    scene,
    scenes,
    text,
)
from clockwork.state import EventType

from helpers import option_labels, scene_text


def play(game, instruction):
    """Run content as a fresh player action."""
    game.take_action("seq", {"instructions": [instruction]})


class TestOpening:
    """The bundled opening is a three-page sequence."""

    def test_first_page_and_continue(self, game):
        """The first page shows with Continue; two pages wait."""
        assert scene_text(game)[0].startswith("Steam hisses")
        assert option_labels(game) == ["Continue"]
        assert len(game.scene.stack) == 2

    def test_branch_resumes_sequence(self, game):
        """A branch plays its page, its epilogue, then the sequence carries on."""
        game.choose(0)
        assert option_labels(game) == ["Say it is", "Say you've been before"]

        game.choose(1)
        assert scene_text(game) == [
            "Course you have. Welcome back, then.",
            "He touches his cap and is gone into the steam.",
        ]
        assert option_labels(game) == ["Continue"]

        game.choose(0)
        assert scene_text(game)[0].startswith("You check your purse")
        assert "Quest received: Find Lodgings" in scene_text(game)
        assert game.scene.options == []
        assert game.scene.stack == []

    def test_other_actions_discard_pages(self, game):
        """Navigating away never resumes a stale sequence."""
        game.take_action("calcStats")
        assert game.scene.stack == []
        assert game.scene.options == []


class TestAdvanceScene:
    """advanceScene and pushScenePages."""

    def test_pages_run_in_order(self, blank_game):
        play(blank_game, scenes(scene("1", "one"), scene("2", "two"), scene("3", "three")))
        seen = [scene_text(blank_game)]
        while blank_game.scene.options:
            blank_game.choose(0)
            seen.append(scene_text(blank_game))
        assert seen == [["one"], ["two"], ["three"]]

    def test_continue_only_while_pages_remain(self, blank_game):
        play(blank_game, scenes(scene("1", "one"), scene("2", "two")))
        blank_game.choose(0)
        assert blank_game.scene.options == []

    def test_empty_pages_are_skipped(self, blank_game):
        """A page that shows nothing doesn't cost the player a click."""
        play(blank_game, ["pushScenePages", {"pages": [[], [text("after")]]}])
        blank_game.choose(0)
        assert scene_text(blank_game) == ["after"]
        assert blank_game.scene.options == []

    def test_push_goes_to_the_front(self, blank_game):
        """Newly pushed pages run before older ones."""
        blank_game.scene.stack = [[text("old")]]
        blank_game.run(["pushScenePages", {"pages": [[text("new")]]}])
        assert blank_game.scene.stack == [[text("new")], [text("old")]]

    def test_push_keeps_existing_options(self, blank_game):
        """Continue is only added when nothing else is offered."""
        blank_game.add_option("wait", {}, "Wait")
        blank_game.run(["pushScenePages", {"pages": [[text("later")]]}])
        assert option_labels(blank_game) == ["Wait"]

    def test_emits_scene_advanced(self, blank_game, bus):
        play(blank_game, scenes(scene("1", "one"), scene("2", "two"), scene("3", "three")))
        blank_game.choose(0)
        event = bus.get_history(EventType.SCENE_ADVANCED)[-1]
        assert event.data["remaining"] == 1

    def test_stack_survives_save(self, blank_game, bus):
        """Queued pages are plain data and resume after a reload."""
        play(blank_game, scenes(scene("1", "one"), scene("2", "two", choice(branch("Ok", "fine")))))
        restored = Game.from_json(blank_game.to_json(), bus=bus)
        restored.choose(0)
        assert scene_text(restored) == ["two"]
        assert option_labels(restored) == ["Ok"]

    def test_bare_instruction_pages(self, blank_game, bus):
        """A bare instruction in a page list is a page of its own, and saves like one."""
        play(blank_game, ["pushScenePages", {"pages": [text("a"), text("b"), text("c")]}])
        assert blank_game.scene.stack == [[text("a")], [text("b")], [text("c")]]

        restored = Game.from_json(blank_game.to_json(), bus=bus)
        restored.choose(0)
        assert scene_text(restored) == ["a"]
        assert restored.scene.stack == [[text("b")], [text("c")]]

    def test_bare_instruction_replace(self, blank_game):
        blank_game.run(["replaceScene", {"pages": [text("x"), text("y")]}])
        assert scene_text(blank_game) == ["x"]
        assert blank_game.scene.stack == [[text("y")]]


class TestSceneEnding:
    """replaceScene and exitScene."""

    def test_replace_scene(self, blank_game):
        """Content, options and queued pages are all replaced."""
        play(blank_game, scenes(scene("1", "one"), scene("2", "two")))
        blank_game.run(replace_scene(scene("a", "alpha"), scene("b", "beta")))
        assert scene_text(blank_game) == ["alpha"]
        assert option_labels(blank_game) == ["Continue"]
        assert blank_game.scene.stack == [[text("beta")]]

    def test_exit_scene_keeps_content(self, game):
        """Content already shown stays; everything else goes."""
        game.scene.npc = "porter"
        game.run(say("Off you go."))
        game.run(["exitScene", {}])
        assert "Off you go." in scene_text(game)
        assert game.scene.options == []
        assert game.scene.stack == []
        assert game.scene.npc is None

    def test_dismiss_scene(self, game):
        game.scene.npc = "porter"
        game.dismiss_scene()
        assert game.scene.content == []
        assert game.scene.options == []
        assert game.scene.stack == []
        assert game.scene.npc is None


class TestMenu:
    """Repeatable menus."""

    def _menu(self):
        return menu(
            menu_item("Look around", "Brass everywhere."),
            menu_item("Use the key", "It turns.", condition=has_item("room-key")),
            menu_exit("Leave", "You step away."),
        )

    def test_menu_loops(self, game):
        """A normal entry plays its content and then the menu comes back."""
        play(game, self._menu())
        assert option_labels(game) == ["Look around", "Leave"]

        game.choose(0)
        assert scene_text(game) == ["Brass everywhere."]
        assert option_labels(game) == ["Continue"]

        game.choose(0)
        assert option_labels(game) == ["Look around", "Leave"]

    def test_exit_ends_menu(self, game):
        play(game, self._menu())
        game.choose(1)
        assert scene_text(game) == ["You step away."]
        assert game.scene.options == []
        assert game.scene.stack == []

    def test_conditions_rechecked(self, game):
        """Entries appear once their condition starts to hold."""
        play(game, self._menu())
        game.choose(0)
        game.run("gainItem", {"item": "room-key"})
        game.choose(0)
        assert option_labels(game) == ["Look around", "Use the key", "Leave"]


FORKED = scenes(
    scene("start", "one", choice(
        branch("Left", "left"),
        branch("Right", [[text("right 1")], [text("right 2")]]),
        "after",
    )),
    scene("end", "two"),
)


class TestReplay:
    """A registered sequence plays the same every time."""

    @pytest.fixture
    def forked(self, temp_script):
        temp_script("testForked", lambda game, params: game.run(FORKED))

    def walk(self, game, pick: int) -> list[list[str]]:
        """Start the sequence, take one branch, then Continue to the end."""
        game.take_action("testForked")
        seen = [scene_text(game)]
        game.choose(pick)
        seen.append(scene_text(game))
        while game.scene.options:
            game.choose(0)
            seen.append(scene_text(game))
        return seen

    def test_same_result_twice(self, blank_game, bus, forked):
        first = self.walk(blank_game, 1)
        assert first == [["one"], ["right 1"], ["right 2", "after"], ["two"]]

        assert self.walk(blank_game, 0) == [["one"], ["left", "after"], ["two"]]
        assert self.walk(blank_game, 1) == first
        assert self.walk(Game(bus=bus), 1) == first
