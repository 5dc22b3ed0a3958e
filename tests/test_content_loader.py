"""Tests for YAML world content."""

import pytest

from clockwork.content.loader import BUILDERS, load_world, load_world_data
from clockwork.errors import AuthoringError, DuplicateDefinitionError
from clockwork.state.definitions import ITEMS, LOCATIONS, NPCS, REPUTATIONS, STATS, StatKind

from helpers import scene_text

ATTIC = {
    "locations": [
        {
            "id": "test-attic",
            "name": "Attic",
            "links": [
                {
                    "dest": "default",
                    "time": 3,
                    "access": {
                        "condition": ["hasItem", {"item": "room-key"}],
                        "message": "The trapdoor is locked.",
                    },
                },
            ],
        },
    ],
}


@pytest.fixture
def loaded():
    """Load content for one test; anything it registered is removed afterwards."""
    before = {section: set(registry) for section, (_, registry) in BUILDERS.items()}
    yield load_world_data
    for section, (_, registry) in BUILDERS.items():
        for key in set(registry) - before[section]:
            registry.unregister(key)


class TestSections:

    def test_counts(self, loaded):
        counts = loaded({
            "items": [{"id": "test-spanner", "name": "Spanner"}],
            "reputations": [{"id": "test-guild", "name": "Guild"}],
        })
        assert counts["items"] == 1
        assert counts["reputations"] == 1
        assert counts["npcs"] == 0
        assert ITEMS.get("test-spanner").name == "Spanner"
        assert "test-guild" in REPUTATIONS

    def test_stat_kind(self, loaded):
        loaded({"stats": [{"id": "TestTinkering", "kind": "skill", "based_on": "Wits"}]})
        stat = STATS.get("TestTinkering")
        assert stat.kind == StatKind.SKILL
        assert stat.based_on == "Wits"

    def test_unknown_section(self, loaded):
        with pytest.raises(AuthoringError, match="spells"):
            loaded({"spells": []})

    def test_not_a_mapping(self, loaded):
        with pytest.raises(AuthoringError):
            loaded([{"id": "x"}])

    def test_missing_id(self, loaded):
        with pytest.raises(AuthoringError):
            loaded({"items": [{"name": "Nameless"}]})

    def test_duplicate_id(self, loaded):
        with pytest.raises(DuplicateDefinitionError):
            loaded({"items": [{"id": "crown"}]})
        assert ITEMS.get("crown").stackable

    def test_load_file(self, loaded, tmp_path):
        path = tmp_path / "extra.yaml"
        path.write_text(
            "items:\n"
            "  - id: test-cog\n"
            "    name: Cog\n"
            "    stackable: true\n"
        )
        counts = load_world(path)
        assert counts["items"] == 1
        assert ITEMS.get("test-cog").stackable

    def test_empty_file(self, loaded, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert sum(load_world(path).values()) == 0


class TestLocations:

    def test_link_access(self, loaded, game):
        """Travel is refused with the message until the condition holds."""
        loaded(ATTIC)
        game.take_action("move", {"location": "test-attic"})
        game.take_action("go", {"location": "default"})
        assert game.current_location == "test-attic"
        assert scene_text(game) == ["The trapdoor is locked."]

        game.run("gainItem", {"item": "room-key"})
        game.take_action("go", {"location": "default"})
        assert game.current_location == "default"

    def test_access_needs_condition(self, loaded):
        with pytest.raises(AuthoringError):
            loaded({"locations": [{"id": "test-cellar", "links": [{"dest": "default", "access": {"message": "No."}}]}]})

    def test_link_needs_dest(self, loaded):
        with pytest.raises(AuthoringError):
            loaded({"locations": [{"id": "test-cellar", "links": [{"time": 3}]}]})


class TestNpcs:

    def test_schedule_follows_by_default(self, loaded, game):
        """A scheduled NPC without on_move follows its schedule."""
        loaded(ATTIC)
        loaded({"npcs": [{"id": "test-maid", "name": "Maid", "schedule": [[0, 24, "test-attic"]]}]})
        assert NPCS.get("test-maid").on_move == ["followSchedule", {}]
        assert game.get_npc("test-maid").location == "test-attic"

    def test_schedule_rows_become_tuples(self, loaded):
        loaded({"npcs": [{"id": "test-clerk", "schedule": [[9, 17, "school", [1, 2, 3]]]}]})
        assert NPCS.get("test-clerk").schedule == [(9, 17, "school", [1, 2, 3])]

    def test_bad_schedule_row(self, loaded):
        with pytest.raises(AuthoringError):
            loaded({"npcs": [{"id": "test-clerk", "schedule": [[9, 17]]}]})

    def test_pronouns(self, loaded):
        loaded({"npcs": [{"id": "test-clerk", "pronouns": "she"}]})
        assert NPCS.get("test-clerk").pronouns.possessive == "her"

    def test_unknown_pronouns(self, loaded):
        with pytest.raises(AuthoringError):
            loaded({"npcs": [{"id": "test-clerk", "pronouns": "it"}]})


class TestBundledWorld:
    """The shipped world.yaml is loaded on import."""

    def test_locations(self):
        for location in ("station", "default", "backstreets", "school", "lake"):
            assert location in LOCATIONS

    def test_porter_from_yaml(self):
        porter = NPCS.get("porter")
        assert porter.pronouns.subject == "he"
        assert porter.on_move == ["followSchedule", {}]
