"""
Tests for headless mode - the JSON I/O interface for programmatic control.

Front ends drive the engine through this, so the command shapes matter.
"""

import json
from io import StringIO

import pytest

from clockwork.interface.config import DEFAULT_CONFIG
from clockwork.interface.headless import HeadlessRunner
from clockwork.state import MemoryWorldStore


def output_lines(runner) -> list[dict]:
    return [json.loads(line) for line in runner.output.getvalue().splitlines()]


@pytest.fixture
def runner(bus, tmp_path):
    """Headless runner with in-memory store and captured output."""
    return HeadlessRunner(
        saves_dir=tmp_path,
        store=MemoryWorldStore(),
        config=DEFAULT_CONFIG.copy(),
        output=StringIO(),
    )


@pytest.fixture
def started(runner):
    runner.handle_command({"cmd": "new", "save_id": "run", "name": "Ada"})
    return runner


class TestBasicCommands:

    def test_quit_returns_action(self, runner):
        result = runner.handle_command({"cmd": "quit"})
        assert result == {"ok": True, "action": "quit"}

    def test_unknown_command_returns_error(self, runner):
        result = runner.handle_command({"cmd": "dance"})
        assert result["ok"] is False
        assert "Unknown command" in result["error"]

    def test_empty_command_returns_error(self, runner):
        assert runner.handle_command({})["ok"] is False

    @pytest.mark.parametrize("cmd", ["state", "reminders", "action", "choose", "save"])
    def test_needs_a_game(self, runner, cmd):
        result = runner.handle_command({"cmd": cmd, "script": "wait", "index": 0})
        assert result == {"ok": False, "error": "No game loaded"}


class TestGameCommands:

    def test_new(self, runner):
        result = runner.handle_command({"cmd": "new", "save_id": "run", "name": "Ada"})
        assert result["ok"] is True
        assert result["save_id"] == "run"
        assert [o["label"] for o in result["scene"]["options"]] == ["Continue"]
        assert result["pending_pages"] == 2
        assert "stack" not in result["scene"]

    def test_state(self, started):
        result = started.handle_command({"cmd": "state"})
        assert result["location"] == "station"
        assert result["date"] == "12pm, Sun 5 Jan"
        assert result["stats"]["Charm"] == 35
        assert {"id": "crown", "number": 10, "worn": False, "locked": False} in result["inventory"]
        assert set(result["npcs_present"]) == {"porter", "tour-guide"}

    def test_choose(self, started):
        result = started.handle_command({"cmd": "choose", "index": 0})
        labels = [o["label"] for o in result["scene"]["options"]]
        assert labels == ["Say it is", "Say you've been before"]

    def test_choose_needs_int(self, started):
        result = started.handle_command({"cmd": "choose", "index": "first"})
        assert result["ok"] is False

    def test_choose_out_of_range(self, started):
        result = started.handle_command({"cmd": "choose", "index": 9})
        assert result["ok"] is False
        assert "No option 9" in result["error"]

    def test_action(self, started):
        result = started.handle_command({"cmd": "action", "script": "go", "params": {"location": "default"}})
        assert result["ok"] is True
        assert result["pending_pages"] == 0
        state = started.handle_command({"cmd": "state"})
        assert state["location"] == "default"

    def test_action_authoring_error(self, started):
        """Engine errors come back as a failed result, not an exception."""
        result = started.handle_command({"cmd": "action", "script": "teleport"})
        assert result["ok"] is False
        assert "teleport" in result["error"]

    def test_cards_and_reminders(self, started):
        for _ in range(3):
            started.handle_command({"cmd": "choose", "index": 0})
        state = started.handle_command({"cmd": "state"})
        assert state["cards"][0]["id"] == "find-lodgings"
        assert state["cards"][0]["completed"] is False

        reminders = started.handle_command({"cmd": "reminders"})["reminders"]
        assert reminders[0]["text"] == "Find lodgings"
        assert reminders[0]["urgency"] == "info"
        assert reminders[0]["card_id"] == "find-lodgings"

    def test_save_and_load(self, started):
        started.handle_command({"cmd": "choose", "index": 0})
        assert started.handle_command({"cmd": "save", "save_id": "copy"})["save_id"] == "copy"

        result = started.handle_command({"cmd": "load", "save_id": "copy"})
        assert result["ok"] is True
        assert [o["label"] for o in result["scene"]["options"]] == ["Say it is", "Say you've been before"]

    def test_load_missing(self, runner):
        result = runner.handle_command({"cmd": "load", "save_id": "nothing"})
        assert result == {"ok": False, "error": "Save not found: nothing"}

    def test_list(self, started):
        saves = started.handle_command({"cmd": "list"})["saves"]
        assert [s["id"] for s in saves] == ["run"]


class TestPretty:

    def test_rendered_scene(self, bus):
        config = DEFAULT_CONFIG.copy()
        config["pretty"] = True
        runner = HeadlessRunner(store=MemoryWorldStore(), config=config, output=StringIO())
        result = runner.handle_command({"cmd": "new", "save_id": "run"})
        assert "Ironspark Terminus" in result["rendered"]
        assert "[0]" in result["rendered"]


class TestRunLoop:

    def test_ready_results_and_quit(self, runner):
        commands = StringIO(
            '{"cmd": "new", "save_id": "run"}\n'
            "\n"
            "not json\n"
            '{"cmd": "quit"}\n'
            '{"cmd": "state"}\n'
        )
        runner.run(commands)
        lines = output_lines(runner)

        assert lines[0]["type"] == "ready"
        responses = [line for line in lines if line["type"] != "event"]
        assert [r["type"] for r in responses] == ["ready", "result", "error", "result"]
        assert "Invalid JSON" in responses[2]["error"]
        assert responses[3]["action"] == "quit"

    def test_events_streamed(self, runner):
        runner.handle_command({"cmd": "new", "save_id": "run"})
        kinds = {line["event_type"] for line in output_lines(runner) if line["type"] == "event"}
        assert "item.gained" in kinds
        assert "world.saved" in kinds
