"""
Headless runner for Clockwork.

Provides a JSON I/O interface for programmatic control.
Input: JSON commands via stdin, one per line
Output: JSON events and results via stdout

This is how a front end (or a test) drives the engine: it issues named
actions and reads back the scene as data.
"""

from __future__ import annotations

import io
import json
import logging
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console

from .. import __version__
from ..errors import ClockworkError
from ..state import EventType, GameEvent, WorldStore, get_event_bus
from ..state.manager import GameManager
from ..systems import clock
from .config import Config, load_config
from .renderer import render_game

logger = logging.getLogger(__name__)


class HeadlessRunner:
    """
    Headless Clockwork runner with JSON I/O.

    Commands are read from stdin as JSON objects.
    Events and responses are written to stdout as JSON.
    """

    def __init__(
        self,
        saves_dir: Path | str | None = None,
        store: WorldStore | None = None,
        config: Config | None = None,
        output: TextIO = sys.stdout,
    ):
        self.saves_dir = Path(saves_dir or "saves")
        self.config = config if config is not None else load_config(self.saves_dir)
        self.output = output
        self.pretty = bool(self.config.get("pretty"))

        self.manager = GameManager(
            store if store is not None else self.saves_dir,
            debug=bool(self.config.get("debug")),
        )
        self._subscribe_to_events()

    def _subscribe_to_events(self):
        """Subscribe to all events and emit them as JSON."""
        bus = get_event_bus()
        for event_type in EventType:
            bus.on(event_type, self._emit_event)

    def _emit_event(self, event: GameEvent):
        """Emit a game event as JSON to stdout."""
        self._write_json({
            "type": "event",
            "event_type": event.type.value,
            "data": event.data,
            "save_id": event.save_id,
            "game_time": event.game_time,
            "timestamp": event.timestamp.isoformat(),
        })

    def _write_json(self, obj: dict):
        """Write a JSON object to output followed by newline."""
        json.dump(obj, self.output, default=str)
        self.output.write("\n")
        self.output.flush()

    def _emit_response(self, response_type: str, **data):
        self._write_json({"type": response_type, **data})

    def handle_command(self, cmd: dict) -> dict:
        """
        Handle a JSON command.

        Commands:
            {"cmd": "new", "save_id": "...", "name": "..."} - Start a new game
            {"cmd": "load", "save_id": "..."} - Load a save
            {"cmd": "save", "save_id": "..."} - Save (optionally to another slot)
            {"cmd": "list"} - List saves
            {"cmd": "state"} - Current scene and player state
            {"cmd": "reminders"} - Current reminders, most urgent first
            {"cmd": "action", "script": "...", "params": {...}} - Take an action
            {"cmd": "choose", "index": 0} - Choose a scene option
            {"cmd": "quit"} - Exit

        Returns:
            Response dict
        """
        cmd_type = cmd.get("cmd", "")

        try:
            if cmd_type == "new":
                return self._cmd_new(cmd.get("save_id"), cmd.get("name"))
            elif cmd_type == "load":
                return self._cmd_load(cmd.get("save_id", ""))
            elif cmd_type == "save":
                return self._cmd_save(cmd.get("save_id"))
            elif cmd_type == "list":
                return {"ok": True, "saves": self.manager.list_saves()}
            elif cmd_type == "state":
                return self._cmd_state()
            elif cmd_type == "reminders":
                return self._cmd_reminders()
            elif cmd_type == "action":
                return self._cmd_action(cmd.get("script", ""), cmd.get("params") or {})
            elif cmd_type == "choose":
                return self._cmd_choose(cmd.get("index"))
            elif cmd_type == "quit":
                return {"ok": True, "action": "quit"}
            else:
                return {"ok": False, "error": f"Unknown command: {cmd_type}"}
        except ClockworkError as e:
            logger.warning(f"Command {cmd_type} failed: {e}")
            return {"ok": False, "error": str(e)}

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def _cmd_new(self, save_id: str | None, name: str | None) -> dict:
        game = self.manager.new_game(
            save_id or "autosave",
            player_name=name or self.config.get("player_name"),
            start_location=self.config.get("start_location"),
            start_time=self.config.get("start_time"),
        )
        return {"ok": True, "save_id": game.save_id, **self._scene_payload()}

    def _cmd_load(self, save_id: str) -> dict:
        if not save_id:
            return {"ok": False, "error": "load requires a save_id"}
        game = self.manager.load_game(save_id)
        if game is None:
            return {"ok": False, "error": f"Save not found: {save_id}"}
        return {"ok": True, "save_id": game.save_id, **self._scene_payload()}

    def _cmd_save(self, save_id: str | None) -> dict:
        if not self.manager.save_game(save_id):
            return {"ok": False, "error": "No game loaded"}
        return {"ok": True, "save_id": self.manager.current.save_id}

    def _cmd_state(self) -> dict:
        game = self.manager.current
        if game is None:
            return {"ok": False, "error": "No game loaded"}

        return {
            "ok": True,
            "time": game.time,
            "date": clock.format_date(game.time),
            "location": game.current_location,
            "npcs_present": list(game.npcs_present),
            "stats": dict(game.player.stats),
            "inventory": [item.model_dump() for item in game.player.inventory],
            "cards": [
                {
                    "id": card.id,
                    "type": card.type.value,
                    "name": game.cards.display_name(card),
                    "description": game.cards.display_description(card),
                    "completed": card.completed,
                    "failed": card.failed,
                }
                for card in game.player.cards
            ],
            **self._scene_payload(),
        }

    def _cmd_reminders(self) -> dict:
        game = self.manager.current
        if game is None:
            return {"ok": False, "error": "No game loaded"}
        return {
            "ok": True,
            "reminders": [
                {
                    "text": r.text,
                    "urgency": r.urgency.value,
                    "card_id": r.card_id,
                    "detail": r.detail,
                }
                for r in game.reminders()
            ],
        }

    def _cmd_action(self, script: str, params: dict) -> dict:
        game = self.manager.current
        if game is None:
            return {"ok": False, "error": "No game loaded"}
        if not script:
            return {"ok": False, "error": "action requires a script"}
        game.take_action(script, params)
        return {"ok": True, **self._scene_payload()}

    def _cmd_choose(self, index) -> dict:
        game = self.manager.current
        if game is None:
            return {"ok": False, "error": "No game loaded"}
        if not isinstance(index, int):
            return {"ok": False, "error": "choose requires an integer index"}
        game.choose(index)
        return {"ok": True, **self._scene_payload()}

    def _scene_payload(self) -> dict:
        game = self.manager.current
        payload = {"scene": game.scene.model_dump(mode="json", exclude={"stack"})}
        payload["pending_pages"] = len(game.scene.stack)
        if self.pretty:
            payload["rendered"] = self._render()
        return payload

    def _render(self) -> str:
        """Render with rich into a string so the JSON stream stays clean."""
        buffer = io.StringIO()
        render_game(self.manager.current, Console(file=buffer, width=80, no_color=True))
        return buffer.getvalue()

    # -------------------------------------------------------------------------

    def run(self, input: TextIO = sys.stdin):
        """
        Main loop: read JSON commands, write responses.

        One JSON object per line. Exit on EOF or quit command.
        """
        self._emit_response("ready", version=__version__)

        for line in input:
            line = line.strip()
            if not line:
                continue

            try:
                cmd = json.loads(line)
            except json.JSONDecodeError as e:
                self._emit_response("error", error=f"Invalid JSON: {e}")
                continue

            result = self.handle_command(cmd)
            self._emit_response("result", **result)

            if result.get("action") == "quit":
                break


def run_headless(saves_dir: Path | str = "saves", config: Config | None = None):
    """Entry point for headless mode."""
    runner = HeadlessRunner(saves_dir=saves_dir, config=config)
    runner.run()
