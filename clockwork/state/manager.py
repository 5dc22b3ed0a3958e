"""
Save slot lifecycle.

Handles new, load, save, list and delete for Game worlds. Storage is
delegated to a WorldStore; the manager owns the current Game.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path

from ..game import Game
from .event_bus import EventBus, EventType, get_event_bus
from .schema import World
from .store import JsonWorldStore, WorldStore

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "autosave"


class GameManager:
    """
    Manages save slots and the current game.

    - new_game() -> fresh world, `init` run, saved
    - load_game(id) -> resume existing
    - list_saves() -> show available
    - save_game() -> persist
    - delete_save(id) -> remove
    """

    def __init__(
        self,
        store: WorldStore | Path | str = "saves",
        bus: EventBus | None = None,
        debug: bool = False,
    ):
        """
        Initialize with a store.

        Args:
            store: WorldStore instance, or path for JsonWorldStore
            bus: Event bus for lifecycle events (defaults to the global bus)
            debug: Passed to every Game, enables the `debug` predicate
        """
        if isinstance(store, (Path, str)):
            self.store = JsonWorldStore(Path(store))
        else:
            self.store = store

        self.bus = bus or get_event_bus()
        self.debug = debug
        self.current: Game | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def new_game(
        self,
        save_id: str = DEFAULT_SLOT,
        player_name: str | None = None,
        start_location: str | None = None,
        start_time: int | None = None,
    ) -> Game:
        """Create a world, run `init` and save it to the slot."""
        world = World()
        if start_time is not None:
            world.time = start_time

        game = Game(world, bus=self.bus, debug=self.debug, save_id=save_id)
        params = {}
        if player_name:
            params["name"] = player_name
        if start_location:
            params["location"] = start_location
        game.take_action("init", params)

        self.current = game
        self.save_game()
        logger.info(f"New game in slot {save_id}")
        return game

    def load_game(self, save_id: str) -> Game | None:
        """
        Load a world by slot name, prefix, or 1-based index into
        list_saves(). Returns None if nothing matches.
        """
        if save_id.isdigit():
            saves = self.list_saves()
            idx = int(save_id) - 1
            if 0 <= idx < len(saves):
                save_id = saves[idx]["id"]

        world = self.store.load(save_id)
        if world is None:
            return None

        game = Game(world, bus=self.bus, debug=self.debug, save_id=save_id)
        self.current = game
        game.emit(EventType.WORLD_LOADED, location=world.current_location)
        logger.info(f"Loaded slot {save_id}")
        return game

    def save_game(self, save_id: str | None = None) -> bool:
        """Save the current game, to another slot if save_id is given."""
        if self.current is None:
            return False

        if save_id:
            self.current.save_id = save_id
        self.store.save(self.current.save_id, self.current.world)
        self.current.emit(EventType.WORLD_SAVED, location=self.current.current_location)
        return True

    def delete_save(self, save_id: str) -> str | None:
        """Delete a slot. Returns the deleted id or None."""
        if save_id.isdigit():
            saves = self.list_saves()
            idx = int(save_id) - 1
            if 0 <= idx < len(saves):
                save_id = saves[idx]["id"]

        if not self.store.delete(save_id):
            return None
        if self.current is not None and self.current.save_id == save_id:
            self.current = None
        return save_id

    def list_saves(self) -> list[dict]:
        """
        List slots, most recent first.

        Each dict has: id, location, time, score, updated_at, display_time
        """
        saves = self.store.list_all()
        for save in saves:
            save["display_time"] = self._format_relative_time(save["updated_at"])
        return saves

    # -------------------------------------------------------------------------

    def _format_relative_time(self, dt: datetime) -> str:
        """Today, Yesterday, a weekday name, or 'Jan 04'."""
        now = datetime.now()
        diff = now - dt

        if diff < timedelta(days=1) and dt.date() == now.date():
            return "Today"
        elif diff < timedelta(days=2) and (now.date() - dt.date()).days == 1:
            return "Yesterday"
        elif diff < timedelta(days=7):
            return dt.strftime("%A")
        else:
            return dt.strftime("%b %d")
