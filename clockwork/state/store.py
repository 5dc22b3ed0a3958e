"""
World storage abstraction.

Separates persistence from the engine for testability. A save slot holds
one World document; anything that can store a JSON string can back it.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from .schema import World

logger = logging.getLogger(__name__)


@runtime_checkable
class WorldStore(Protocol):
    """
    Abstract storage interface for save slots.

    Implementations:
    - JsonWorldStore: File-based persistence (production)
    - MemoryWorldStore: In-memory storage (testing)
    """

    def save(self, save_id: str, world: World) -> None:
        """Persist a world under a slot name."""
        ...

    def load(self, save_id: str) -> World | None:
        """Load a world by slot name. Returns None if not found."""
        ...

    def delete(self, save_id: str) -> bool:
        """Delete a slot. Returns True if deleted."""
        ...

    def list_all(self) -> list[dict]:
        """List all slots with metadata."""
        ...

    def exists(self, save_id: str) -> bool:
        """Check if a slot exists."""
        ...


def _summary(save_id: str, world: World, updated_at: datetime) -> dict:
    return {
        "id": save_id,
        "location": world.current_location,
        "time": world.time,
        "score": world.score,
        "updated_at": updated_at,
    }


class JsonWorldStore:
    """
    File-based world storage using JSON.

    Features:
    - Automatic backup on save
    - Prefix matching on load
    """

    def __init__(self, saves_dir: Path | str = "saves"):
        self.saves_dir = Path(saves_dir)
        self.saves_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, save_id: str) -> Path:
        return self.saves_dir / f"{save_id}.json"

    def _slot_files(self) -> list[Path]:
        return [f for f in self.saves_dir.glob("*.json") if not f.name.startswith(".")]

    def save(self, save_id: str, world: World) -> None:
        """Save world to JSON file with backup."""
        save_file = self._path(save_id)

        if save_file.exists():
            backup = save_file.with_suffix(".json.bak")
            backup.write_text(save_file.read_text())

        save_file.write_text(world.model_dump_json(indent=2))

    def load(self, save_id: str) -> World | None:
        """
        Load world by slot name or prefix.

        "morning" matches morning.json, or morning-2.json if that is the
        only slot starting with it.
        """
        save_file = self._path(save_id)

        if not save_file.exists():
            for f in self._slot_files():
                if f.stem.startswith(save_id):
                    save_file = f
                    break

        if not save_file.exists():
            return None

        try:
            data = json.loads(save_file.read_text())
            return World.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Could not read save {save_file.name}: {e}")
            return None

    def delete(self, save_id: str) -> bool:
        save_file = self._path(save_id)
        if save_file.exists():
            save_file.unlink()
            return True
        return False

    def list_all(self) -> list[dict]:
        """List all slots, most recently modified first."""
        saves = []

        for f in sorted(self._slot_files(), key=lambda x: x.stat().st_mtime, reverse=True):
            try:
                world = World.model_validate(json.loads(f.read_text()))
            except (json.JSONDecodeError, ValidationError):
                logger.warning(f"Skipping unreadable save {f.name}")
                continue
            saves.append(_summary(f.stem, world, datetime.fromtimestamp(f.stat().st_mtime)))

        return saves

    def exists(self, save_id: str) -> bool:
        return self._path(save_id).exists()


class MemoryWorldStore:
    """
    In-memory world storage for testing.

    Stores serialized JSON, not live objects, so a load always returns a
    fresh World just as the file store would.
    """

    def __init__(self):
        self.saves: dict[str, tuple[str, datetime]] = {}

    def save(self, save_id: str, world: World) -> None:
        self.saves[save_id] = (world.model_dump_json(), datetime.now())

    def load(self, save_id: str) -> World | None:
        if save_id not in self.saves:
            matches = [sid for sid in self.saves if sid.startswith(save_id)]
            if not matches:
                return None
            save_id = matches[0]
        payload, _ = self.saves[save_id]
        return World.model_validate_json(payload)

    def delete(self, save_id: str) -> bool:
        if save_id in self.saves:
            del self.saves[save_id]
            return True
        return False

    def list_all(self) -> list[dict]:
        saves = [
            _summary(sid, World.model_validate_json(payload), updated)
            for sid, (payload, updated) in self.saves.items()
        ]
        saves.sort(key=lambda x: x["updated_at"], reverse=True)
        return saves

    def exists(self, save_id: str) -> bool:
        return save_id in self.saves

    def clear(self) -> None:
        """Clear all saves (test utility)."""
        self.saves.clear()
