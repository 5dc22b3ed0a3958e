"""
Pytest fixtures for Clockwork tests.

Provides fresh games, in-memory stores, fixed dice and helpers for
registering throwaway content that is removed again after each test.
"""

import pytest
from pathlib import Path

# Add the project root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from clockwork import Game
from clockwork.script.registry import SCRIPTS
from clockwork.state import (
    MemoryWorldStore,
    get_event_bus,
    reset_event_bus,
)
from clockwork.state.manager import GameManager
from clockwork.tools import dice


@pytest.fixture
def bus():
    """Fresh global event bus."""
    reset_event_bus()
    return get_event_bus()


@pytest.fixture
def blank_game(bus):
    """Game on an empty world; `init` has not run."""
    return Game(bus=bus)


@pytest.fixture
def game(bus):
    """New playthrough: `init` has run and the opening scene is showing."""
    g = Game(bus=bus, save_id="test")
    g.take_action("init")
    return g


@pytest.fixture
def memory_store():
    """In-memory world store for testing."""
    return MemoryWorldStore()


@pytest.fixture
def manager(memory_store, bus):
    """Game manager with in-memory store."""
    return GameManager(memory_store, bus=bus)


@pytest.fixture
def fixed_roll(monkeypatch):
    """Force the next d100 rolls to a value: fixed_roll(1)."""
    def set_roll(value: int):
        monkeypatch.setattr(dice, "roll_d100", lambda: value)
    return set_roll


@pytest.fixture
def temp_script():
    """Register scripts for one test only: temp_script("testEcho", fn)."""
    names = []

    def register(name, fn):
        SCRIPTS.register(name, fn)
        names.append(name)
        return fn

    yield register
    for name in names:
        SCRIPTS.unregister(name)


@pytest.fixture
def temp_definition():
    """Register a definition for one test only: temp_definition(ITEMS, item)."""
    added = []

    def register(registry, definition, key=None):
        registry.register(definition, key=key)
        added.append((registry, key or definition.id))
        return definition

    yield register
    for registry, key in added:
        registry.unregister(key)
