"""State management for Clockwork worlds."""

from .event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)
from .schema import (
    Card,
    CardType,
    ContentItem,
    ContentKind,
    InlineContent,
    InventoryItem,
    LocationState,
    NPC,
    Player,
    Scene,
    SceneOption,
    World,
)
from .store import WorldStore, JsonWorldStore, MemoryWorldStore

__all__ = [
    # Events
    "EventBus",
    "EventType",
    "GameEvent",
    "get_event_bus",
    "reset_event_bus",
    # Schema
    "Card",
    "CardType",
    "ContentItem",
    "ContentKind",
    "InlineContent",
    "InventoryItem",
    "LocationState",
    "NPC",
    "Player",
    "Scene",
    "SceneOption",
    "World",
    # Storage
    "WorldStore",
    "JsonWorldStore",
    "MemoryWorldStore",
]
