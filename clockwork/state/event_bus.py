"""
Event bus for Clockwork state changes.

Lets observers (renderers, loggers, tests) react to world changes without
the engine knowing about them. Game semantics never depend on the bus.

Usage:
    from .event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.CARD_ADDED, on_card)

    bus.emit(EventType.CARD_ADDED, card="intoxicated", type="Effect")

    def on_card(event: GameEvent):
        print(f"New card {event.data['card']}")
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Game events that can be published."""

    # Player events
    STAT_CHANGED = "stat.changed"
    ITEM_GAINED = "item.gained"
    ITEM_LOST = "item.lost"
    REPUTATION_CHANGED = "reputation.changed"

    # Card events
    CARD_ADDED = "card.added"
    CARD_REMOVED = "card.removed"
    QUEST_COMPLETED = "quest.completed"

    # World events
    TIME_ADVANCED = "time.advanced"
    LOCATION_CHANGED = "location.changed"
    NPC_MOVED = "npc.moved"
    NPC_STAT_CHANGED = "npc.stat_changed"

    # Scene events
    SCENE_ADVANCED = "scene.advanced"

    # Persistence events
    WORLD_SAVED = "world.saved"
    WORLD_LOADED = "world.loaded"


@dataclass
class GameEvent:
    """
    Event payload for the event bus.

    Attributes:
        type: The event type (from EventType enum)
        data: Event-specific payload as dict
        save_id: Save slot this event belongs to, if known
        game_time: Simulated time when the event occurred
        timestamp: Wall-clock time when the event was emitted
    """

    type: EventType
    data: dict = field(default_factory=dict)
    save_id: str = ""
    game_time: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners run immediately on emit(), in subscription order. A listener
    that raises is logged and skipped; the rest still run.
    """

    def __init__(self):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._history: list[GameEvent] = []
        self._history_limit = 100

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: The type of event to listen for
            handler: Callback function that receives GameEvent
        """
        handlers = self._listeners.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe a handler. Unknown handlers are ignored."""
        if handler in self._listeners.get(event_type, []):
            self._listeners[event_type].remove(handler)

    def emit(
        self,
        event_type: EventType,
        save_id: str = "",
        game_time: int = 0,
        **data,
    ) -> GameEvent:
        """
        Emit an event to all subscribers.

        Returns:
            The emitted GameEvent
        """
        event = GameEvent(type=event_type, data=data, save_id=save_id, game_time=game_time)

        self._history.append(event)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit :]

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Error in handler for {event_type.value}")

        return event

    def clear(self) -> None:
        """Clear all listeners and history. Useful for testing."""
        self._listeners.clear()
        self._history.clear()

    def get_history(self, event_type: EventType | None = None) -> list[GameEvent]:
        """Recent events, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Reset the global event bus. Useful for testing."""
    global _event_bus
    _event_bus = None
