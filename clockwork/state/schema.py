"""
Pydantic models for Clockwork world state.

Everything here is plain data: it serializes to JSON and back without
losing anything. Behaviour that needs the registries (stat calculation,
card hooks, NPC templates) lives on Game and in the systems package.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_serializer

from ..systems.clock import DEFAULT_START_TIME


# An instruction is a two-element list: [script_name, params].
# Lists rather than tuples so a JSON round trip compares equal.
Instruction = list[Any]

# A continuation page is an ordered list of instructions.
Page = list[Instruction]

# Values a card may carry in its free-form field bag
CardValue = bool | int | float | str | None

# Stats, reputation and NPC stats: whole numbers usually, fractions allowed
StatValue = int | float

# Stats every NPC starts with before its template adds its own
DEFAULT_NPC_STATS: dict[str, StatValue] = {"approachCount": 0, "nameKnown": 0, "affection": 0}


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class CardType(str, Enum):
    QUEST = "Quest"
    EFFECT = "Effect"
    TRAIT = "Trait"
    TASK = "Task"
    DATE = "Date"


class ContentKind(str, Enum):
    TEXT = "text"
    PARAGRAPH = "paragraph"
    SPEECH = "speech"


# -----------------------------------------------------------------------------
# Scene
# -----------------------------------------------------------------------------

class InlineContent(BaseModel):
    """A run of text inside a paragraph, optionally coloured."""
    type: ContentKind = ContentKind.TEXT
    text: str
    color: str | None = None
    hover_text: str | None = None


class ContentItem(BaseModel):
    """
    One block of scene content.

    - text: a single coloured line (feedback such as "Charm +5")
    - paragraph: a list of inline runs
    - speech: dialogue, coloured by the speaking NPC
    """
    type: ContentKind
    text: str | None = None
    color: str | None = None
    content: list[InlineContent] = Field(default_factory=list)

    @property
    def plain_text(self) -> str:
        """Flatten to a string, whatever the kind."""
        if self.type == ContentKind.PARAGRAPH:
            return "".join(part.text for part in self.content)
        return self.text or ""


class SceneOption(BaseModel):
    """A button. Choosing it runs `script` as a player action."""
    type: str = "button"
    script: Instruction
    label: str | None = None


class Scene(BaseModel):
    """The player-facing bundle: content, options and pending pages."""
    content: list[ContentItem] = Field(default_factory=list)
    options: list[SceneOption] = Field(default_factory=list)
    npc: str | None = None
    hide_npc_image: bool | None = None
    shop: dict[str, Any] | None = None
    # Continuation stack: pages waiting to run, front first
    stack: list[Page] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Player
# -----------------------------------------------------------------------------

class InventoryItem(BaseModel):
    """A held item (or stack of items)."""
    id: str
    number: int = 1
    worn: bool = False
    locked: bool = False


class Card(BaseModel):
    """
    A quest, effect, trait, task or date held by the player.

    Definitions (name, hooks) live in the card registry; the instance only
    carries lifecycle flags and a bag of per-playthrough fields.
    """
    id: str
    type: CardType
    completed: bool = False
    failed: bool = False
    fields: dict[str, CardValue] = Field(default_factory=dict)

    def get(self, key: str, default: CardValue = None) -> CardValue:
        return self.fields.get(key, default)

    def set(self, key: str, value: CardValue) -> None:
        self.fields[key] = value

    def num(self, key: str, default: float = 0) -> float:
        """Numeric field, or default when unset or not a number."""
        value = self.fields.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return default
        return value

    def flag(self, key: str) -> bool:
        return bool(self.fields.get(key))

    def text(self, key: str) -> str | None:
        value = self.fields.get(key)
        return value if isinstance(value, str) else None


class Player(BaseModel):
    """The player character."""
    name: str = ""
    base_stats: dict[str, StatValue] = Field(default_factory=dict)
    timers: dict[str, int] = Field(default_factory=dict)
    reputation: dict[str, StatValue] = Field(default_factory=dict)
    relationships: dict[str, str] = Field(default_factory=dict)
    inventory: list[InventoryItem] = Field(default_factory=list)
    cards: list[Card] = Field(default_factory=list)
    outfits: dict[str, list[str]] = Field(default_factory=dict)

    # Derived values, recomputed by Game.calc_stats; never persisted
    stats: dict[str, StatValue] = Field(default_factory=dict, exclude=True)
    sleeping: bool = Field(default=False, exclude=True)

    @field_serializer("reputation")
    def _drop_zero_reputation(self, reputation: dict[str, StatValue]) -> dict[str, StatValue]:
        return {name: value for name, value in reputation.items() if value != 0}

    def stat(self, name: str) -> StatValue:
        """Derived stat value, falling back to the base value."""
        if name in self.stats:
            return self.stats[name]
        return self.base_stats.get(name, 0)

    def has_card(self, card_id: str) -> bool:
        return any(c.id == card_id for c in self.cards)

    def get_card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def set_timer(self, timer: str, time: int) -> None:
        self.timers[timer] = time

    def count_item(self, item_id: str) -> int:
        return sum(i.number for i in self.inventory if i.id == item_id)

    def add_item(self, item_id: str, number: int = 1, stackable: bool = False) -> None:
        """Add to an existing stack when stackable, else as a new entry."""
        if stackable:
            for held in self.inventory:
                if held.id == item_id:
                    held.number += number
                    return
        self.inventory.append(InventoryItem(id=item_id, number=number))

    def remove_item(self, item_id: str, number: int = 1) -> InventoryItem | None:
        """Remove up to `number`; returns what was removed or None if not held."""
        for index, held in enumerate(self.inventory):
            if held.id == item_id:
                held.number -= number
                if held.number <= 0:
                    del self.inventory[index]
                return InventoryItem(id=item_id, number=number)
        return None

    def is_wearing(self, item_id: str) -> bool:
        return any(i.id == item_id and i.worn for i in self.inventory)

    def wear_item(self, item_id: str) -> bool:
        for held in self.inventory:
            if held.id == item_id:
                held.worn = True
                return True
        return False

    def unwear_item(self, item_id: str, force: bool = False) -> bool:
        """Take an item off. Locked items stay on unless forced."""
        for held in self.inventory:
            if held.id == item_id and held.worn:
                if held.locked and not force:
                    return False
                held.worn = False
                return True
        return False

    def strip_all(self, force: bool = False) -> None:
        for held in self.inventory:
            if held.worn:
                self.unwear_item(held.id, force)

    def save_outfit(self, name: str) -> None:
        self.outfits[name] = [i.id for i in self.inventory if i.worn]

    def wear_outfit(self, name: str) -> bool:
        """Strip and re-dress in a saved outfit. Items no longer held are skipped."""
        if name not in self.outfits:
            return False
        self.strip_all()
        for item_id in self.outfits[name]:
            self.wear_item(item_id)
        return True


# -----------------------------------------------------------------------------
# World entities
# -----------------------------------------------------------------------------

class NPC(BaseModel):
    """Mutable per-playthrough state for a registered NPC template."""
    id: str
    stats: dict[str, StatValue] = Field(default_factory=lambda: dict(DEFAULT_NPC_STATS))
    location: str | None = None  # None = offscreen

    @property
    def approach_count(self) -> int:
        return self.stats.get("approachCount", 0)

    @property
    def name_known(self) -> bool:
        return self.stats.get("nameKnown", 0) > 0

    @property
    def affection(self) -> StatValue:
        return self.stats.get("affection", 0)


class LocationState(BaseModel):
    """Mutable state for a registered location."""
    id: str
    num_visits: int = 0
    discovered: bool = False


class World(BaseModel):
    """
    Root persisted document.

    One World is one save: time, place, player, NPCs and the open scene
    (including its continuation stack).
    """
    version: int = 1
    score: int = 0
    player: Player = Field(default_factory=Player)
    locations: dict[str, LocationState] = Field(default_factory=dict)
    npcs: dict[str, NPC] = Field(default_factory=dict)
    current_location: str = "station"
    scene: Scene = Field(default_factory=Scene)
    time: int = DEFAULT_START_TIME
