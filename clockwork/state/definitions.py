"""
Registries for immutable content definitions.

Stats, items, locations, NPC templates, cards, factions and reputations
are registered once at start-up and treated as read-only afterwards.
Per-playthrough state lives in the schema models; these only describe
what exists and how it behaves.

Usage:
    from clockwork.state.definitions import ITEMS, ItemDefinition

    ITEMS.register(ItemDefinition(id="crown", name="Crown", stackable=True))
    ITEMS.get("crown").name
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterator, TypeVar

from ..errors import DefinitionNotFoundError, DuplicateDefinitionError

if TYPE_CHECKING:
    from ..game import Game
    from .schema import NPC, Card, CardType


# A script reference: an instruction, a registered name, a callable
# taking (game, params), or a list of instructions run in sequence.
Script = Any

T = TypeVar("T")


class Registry(Generic[T]):
    """
    Name-keyed registry. Duplicate names and unknown lookups both raise.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._entries: dict[str, T] = {}

    def register(self, definition: T, key: str | None = None) -> T:
        key = key or getattr(definition, "id")
        if key in self._entries:
            raise DuplicateDefinitionError(self.kind, key)
        self._entries[key] = definition
        return definition

    def get(self, key: str) -> T:
        try:
            return self._entries[key]
        except KeyError:
            raise DefinitionNotFoundError(self.kind, key) from None

    def find(self, key: str) -> T | None:
        return self._entries.get(key)

    def unregister(self, key: str) -> None:
        """Remove an entry. Test utility."""
        self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def values(self) -> list[T]:
        return list(self._entries.values())


# -----------------------------------------------------------------------------
# Stats
# -----------------------------------------------------------------------------

class StatKind(str, Enum):
    MAIN = "main"
    SKILL = "skill"
    METER = "meter"


@dataclass
class StatDefinition:
    """A player stat. Skills test against their `based_on` main stat."""
    id: str
    kind: StatKind = StatKind.MAIN
    description: str = ""
    based_on: str | None = None
    gain_color: str | None = None
    loss_color: str | None = None
    min: int = 0
    max: int = 100


# -----------------------------------------------------------------------------
# Items
# -----------------------------------------------------------------------------

@dataclass
class ItemDefinition:
    id: str
    name: str = ""
    description: str = ""
    stackable: bool = False
    wearable: bool = False
    on_consume: Script = None
    on_examine: Script = None
    # Flat modifiers applied while carried (or while worn, for wearables)
    stat_modifiers: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            self.name = self.id


# -----------------------------------------------------------------------------
# Locations
# -----------------------------------------------------------------------------

@dataclass
class LocationLink:
    """A one-way route to `dest` taking `time` minutes."""
    dest: str
    time: int = 1
    label: str | None = None
    # Returns a refusal message, or None to allow travel
    check_access: Callable[[Game], str | None] | None = None
    on_follow: Script = None


@dataclass
class LocationDefinition:
    id: str
    name: str = ""
    description: str = ""
    links: list[LocationLink] = field(default_factory=list)
    on_arrive: Script = None
    on_first_arrive: Script = None
    on_wait: Script = None

    def __post_init__(self):
        if not self.name:
            self.name = self.id

    def link_to(self, dest: str) -> LocationLink | None:
        for link in self.links:
            if link.dest == dest:
                return link
        return None


# -----------------------------------------------------------------------------
# NPCs
# -----------------------------------------------------------------------------

@dataclass
class Pronouns:
    subject: str
    object: str
    possessive: str


PRONOUNS = {
    "he": Pronouns("he", "him", "his"),
    "she": Pronouns("she", "her", "her"),
    "they": Pronouns("they", "them", "their"),
}


# (start_hour, end_hour, location_id) or (start, end, location_id, days)
ScheduleEntry = tuple


@dataclass
class NPCTemplate:
    """
    Immutable description of an NPC plus its behaviour hooks.

    Hooks are scripts; `generate` is a plain callable run once when the
    NPC is first instantiated.
    """
    id: str
    name: str = ""
    uname: str = ""  # shown until the player learns the name
    description: str = ""
    speech_color: str | None = None
    pronouns: Pronouns = field(default_factory=lambda: PRONOUNS["they"])
    schedule: list[ScheduleEntry] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)
    generate: Callable[[Game, NPC], None] | None = None
    on_move: Script = None
    on_approach: Script = None
    on_first_approach: Script = None
    on_wait: Script = None
    on_leave_player: Script = None
    after_update: Script = None
    scripts: dict[str, Script] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Cards
# -----------------------------------------------------------------------------

class ReminderUrgency(str, Enum):
    INFO = "info"
    WARNING = "warning"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return ["info", "warning", "urgent"].index(self.value)


@dataclass
class Reminder:
    """An on-demand notice derived from card state and world time."""
    text: str
    urgency: ReminderUrgency = ReminderUrgency.INFO
    card_id: str | None = None
    detail: str | None = None


@dataclass
class CardDefinition:
    """
    Registered behaviour for a card id.

    All hooks are optional callables:
    - after_update(game, card): every action
    - on_time(game, card, seconds): every clock advance
    - on_added(game, card): once, when the card is added
    - reminders(game, card) -> list[Reminder]
    - calc_stats(game, card, stats): adjust derived stats in place
    - npc_location(game, card, npc_id) -> location id holding that NPC in
      place of its schedule, or None
    """
    id: str
    name: str = ""
    description: str = ""
    type: CardType | None = None
    colour: str | None = None
    after_update: Callable[[Game, Card], None] | None = None
    on_time: Callable[[Game, Card, int], None] | None = None
    on_added: Callable[[Game, Card], None] | None = None
    reminders: Callable[[Game, Card], list[Reminder]] | None = None
    calc_stats: Callable[[Game, Card, dict[str, int]], None] | None = None
    npc_location: Callable[[Game, Card, str], str | None] | None = None
    display_name: Callable[[Game, Card], str] | None = None
    display_description: Callable[[Game, Card], str] | None = None

    def __post_init__(self):
        if not self.name:
            self.name = self.id


# -----------------------------------------------------------------------------
# Factions and reputation
# -----------------------------------------------------------------------------

@dataclass
class FactionDefinition:
    id: str
    name: str = ""
    description: str = ""
    reputations: list[str] = field(default_factory=list)


@dataclass
class ReputationDefinition:
    id: str
    name: str = ""
    faction: str | None = None
    description: str = ""
    gain_color: str | None = None
    loss_color: str | None = None


# -----------------------------------------------------------------------------
# Global registries
# -----------------------------------------------------------------------------

STATS: Registry[StatDefinition] = Registry("Stat")
ITEMS: Registry[ItemDefinition] = Registry("Item")
LOCATIONS: Registry[LocationDefinition] = Registry("Location")
NPCS: Registry[NPCTemplate] = Registry("NPC")
CARDS: Registry[CardDefinition] = Registry("Card")
FACTIONS: Registry[FactionDefinition] = Registry("Faction")
REPUTATIONS: Registry[ReputationDefinition] = Registry("Reputation")


MAIN_STATS = ["Agility", "Perception", "Brawn", "Wits", "Charm"]

SKILLS = {
    "Flirtation": "Charm",
    "Etiquette": "Charm",
    "Dancing": "Agility",
    "Athletics": "Brawn",
    "Mechanics": "Wits",
    "Aetherics": "Wits",
}

# name -> (gain colour, loss colour)
METERS = {
    "Energy": ("#10b981", "#ef4444"),
    "Arousal": ("#ec4899", "#a855f7"),
    "Composure": ("#3b82f6", "#f59e0b"),
    "Stress": ("#ef4444", "#10b981"),
    "Pain": ("#ef4444", "#10b981"),
    "Mood": ("#10b981", "#ef4444"),
}


def register_builtin_stats() -> None:
    """Register the core stat set. Safe to call more than once."""
    for name in MAIN_STATS:
        if name not in STATS:
            STATS.register(StatDefinition(id=name, kind=StatKind.MAIN))
    for name, base in SKILLS.items():
        if name not in STATS:
            STATS.register(StatDefinition(id=name, kind=StatKind.SKILL, based_on=base))
    for name, (gain, loss) in METERS.items():
        if name not in STATS:
            STATS.register(
                StatDefinition(id=name, kind=StatKind.METER, gain_color=gain, loss_color=loss)
            )


register_builtin_stats()
