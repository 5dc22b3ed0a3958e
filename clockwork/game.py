"""
The Game aggregate.

Wraps a World document with the behaviour that needs the registries:
script dispatch, the action loop, lazy NPC and location instantiation,
derived stats and card hooks.

Standard loop (given a new or loaded world):
1. take_action(script, params) runs a player action
   - clears the scene (keeping the scene NPC)
   - discards the continuation stack unless the action resumes it
   - runs the script
2. after_action() runs card and NPC after_update hooks
3. the caller reads game.scene and offers its options
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from .errors import AuthoringError, ClockworkError, ScriptNotFoundError
from .script.registry import SCRIPTS, is_instruction
from .state.definitions import (
    CARDS,
    ITEMS,
    LOCATIONS,
    NPCS,
    STATS,
    CardDefinition,
    LocationDefinition,
    NPCTemplate,
    Reminder,
    StatKind,
)
from .state.event_bus import EventBus, EventType, get_event_bus
from .state.schema import (
    DEFAULT_NPC_STATS,
    NPC,
    Card,
    ContentItem,
    ContentKind,
    InlineContent,
    LocationState,
    Player,
    Scene,
    SceneOption,
    World,
)
from .systems import clock
from .tools import dice

logger = logging.getLogger(__name__)

ADVANCE_SCENE = "advanceScene"
GLOBAL_PREFIX = "global:"
NPC_PREFIX = "npc:"


class Game:
    """
    Engine-side view of one playthrough.

    The World is the only persisted state; everything else on Game is
    either derived (npcs_present, player.stats) or a lazily built system.
    """

    def __init__(
        self,
        world: World | None = None,
        bus: EventBus | None = None,
        debug: bool = False,
        save_id: str = "",
    ):
        self.world = world if world is not None else World()
        self.bus = bus or get_event_bus()
        self.debug = debug
        self.save_id = save_id
        self.npcs_present: list[str] = []

        # Systems (lazily initialized)
        self._card_system = None

        self.calc_stats()
        self.update_npcs_present()

    @property
    def cards(self):
        """Get the card system (lazy initialization)."""
        if self._card_system is None:
            from .systems.cards import CardSystem
            self._card_system = CardSystem(self)
        return self._card_system

    # -------------------------------------------------------------------------
    # World accessors
    # -------------------------------------------------------------------------

    @property
    def time(self) -> int:
        return self.world.time

    @time.setter
    def time(self, value: int) -> None:
        self.world.time = value

    @property
    def player(self) -> Player:
        return self.world.player

    @property
    def scene(self) -> Scene:
        return self.world.scene

    @scene.setter
    def scene(self, value: Scene) -> None:
        self.world.scene = value

    @property
    def npcs(self) -> dict[str, NPC]:
        return self.world.npcs

    @property
    def locations(self) -> dict[str, LocationState]:
        return self.world.locations

    @property
    def current_location(self) -> str:
        return self.world.current_location

    @property
    def is_debug(self) -> bool:
        return self.debug

    @property
    def date(self) -> datetime:
        return clock.to_datetime(self.time)

    @property
    def hour_of_day(self) -> float:
        return clock.hour_of_day(self.time)

    @property
    def day_of_week(self) -> int:
        """0 = Sunday."""
        return clock.day_of_week(self.time)

    @property
    def in_scene(self) -> bool:
        """True when the scene has options; waiting and travel defer to it."""
        return len(self.scene.options) > 0

    def emit(self, event_type: EventType, **data) -> None:
        self.bus.emit(event_type, save_id=self.save_id, game_time=self.time, **data)

    # -------------------------------------------------------------------------
    # Script dispatch
    # -------------------------------------------------------------------------

    def run(self, script: Any, params: dict | None = None) -> Any:
        """
        Run a script and return its result.

        Accepts a registered name (optionally `global:` or `npc:`
        prefixed), an instruction, a callable taking (game, params), or a
        list of instructions run in order. Extra params are merged under
        an instruction's own params.
        """
        if script is None:
            return None
        params = params or {}

        if callable(script):
            return script(self, params)
        if isinstance(script, str):
            return self._run_named(script, params)
        if is_instruction(script):
            name, own = script
            return self._run_named(name, {**params, **own})
        if isinstance(script, (list, tuple)):
            result = None
            for instruction in script:
                result = self.run(instruction, params)
            return result

        raise AuthoringError(f"Not a script: {script!r}")

    def _run_named(self, name: str, params: dict) -> Any:
        if name.startswith(GLOBAL_PREFIX):
            return SCRIPTS.run(self, name[len(GLOBAL_PREFIX):], params)
        if name.startswith(NPC_PREFIX):
            if not self.scene.npc:
                raise ClockworkError(f"{name} needs a scene NPC")
            return self.run_npc_script(self.scene.npc, name[len(NPC_PREFIX):], params)
        return SCRIPTS.run(self, name, params)

    def exec_all(self, instructions: list) -> None:
        """Run instructions purely for their side effects."""
        for instruction in instructions:
            self.run(instruction)

    def run_npc_script(self, npc_id: str, script_name: str, params: dict | None = None) -> Any:
        template = self.npc_template(npc_id)
        script = template.scripts.get(script_name)
        if script is None:
            raise ScriptNotFoundError(script_name, context=f"NPC {npc_id} script")
        return self.run(script, params or {})

    # -------------------------------------------------------------------------
    # Scene content
    # -------------------------------------------------------------------------

    def add(self, item: Any) -> Game:
        """
        Add content or options to the scene.

        - str: a plain paragraph
        - ContentItem / SceneOption: added as is
        - dict: validated as an option if it has a script, else as content
        - list: each element in turn
        """
        if isinstance(item, str):
            self.scene.content.append(ContentItem(
                type=ContentKind.PARAGRAPH, content=[InlineContent(text=item)],
            ))
        elif isinstance(item, ContentItem):
            self.scene.content.append(item)
        elif isinstance(item, SceneOption):
            self.scene.options.append(item)
        elif isinstance(item, dict):
            if "script" in item:
                self.scene.options.append(SceneOption.model_validate(item))
            else:
                self.scene.content.append(ContentItem.model_validate(item))
        elif isinstance(item, (list, tuple)):
            for element in item:
                self.add(element)
        else:
            raise AuthoringError(f"Cannot add {item!r} to a scene")
        return self

    def add_colour(self, text: str, color: str | None) -> Game:
        """A single coloured line, as used for stat and card feedback."""
        self.scene.content.append(ContentItem(type=ContentKind.TEXT, text=text, color=color))
        return self

    def add_paragraph(self, parts: list[InlineContent]) -> Game:
        self.scene.content.append(ContentItem(type=ContentKind.PARAGRAPH, content=parts))
        return self

    def add_speech(self, text: str, color: str | None = None) -> Game:
        self.scene.content.append(ContentItem(type=ContentKind.SPEECH, text=text, color=color))
        return self

    def add_option(self, script_name: str, params: dict | None = None, label: str | None = None) -> Game:
        self.scene.options.append(SceneOption(script=[script_name, params or {}], label=label))
        return self

    # -------------------------------------------------------------------------
    # Action loop
    # -------------------------------------------------------------------------

    def clear_scene(self) -> None:
        """Reset content and options. Keeps the NPC, image flag and stack."""
        old = self.scene
        self.scene = Scene(npc=old.npc, hide_npc_image=old.hide_npc_image, stack=old.stack)

    def dismiss_scene(self) -> None:
        """Clear everything, including the NPC and any queued pages."""
        self.scene = Scene()

    def take_action(self, script: str, params: dict | None = None) -> None:
        """
        Run a player action.

        Any action other than advanceScene discards queued pages, so
        navigating away never resumes a stale sequence.
        """
        self.clear_scene()
        bare = script[len(GLOBAL_PREFIX):] if script.startswith(GLOBAL_PREFIX) else script
        if bare != ADVANCE_SCENE and self.scene.stack:
            logger.debug(f"Discarding {len(self.scene.stack)} queued page(s) for {script}")
            self.scene.stack = []

        self.run(script, params or {})
        self.after_action()

    def choose(self, index: int) -> None:
        """Take the action behind the option at `index`."""
        if not 0 <= index < len(self.scene.options):
            raise ClockworkError(f"No option {index}: scene has {len(self.scene.options)}")
        name, params = self.scene.options[index].script
        self.take_action(name, params)

    def after_action(self) -> None:
        """Run card and NPC after_update hooks; close finished conversations."""
        for card in list(self.player.cards):
            definition = self.card_definition(card)
            if definition.after_update is not None:
                definition.after_update(self, card)

        for npc_id in list(self.npcs_present):
            template = self.npc_template(npc_id)
            if template.after_update is not None:
                self.run(template.after_update, {"npc": npc_id})

        if not self.scene.options:
            self.scene.npc = None
            self.scene.hide_npc_image = None

    # -------------------------------------------------------------------------
    # Locations
    # -------------------------------------------------------------------------

    def location_definition(self, location_id: str | None = None) -> LocationDefinition:
        return LOCATIONS.get(location_id or self.current_location)

    def get_location(self, location_id: str) -> LocationState:
        """Location state, created on first access. Unknown ids raise."""
        state = self.locations.get(location_id)
        if state is None:
            LOCATIONS.get(location_id)
            state = LocationState(id=location_id)
            self.locations[location_id] = state
        return state

    @property
    def location(self) -> LocationState:
        return self.get_location(self.current_location)

    def move_to_location(self, location_id: str) -> None:
        before = self.current_location
        self.world.current_location = location_id
        self.update_npcs_present()
        if before != location_id:
            self.emit(EventType.LOCATION_CHANGED, before=before, after=location_id)

    # -------------------------------------------------------------------------
    # NPCs
    # -------------------------------------------------------------------------

    def npc_template(self, npc_id: str) -> NPCTemplate:
        return NPCS.get(npc_id)

    def get_npc(self, npc_id: str) -> NPC:
        """
        NPC state, generated on first reference.

        The NPC is stored before on_move runs so the hook can look it up.
        """
        npc = self.npcs.get(npc_id)
        if npc is not None:
            return npc

        template = self.npc_template(npc_id)
        npc = NPC(id=npc_id, stats={**DEFAULT_NPC_STATS, **template.stats})
        if template.generate is not None:
            template.generate(self, npc)
        self.npcs[npc_id] = npc
        logger.debug(f"Generated NPC {npc_id}")

        if template.on_move is not None:
            self.run(template.on_move, {"npc": npc_id})
        return npc

    @property
    def npc(self) -> NPC:
        """The scene NPC. Raises if there isn't one."""
        if not self.scene.npc:
            raise ClockworkError("No NPC in current scene")
        return self.get_npc(self.scene.npc)

    def set_npc_location(self, npc_id: str, location: str | None) -> None:
        npc = self.get_npc(npc_id)
        if npc.location == location:
            return
        before = npc.location
        npc.location = location
        logger.debug(f"{npc_id} moved {before} -> {location}")
        self.emit(EventType.NPC_MOVED, npc=npc_id, before=before, after=location)

    def update_npcs_present(self) -> None:
        """Recompute who shares the player's location. Never generates NPCs."""
        self.npcs_present = [
            npc_id for npc_id, npc in self.npcs.items()
            if npc.location == self.current_location
        ]

    def npc_display_name(self, npc_id: str) -> str:
        """Proper name once learned, the descriptive name before that."""
        npc = self.get_npc(npc_id)
        template = self.npc_template(npc_id)
        name = template.name if npc.name_known else (template.uname or template.name)
        return name or "someone"

    # -------------------------------------------------------------------------
    # Time
    # -------------------------------------------------------------------------

    def time_lapse(self, minutes: float | None = None, seconds: int | None = None) -> Game:
        params = {}
        if minutes is not None:
            params["minutes"] = minutes
        if seconds is not None:
            params["seconds"] = seconds
        self.run("timeLapse", params)
        return self

    def calc_ticks(self, seconds_elapsed: int, interval: int) -> int:
        """Interval boundaries crossed by the last `seconds_elapsed` seconds."""
        return clock.intervals_crossed(self.time - seconds_elapsed, self.time, interval)

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def calc_stats(self) -> None:
        """
        Recompute derived stats from base stats, held items and cards,
        then clamp each to its bounds.
        """
        stats = dict(self.player.base_stats)

        for held in self.player.inventory:
            definition = ITEMS.find(held.id)
            if definition is None or not definition.stat_modifiers:
                continue
            if definition.wearable and not held.worn:
                continue
            for name, delta in definition.stat_modifiers.items():
                stats[name] = stats.get(name, 0) + delta * held.number

        for card in self.player.cards:
            definition = CARDS.find(card.id)
            if definition is not None and definition.calc_stats is not None:
                definition.calc_stats(self, card, stats)

        for name, value in stats.items():
            stat = STATS.find(name)
            low, high = (stat.min, stat.max) if stat else (0, 100)
            stats[name] = max(low, min(high, value))

        self.player.stats = stats

    def skill_test(self, name: str, difficulty: int = 0) -> dice.RollResult:
        """Roll a test against a main stat or a skill."""
        stat = STATS.get(name)
        if stat.kind == StatKind.SKILL and stat.based_on:
            result = dice.skill_test(self.player.stat(stat.based_on), self.player.stat(name), difficulty)
        else:
            result = dice.skill_test(self.player.stat(name), 0, difficulty)
        logger.debug(f"Skill test {name} vs {difficulty}: rolled {result.roll}, target {result.target}")
        return result

    # -------------------------------------------------------------------------
    # Cards
    # -------------------------------------------------------------------------

    def card_definition(self, card: Card | str) -> CardDefinition:
        return CARDS.get(card if isinstance(card, str) else card.id)

    def add_card(self, card_id: str, card_type, fields: dict | None = None) -> bool:
        return self.cards.add_card(card_id, card_type, fields)

    def add_quest(self, quest_id: str, args: dict | None = None) -> Game:
        self.cards.add_quest(quest_id, args)
        return self

    def complete_quest(self, quest_id: str) -> Game:
        self.cards.complete_quest(quest_id)
        return self

    def add_effect(self, effect_id: str, args: dict | None = None) -> Game:
        self.cards.add_effect(effect_id, args)
        return self

    def remove_card(self, card_id: str, silent: bool = True) -> bool:
        return self.cards.remove_card(card_id, silent)

    def reminders(self) -> list[Reminder]:
        """All current reminders, most urgent first."""
        return self.cards.reminders()

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_json(self) -> str:
        return self.world.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, payload: str | bytes, **kwargs) -> Game:
        return cls(World.model_validate_json(payload), **kwargs)

    @classmethod
    def from_dict(cls, data: dict, **kwargs) -> Game:
        return cls(World.model_validate(data), **kwargs)
