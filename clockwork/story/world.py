"""
Demo world: content loading, the starting quest and the `init` script.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..content.loader import load_world
from ..script.dsl import (
    add_quest,
    branch,
    choice,
    has_item,
    not_,
    option,
    say,
    scene,
    scenes,
    text,
    when,
)
from ..script.registry import script
from ..state.definitions import CARDS, CardDefinition, Reminder, ReminderUrgency
from ..state.schema import Card, CardType

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"

START_LOCATION = "station"
STORY_NPCS = ["porter", "tour-guide"]

STARTING_STATS = {
    "Agility": 30,
    "Perception": 30,
    "Brawn": 25,
    "Wits": 35,
    "Charm": 35,
    "Flirtation": 10,
    "Etiquette": 10,
    "Dancing": 5,
    "Athletics": 5,
    "Mechanics": 10,
    "Aetherics": 5,
    "Energy": 80,
    "Mood": 60,
    "Composure": 50,
    "Stress": 10,
}

STARTING_ITEMS = [("crown", 10), ("pocket-watch", 1), ("sweet-wine", 1), ("brass-goggles", 1)]

ROOM_PRICE = 5


load_world(DATA_DIR / "world.yaml")


# -----------------------------------------------------------------------------
# Lodgings quest
# -----------------------------------------------------------------------------

def _lodgings_after_update(game: Game, card: Card) -> None:
    if not card.completed and game.player.count_item("room-key") > 0:
        game.complete_quest(card.id)


def _lodgings_reminders(game: Game, card: Card) -> list[Reminder]:
    if game.hour_of_day >= 21 or game.hour_of_day < 6:
        return [Reminder(
            text="Find somewhere to sleep tonight",
            urgency=ReminderUrgency.WARNING,
            detail="The backstreets are said to have cheap rooms.",
        )]
    return [Reminder(text="Find lodgings", detail="Somewhere in the city has a bed going.")]


CARDS.register(CardDefinition(
    id="find-lodgings",
    name="Find Lodgings",
    description="You need a room before nightfall.",
    type=CardType.QUEST,
    colour="#3b82f6",
    after_update=_lodgings_after_update,
    reminders=_lodgings_reminders,
))


@script("rentRoom")
def rent_room(game: Game, params: dict) -> None:
    if game.player.count_item("crown") < ROOM_PRICE:
        game.add("You don't have enough crowns.")
        return
    game.run("loseItem", {"item": "crown", "number": ROOM_PRICE})
    game.run("gainItem", {"item": "room-key", "text": "The landlady hands you a heavy iron key."})


@script("backstreetsArrive")
def backstreets_arrive(game: Game, params: dict) -> None:
    game.run(when(
        not_(has_item("room-key")),
        text("A landlady leans in a doorway, a card in the window reading ROOMS."),
        option(f"Rent a room ({ROOM_PRICE} crowns)", "rentRoom"),
    ))


# -----------------------------------------------------------------------------
# New game
# -----------------------------------------------------------------------------

OPENING = scenes(
    scene(
        "arrival",
        text("Steam hisses as the train grinds to a halt. You step onto the platform of Ironspark Terminus."),
        text("The air is thick with coal and oil. Gears turn behind the glass panels of the station walls."),
    ),
    scene(
        "platform",
        text("A porter with an oversized cap hurries past, then doubles back."),
        say("First time in Aetheria, miss?"),
        choice(
            branch("Say it is", say("Welcome! Mind the automatons, they don't stop for anyone.")),
            branch("Say you've been before", say("Course you have. Welcome back, then.")),
            text("He touches his cap and is gone into the steam."),
        ),
    ),
    scene(
        "plans",
        text("You check your purse: ten crowns. Enough for a room, if you find one before dark."),
        add_quest("find-lodgings"),
    ),
)


@script("init")
def init(game: Game, params: dict) -> None:
    """Set up a new playthrough and show the opening."""
    player = game.player
    player.name = params.get("name") or "Elise"
    player.base_stats.update(STARTING_STATS)
    for item_id, number in STARTING_ITEMS:
        game.run("gainItem", {"item": item_id, "number": number})

    location = params.get("location") or START_LOCATION
    game.move_to_location(location)
    state = game.get_location(location)
    state.discovered = True
    state.num_visits += 1

    for npc_id in STORY_NPCS:
        game.get_npc(npc_id)
    game.update_npcs_present()

    game.run(OPENING)
    logger.info(f"New game started at {location}")
