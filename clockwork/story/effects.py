"""
Effect cards and periodic time effects for the demo world.

- intoxicated: alcohol wears off by 10 per quarter hour; -20 Agility while it lasts
- sleepy: a plain effect
- Stress eases by 1 for each hour that passes
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..script.registry import script
from ..state.definitions import CARDS, CardDefinition
from ..state.schema import Card, CardType
from ..systems import clock

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

ALCOHOL_PER_TICK = 10
INTOXICATED_AGILITY = -20


def _intoxicated_on_time(game: Game, card: Card, seconds: int) -> None:
    ticks = game.calc_ticks(seconds, clock.ENERGY_INTERVAL)
    if ticks <= 0:
        return

    alcohol = max(0, card.num("alcohol") - ticks * ALCOHOL_PER_TICK)
    card.set("alcohol", alcohol)
    if alcohol <= 0:
        game.remove_card(card.id)
        game.add_colour("You are no longer intoxicated", None)
    else:
        game.calc_stats()


def _intoxicated_stats(game: Game, card: Card, stats: dict[str, int]) -> None:
    stats["Agility"] = stats.get("Agility", 0) + INTOXICATED_AGILITY


CARDS.register(CardDefinition(
    id="intoxicated",
    name="Intoxicated",
    description="You feel lightheaded and giddy from the wine.",
    type=CardType.EFFECT,
    colour="#9333ea",
    on_time=_intoxicated_on_time,
    calc_stats=_intoxicated_stats,
))

CARDS.register(CardDefinition(
    id="sleepy",
    name="Sleepy",
    description="You feel tired and drowsy.",
    type=CardType.EFFECT,
    colour="#3b82f6",
))


def consume_alcohol(game: Game, amount: int) -> None:
    """Top up an existing intoxicated effect, or start one."""
    card = game.player.get_card("intoxicated")
    if card is not None:
        card.set("alcohol", card.num("alcohol") + amount)
        return
    game.add_effect("intoxicated", {"alcohol": amount})


@script("drinkAlcohol")
def drink_alcohol(game: Game, params: dict) -> None:
    consume_alcohol(game, params.get("amount", 0))


@clock.time_effect
def ease_stress(game: Game, seconds: int) -> None:
    hours = game.calc_ticks(seconds, clock.HOUR)
    stress = game.player.base_stats.get("Stress", 0)
    if hours > 0 and stress > 0:
        game.player.base_stats["Stress"] = max(0, stress - hours)
        game.calc_stats()
