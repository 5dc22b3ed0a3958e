"""
World clock helpers.

Simulated time is an integer count of seconds since the Unix epoch,
interpreted as UTC. Periodic effects are driven by counting interval
boundaries crossed, so a single long jump applies the same cumulative
effect as many short ones.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

from ..state.event_bus import EventType

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR

# Energy drains by one point per quarter hour while awake
ENERGY_INTERVAL = 15 * MINUTE


def to_timestamp(moment: datetime) -> int:
    """Seconds since the epoch for an aware or naive (UTC) datetime."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int((moment - EPOCH).total_seconds())


def to_datetime(timestamp: int) -> datetime:
    """UTC datetime for a simulated timestamp (works before 1970)."""
    return EPOCH + timedelta(seconds=timestamp)


# Noon, Sunday 5 January 1902
DEFAULT_START_TIME = to_timestamp(datetime(1902, 1, 5, 12, 0, 0))


def intervals_crossed(prev: int | float, current: int | float, interval: int) -> int:
    """
    Number of interval boundaries crossed moving from prev to current.

    intervals_crossed(890, 920, 60) == 1   (crossed 900)
    intervals_crossed(100, 250, 60) == 2   (crossed 120 and 180)
    """
    return int(current // interval) - int(prev // interval)


def hour_of_day(timestamp: int) -> float:
    """Fractional hour, 0 <= h < 24."""
    moment = to_datetime(timestamp)
    return moment.hour + moment.minute / 60 + moment.second / 3600


def day_of_week(timestamp: int) -> int:
    """0 = Sunday, 1 = Monday ... 6 = Saturday."""
    return (to_datetime(timestamp).weekday() + 1) % 7


def same_day(a: int, b: int) -> bool:
    return to_datetime(a).date() == to_datetime(b).date()


def format_clock(timestamp: int) -> str:
    """'6pm', '6:30pm', '12am' style time."""
    moment = to_datetime(timestamp)
    period = "pm" if moment.hour >= 12 else "am"
    h12 = moment.hour % 12 or 12
    if moment.minute:
        return f"{h12}:{moment.minute:02d}{period}"
    return f"{h12}{period}"


def format_date(timestamp: int) -> str:
    """'6pm, Mon 6 Jan'"""
    moment = to_datetime(timestamp)
    return f"{format_clock(timestamp)}, {moment.strftime('%a')} {moment.day} {moment.strftime('%b')}"


def seconds_until_hour(timestamp: int, target_hour: float) -> int:
    """
    Seconds to reach target_hour later the same day.

    Returns 0 if the target hour has already passed today.
    """
    current = hour_of_day(timestamp)
    if current >= target_hour:
        return 0
    return int((target_hour - current) * HOUR)


TimeEffect = Callable[["Game", int], None]

# Periodic effects run by the timeEffects script, in registration order
TIME_EFFECTS: list[TimeEffect] = []


def time_effect(fn: TimeEffect) -> TimeEffect:
    """Register a periodic effect taking (game, seconds_elapsed)."""
    TIME_EFFECTS.append(fn)
    return fn


def run_time_effects(game: Game, seconds: int) -> None:
    for effect in TIME_EFFECTS:
        effect(game, seconds)


def advance(game: Game, seconds: int) -> None:
    """
    Move the clock forward and run every time-driven system.

    Order matters:
    1. energy drain (skipped while sleeping)
    2. each card's on_time hook
    3. the timeEffects script
    4. NPC on_move hooks, if an hour boundary was crossed
    """
    if seconds <= 0:
        return

    before = game.time
    game.time = before + seconds
    logger.debug(f"Clock advanced {seconds}s to {format_date(game.time)}")

    player = game.player
    if not player.sleeping:
        drained = intervals_crossed(before, game.time, ENERGY_INTERVAL)
        if drained > 0:
            energy = player.base_stats.get("Energy", 0)
            player.base_stats["Energy"] = max(0, energy - drained)

    # Snapshot: hooks may add or remove cards
    for card in list(player.cards):
        definition = game.card_definition(card)
        if definition.on_time is not None:
            definition.on_time(game, card, seconds)

    game.run("timeEffects", {"seconds": seconds})

    if intervals_crossed(before, game.time, HOUR) > 0:
        for npc_id in list(game.npcs):
            template = game.npc_template(npc_id)
            if template.on_move is not None:
                game.run(template.on_move, {"npc": npc_id})
        game.update_npcs_present()

    game.bus.emit(EventType.TIME_ADVANCED, game_time=game.time, before=before, seconds=seconds)
