"""
NPC schedules.

A schedule is an ordered list of entries:

    (start_hour, end_hour, location_id)
    (start_hour, end_hour, location_id, days)

Hours are fractional (9.5 = 9:30). A range whose start is after its end
wraps past midnight. `days` lists weekdays with 0 (or 7) = Sunday. The
first matching entry wins.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ..game import Game
    from ..state.definitions import ScheduleEntry

logger = logging.getLogger(__name__)


def hour_in_range(hour: float, start: float, end: float) -> bool:
    """start <= hour < end, wrapping past midnight when start > end."""
    if start <= end:
        return start <= hour < end
    return hour >= start or hour < end


def day_matches(day: int, days: Sequence[int] | None) -> bool:
    if days is None:
        return True
    return any(d % 7 == day for d in days)


def resolve_schedule(schedule: Sequence[ScheduleEntry], hour: float, day: int) -> tuple[bool, str | None]:
    """
    First matching location for a time.

    Returns (matched, location). When nothing matches, (False, None).
    """
    for entry in schedule:
        start, end, location = entry[0], entry[1], entry[2]
        days = entry[3] if len(entry) > 3 else None
        if day_matches(day, days) and hour_in_range(hour, start, end):
            return True, location
    return False, None


def follow_schedule(game: Game, npc_id: str, schedule: Sequence[ScheduleEntry]) -> None:
    """
    Place an NPC according to its schedule at the current time.

    With no matching entry, an NPC standing on one of the schedule's own
    locations goes offscreen; anywhere else it stays put. If the NPC is
    about to leave the player's location, on_leave_player runs first,
    but only while the player is awake and not already in a scene.

    A card holding the NPC (a date waiting at its meeting point) beats
    the schedule.
    """
    held = game.cards.held_location(npc_id)
    if held is not None:
        game.set_npc_location(npc_id, held)
        return

    npc = game.get_npc(npc_id)
    matched, target = resolve_schedule(schedule, game.hour_of_day, game.day_of_week)

    if not matched:
        scheduled = {entry[2] for entry in schedule}
        if npc.location not in scheduled:
            return
        target = None

    if target == npc.location:
        return

    leaving_player = (
        npc.location is not None
        and npc.location == game.current_location
        and target != game.current_location
    )
    if leaving_player and not game.player.sleeping and not game.in_scene:
        template = game.npc_template(npc_id)
        if template.on_leave_player is not None:
            game.scene.npc = npc_id
            game.run(template.on_leave_player, {"npc": npc_id})

    game.set_npc_location(npc_id, target)

