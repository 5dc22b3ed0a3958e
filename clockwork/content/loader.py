"""
YAML world content.

A content file registers definitions in bulk. Every top-level key is
optional:

    stats:        [{id, kind, based_on, description, gain_color, loss_color, min, max}]
    factions:     [{id, name, description, reputations}]
    reputations:  [{id, name, faction, description, gain_color, loss_color}]
    items:        [{id, name, description, stackable, wearable, on_consume,
                    on_examine, stat_modifiers}]
    locations:    [{id, name, description, on_arrive, on_first_arrive, on_wait,
                    links: [{dest, time, label, on_follow, access}]}]
    npcs:         [{id, name, uname, description, speech_color, pronouns,
                    schedule, stats, on_move, on_approach, on_first_approach,
                    on_wait, on_leave_player, after_update, scripts}]

Hooks are instructions (`[name, {params}]`), script names, or lists of
instructions. A link's `access` is `{condition, message}`: travel is
refused with `message` unless `condition` holds.

An NPC with a schedule and no on_move follows its schedule every hour.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

import yaml

from ..errors import AuthoringError
from ..state.definitions import (
    FACTIONS,
    ITEMS,
    LOCATIONS,
    NPCS,
    PRONOUNS,
    REPUTATIONS,
    STATS,
    FactionDefinition,
    ItemDefinition,
    LocationDefinition,
    LocationLink,
    NPCTemplate,
    ReputationDefinition,
    StatDefinition,
    StatKind,
)

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

FOLLOW_SCHEDULE = ["followSchedule", {}]

SECTIONS = ("stats", "factions", "reputations", "items", "locations", "npcs")


def _require_id(entry: Any, section: str) -> str:
    if not isinstance(entry, dict) or not entry.get("id"):
        raise AuthoringError(f"Every {section} entry needs an id: {entry!r}")
    return entry["id"]


def _pick(entry: dict, *keys: str) -> dict:
    return {k: entry[k] for k in keys if k in entry}


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------

def build_stat(entry: dict) -> StatDefinition:
    _require_id(entry, "stats")
    fields = _pick(entry, "id", "description", "based_on", "gain_color", "loss_color", "min", "max")
    if "kind" in entry:
        fields["kind"] = StatKind(entry["kind"])
    return StatDefinition(**fields)


def build_faction(entry: dict) -> FactionDefinition:
    _require_id(entry, "factions")
    return FactionDefinition(**_pick(entry, "id", "name", "description", "reputations"))


def build_reputation(entry: dict) -> ReputationDefinition:
    _require_id(entry, "reputations")
    return ReputationDefinition(
        **_pick(entry, "id", "name", "faction", "description", "gain_color", "loss_color")
    )


def build_item(entry: dict) -> ItemDefinition:
    _require_id(entry, "items")
    return ItemDefinition(**_pick(
        entry, "id", "name", "description", "stackable", "wearable",
        "on_consume", "on_examine", "stat_modifiers",
    ))


def _access_check(access: dict) -> Callable[[Game], str | None]:
    condition = access.get("condition")
    message = access.get("message") or "You can't go that way."
    if condition is None:
        raise AuthoringError(f"Link access needs a condition: {access!r}")

    def check(game: Game) -> str | None:
        return None if game.run(condition) else message

    return check


def build_link(entry: dict, origin: str) -> LocationLink:
    if not isinstance(entry, dict) or not entry.get("dest"):
        raise AuthoringError(f"Link from {origin} needs a dest: {entry!r}")
    fields = _pick(entry, "dest", "time", "label", "on_follow")
    if entry.get("access"):
        fields["check_access"] = _access_check(entry["access"])
    return LocationLink(**fields)


def build_location(entry: dict) -> LocationDefinition:
    location_id = _require_id(entry, "locations")
    fields = _pick(entry, "id", "name", "description", "on_arrive", "on_first_arrive", "on_wait")
    fields["links"] = [build_link(link, location_id) for link in entry.get("links") or []]
    return LocationDefinition(**fields)


def build_schedule(raw: list, npc_id: str) -> list[tuple]:
    schedule = []
    for row in raw:
        if not isinstance(row, (list, tuple)) or len(row) not in (3, 4):
            raise AuthoringError(f"Bad schedule entry for {npc_id}: {row!r}")
        schedule.append(tuple(row))
    return schedule


def build_npc(entry: dict) -> NPCTemplate:
    npc_id = _require_id(entry, "npcs")
    fields = _pick(
        entry, "id", "name", "uname", "description", "speech_color", "stats",
        "on_move", "on_approach", "on_first_approach", "on_wait",
        "on_leave_player", "after_update", "scripts",
    )

    pronouns = entry.get("pronouns")
    if pronouns is not None:
        if pronouns not in PRONOUNS:
            raise AuthoringError(f"Unknown pronouns for {npc_id}: {pronouns}")
        fields["pronouns"] = PRONOUNS[pronouns]

    if entry.get("schedule"):
        fields["schedule"] = build_schedule(entry["schedule"], npc_id)
        fields.setdefault("on_move", list(FOLLOW_SCHEDULE))

    return NPCTemplate(**fields)


# -----------------------------------------------------------------------------
# Loading
# -----------------------------------------------------------------------------

BUILDERS = {
    "stats": (build_stat, STATS),
    "factions": (build_faction, FACTIONS),
    "reputations": (build_reputation, REPUTATIONS),
    "items": (build_item, ITEMS),
    "locations": (build_location, LOCATIONS),
    "npcs": (build_npc, NPCS),
}


def load_world_data(data: dict) -> dict[str, int]:
    """
    Register every definition in an already-parsed content document.

    Returns the number registered per section. Duplicate ids raise.
    """
    if not isinstance(data, dict):
        raise AuthoringError("Content must be a mapping of sections")

    unknown = set(data) - set(SECTIONS)
    if unknown:
        raise AuthoringError(f"Unknown content sections: {', '.join(sorted(unknown))}")

    counts: dict[str, int] = {}
    for section in SECTIONS:
        build, registry = BUILDERS[section]
        entries = data.get(section) or []
        for entry in entries:
            registry.register(build(entry))
        counts[section] = len(entries)
    return counts


def load_world(path: Path | str) -> dict[str, int]:
    """Load and register a YAML content file."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    counts = load_world_data(data)
    logger.info(
        f"Loaded {path.name}: "
        + ", ".join(f"{n} {section}" for section, n in counts.items() if n)
    )
    return counts
