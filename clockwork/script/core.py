"""
Core scripts.

Generic, world-independent instructions registered at import time:

- Control flow: seq, when, cond, random, skillCheck, menu
- Scene stack: pushScenePages, advanceScene, replaceScene, endScene, exitScene
- Predicates: hasItem, hasStat, hasReputation, inLocation, inScene, npcStat,
  hasCard, cardCompleted, locationDiscovered, hourBetween, timeElapsed,
  debug, not, and, or
- Content: text, paragraph, say, playerName, pc, npcName, npc, option,
  npcLeaveOption, endConversation
- Actions: timeLapse, timeEffects, move, go, wait, approach, interact,
  item, stat, reputation, timer and card changes

Story-specific scripts belong in the story package.
"""

from __future__ import annotations

import copy
import logging
import random
import re
from typing import TYPE_CHECKING, Any

from ..errors import ClockworkError, InvalidParameterError, ScriptNotFoundError
from ..state.definitions import ITEMS, LOCATIONS, METERS, REPUTATIONS, STATS
from ..state.event_bus import EventType
from ..state.schema import CardType, InlineContent
from ..systems import clock
from ..systems.schedule import follow_schedule, hour_in_range
from .interpolation import resolve_parts
from .registry import SCRIPTS, is_instruction, script

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

GAIN_COLOR = "#10b981"
LOSS_COLOR = "#ef4444"
PLAYER_NAME_COLOR = "#e0b0ff"
ITEM_COLOR = "#ffeb3b"
DISCOVERY_COLOR = "#3b82f6"
DEFAULT_SPEECH_COLOR = "#a8d4f0"
DEFAULT_PLAYER_NAME = "Elise"

WAIT_CHUNK_MINUTES = 10


# -----------------------------------------------------------------------------
# Parameter helpers
# -----------------------------------------------------------------------------

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_str(params: dict, key: str, name: str) -> str:
    value = params.get(key)
    if not value or not isinstance(value, str):
        raise InvalidParameterError(f"{name} requires a {key} parameter")
    return value


def _require_number(params: dict, key: str, name: str) -> float:
    value = params.get(key)
    if not _is_number(value):
        raise InvalidParameterError(f"{name} requires a {key} parameter")
    return value


def _non_negative(params: dict, key: str, name: str, default: float = 0) -> float:
    value = params.get(key)
    if value is None:
        return default
    if not _is_number(value) or value < 0:
        raise InvalidParameterError(f"{name} requires a non-negative number of {key}")
    return value


def _chance(params: dict, name: str) -> bool:
    """Roll the optional `chance` parameter. True means go ahead."""
    chance = params.get("chance", 1.0)
    if not _is_number(chance) or not 0 <= chance <= 1:
        raise InvalidParameterError(f"{name} chance must be a number between 0 and 1")
    return random.random() <= chance


def _in_bounds(value: float, params: dict) -> bool:
    if params.get("min") is not None and value < params["min"]:
        return False
    if params.get("max") is not None and value > params["max"]:
        return False
    return True


def _no_bounds(params: dict) -> bool:
    return params.get("min") is None and params.get("max") is None


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def _feedback(change: float) -> str:
    return f"+{change:g}" if change > 0 else f"{change:g}"


def _scene_npc(game: Game, params: dict, name: str) -> str:
    npc_id = params.get("npc") or game.scene.npc
    if not npc_id:
        raise InvalidParameterError(f"{name} requires an npc parameter or a scene NPC")
    return npc_id


def _pages(pages: list) -> list[list]:
    """Deep copy of pages for the stack. A bare instruction becomes a one-instruction page."""
    return [
        [[page[0], copy.deepcopy(page[1])]] if is_instruction(page) else copy.deepcopy(page)
        for page in pages
    ]


# -----------------------------------------------------------------------------
# Control flow
# -----------------------------------------------------------------------------

@script("seq")
def seq(game: Game, params: dict) -> None:
    game.exec_all(params.get("instructions") or [])


@script("when")
def when(game: Game, params: dict) -> None:
    condition, then = params.get("condition"), params.get("then")
    if not condition or not then:
        return
    if game.run(condition):
        game.exec_all(then)


@script("cond")
def cond(game: Game, params: dict) -> None:
    """First branch whose condition holds runs; later conditions are never evaluated."""
    for branch in params.get("branches") or []:
        if game.run(branch["condition"]):
            game.run(branch["then"])
            return
    if params.get("default") is not None:
        game.run(params["default"])


@script("random")
def random_choice(game: Game, params: dict) -> None:
    """
    Run one eligible child at random.

    A `when` child joins the pool only if its condition holds (its `then`
    list is what runs). Falsy children are skipped.
    """
    pool: list[list] = []
    for child in params.get("children") or []:
        if not child:
            continue
        if is_instruction(child) and child[0] == "when":
            gate = child[1]
            if gate.get("condition") and gate.get("then") and game.run(gate["condition"]):
                pool.append(gate["then"])
        else:
            pool.append([child])

    if not pool:
        return
    game.exec_all(random.choice(pool))


@script("skillCheck")
def skill_check(game: Game, params: dict) -> bool:
    """
    Test a stat or skill. Without callbacks this is a predicate; with them
    the matching callback runs and the outcome is still returned.
    """
    skill = _require_str(params, "skill", "skillCheck")
    difficulty = params.get("difficulty", 0)
    success = game.skill_test(skill, difficulty).success

    on_success, on_failure = params.get("onSuccess"), params.get("onFailure")
    if success and on_success is not None:
        game.run(on_success)
    elif not success and on_failure is not None:
        game.run(on_failure)
    return success


@script("menu")
def menu(game: Game, params: dict) -> None:
    """
    Repeatable menu.

    Non-exit entries play their content and then show the menu again;
    exit entries play their content and stop. Conditions are evaluated
    each time the menu is shown.
    """
    entries = params.get("entries") or []
    menu_self = ["menu", copy.deepcopy(params)]

    for entry in entries:
        condition = entry.get("condition")
        if condition is not None and not game.run(condition):
            continue

        content = copy.deepcopy(entry.get("content") or [])
        if entry.get("isExit"):
            push = [content]
        else:
            push = [content, [copy.deepcopy(menu_self)]]
        game.add_option("advanceScene", {"push": push}, entry["label"])


# -----------------------------------------------------------------------------
# Scene stack
# -----------------------------------------------------------------------------

@script("pushScenePages")
def push_scene_pages(game: Game, params: dict) -> None:
    """Queue pages ahead of anything already waiting; offer Continue if nothing else is offered."""
    pages = params.get("pages")
    if not pages:
        return
    game.scene.stack[0:0] = _pages(pages)
    if not game.scene.options:
        game.add_option("advanceScene", {}, "Continue")


@script("advanceScene")
def advance_scene(game: Game, params: dict) -> None:
    """
    Run the next queued page.

    Pages in `push` go to the front first (this is how branches resume the
    enclosing sequence). Pages that add no content and no options are
    skipped. Continue is offered again only while pages remain.
    """
    push = params.get("push")
    if push:
        game.scene.stack[0:0] = _pages(push)

    while game.scene.stack:
        before = len(game.scene.content)
        page = game.scene.stack.pop(0)
        game.exec_all(page)
        if len(game.scene.content) > before or game.scene.options:
            break

    if not game.scene.options and game.scene.stack:
        game.add_option("advanceScene", {}, "Continue")

    game.emit(EventType.SCENE_ADVANCED, remaining=len(game.scene.stack))


@script("replaceScene")
def replace_scene(game: Game, params: dict) -> None:
    """Clear content, options and queued pages, then play the given pages."""
    game.scene.content = []
    game.scene.options = []
    game.scene.stack = _pages(params.get("pages") or [])
    advance_scene(game, {})


@script("endScene")
def end_scene(game: Game, params: dict) -> None:
    if params.get("text"):
        game.add(params["text"])


@script("exitScene")
def exit_scene(game: Game, params: dict) -> None:
    """Close the scene: no options, no NPC, nothing queued. Content already shown stays."""
    game.scene.options = []
    game.scene.stack = []
    game.scene.npc = None
    game.scene.hide_npc_image = None


# -----------------------------------------------------------------------------
# Predicates
# -----------------------------------------------------------------------------

@script("hasItem")
def has_item(game: Game, params: dict) -> bool:
    if not params.get("item"):
        return False
    return game.player.count_item(params["item"]) >= params.get("count", 1)


@script("hasStat")
def has_stat(game: Game, params: dict) -> bool:
    if not params.get("stat"):
        return False
    return _in_bounds(game.player.stat(params["stat"]), params)


@script("hasReputation")
def has_reputation(game: Game, params: dict) -> bool:
    """Reputation within bounds; with no bounds, any positive standing."""
    if not params.get("reputation"):
        return False
    value = game.player.reputation.get(params["reputation"], 0)
    if _no_bounds(params):
        return value > 0
    return _in_bounds(value, params)


@script("inLocation")
def in_location(game: Game, params: dict) -> bool:
    return game.current_location == params.get("location")


@script("inScene")
def in_scene(game: Game, params: dict) -> bool:
    return game.in_scene


@script("npcStat")
def npc_stat(game: Game, params: dict) -> bool:
    """NPC stat within bounds (default > 0). An NPC never met is simply False."""
    npc_id = params.get("npc") or game.scene.npc
    if not npc_id or not params.get("stat"):
        return False
    npc = game.npcs.get(npc_id)
    if npc is None:
        return False
    value = npc.stats.get(params["stat"], 0)
    if _no_bounds(params):
        return value > 0
    return _in_bounds(value, params)


@script("hasCard")
def has_card(game: Game, params: dict) -> bool:
    return bool(params.get("cardId")) and game.player.has_card(params["cardId"])


@script("cardCompleted")
def card_completed(game: Game, params: dict) -> bool:
    card = game.player.get_card(params.get("cardId") or "")
    return card is not None and card.completed


@script("locationDiscovered")
def location_discovered(game: Game, params: dict) -> bool:
    state = game.locations.get(params.get("location") or "")
    return state is not None and state.discovered


@script("hourBetween")
def hour_between(game: Game, params: dict) -> bool:
    """Current hour in [from, to); 22 to 6 wraps past midnight."""
    return hour_in_range(game.hour_of_day, params.get("from", 0), params.get("to", 24))


@script("timeElapsed")
def time_elapsed(game: Game, params: dict) -> bool:
    """At least `minutes` since the timer was recorded. Never recorded counts as long ago."""
    timer = _require_str(params, "timer", "timeElapsed")
    minutes = _require_number(params, "minutes", "timeElapsed")
    recorded = game.player.timers.get(timer)
    if recorded is None:
        return True
    return game.time - recorded >= minutes * 60


@script("debug")
def debug(game: Game, params: dict) -> bool:
    return game.is_debug


@script("not")
def not_(game: Game, params: dict) -> bool:
    predicate = params.get("predicate")
    if predicate is None:
        return True
    return not game.run(predicate)


@script("and")
def and_(game: Game, params: dict) -> bool:
    return all(game.run(p) for p in params.get("predicates") or [])


@script("or")
def or_(game: Game, params: dict) -> bool:
    return any(game.run(p) for p in params.get("predicates") or [])


# -----------------------------------------------------------------------------
# Content
# -----------------------------------------------------------------------------

@script("text")
def text(game: Game, params: dict) -> None:
    """Paragraph from interpolated strings and inline instructions."""
    parts = params.get("parts")
    if not parts:
        return
    resolved = resolve_parts(game, parts)
    if resolved:
        game.add_paragraph(resolved)


@script("paragraph")
def paragraph(game: Game, params: dict) -> None:
    content = params.get("content")
    if not content:
        return
    parts = []
    for item in content:
        if isinstance(item, str):
            parts.append(InlineContent(text=item))
        else:
            parts.append(InlineContent(
                text=item["text"], color=item.get("color"), hover_text=item.get("hoverText"),
            ))
    game.add_paragraph(parts)


@script("say")
def say(game: Game, params: dict) -> None:
    """Speech in the scene NPC's colour."""
    parts = params.get("parts")
    if not parts:
        return
    resolved = resolve_parts(game, parts)
    if not resolved:
        return
    color = params.get("color")
    if color is None and game.scene.npc:
        color = game.npc_template(game.scene.npc).speech_color
    game.add_speech("".join(part.text for part in resolved), color)


@script("playerName")
def player_name(game: Game, params: dict) -> InlineContent:
    return InlineContent(text=game.player.name or DEFAULT_PLAYER_NAME, color=PLAYER_NAME_COLOR)


@script("pc")
def pc(game: Game, params: dict) -> InlineContent:
    return player_name(game, params)


@script("npcName")
def npc_name(game: Game, params: dict) -> InlineContent:
    npc_id = params.get("npc") or game.scene.npc
    if not npc_id:
        return InlineContent(text="someone")
    color = game.npc_template(npc_id).speech_color or "#888"
    return InlineContent(text=game.npc_display_name(npc_id), color=color)


class NpcAccessor:
    """Chained access for {npc}, {npc:he}, {npc(rob):name}."""

    PRONOUN_FORMS = {"he": "subject", "him": "object", "his": "possessive"}

    def __init__(self, npc_id: str):
        self.npc_id = npc_id

    def default(self, game: Game) -> InlineContent:
        return npc_name(game, {"npc": self.npc_id})

    def resolve(self, game: Game, rest: str) -> Any:
        template = game.npc_template(self.npc_id)

        form = self.PRONOUN_FORMS.get(rest.lower())
        if form is not None:
            word = getattr(template.pronouns, form)
            return word.capitalize() if rest[0].isupper() else word
        if rest == "name":
            return self.default(game)
        if rest in template.scripts:
            return game.run_npc_script(self.npc_id, rest)

        raise ClockworkError(f"Unknown NPC accessor '{rest}' for {self.npc_id}")


@script("npc")
def npc(game: Game, params: dict) -> NpcAccessor:
    npc_id = params.get("arg") or game.scene.npc
    if not npc_id:
        raise ClockworkError("{npc} used outside an NPC scene")
    game.npc_template(npc_id)
    return NpcAccessor(npc_id)


def script_name_from_label(label: str) -> str:
    """'Go Home!' -> 'gohome'"""
    return re.sub(r"[^a-z0-9]", "", label.lower())


@script("option")
def option(game: Game, params: dict) -> None:
    """
    Add a button.

    - 'npc:name': the scene NPC's script, via interact
    - 'global:name': a registered script
    - 'name': the scene NPC's script if it has one, else a registered script

    Without a script, the name is derived from the label.
    """
    label = params.get("label")
    if not label:
        return

    raw = params.get("script") or script_name_from_label(label)
    script_params = params.get("params") or {}

    if raw.startswith("npc:"):
        game.add_option("interact", {"script": raw[4:], "params": script_params}, label)
        return

    if raw.startswith("global:"):
        name = raw[7:]
    else:
        name = raw
        if game.scene.npc and name in game.npc_template(game.scene.npc).scripts:
            game.add_option("interact", {"script": name, "params": script_params}, label)
            return

    if name not in SCRIPTS:
        raise ScriptNotFoundError(name, context="Option script")
    game.add_option(name, copy.deepcopy(script_params), label)


@script("npcLeaveOption")
def npc_leave_option(game: Game, params: dict) -> None:
    leave = {k: params[k] for k in ("text", "reply") if params.get(k)}
    game.add_option("endConversation", leave, params.get("label") or "Leave")


@script("endConversation")
def end_conversation(game: Game, params: dict) -> None:
    game.add(params.get("text") or "You politely end the conversation.")
    reply = params.get("reply")
    if reply:
        if game.scene.npc:
            game.add_speech(reply, game.npc_template(game.scene.npc).speech_color)
        else:
            game.add_speech(reply, DEFAULT_SPEECH_COLOR)


# -----------------------------------------------------------------------------
# Time and movement
# -----------------------------------------------------------------------------

@script("timeLapse")
def time_lapse(game: Game, params: dict) -> None:
    """
    Advance the clock by minutes and/or seconds, or until an hour of the
    day. `untilTime` never wraps to the next day.
    """
    seconds = _non_negative(params, "seconds", "timeLapse")
    minutes = _non_negative(params, "minutes", "timeLapse")

    if params.get("untilTime") is not None:
        target = params["untilTime"]
        if not _is_number(target):
            raise InvalidParameterError("timeLapse untilTime must be an hour of the day")
        seconds, minutes = clock.seconds_until_hour(game.time, target), 0

    clock.advance(game, int(seconds + minutes * 60))


@script("timeEffects")
def time_effects(game: Game, params: dict) -> None:
    clock.run_time_effects(game, params.get("seconds", 0))


@script("move")
def move(game: Game, params: dict) -> None:
    """Teleport the player, optionally spending time afterwards."""
    location = _require_str(params, "location", "move")
    game.get_location(location)
    game.move_to_location(location)
    minutes = params.get("minutes")
    if minutes:
        game.time_lapse(minutes)


@script("go")
def go(game: Game, params: dict) -> None:
    """
    Travel along a link from the current location.

    Order: access check, on_follow (a scene stops travel), visit count,
    travel time, move, discovery, on_first_arrive, on_arrive.
    """
    location_id = _require_str(params, "location", "go")
    destination = LOCATIONS.get(location_id)

    link = game.location_definition().link_to(location_id)
    if link is None:
        game.add(f"You can't see a way to {destination.name}.")
        return

    if link.check_access is not None:
        reason = link.check_access(game)
        if reason:
            game.add(reason)
            return

    if link.on_follow is not None:
        game.run(link.on_follow)
        if game.in_scene:
            return

    state = game.get_location(location_id)
    first_visit = state.num_visits == 0
    state.num_visits += 1

    minutes = _non_negative(params, "minutes", "go", default=link.time)
    game.time_lapse(minutes)

    move(game, {"location": location_id})
    state.discovered = True

    if first_visit and destination.on_first_arrive is not None:
        game.run(destination.on_first_arrive)
    if destination.on_arrive is not None:
        game.run(destination.on_arrive)


@script("wait")
def wait(game: Game, params: dict) -> None:
    """
    Wait here, in 10-minute chunks.

    After each chunk, present NPCs' on_wait hooks run, then the location's.
    Any hook that opens a scene ends the wait early, and `then` is skipped.
    """
    total = _non_negative(params, "minutes", "wait", default=15)
    if params.get("text"):
        game.add(params["text"])

    remaining = total
    while remaining > 0:
        chunk = min(remaining, WAIT_CHUNK_MINUTES)
        game.time_lapse(chunk)
        remaining -= chunk

        for npc_id in list(game.npcs_present):
            template = game.npc_template(npc_id)
            if template.on_wait is not None:
                game.run(template.on_wait, {"npc": npc_id, "minutes": chunk})
            if game.in_scene:
                return

        on_wait = game.location_definition().on_wait
        if on_wait is not None:
            game.run(on_wait, {"minutes": chunk})
        if game.in_scene:
            return

    then = params.get("then")
    if then and then.get("script"):
        game.run(then["script"], then.get("params") or {})


@script("discoverLocation")
def discover_location(game: Game, params: dict) -> None:
    location = _require_str(params, "location", "discoverLocation")
    state = game.get_location(location)
    if state.discovered:
        return
    state.discovered = True
    if params.get("text"):
        game.add_colour(params["text"], params.get("colour") or DISCOVERY_COLOR)


# -----------------------------------------------------------------------------
# NPCs
# -----------------------------------------------------------------------------

@script("approach")
def approach(game: Game, params: dict) -> None:
    """Start talking to an NPC: first-meeting hook, regular hook, or a brush-off."""
    npc_id = _require_str(params, "npc", "approach")
    npc_state = game.get_npc(npc_id)
    npc_state.stats["approachCount"] = npc_state.approach_count + 1

    template = game.npc_template(npc_id)
    game.scene.npc = npc_id
    game.scene.hide_npc_image = False

    hook = template.on_approach
    if npc_state.approach_count == 1 and template.on_first_approach is not None:
        hook = template.on_first_approach

    if hook is not None:
        game.run(hook, {"npc": npc_id})
        return

    if npc_state.name_known and template.name:
        name = template.name
    else:
        name = template.uname or template.description or template.name or "The NPC"
    game.add(f"{name} isn't interested in talking to you.")


@script("interact")
def interact(game: Game, params: dict) -> Any:
    """Run one of an NPC's own scripts. Takes a minute."""
    npc_id = _scene_npc(game, params, "interact")
    name = _require_str(params, "script", "interact")
    template = game.npc_template(npc_id)
    if name not in template.scripts:
        raise ScriptNotFoundError(name, context=f"NPC {npc_id} script")
    game.time_lapse(1)
    return game.run(template.scripts[name], params.get("params") or {})


@script("followSchedule")
def follow_schedule_script(game: Game, params: dict) -> None:
    npc_id = _require_str(params, "npc", "followSchedule")
    follow_schedule(game, npc_id, game.npc_template(npc_id).schedule)


@script("setNpc")
def set_npc(game: Game, params: dict) -> None:
    game.scene.npc = _require_str(params, "npc", "setNpc")


@script("hideNpcImage")
def hide_npc_image(game: Game, params: dict) -> None:
    game.scene.hide_npc_image = True


@script("showNpcImage")
def show_npc_image(game: Game, params: dict) -> None:
    game.scene.hide_npc_image = False


@script("learnNpcName")
def learn_npc_name(game: Game, params: dict) -> None:
    npc_id = params.get("npc") or game.scene.npc
    if not npc_id:
        return
    game.get_npc(npc_id).stats["nameKnown"] = 1


@script("setNpcLocation")
def set_npc_location(game: Game, params: dict) -> None:
    npc_id = _scene_npc(game, params, "setNpcLocation")
    game.set_npc_location(npc_id, params.get("location"))
    game.update_npcs_present()


@script("addNpcStat")
def add_npc_stat(game: Game, params: dict) -> None:
    """
    Change an NPC stat with optional bounds. A change that clamps to
    nothing does nothing and says nothing.
    """
    npc_id = _scene_npc(game, params, "addNpcStat")
    stat = _require_str(params, "stat", "addNpcStat")
    change = _require_number(params, "change", "addNpcStat")

    npc_state = game.get_npc(npc_id)
    current = npc_state.stats.get(stat, 0)
    value = current + change
    if params.get("max") is not None:
        value = min(value, params["max"])
    if params.get("min") is not None:
        value = max(value, params["min"])
    actual = value - current
    if actual == 0:
        return

    npc_state.stats[stat] = value
    game.emit(EventType.NPC_STAT_CHANGED, npc=npc_id, stat=stat, before=current, after=value)

    if not params.get("hidden"):
        color = GAIN_COLOR if actual > 0 else LOSS_COLOR
        game.add_colour(f"{stat.capitalize()} {_feedback(actual)}", color)


# -----------------------------------------------------------------------------
# Player stats, items and timers
# -----------------------------------------------------------------------------

@script("addStat")
def add_stat(game: Game, params: dict) -> None:
    """
    Change a base stat, clamped to [min, max] (default 0..100).

    Nothing happens, and nothing is shown, when the clamped change is zero
    or runs against the requested direction.
    """
    name = _require_str(params, "stat", "addStat")
    stat = STATS.get(name)
    change = _require_number(params, "change", "addStat")
    if not _chance(params, "addStat"):
        return

    current = game.player.base_stats.get(name, 0)
    low = params.get("min", stat.min)
    high = params.get("max", stat.max)
    value = max(low, min(high, current + change))
    actual = value - current
    if actual == 0 or _sign(actual) != _sign(change):
        return

    game.player.base_stats[name] = value
    game.calc_stats()
    game.emit(EventType.STAT_CHANGED, stat=name, before=current, after=value)

    if params.get("hidden"):
        return
    color = params.get("colour")
    if color is None:
        if name in METERS:
            gain, loss = METERS[name]
            color = gain if change > 0 else loss
        else:
            color = GAIN_COLOR if change > 0 else LOSS_COLOR
    game.add_colour(params.get("text") or f"{name} {_feedback(change)}", color)


@script("addReputation")
def add_reputation(game: Game, params: dict) -> None:
    """Change a reputation track (0..100), with the track's own colours."""
    name = _require_str(params, "reputation", "addReputation")
    definition = REPUTATIONS.get(name)
    change = _require_number(params, "change", "addReputation")
    if not _chance(params, "addReputation"):
        return

    current = game.player.reputation.get(name, 0)
    value = max(params.get("min", 0), min(params.get("max", 100), current + change))
    actual = value - current
    if actual == 0 or _sign(actual) != _sign(change):
        return

    game.player.reputation[name] = value
    game.emit(EventType.REPUTATION_CHANGED, reputation=name, before=current, after=value)

    if not params.get("hidden"):
        color = definition.gain_color if change > 0 else definition.loss_color
        if color is None:
            color = GAIN_COLOR if change > 0 else LOSS_COLOR
        game.add_colour(f"{definition.name or name} {_feedback(change)}", color)


@script("calcStats")
def calc_stats(game: Game, params: dict) -> None:
    game.calc_stats()


@script("recordTime")
def record_time(game: Game, params: dict) -> None:
    game.player.set_timer(_require_str(params, "timer", "recordTime"), game.time)


@script("gainItem")
def gain_item(game: Game, params: dict) -> None:
    item_id = _require_str(params, "item", "gainItem")
    definition = ITEMS.get(item_id)
    number = int(_non_negative(params, "number", "gainItem", default=1))
    if params.get("text"):
        game.add_colour(params["text"], ITEM_COLOR)
    if number == 0:
        return
    game.player.add_item(item_id, number, stackable=definition.stackable)
    game.calc_stats()
    game.emit(EventType.ITEM_GAINED, item=item_id, number=number)


@script("loseItem")
def lose_item(game: Game, params: dict) -> None:
    """Remove items. Losing something the player doesn't hold is a no-op."""
    item_id = _require_str(params, "item", "loseItem")
    ITEMS.get(item_id)
    number = int(_non_negative(params, "number", "loseItem", default=1))
    if game.player.remove_item(item_id, number) is None:
        return
    game.calc_stats()
    game.emit(EventType.ITEM_LOST, item=item_id, number=number)


@script("consumeItem")
def consume_item(game: Game, params: dict) -> None:
    item_id = _require_str(params, "item", "consumeItem")
    definition = ITEMS.get(item_id)
    if definition.on_consume is None:
        game.add("You cannot use that.")
        return
    if game.player.count_item(item_id) < 1:
        game.add("You don't have that item.")
        return
    game.player.remove_item(item_id, 1)
    game.calc_stats()
    game.emit(EventType.ITEM_LOST, item=item_id, number=1)
    game.run(definition.on_consume, {"item": item_id})


@script("examineItem")
def examine_item(game: Game, params: dict) -> None:
    definition = ITEMS.get(_require_str(params, "item", "examineItem"))
    if definition.on_examine is None:
        game.add("Nothing happens.")
        return
    game.run(definition.on_examine, {"item": definition.id})


@script("wearItem")
def wear_item(game: Game, params: dict) -> None:
    game.player.wear_item(_require_str(params, "item", "wearItem"))
    game.calc_stats()


@script("unwearItem")
def unwear_item(game: Game, params: dict) -> None:
    game.player.unwear_item(_require_str(params, "item", "unwearItem"), params.get("force", False))
    game.calc_stats()


@script("saveOutfit")
def save_outfit(game: Game, params: dict) -> None:
    game.player.save_outfit(_require_str(params, "name", "saveOutfit"))


@script("wearOutfit")
def wear_outfit(game: Game, params: dict) -> None:
    name = _require_str(params, "name", "wearOutfit")
    game.player.wear_outfit(name)
    if params.get("delete"):
        game.player.outfits.pop(name, None)
    game.calc_stats()


# -----------------------------------------------------------------------------
# Cards
# -----------------------------------------------------------------------------

@script("addQuest")
def add_quest(game: Game, params: dict) -> None:
    if params.get("questId"):
        game.cards.add_quest(params["questId"], params.get("args"))


@script("completeQuest")
def complete_quest(game: Game, params: dict) -> None:
    if params.get("questId"):
        game.cards.complete_quest(params["questId"])


@script("addEffect")
def add_effect(game: Game, params: dict) -> None:
    if params.get("effectId"):
        game.cards.add_effect(params["effectId"], params.get("args"))


@script("addCard")
def add_card(game: Game, params: dict) -> bool:
    card_id = _require_str(params, "cardId", "addCard")
    card_type = _require_str(params, "type", "addCard")
    return game.cards.add_card(card_id, CardType(card_type), params.get("args"))


@script("removeCard")
def remove_card(game: Game, params: dict) -> bool:
    card_id = _require_str(params, "cardId", "removeCard")
    return game.cards.remove_card(card_id, params.get("silent", True))
