"""
Dates: a time-windowed appointment with an NPC.

Each NPC that can be dated registers a DatePlan with its meeting point,
the date itself and optional custom scripts for greeting, cancelling,
no-shows and completion. The standard_* builders supply the defaults.

The date card holds:
    npc           NPC id
    meetTime      simulated time of the meeting
    meetLocation  location id
    dateStarted   set once the NPC has greeted the player

While the NPC is waiting, the card holds it at the meeting point: the
schedule defers to the card's npc_location hook on every hourly move,
and after_update places it there once the window opens. Once the wait
is over without a meeting, the no-show script runs and the card goes.

Usage:
    register_date_plan(DatePlan(npc_id="tour-guide", ..., date_scene=scenes(...)))
    arrange_date(game, "tour-guide")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from ..script.dsl import run
from ..script.registry import make_scripts
from ..state.definitions import CARDS, CardDefinition, Registry, Reminder, ReminderUrgency, Script
from ..state.schema import Card, CardType
from ..systems import clock

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

DATE_CARD = "date"
DATE_COLOR = "#f472b6"
DEFAULT_WAIT_MINUTES = 120
DEFAULT_MEET_HOUR = 18


@dataclass
class DatePlan:
    """NPC-specific content for a date."""
    npc_id: str
    npc_display_name: str
    meet_location: str
    meet_location_name: str
    date_scene: Script
    wait_minutes: int = DEFAULT_WAIT_MINUTES
    on_greeting: Script = None
    on_cancel: Script = None
    on_no_show: Script = None
    on_complete: Script = None


DATE_PLANS: Registry[DatePlan] = Registry("Date plan")


def register_date_plan(plan: DatePlan) -> DatePlan:
    return DATE_PLANS.register(plan, key=plan.npc_id)


def get_date_card(game: Game) -> Card | None:
    return game.player.get_card(DATE_CARD)


def _plan(card: Card) -> DatePlan | None:
    return DATE_PLANS.find(card.text("npc") or "")


def _deadline(card: Card, plan: DatePlan) -> int:
    return int(card.num("meetTime")) + plan.wait_minutes * 60


# -----------------------------------------------------------------------------
# Builders
# -----------------------------------------------------------------------------

def _params(**kwargs) -> dict:
    return {k: v for k, v in kwargs.items() if v is not None}


def standard_greeting(greeting: str | None = None, go_label: str | None = None) -> list:
    """NPC greets the player, who can cancel or go."""
    return run("standardGreeting", _params(greeting=greeting, goLabel=go_label))


def standard_cancel(response: str | None = None, penalty: int = 20) -> list:
    return run("standardCancel", _params(response=response, penalty=penalty))


def standard_no_show(npc_display_name: str | None = None, narration: str | None = None, penalty: int = 15) -> list:
    return run("standardNoShow", _params(npcDisplayName=npc_display_name, narration=narration, penalty=penalty))


def standard_complete(bonus: int = 15) -> list:
    return run("standardComplete", {"bonus": bonus})


def end_date() -> list:
    """Last instruction of a date scene. The NPC comes from the date card."""
    return run("dateComplete", {})


# -----------------------------------------------------------------------------
# Helpers for NPC hooks
# -----------------------------------------------------------------------------

def next_meet_time(game: Game, hour: int = DEFAULT_MEET_HOUR) -> int:
    """The given hour tomorrow."""
    tomorrow = game.date.replace(hour=hour, minute=0, second=0, microsecond=0) + timedelta(days=1)
    return clock.to_timestamp(tomorrow)


def arrange_date(game: Game, npc_id: str, meet_time: int | None = None) -> bool:
    """Add the date card for a registered plan. False if a date is already arranged."""
    plan = DATE_PLANS.get(npc_id)
    return game.add_card(DATE_CARD, CardType.DATE, {
        "npc": npc_id,
        "meetTime": meet_time if meet_time is not None else next_meet_time(game),
        "meetLocation": plan.meet_location,
        "dateStarted": False,
    })


def handle_date_approach(game: Game, npc_id: str) -> bool:
    """
    For an NPC's on_wait or on_approach hook.

    If the player is at the meeting point while this NPC is waiting,
    starts the date approach and returns True; the hook should then stop.
    """
    card = get_date_card(game)
    if card is None or card.text("npc") != npc_id or card.flag("dateStarted"):
        return False
    plan = DATE_PLANS.find(npc_id)
    if plan is None:
        return False

    if (
        card.num("meetTime") <= game.time < _deadline(card, plan)
        and game.current_location == card.text("meetLocation")
    ):
        game.run("dateApproach", {"npc": npc_id})
        return True
    return False


# -----------------------------------------------------------------------------
# Card definition
# -----------------------------------------------------------------------------

def _display_name(game: Game, card: Card) -> str:
    plan = _plan(card)
    return f"Date with {plan.npc_display_name}" if plan else "Date"


def _display_description(game: Game, card: Card) -> str:
    plan = _plan(card)
    if plan is None:
        return "You have a date arranged."
    when = clock.format_date(int(card.num("meetTime")))
    return f"Meet {plan.npc_display_name} at {plan.meet_location_name} at {when}"


def _on_added(game: Game, card: Card) -> None:
    plan = _plan(card)
    if plan is not None:
        game.add_colour(f"You have a date with {plan.npc_display_name} tomorrow evening.", DATE_COLOR)


def _reminders(game: Game, card: Card) -> list[Reminder]:
    if card.flag("dateStarted") or card.completed or card.failed:
        return []
    plan = _plan(card)
    if plan is None:
        return []

    meet_time = int(card.num("meetTime"))
    if game.time >= _deadline(card, plan):
        return []

    name, place = plan.npc_display_name, plan.meet_location_name
    at = clock.format_clock(meet_time)

    if not clock.same_day(game.time, meet_time):
        return [Reminder(
            text=f"Date with {name} tomorrow at {at}",
            detail=f"Meet {name} in {place} at {at} tomorrow.",
        )]

    if game.time < meet_time:
        return [Reminder(
            text=f"Meet {name} in {place} at {at} today",
            detail=f"Don't forget your date! Head to {place} before {at}.",
        )]

    return [Reminder(
        text=f"{name} is waiting for you in {place}!",
        urgency=ReminderUrgency.URGENT,
        detail=f"Hurry! {name} won't wait forever.",
    )]


def _npc_location(game: Game, card: Card, npc_id: str) -> str | None:
    """The meeting point, while this NPC is waiting there."""
    if card.flag("dateStarted") or card.completed or card.failed:
        return None
    plan = _plan(card)
    if plan is None or plan.npc_id != npc_id:
        return None
    if card.num("meetTime") <= game.time < _deadline(card, plan):
        return card.text("meetLocation")
    return None


def _after_update(game: Game, card: Card) -> None:
    if card.flag("dateStarted") or card.completed or card.failed:
        return
    plan = _plan(card)
    if plan is None:
        return

    deadline = _deadline(card, plan)
    if game.time >= deadline:
        logger.info(f"Date with {plan.npc_id} missed")
        game.run(plan.on_no_show or standard_no_show(plan.npc_display_name))
        return

    held = _npc_location(game, card, plan.npc_id)
    if held is not None:
        game.set_npc_location(plan.npc_id, held)
        game.update_npcs_present()


CARDS.register(CardDefinition(
    id=DATE_CARD,
    name="Date",
    description="You have a date arranged.",
    type=CardType.DATE,
    colour=DATE_COLOR,
    after_update=_after_update,
    on_added=_on_added,
    reminders=_reminders,
    npc_location=_npc_location,
    display_name=_display_name,
    display_description=_display_description,
))


# -----------------------------------------------------------------------------
# Scripts
# -----------------------------------------------------------------------------

def _return_to_schedule(game: Game, npc_id: str) -> None:
    template = game.npc_template(npc_id)
    if template.on_move is not None:
        game.run(template.on_move, {"npc": npc_id})
    game.update_npcs_present()


def _standard_greeting(game: Game, params: dict) -> None:
    npc_id = game.scene.npc
    template = game.npc_template(npc_id)
    game.add_speech(params.get("greeting") or "You came! Shall we go?", template.speech_color)
    label = params.get("goLabel") or f"Go with {template.pronouns.object}"
    game.add_option("dateCancel", {"npc": npc_id}, "Cancel the date")
    game.add_option("dateStart", {"npc": npc_id}, label)


def _standard_cancel(game: Game, params: dict) -> None:
    npc_id = game.scene.npc
    if not npc_id:
        return
    template = game.npc_template(npc_id)
    game.add_speech(
        params.get("response") or "Oh. Right. Maybe some other time, then.", template.speech_color,
    )
    game.run("addNpcStat", {"npc": npc_id, "stat": "affection", "change": -params.get("penalty", 20), "min": 0})
    game.remove_card(DATE_CARD)
    _return_to_schedule(game, npc_id)


def _standard_no_show(game: Game, params: dict) -> None:
    card = get_date_card(game)
    if card is None:
        return
    name = params.get("npcDisplayName") or "They"
    game.add(params.get("narration") or f"{name} waited for you, but you never came.")
    game.run("addNpcStat", {
        "npc": card.text("npc"), "stat": "affection", "change": -params.get("penalty", 15), "min": 0,
    })
    card.failed = True
    game.remove_card(DATE_CARD)


def _standard_complete(game: Game, params: dict) -> None:
    card = get_date_card(game)
    if card is None:
        return
    npc_id = card.text("npc")
    bonus = params.get("bonus", 15)
    if bonus:
        game.run("addNpcStat", {"npc": npc_id, "stat": "affection", "change": bonus, "max": 100})
    game.remove_card(DATE_CARD)
    _return_to_schedule(game, npc_id)


def _plan_for(game: Game, params: dict) -> tuple[Card, DatePlan] | None:
    card = get_date_card(game)
    if card is None:
        return None
    plan = DATE_PLANS.find(params.get("npc") or card.text("npc") or "")
    if plan is None:
        return None
    return card, plan


def _date_approach(game: Game, params: dict) -> None:
    found = _plan_for(game, params)
    if found is None:
        return
    card, plan = found
    card.set("dateStarted", True)
    game.scene.npc = plan.npc_id
    game.scene.hide_npc_image = False
    game.run(plan.on_greeting or standard_greeting())


def _date_cancel(game: Game, params: dict) -> None:
    found = _plan_for(game, params)
    if found is None:
        return
    _, plan = found
    game.scene.npc = plan.npc_id
    game.run(plan.on_cancel or standard_cancel())


def _date_start(game: Game, params: dict) -> None:
    found = _plan_for(game, params)
    if found is None:
        return
    _, plan = found
    game.scene.npc = plan.npc_id
    game.run(plan.date_scene)


def _date_complete(game: Game, params: dict) -> None:
    found = _plan_for(game, params)
    if found is None:
        return
    _, plan = found
    game.run(plan.on_complete or standard_complete())


def _arrange_date(game: Game, params: dict) -> bool:
    return arrange_date(game, params.get("npc") or game.scene.npc, params.get("meetTime"))


make_scripts({
    "standardGreeting": _standard_greeting,
    "standardCancel": _standard_cancel,
    "standardNoShow": _standard_no_show,
    "standardComplete": _standard_complete,
    "dateApproach": _date_approach,
    "dateCancel": _date_cancel,
    "dateStart": _date_start,
    "dateComplete": _date_complete,
    "arrangeDate": _arrange_date,
})
