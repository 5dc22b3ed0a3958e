"""
Rob Hayes, the station tour guide.

Works the station from 9 to 6. Offers a tour on first meeting, can be
flirted with, and once fond enough will ask the player out (see dating).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..script.dsl import (
    add_npc_stat,
    and_,
    branch,
    choice,
    cond,
    end_conversation,
    has_card,
    hide_npc_image,
    learn_npc_name,
    move,
    not_,
    npc_leave_option,
    npc_stat,
    option,
    say,
    scene,
    scenes,
    seq,
    show_npc_image,
    skill_check,
    text,
    time_lapse,
)
from ..state.definitions import NPCS, PRONOUNS, NPCTemplate
from ..state.schema import NPC
from .dating import (
    DatePlan,
    arrange_date,
    end_date,
    handle_date_approach,
    register_date_plan,
    standard_cancel,
    standard_complete,
    standard_greeting,
    standard_no_show,
)

if TYPE_CHECKING:
    from ..game import Game

NPC_ID = "tour-guide"


def _generate(game: Game, npc: NPC) -> None:
    npc.location = "station"


def _on_wait(game: Game, params: dict) -> None:
    if handle_date_approach(game, NPC_ID):
        return
    if not game.get_npc(NPC_ID).name_known:
        game.run("approach", {"npc": NPC_ID})


def _on_approach(game: Game, params: dict) -> None:
    if handle_date_approach(game, NPC_ID):
        return

    npc = game.get_npc(NPC_ID)
    if game.player.has_card("date"):
        line = "Hello again! Looking forward to later."
    elif npc.stats.get("tourDone"):
        line = "Hello again! Settling in all right?"
    else:
        line = "Back again? The tour's still on offer."
    game.run(say(line))

    if not npc.stats.get("tourDone"):
        game.add_option("interact", {"script": "tour"}, "Take the tour")
    game.add_option("interact", {"script": "flirt"}, "Flirt")
    game.run(npc_leave_option(reply="Safe travels!"))


def _ask_out(game: Game, params: dict) -> None:
    if arrange_date(game, NPC_ID):
        game.run(say("Really? Brilliant! City Centre, six o'clock tomorrow. Don't be late!"))
        game.add("He beams, bouncing slightly on his heels.")
    game.run(npc_leave_option())


TOUR = scenes(
    scene(
        "setting off",
        hide_npc_image(),
        "Rob tucks his guidebook under his arm and leads you out through the station arches.",
        move("default", 15),
        show_npc_image(),
        say("City Centre. Every tower tells a different time, and every one of them swears it's right."),
    ),
    scene(
        "the square",
        say("Academy's that way, backstreets the other. Stick to the lamps after dark."),
        choice(
            branch("Ask about the Academy",
                say("Brilliant lot. Slightly explosive. Mind the east wing."),
            ),
            branch("Ask about the backstreets",
                say("Cheap food, cheaper company. Keep a hand on your purse."),
            ),
            "He checks his watch, then shakes it and checks it again.",
        ),
    ),
    scene(
        "farewell",
        say("That's the tour! Come find me at the station if you need anything."),
        learn_npc_name(),
        add_npc_stat("tourDone", 1, max=1, hidden=True),
        add_npc_stat("affection", 5, max=30),
        end_conversation("Rob tips his cap and heads back towards the station."),
    ),
)

FLIRT = seq(
    time_lapse(5),
    skill_check(
        "Flirtation", 10,
        on_success=seq(
            text("You catch his eye and hold it a moment longer than you need to."),
            say("I, ah. Right. Yes."),
            add_npc_stat("affection", 5, max=40),
            cond(
                and_(npc_stat("affection", min=20), not_(has_card("date"))),
                seq(
                    say("Would you... I mean, would you like to get dinner sometime?"),
                    option("Say yes", "npc:askOut"),
                    npc_leave_option("You let him down gently.", "Oh. No, of course.", "Say no"),
                ),
                npc_leave_option(),
            ),
        ),
        on_failure=seq(
            text("Your attempt lands somewhere between charming and baffling."),
            say("Sorry, was that... a joke?"),
            npc_leave_option(),
        ),
    ),
)

DATE_SCENE = scenes(
    scene(
        "walk",
        hide_npc_image(),
        "Rob offers his arm, and you set off through the lamplit streets.",
        move("lake", 15),
        "The city noise fades as the path drops towards the water.",
    ),
    scene(
        "lake",
        show_npc_image(),
        say("I come here after work sometimes. It's the only quiet place in the city."),
        choice(
            branch("Lean against him",
                "You lean into his shoulder. He goes very still, then relaxes.",
                add_npc_stat("affection", 3, max=45),
            ),
            branch("Watch the water",
                "You keep a comfortable distance and watch the mist curl.",
            ),
            say("I'm glad you came."),
        ),
    ),
    scene(
        "stars",
        skill_check(
            "Perception", 10,
            on_success=seq(
                text("A spark arcs across the sky, trailing light like a clockwork firework."),
                say("Shooting star! Quick, make a wish!"),
                add_npc_stat("affection", 2, max=45),
            ),
            on_failure=text("The stars come out one by one over the lake."),
        ),
    ),
    scene(
        "goodnight",
        say("Get home safe. I hope we can do this again."),
        "He waves, then disappears into the steam.",
        end_date(),
    ),
)


NPCS.register(NPCTemplate(
    id=NPC_ID,
    name="Rob Hayes",
    uname="tour guide",
    description="A genial man with a well-worn guidebook and a brass guide's badge.",
    speech_color="#94a3b8",
    pronouns=PRONOUNS["he"],
    schedule=[(9, 18, "station")],
    generate=_generate,
    on_move=["followSchedule", {}],
    on_wait=_on_wait,
    on_approach=_on_approach,
    on_first_approach=seq(
        text("A man with a guidebook catches your eye and steps over with a warm smile."),
        say("Rob Hayes, city tours for new arrivals. About an hour, ends in the square. Fancy it?"),
        learn_npc_name(),
        option("Accept", "npc:tour"),
        npc_leave_option("You politely decline.", "Whenever you're ready. I'm usually here.", "Decline"),
    ),
    scripts={
        "tour": TOUR,
        "flirt": FLIRT,
        "askOut": _ask_out,
    },
))

register_date_plan(DatePlan(
    npc_id=NPC_ID,
    npc_display_name="Rob",
    meet_location="default",
    meet_location_name="the City Centre",
    wait_minutes=120,
    date_scene=DATE_SCENE,
    on_greeting=standard_greeting("You came! You look wonderful. Shall we?"),
    on_cancel=standard_cancel("Oh. Right. No, that's fine. Another time."),
    on_no_show=standard_no_show("Rob", "Rob waited in the City Centre for two hours, but you never showed."),
    on_complete=standard_complete(10),
))
