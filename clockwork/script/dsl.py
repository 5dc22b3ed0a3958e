"""
Instruction builders.

Pure functions that return `[name, params]` lists. Nothing here touches a
Game; the results are data that can be stored in definitions, pushed onto
the continuation stack and saved to JSON unchanged.

Multi-page construction:

    scenes(
        scene("arrival", text("The train hisses to a stop.")),
        scene("platform",
            text("A porter waves."),
            choice(
                branch("Wave back", text("He grins.")),
                branch("Ignore him", text("He shrugs.")),
                text("You head for the exit."),   # epilogue for both branches
            ),
        ),
        scene("exit", text("The square opens up before you.")),
    )
"""

import copy
from typing import Any

from .registry import is_instruction, is_page

Instruction = list[Any]
Page = list[Instruction]

ADVANCE_SCENE = "advanceScene"


def run(script: str, params: dict | None = None, **kwargs) -> Instruction:
    """Generic builder: call any registered script."""
    merged = dict(params or {})
    merged.update(kwargs)
    return [script, merged]


def _compact(**params) -> dict:
    """Drop unset (None) parameters so instructions stay small."""
    return {k: v for k, v in params.items() if v is not None}


def as_page(*items: Any) -> Page:
    """
    Normalise loose page content into a list of instructions.

    Accepts instructions, lists of instructions and bare strings (which
    become text). Falsy entries are skipped.
    """
    page: Page = []
    for item in items:
        if not item:
            continue
        if isinstance(item, str):
            page.append(text(item))
        elif is_instruction(item):
            page.append(list(item))
        elif isinstance(item, (list, tuple)):
            page.extend(as_page(*item))
        else:
            raise TypeError(f"Not an instruction: {item!r}")
    return page


# -----------------------------------------------------------------------------
# Content
# -----------------------------------------------------------------------------

def text(*parts: Any) -> Instruction:
    """Paragraph from strings (with {expr} interpolation) and inline instructions."""
    return ["text", {"parts": list(parts)}]


def hl(text: str, color: str, hover_text: str | None = None) -> dict:
    """Highlighted run inside a paragraph."""
    return _compact(text=text, color=color, hoverText=hover_text)


def paragraph(*content: Any) -> Instruction:
    return ["paragraph", {"content": list(content)}]


def say(*parts: Any) -> Instruction:
    """Speech from the scene NPC, in its speech colour."""
    return ["say", {"parts": list(parts)}]


def player_name() -> Instruction:
    return ["playerName", {}]


def npc_name(npc: str | None = None) -> Instruction:
    return ["npcName", _compact(npc=npc)]


def option(label: str, script: str | None = None, params: dict | None = None) -> Instruction:
    """
    Add a button.

    `script` may carry an `npc:` or `global:` prefix; without one the scene
    NPC's own script wins if it has one. Omit it to derive the name from
    the label.
    """
    return ["option", _compact(label=label, script=script, params=params)]


def npc_leave_option(text: str | None = None, reply: str | None = None, label: str = "Leave") -> Instruction:
    return ["npcLeaveOption", _compact(text=text, reply=reply, label=label)]


def end_conversation(text: str | None = None, reply: str | None = None) -> Instruction:
    return ["endConversation", _compact(text=text, reply=reply)]


# -----------------------------------------------------------------------------
# Control flow
# -----------------------------------------------------------------------------

def seq(*instructions: Instruction) -> Instruction:
    return ["seq", {"instructions": as_page(*instructions)}]


def when(condition: Instruction, *then: Any) -> Instruction:
    return ["when", {"condition": condition, "then": as_page(*then)}]


def unless(condition: Instruction, *then: Any) -> Instruction:
    return when(not_(condition), *then)


def cond(*args: Instruction) -> Instruction:
    """
    Multi-branch conditional.

    cond(c1, e1, c2, e2, ..., default): pairs of condition and expression,
    with an optional trailing default.
    """
    if len(args) < 2:
        raise ValueError("cond requires at least 2 arguments")

    branches = []
    default = None
    pairs = args
    if len(args) % 2 == 1:
        pairs, default = args[:-1], args[-1]
    for i in range(0, len(pairs), 2):
        branches.append({"condition": pairs[i], "then": pairs[i + 1]})

    return ["cond", _compact(branches=branches, default=default)]


def random(*children: Any) -> Instruction:
    """
    Run one child picked at random.

    A `when` child joins the pool only if its condition holds; falsy
    children are skipped. Bare strings become text.
    """
    pool = []
    for child in children:
        if not child:
            continue
        pool.append(text(child) if isinstance(child, str) else child)
    return ["random", {"children": pool}]


def skill_check(
    skill: str,
    difficulty: int = 0,
    on_success: Instruction | None = None,
    on_failure: Instruction | None = None,
) -> Instruction:
    """Predicate when no callbacks are given; otherwise runs the matching one."""
    return ["skillCheck", _compact(
        skill=skill, difficulty=difficulty, onSuccess=on_success, onFailure=on_failure,
    )]


# -----------------------------------------------------------------------------
# Game actions
# -----------------------------------------------------------------------------

def add_item(item: str, number: int = 1, text: str | None = None) -> Instruction:
    return ["gainItem", _compact(item=item, number=number, text=text)]


def remove_item(item: str, number: int = 1) -> Instruction:
    return ["loseItem", {"item": item, "number": number}]


def consume_item(item: str) -> Instruction:
    return ["consumeItem", {"item": item}]


def wear_item(item: str) -> Instruction:
    return ["wearItem", {"item": item}]


def unwear_item(item: str, force: bool = False) -> Instruction:
    return ["unwearItem", {"item": item, "force": force}]


def move(location: str, minutes: int | None = None) -> Instruction:
    return ["move", _compact(location=location, minutes=minutes)]


def go(location: str, minutes: int | None = None) -> Instruction:
    return ["go", _compact(location=location, minutes=minutes)]


def time_lapse(
    minutes: float | None = None,
    seconds: int | None = None,
    until_time: float | None = None,
) -> Instruction:
    return ["timeLapse", _compact(minutes=minutes, seconds=seconds, untilTime=until_time)]


def wait(minutes: int = 15, text: str | None = None, then: dict | None = None) -> Instruction:
    return ["wait", _compact(minutes=minutes, text=text, then=then)]


def add_stat(stat: str, change: int, **options) -> Instruction:
    """Options: min, max, chance, hidden, colour, text."""
    return ["addStat", {"stat": stat, "change": change, **options}]


def add_npc_stat(stat: str, change: int, npc: str | None = None, **options) -> Instruction:
    """Options: min, max, hidden. Uses the scene NPC when npc is omitted."""
    return ["addNpcStat", {**_compact(npc=npc), "stat": stat, "change": change, **options}]


def add_reputation(reputation: str, change: int, **options) -> Instruction:
    return ["addReputation", {"reputation": reputation, "change": change, **options}]


def set_npc_location(location: str | None, npc: str | None = None) -> Instruction:
    return ["setNpcLocation", {**_compact(npc=npc), "location": location}]


def learn_npc_name() -> Instruction:
    return ["learnNpcName", {}]


def set_npc(npc: str) -> Instruction:
    return ["setNpc", {"npc": npc}]


def hide_npc_image() -> Instruction:
    return ["hideNpcImage", {}]


def show_npc_image() -> Instruction:
    return ["showNpcImage", {}]


def record_time(timer: str) -> Instruction:
    return ["recordTime", {"timer": timer}]


def discover_location(location: str, text: str | None = None, colour: str | None = None) -> Instruction:
    return ["discoverLocation", _compact(location=location, text=text, colour=colour)]


def approach(npc: str) -> Instruction:
    return ["approach", {"npc": npc}]


def interact(script: str, npc: str | None = None, params: dict | None = None) -> Instruction:
    return ["interact", _compact(npc=npc, script=script, params=params)]


def end_scene(text: str | None = None) -> Instruction:
    return ["endScene", _compact(text=text)]


def exit_scene() -> Instruction:
    return ["exitScene", {}]


def add_quest(quest_id: str, **args) -> Instruction:
    return ["addQuest", _compact(questId=quest_id, args=args or None)]


def complete_quest(quest_id: str) -> Instruction:
    return ["completeQuest", {"questId": quest_id}]


def add_effect(effect_id: str, **args) -> Instruction:
    return ["addEffect", _compact(effectId=effect_id, args=args or None)]


def remove_card(card_id: str, silent: bool = True) -> Instruction:
    return ["removeCard", {"cardId": card_id, "silent": silent}]


# -----------------------------------------------------------------------------
# Predicates
# -----------------------------------------------------------------------------

def has_item(item: str, count: int = 1) -> Instruction:
    return ["hasItem", {"item": item, "count": count}]


def has_stat(stat: str, min: int | None = None, max: int | None = None) -> Instruction:
    return ["hasStat", _compact(stat=stat, min=min, max=max)]


def has_reputation(reputation: str, min: int | None = None, max: int | None = None) -> Instruction:
    return ["hasReputation", _compact(reputation=reputation, min=min, max=max)]


def in_location(location: str) -> Instruction:
    return ["inLocation", {"location": location}]


def in_scene() -> Instruction:
    return ["inScene", {}]


def npc_stat(stat: str, npc: str | None = None, min: int | None = None, max: int | None = None) -> Instruction:
    return ["npcStat", _compact(npc=npc, stat=stat, min=min, max=max)]


def has_card(card_id: str) -> Instruction:
    return ["hasCard", {"cardId": card_id}]


def card_completed(card_id: str) -> Instruction:
    return ["cardCompleted", {"cardId": card_id}]


def location_discovered(location: str) -> Instruction:
    return ["locationDiscovered", {"location": location}]


def hour_between(start: float, end: float) -> Instruction:
    return ["hourBetween", {"from": start, "to": end}]


def time_elapsed(timer: str, minutes: int) -> Instruction:
    return ["timeElapsed", {"timer": timer, "minutes": minutes}]


def debug() -> Instruction:
    return ["debug", {}]


def not_(predicate: Instruction) -> Instruction:
    return ["not", {"predicate": predicate}]


def and_(*predicates: Instruction) -> Instruction:
    return ["and", {"predicates": list(predicates)}]


def or_(*predicates: Instruction) -> Instruction:
    return ["or", {"predicates": list(predicates)}]


# -----------------------------------------------------------------------------
# Multi-page scenes
# -----------------------------------------------------------------------------

def scene(name: str, *content: Any) -> Page:
    """
    One page of a multi-page sequence.

    The name is for the author's benefit only and is not stored.
    """
    return as_page(*content)


def scenes(*pages: Any) -> Instruction:
    """
    Show the first page now and queue the rest behind "Continue".

    Pages are deep-copied so the returned instruction shares no structure
    with the caller's arguments.
    """
    normalised = copy.deepcopy([as_page(p) for p in pages])
    if not normalised:
        return seq()
    first, rest = normalised[0], normalised[1:]
    if not rest:
        return seq(*first)
    return seq(*first, ["pushScenePages", {"pages": rest}])


def _is_page_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and len(value) > 0
        and not is_instruction(value)
        and all(is_page(p) and p for p in value)
    )


def branch(label: str, *content: Any) -> Instruction:
    """
    An option that plays its own content, then resumes the enclosing
    sequence.

    branch("Ask", text("..."), say("...")) plays one page.
    branch("Ask", [page1, page2]) plays several pages in turn.
    """
    if len(content) == 1 and _is_page_list(content[0]):
        push = copy.deepcopy(content[0])
    else:
        push = [as_page(*content)]
    return [
        "option",
        {"label": label, "script": f"global:{ADVANCE_SCENE}", "params": {"push": push}},
    ]


def gated_branch(condition: Instruction, label: str, *content: Any) -> Instruction:
    """A branch shown only when condition holds."""
    return when(condition, branch(label, *content))


def _is_branch(instruction: Any) -> bool:
    if not is_instruction(instruction):
        return False
    name, params = instruction
    if name == "option":
        return params.get("script") == f"global:{ADVANCE_SCENE}"
    if name == "when":
        then = params.get("then", [])
        return bool(then) and all(_is_branch(i) for i in then)
    return False


def _append_epilogue(instruction: Instruction, epilogue: Page) -> Instruction:
    name, params = instruction
    if name == "when":
        for child in params["then"]:
            _append_epilogue(child, epilogue)
        return instruction
    push = params["params"]["push"]
    if not push:
        push.append([])
    push[-1].extend(copy.deepcopy(epilogue))
    return instruction


def choice(*args: Any) -> Instruction:
    """
    A set of branches sharing trailing content.

    Leading arguments are branches (or gated branches); anything after
    them is the epilogue, spliced onto the last page of every branch so
    no extra "Continue" is needed.
    """
    branches = []
    index = 0
    while index < len(args) and _is_branch(args[index]):
        branches.append(args[index])
        index += 1
    epilogue = as_page(*args[index:])

    if not epilogue:
        return seq(*branches)
    return seq(*(_append_epilogue(copy.deepcopy(b), epilogue) for b in branches))


def menu_item(label: str, *content: Any, condition: Instruction | None = None) -> dict:
    """A menu entry that returns to the menu after its content."""
    return _compact(label=label, content=as_page(*content), isExit=False, condition=condition)


def menu_exit(label: str, *content: Any, condition: Instruction | None = None) -> dict:
    """A menu entry that leaves the menu after its content."""
    return _compact(label=label, content=as_page(*content), isExit=True, condition=condition)


def menu(*entries: dict) -> Instruction:
    """Repeatable menu. Conditions are re-checked every time it is shown."""
    return ["menu", {"entries": copy.deepcopy(list(entries))}]


def replace_scene(*pages: Any) -> Instruction:
    """Drop any queued pages and play these instead."""
    return ["replaceScene", {"pages": copy.deepcopy([as_page(p) for p in pages])}]
