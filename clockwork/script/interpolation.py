"""
`{expr}` interpolation for story text.

An expression names a registered script, optionally followed by an
argument list and an accessor chain:

    {pc}               the player's name
    {npc}              the scene NPC's display name
    {npc:he}           pronoun of the scene NPC (also him, his, He, Him, His)
    {npc(rob):name}    accessor on a specific NPC

`{{` and `}}` produce literal braces. An expression that cannot be
resolved renders as red `{expr}` so broken content is visible in play.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from ..errors import ClockworkError
from ..state.schema import InlineContent
from .registry import SCRIPTS

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

ERROR_COLOR = "#ff4444"


@runtime_checkable
class Accessor(Protocol):
    """
    Returned by scripts that support chaining ({npc:he}).

    default() is used when the expression has no tail.
    """

    def default(self, game: Game) -> Any:
        ...

    def resolve(self, game: Game, rest: str) -> Any:
        ...


def parse_expression(expression: str) -> tuple[str, str | None, str | None]:
    """
    Split "name(args):rest" into (name, args, rest).

    parse_expression("npc")            -> ("npc", None, None)
    parse_expression("npc:he")         -> ("npc", None, "he")
    parse_expression("npc(rob):name")  -> ("npc", "rob", "name")
    """
    name, args, rest = expression, None, None

    paren = expression.find("(")
    colon = expression.find(":")
    if paren != -1 and (colon == -1 or paren < colon):
        close = expression.find(")", paren)
        if close == -1:
            raise ClockworkError(f"Unclosed argument list in {{{expression}}}")
        name = expression[:paren]
        args = expression[paren + 1 : close]
        tail = expression[close + 1 :]
        rest = tail[1:] if tail.startswith(":") else (tail or None)
    elif colon != -1:
        name, rest = expression[:colon], expression[colon + 1 :]

    return name.strip(), args, (rest.strip() if rest else None)


def as_inline(value: Any) -> InlineContent | None:
    """Coerce a script result to inline content, or None if it isn't text."""
    if isinstance(value, InlineContent):
        return value
    if isinstance(value, str):
        return InlineContent(text=value)
    if isinstance(value, dict) and "text" in value:
        return InlineContent.model_validate(value)
    return None


def _error(expression: str) -> InlineContent:
    return InlineContent(text=f"{{{expression}}}", color=ERROR_COLOR)


def resolve_expression(game: Game, expression: str) -> InlineContent:
    """Evaluate one {expr}. Never raises; failures render as red text."""
    if not expression:
        return _error(expression)

    try:
        name, args, rest = parse_expression(expression)
        params = {"arg": args} if args is not None else {}
        result = SCRIPTS.run(game, name, params)

        if isinstance(result, Accessor):
            result = result.resolve(game, rest) if rest else result.default(game)
        elif rest:
            raise ClockworkError(f"{name} does not support accessors")

        content = as_inline(result)
        if content is not None:
            return content
    except ClockworkError as e:
        logger.warning(f"Could not interpolate {{{expression}}}: {e}")
        return _error(expression)

    logger.warning(f"Interpolation {{{expression}}} produced no text")
    return _error(expression)


def interpolate(game: Game, template: str) -> list[InlineContent]:
    """Parse a template into inline runs, resolving each {expr}."""
    result: list[InlineContent] = []
    literal = ""
    i = 0

    while i < len(template):
        ch = template[i]
        pair = template[i : i + 2]

        if pair == "{{":
            literal += "{"
            i += 2
            continue
        if pair == "}}":
            literal += "}"
            i += 2
            continue

        if ch == "{":
            end = template.find("}", i + 1)
            if end == -1:
                literal += ch
                i += 1
                continue
            if literal:
                result.append(InlineContent(text=literal))
                literal = ""
            result.append(resolve_expression(game, template[i + 1 : end].strip()))
            i = end + 1
            continue

        literal += ch
        i += 1

    if literal:
        result.append(InlineContent(text=literal))

    return result


def resolve_parts(game: Game, parts: list[Any]) -> list[InlineContent]:
    """
    Resolve text parts: strings are interpolated, instructions are run and
    their inline result kept. Instructions that return nothing add nothing.
    """
    resolved: list[InlineContent] = []
    for part in parts:
        if isinstance(part, str):
            if "{" not in part and "}" not in part:
                resolved.append(InlineContent(text=part))
            else:
                resolved.extend(interpolate(game, part))
        elif isinstance(part, dict) and "text" in part:
            resolved.append(InlineContent(
                text=part["text"], color=part.get("color"), hover_text=part.get("hoverText"),
            ))
        else:
            content = as_inline(game.run(part))
            if content is not None:
                resolved.append(content)
    return resolved
