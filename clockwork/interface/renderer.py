"""
Rich rendering for playtesting.

Turns a Scene, the reminder list and a status line into rich renderables.
Developer aid only: the engine never depends on it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.box import ROUNDED

from ..state.definitions import LOCATIONS, Reminder, ReminderUrgency
from ..state.schema import ContentItem, ContentKind, Scene
from ..systems import clock

if TYPE_CHECKING:
    from ..game import Game


# Shared console instance
console = Console()

THEME = {
    "primary": "#c8a165",  # brass
    "secondary": "grey70",
    "dim": "dim",
    "text": "grey85",
}

URGENCY_STYLES = {
    ReminderUrgency.INFO: "grey70",
    ReminderUrgency.WARNING: "dark_goldenrod",
    ReminderUrgency.URGENT: "bold red",
}


def colour_style(color: str | None, fallback: str) -> str:
    """Hex colour as a rich style. Short forms (#888) are expanded."""
    if not color:
        return fallback
    if color.startswith("#") and len(color) == 4:
        return "#" + "".join(c * 2 for c in color[1:])
    return color


def content_text(item: ContentItem) -> Text:
    """One content block as styled text."""
    if item.type == ContentKind.PARAGRAPH:
        text = Text()
        for part in item.content:
            text.append(part.text, style=colour_style(part.color, THEME["text"]))
        return text
    if item.type == ContentKind.SPEECH:
        return Text(f"“{item.text}”", style=colour_style(item.color, "italic"))
    return Text(item.text or "", style=colour_style(item.color, THEME["text"]))


def scene_renderable(scene: Scene, title: str | None = None) -> Panel:
    """Content followed by numbered options."""
    blocks: list = [content_text(item) for item in scene.content]

    if scene.options:
        table = Table.grid(padding=(0, 1))
        for index, option in enumerate(scene.options):
            label = option.label or option.script[0]
            table.add_row(Text(f"[{index}]", style=THEME["primary"]), Text(label))
        blocks.append(Text(""))
        blocks.append(table)

    return Panel(
        Group(*blocks),
        title=title,
        border_style=THEME["primary"],
        box=ROUNDED,
    )


def reminders_renderable(reminders: list[Reminder]) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 1))
    for reminder in reminders:
        table.add_row(Text("•", style=URGENCY_STYLES[reminder.urgency]),
                      Text(reminder.text, style=URGENCY_STYLES[reminder.urgency]))
    return table


def status_line(game: Game) -> Text:
    """'6pm, Sun 5 Jan  |  City Centre  |  Energy 80'"""
    location = LOCATIONS.find(game.current_location)
    name = location.name if location else game.current_location
    text = Text()
    text.append(clock.format_date(game.time), style=THEME["primary"])
    text.append("  |  ", style=THEME["dim"])
    text.append(name, style=THEME["text"])
    text.append("  |  ", style=THEME["dim"])
    text.append(f"Energy {game.player.stat('Energy')}", style=THEME["secondary"])
    if game.npcs_present:
        text.append("  |  ", style=THEME["dim"])
        text.append(", ".join(game.npc_display_name(n) for n in game.npcs_present), style=THEME["secondary"])
    return text


def render_game(game: Game, target: Console | None = None) -> None:
    """Print status, reminders and the scene."""
    target = target or console
    target.print(status_line(game))
    reminders = game.reminders()
    if reminders:
        target.print(reminders_renderable(reminders))
    npc_title = game.npc_display_name(game.scene.npc) if game.scene.npc else None
    target.print(scene_renderable(game.scene, title=npc_title))
