"""
Card lifecycle for Clockwork.

Handles adding, completing and removing quests, effects, traits, tasks
and dates, plus on-demand reminders. Extracted from Game to keep the
aggregate focused on dispatch and state access.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..state.definitions import CARDS, Reminder
from ..state.event_bus import EventType
from ..state.schema import Card, CardType

if TYPE_CHECKING:
    from ..game import Game

logger = logging.getLogger(__name__)

QUEST_RECEIVED_COLOR = "#3b82f6"
QUEST_COMPLETED_COLOR = "#10b981"
EFFECT_COLOR = "#a855f7"


class CardSystem:
    """
    Manages the player's cards.

    Requires a Game for state access. At most one card per id exists at a
    time; adding a duplicate is rejected, never merged.
    """

    def __init__(self, game: Game):
        self.game = game

    @property
    def _player(self):
        return self.game.player

    def get(self, card_id: str) -> Card | None:
        return self._player.get_card(card_id)

    def display_name(self, card: Card) -> str:
        definition = CARDS.get(card.id)
        if definition.display_name is not None:
            return definition.display_name(self.game, card)
        return definition.name

    def display_description(self, card: Card) -> str:
        definition = CARDS.get(card.id)
        if definition.display_description is not None:
            return definition.display_description(self.game, card)
        return definition.description

    def add_card(self, card_id: str, card_type: CardType | str, fields: dict | None = None) -> bool:
        """
        Add a card.

        Returns False (and changes nothing) if a card with this id is
        already held. Unknown card ids raise.
        """
        definition = CARDS.get(card_id)
        if self._player.has_card(card_id):
            logger.debug(f"Card {card_id} already held")
            return False

        card = Card(id=card_id, type=CardType(card_type), fields=dict(fields or {}))
        self._player.cards.append(card)
        logger.info(f"Card added: {card_id} ({card.type.value})")
        self.game.emit(EventType.CARD_ADDED, card=card_id, type=card.type.value)

        if definition.on_added is not None:
            definition.on_added(self.game, card)
        if definition.calc_stats is not None:
            self.game.calc_stats()
        return True

    def add_quest(self, quest_id: str, args: dict | None = None) -> bool:
        """Add a quest, announcing it unless args contains silent=True."""
        args = dict(args or {})
        silent = bool(args.pop("silent", False))
        if not self.add_card(quest_id, CardType.QUEST, args):
            return False
        if not silent:
            name = self.display_name(self.get(quest_id))
            self.game.add_colour(f"Quest received: {name}", QUEST_RECEIVED_COLOR)
        return True

    def complete_quest(self, quest_id: str) -> bool:
        """Mark a held quest completed. Announces once; repeats are no-ops."""
        quest = self.get(quest_id)
        if quest is None or quest.completed:
            return False
        quest.completed = True
        self.game.add_colour(f"Quest completed: {self.display_name(quest)}", QUEST_COMPLETED_COLOR)
        self.game.emit(EventType.QUEST_COMPLETED, card=quest_id)
        return True

    def add_effect(self, effect_id: str, args: dict | None = None) -> bool:
        """Add an effect, announce it and recompute stats."""
        if not self.add_card(effect_id, CardType.EFFECT, args):
            return False
        name = self.display_name(self.get(effect_id))
        self.game.add_colour(f"Effect: {name}", EFFECT_COLOR)
        self.game.calc_stats()
        return True

    def remove_card(self, card_id: str, silent: bool = True) -> bool:
        """Remove a held card. Returns False if it wasn't held."""
        card = self.get(card_id)
        if card is None:
            return False

        name = self.display_name(card)
        self._player.cards.remove(card)
        logger.info(f"Card removed: {card_id}")
        self.game.emit(EventType.CARD_REMOVED, card=card_id, failed=card.failed)

        if not silent:
            self.game.add_colour(f"{name} removed", CARDS.get(card_id).colour)
        self.game.calc_stats()
        return True

    def held_location(self, npc_id: str) -> str | None:
        """Where an active card is holding an NPC, if any. The first card to answer wins."""
        for card in self._player.cards:
            if card.completed or card.failed:
                continue
            definition = CARDS.get(card.id)
            if definition.npc_location is None:
                continue
            location = definition.npc_location(self.game, card, npc_id)
            if location is not None:
                return location
        return None

    def reminders(self) -> list[Reminder]:
        """
        Gather reminders from every card, most urgent first.

        Recomputed on each call; completed or failed cards contribute none.
        """
        result: list[Reminder] = []
        for card in list(self._player.cards):
            if card.completed or card.failed:
                continue
            definition = CARDS.get(card.id)
            if definition.reminders is None:
                continue
            for reminder in definition.reminders(self.game, card):
                if reminder.card_id is None:
                    reminder.card_id = card.id
                result.append(reminder)

        result.sort(key=lambda r: r.urgency.rank, reverse=True)
        return result
