"""Pet actions as state transitions.

Every public method of ``PetStateMachine`` takes a ``GameState`` and returns a
new one built from a deep copy; the input is never touched, so a failure
halfway through an action leaves the caller's state intact. Mood is
recomputed on the copy before it is returned.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from datetime import datetime

from pixelpet.core.pet.classifier import words_used
from pixelpet.core.pet.decay import apply_decay, hours_since
from pixelpet.core.pet.matchers import extract_user_name
from pixelpet.core.pet.models import (
    ConversationEntry,
    CustomItem,
    GameState,
    Interaction,
    InteractionType,
    Speaker,
    clamp,
)
from pixelpet.core.pet.mood import with_mood
from pixelpet.core.pet.vocabulary import VocabularyStore

logger = logging.getLogger(__name__)

INTERACTION_CAP = 100
CONVERSATION_CAP = 50
FAVORITES_CAP = 10
PATTERN_WINDOW = 20


def append_bounded(items: list, item: object, cap: int) -> None:
    """Append and evict from the front until ``len(items) <= cap``."""
    items.append(item)
    if len(items) > cap:
        del items[: len(items) - cap]


def remember_favorite(items: list[str], name: str, cap: int = FAVORITES_CAP) -> None:
    """Move ``name`` to the most-recent end, keeping the last ``cap`` distinct names."""
    if name in items:
        items.remove(name)
    append_bounded(items, name, cap)


def interaction_counts(
    interactions: Iterable[Interaction], window: int = PATTERN_WINDOW
) -> Counter[str]:
    recent = list(interactions)[-window:]
    return Counter(i.type for i in recent)


def relationship_score(state: GameState, now: datetime) -> float:
    """Affinity in [0, 100] derived from stats, recent care and vocabulary size."""
    pet = state.pet
    memory = state.memory
    counts = interaction_counts(memory.interactions)

    score = 50.0
    score += (pet.happiness - 50) * 0.3
    score += (pet.health - 50) * 0.2
    score += (pet.hunger - 50) * 0.1

    score += counts["pet"] * 2
    score += counts["play"] * 1.5
    score += counts["talk"] * 1
    score -= max(0, 10 - counts["feed"]) * 3

    if memory.interactions:
        score -= hours_since(memory.interactions[-1].timestamp, now) * 2

    score += min(10.0, memory.vocabulary.total_words_learned * 0.5)
    return clamp(score)


class PetStateMachine:
    def __init__(
        self,
        interaction_cap: int = INTERACTION_CAP,
        conversation_cap: int = CONVERSATION_CAP,
        favorites_cap: int = FAVORITES_CAP,
    ) -> None:
        self.interaction_cap = interaction_cap
        self.conversation_cap = conversation_cap
        self.favorites_cap = favorites_cap

    # ------------------------------------------------------------------
    # Internal helpers (operate on the working copy)
    # ------------------------------------------------------------------

    @staticmethod
    def _begin(state: GameState) -> GameState:
        return state.model_copy(deep=True)

    @staticmethod
    def _finish(state: GameState) -> GameState:
        with_mood(state.pet)
        return state

    def _record(
        self,
        state: GameState,
        kind: InteractionType,
        now: datetime,
        value: float | None = None,
        note: str | None = None,
    ) -> None:
        interaction = Interaction(type=kind, timestamp=now, value=value, note=note)
        append_bounded(state.memory.interactions, interaction, self.interaction_cap)
        state.game_stats.total_interactions += 1

    def _converse(
        self, state: GameState, speaker: Speaker, message: str, now: datetime
    ) -> None:
        entry = ConversationEntry(
            speaker=speaker,
            message=message,
            timestamp=now,
            words_used=words_used(message),
        )
        append_bounded(state.memory.conversation_history, entry, self.conversation_cap)

    # ------------------------------------------------------------------
    # Care actions
    # ------------------------------------------------------------------

    def feed(
        self,
        state: GameState,
        now: datetime,
        amount: float = 25,
        food_name: str | None = None,
    ) -> GameState:
        s = self._begin(state)
        pet = s.pet
        pet.hunger = clamp(pet.hunger + amount)
        pet.health = clamp(pet.health + 2)
        pet.last_fed = now
        self._record(s, "feed", now, value=amount, note=food_name)
        if food_name:
            remember_favorite(s.memory.favorite_foods, food_name, self.favorites_cap)
        return self._finish(s)

    def play(
        self,
        state: GameState,
        now: datetime,
        amount: float = 20,
        game_name: str | None = None,
    ) -> GameState:
        s = self._begin(state)
        pet = s.pet
        pet.happiness = clamp(pet.happiness + amount)
        pet.energy = clamp(pet.energy - 10)
        pet.last_played = now
        self._record(s, "play", now, value=amount, note=game_name)
        if game_name:
            remember_favorite(s.memory.favorite_games, game_name, self.favorites_cap)
        return self._finish(s)

    def pet(self, state: GameState, now: datetime) -> GameState:
        s = self._begin(state)
        s.pet.happiness = clamp(s.pet.happiness + 8)
        s.pet.health = clamp(s.pet.health + 1)
        self._record(s, "pet", now)
        return self._finish(s)

    def clean(self, state: GameState, now: datetime) -> GameState:
        s = self._begin(state)
        s.pet.hygiene = 100.0
        s.pet.happiness = clamp(s.pet.happiness + 5)
        s.pet.last_cleaned = now
        self._record(s, "clean", now)
        return self._finish(s)

    def toggle_sleep(self, state: GameState, now: datetime) -> GameState:
        s = self._begin(state)
        s.pet.is_sleeping = not s.pet.is_sleeping
        s.pet.last_slept = now
        self._record(s, "sleep" if s.pet.is_sleeping else "wake", now)
        return self._finish(s)

    def give_medicine(self, state: GameState, now: datetime) -> GameState:
        """Heal unconditionally. Callers decide whether the pet needs it."""
        s = self._begin(state)
        s.pet.health = clamp(s.pet.health + 30)
        s.pet.is_sick = False
        self._record(s, "medicine", now)
        return self._finish(s)

    def rename(self, state: GameState, name: str) -> GameState:
        name = name.strip()
        if not name:
            return state
        s = self._begin(state)
        s.pet.name = name[:12]
        return self._finish(s)

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def add_item(self, state: GameState, item: CustomItem) -> GameState:
        s = self._begin(state)
        s.inventory.append(item.model_copy(deep=True))
        if item.id not in s.unlocked_items:
            s.unlocked_items.append(item.id)
        s.game_stats.items_collected += 1
        return self._finish(s)

    def use_item(self, state: GameState, item_id: str, now: datetime) -> GameState:
        if state.find_item(item_id) is None:
            logger.debug("Ignoring use of unknown item %s", item_id)
            return state
        s = self._begin(state)
        item = s.find_item(item_id)
        for stat, delta in item.effect.deltas().items():
            setattr(s.pet, stat, clamp(getattr(s.pet, stat) + delta))
        item.use_count += 1
        self._record(s, "custom", now, note=item.id)
        return self._finish(s)

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def talk(
        self,
        state: GameState,
        text: str,
        now: datetime,
        known_words: Iterable[str] = (),
        context: str = "conversation",
    ) -> tuple[GameState, list[str]]:
        """Log the utterance, learn its words and pick up the user's name.

        Returns the new state and the words learned this turn, including any
        the caller had already detected.
        """
        s = self._begin(state)
        self._converse(s, "user", text, now)
        s.game_stats.conversations_had += 1

        store = VocabularyStore(s.memory.vocabulary)
        fresh = store.ingest(text, context, now)
        s.game_stats.words_learned += len(fresh)

        name = extract_user_name(text)
        if name:
            store.set_user_name(name)

        self._record(s, "talk", now)
        learned = list(dict.fromkeys([*known_words, *fresh]))
        return self._finish(s), learned

    def log_reply(self, state: GameState, message: str, now: datetime) -> GameState:
        s = self._begin(state)
        self._converse(s, "pet", message, now)
        return self._finish(s)

    def set_user_name(self, state: GameState, name: str) -> GameState:
        if not name.strip():
            return state
        s = self._begin(state)
        VocabularyStore(s.memory.vocabulary).set_user_name(name)
        return self._finish(s)

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def tick(self, state: GameState, now: datetime) -> GameState:
        s = self._begin(state)
        s.pet = apply_decay(s.pet, now)
        return self._finish(s)
