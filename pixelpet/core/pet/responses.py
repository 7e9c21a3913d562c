"""Canned, mood-indexed replies with learned words spliced in.

All randomness goes through an injected source with a single
``random() -> float`` method (``random.Random`` qualifies), so a scripted
source makes every reply reproducible.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, TypeVar

from pixelpet.core.pet.decay import hours_since
from pixelpet.core.pet.matchers import match_triggers
from pixelpet.core.pet.models import GameState, Mood, PetResponse, Sentiment, Vocabulary
from pixelpet.core.pet.phrases import PhraseBook
from pixelpet.core.pet.state import relationship_score
from pixelpet.core.pet.vocabulary import VocabularyStore

T = TypeVar("T")

LONG_ABSENCE_HOURS = 24
MISSED_YOU_HOURS = 8
SPLICE_MIN_LENGTH = 20


class RandomSource(Protocol):
    def random(self) -> float: ...


def pick(rng: RandomSource, options: Sequence[T]) -> T:
    """Uniform choice. A single option is returned without drawing."""
    if not options:
        raise ValueError("cannot pick from an empty sequence")
    if len(options) == 1:
        return options[0]
    return options[min(int(rng.random() * len(options)), len(options) - 1)]


def mood_sentiment(mood: Mood) -> Sentiment:
    if mood in ("happy", "ecstatic"):
        return "positive"
    if mood in ("sad", "angry"):
        return "negative"
    return "neutral"


class ResponseGenerator:
    def __init__(self, rng: RandomSource | None = None) -> None:
        self.rng: RandomSource = rng if rng is not None else random.Random()

    def _chance(self, probability: float) -> bool:
        return self.rng.random() < probability

    def _line(self, key: str, **values: object) -> str:
        return pick(self.rng, PhraseBook.LINES.lines(key)).format(**values)

    def _mood_line(self, book: PhraseBook, mood: Mood) -> str:
        return pick(self.rng, book.lines(mood))

    def line(self, key: str, **values: object) -> str:
        """A fixed line from the shared table, formatted with ``values``."""
        return self._line(key, **values)

    # ------------------------------------------------------------------
    # Splicing
    # ------------------------------------------------------------------

    def splice(
        self,
        message: str,
        vocabulary: Vocabulary,
        mood: Mood,
        context: str | None = None,
    ) -> str:
        """Maybe drop one learned word or the user's name into ``message``.

        Candidates are gathered behind independent gates (user name 40%,
        a top-3 favorite 30%, a word learned in ``context`` 30%, a word
        matching the mood's sentiment 25%). One candidate then replaces the
        first "!" or "?" (50% each), or is appended to messages longer than
        20 characters.
        """
        if not vocabulary.words:
            return message

        store = VocabularyStore(vocabulary)
        candidates: list[str] = []

        if vocabulary.user_name and self._chance(0.4):
            candidates.append(vocabulary.user_name)

        if vocabulary.favorite_words and self._chance(0.3):
            top = vocabulary.favorite_words[:3]
            candidates.append(pick(self.rng, top))

        if context:
            in_context = store.in_context(context)
            if in_context and self._chance(0.3):
                candidates.append(pick(self.rng, in_context).word)

        matching = store.by_sentiment(mood_sentiment(mood))
        if matching and self._chance(0.25):
            candidates.append(pick(self.rng, matching).word)

        if not candidates:
            return message

        word = pick(self.rng, candidates)
        if "!" in message and self._chance(0.5):
            return message.replace("!", f", {word}!", 1)
        if "?" in message and self._chance(0.5):
            return message.replace("?", f", {word}?", 1)
        if len(message) > SPLICE_MIN_LENGTH:
            return f"{message} {word}!"
        return message

    def learned_word_callout(self, vocabulary: Vocabulary, now: datetime) -> str | None:
        """Mention a word learned in the last day, or sometimes a frequent one."""
        store = VocabularyStore(vocabulary)
        recent = store.recent(now)
        if recent:
            word = pick(self.rng, recent)
            return self._line("recent_word", word=word.word, sentiment=word.sentiment)

        frequent = store.frequent()
        if frequent and self._chance(0.3):
            word = pick(self.rng, frequent)
            return self._line("frequent_word", word=word.word)
        return None

    # ------------------------------------------------------------------
    # Occasions
    # ------------------------------------------------------------------

    def greeting(self, state: GameState, now: datetime) -> PetResponse:
        pet = state.pet
        memory = state.memory
        mood = pet.mood

        callout = self.learned_word_callout(memory.vocabulary, now)
        if callout and self._chance(0.3):
            return PetResponse(message=callout, mood=mood, animation="happy")

        absent_h = 0.0
        if memory.interactions:
            absent_h = hours_since(memory.interactions[-1].timestamp, now)

        if absent_h > LONG_ABSENCE_HOURS:
            message = self._line(
                "long_absence", greeting=self._mood_line(PhraseBook.GREETING, mood)
            )
        elif absent_h > MISSED_YOU_HOURS:
            message = self._line(
                "missed_you", greeting=self._mood_line(PhraseBook.GREETING, mood)
            )
        else:
            affinity = relationship_score(state, now)
            if affinity > 80:
                table_mood: Mood = "ecstatic"
            elif affinity > 50:
                table_mood = "happy"
            elif affinity < 20:
                table_mood = "angry"
            else:
                table_mood = mood
            message = self._mood_line(PhraseBook.GREETING, table_mood)

        message = self.splice(message, memory.vocabulary, mood, "greeting")
        return PetResponse(message=message, mood=mood, animation="happy")

    def feed(self, state: GameState, food_name: str | None = None) -> PetResponse:
        pet = state.pet
        message = self._mood_line(PhraseBook.FEED, pet.mood)
        if food_name:
            quality = "amazing" if pet.hunger > 80 else "good"
            message = f"{message} {self._line('food_suffix', food=food_name, quality=quality)}"
        message = self.splice(message, state.memory.vocabulary, pet.mood, "food")
        return PetResponse(message=message, mood=pet.mood, animation="eat")

    def play(self, state: GameState, game_name: str | None = None) -> PetResponse:
        pet = state.pet
        message = self._mood_line(PhraseBook.PLAY, pet.mood)
        if game_name:
            quality = "my favorite" if pet.happiness > 70 else "fun"
            message = f"{message} {self._line('game_suffix', game=game_name, quality=quality)}"
        message = self.splice(message, state.memory.vocabulary, pet.mood, "play")
        return PetResponse(message=message, mood=pet.mood, animation="play")

    def pet(self, state: GameState) -> PetResponse:
        mood = state.pet.mood
        message = self._mood_line(PhraseBook.PET, mood)
        message = self.splice(message, state.memory.vocabulary, mood, "pet")
        return PetResponse(message=message, mood=mood, animation="happy")

    def random_thought(self, state: GameState, now: datetime) -> PetResponse:
        pet = state.pet
        memory = state.memory
        mood = pet.mood

        if len(memory.vocabulary.words) > 5 and self._chance(0.3):
            callout = self.learned_word_callout(memory.vocabulary, now)
            if callout:
                return PetResponse(message=callout, mood=mood)

        if memory.favorite_foods and self._chance(0.3):
            food = pick(self.rng, memory.favorite_foods)
            message = self._line("craving", food=food)
            message = self.splice(message, memory.vocabulary, mood, "food")
            return PetResponse(message=message, mood=mood)

        if memory.favorite_games and self._chance(0.3):
            game = pick(self.rng, memory.favorite_games)
            message = self._line("game_memory", game=game)
            message = self.splice(message, memory.vocabulary, mood, "play")
            return PetResponse(message=message, mood=mood)

        if relationship_score(state, now) > 80 and self._chance(0.2):
            message = self.splice(self._line("best_friend"), memory.vocabulary, mood)
            return PetResponse(message=message, mood=mood)

        message = self._mood_line(PhraseBook.THOUGHT, mood)
        message = self.splice(message, memory.vocabulary, mood)
        return PetResponse(message=message, mood=mood)

    def status(self, state: GameState) -> PetResponse:
        pet = state.pet
        if pet.hunger < 20:
            key = "status_hungry"
        elif pet.happiness < 20:
            key = "status_lonely"
        elif pet.health < 30:
            key = "status_unwell"
        elif pet.energy < 20:
            key = "status_exhausted"
        elif pet.hygiene < 20:
            key = "status_dirty"
        elif pet.happiness > 80 and pet.health > 80:
            key = "status_great"
        else:
            key = "status_okay"
        message = self.splice(self._line(key), state.memory.vocabulary, pet.mood)
        return PetResponse(message=message, mood=pet.mood)

    def reply(
        self,
        text: str,
        learned_words: Sequence[str],
        state: GameState,
        now: datetime,
    ) -> PetResponse:
        """Answer free text from the user.

        ``state`` must already reflect the utterance, so a name given in
        this very message is the one used in the answer.
        """
        pet = state.pet
        vocabulary = state.memory.vocabulary
        mood = pet.mood
        learned = list(learned_words)

        def respond(message: str) -> PetResponse:
            return PetResponse(message=message, mood=mood, learned_words=learned)

        for topic in match_triggers(text):
            if topic == "name":
                if not vocabulary.user_name:
                    continue
                return respond(self._line("name_known", name=vocabulary.user_name))
            if topic == "food":
                key = "hungry_yes" if pet.hunger < 50 else "hungry_no"
                return respond(self.splice(self._line(key), vocabulary, mood, "food"))
            if topic == "play":
                key = "play_yes" if pet.energy > 30 else "play_no"
                return respond(self.splice(self._line(key), vocabulary, mood, "play"))
            if topic == "sleep":
                key = "sleep_yes" if pet.energy < 40 else "sleep_no"
                return respond(self.splice(self._line(key), vocabulary, mood))
            if topic == "status":
                return respond(self.status(state).message)

        if learned and self._chance(0.5):
            word = pick(self.rng, learned)
            return respond(self._line("new_word", word=word))

        message = self._line("default_reply")
        return respond(self.splice(message, vocabulary, mood))
