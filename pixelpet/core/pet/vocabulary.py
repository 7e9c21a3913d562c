from __future__ import annotations

import logging
from datetime import datetime, timedelta

from pixelpet.core.pet.classifier import classify, tokenize
from pixelpet.core.pet.models import (
    LearnedWord,
    Sentiment,
    Vocabulary,
    WordCategory,
    utc_now,
)

logger = logging.getLogger(__name__)

FAVORITE_WORDS_CAP = 10
RECENT_WINDOW = timedelta(hours=24)
FREQUENT_USAGE = 3


class VocabularyStore:
    """Learned words keyed by lowercase text, wrapped around a ``Vocabulary``.

    The store mutates the model it was given. Callers that need atomic
    updates hand it a copy.
    """

    def __init__(self, vocabulary: Vocabulary) -> None:
        self.vocabulary = vocabulary
        self._index: dict[str, LearnedWord] = {
            w.word.lower(): w for w in vocabulary.words
        }

    def __len__(self) -> int:
        return len(self.vocabulary.words)

    def __contains__(self, word: str) -> bool:
        return word.lower() in self._index

    def get(self, word: str) -> LearnedWord | None:
        return self._index.get(word.lower())

    def ingest(
        self, text: str, context: str = "conversation", now: datetime | None = None
    ) -> list[str]:
        """Learn every token in ``text``. Returns the words seen for the first time."""
        now = now or utc_now()
        learned: list[str] = []
        for token in tokenize(text):
            existing = self._index.get(token)
            if existing is not None:
                existing.usage_count += 1
                if context not in existing.context:
                    existing.context.append(context)
                continue
            category, sentiment = classify(token)
            word = LearnedWord(
                word=token,
                learned_at=now,
                usage_count=1,
                context=[context],
                sentiment=sentiment,
                category=category,
            )
            self.vocabulary.words.append(word)
            self._index[token] = word
            learned.append(token)

        self.vocabulary.total_words_learned += len(learned)
        self._refresh_favorites()
        if learned:
            logger.debug("Learned %d new words: %s", len(learned), ", ".join(learned))
        return learned

    def _refresh_favorites(self) -> None:
        # sorted() is stable, so ties keep discovery order
        ranked = sorted(self.vocabulary.words, key=lambda w: w.usage_count, reverse=True)
        self.vocabulary.favorite_words = [w.word for w in ranked[:FAVORITE_WORDS_CAP]]

    def set_user_name(self, name: str) -> None:
        name = name.strip()
        if name:
            self.vocabulary.user_name = name

    def by_category(self, category: WordCategory) -> list[LearnedWord]:
        return [w for w in self.vocabulary.words if w.category == category]

    def by_sentiment(self, sentiment: Sentiment) -> list[LearnedWord]:
        return [w for w in self.vocabulary.words if w.sentiment == sentiment]

    def in_context(self, context: str) -> list[LearnedWord]:
        return [w for w in self.vocabulary.words if context in w.context]

    def recent(self, now: datetime, window: timedelta = RECENT_WINDOW) -> list[LearnedWord]:
        return [w for w in self.vocabulary.words if now - w.learned_at < window]

    def frequent(self, min_usage: int = FREQUENT_USAGE) -> list[LearnedWord]:
        return [w for w in self.vocabulary.words if w.usage_count > min_usage]
