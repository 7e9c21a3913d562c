from __future__ import annotations

import re

from pixelpet.core.pet.models import Sentiment, WordCategory

GREETING_WORDS: tuple[str, ...] = (
    "hello", "hi", "hey", "good morning", "good evening", "yo", "sup", "greetings",
)
FOOD_WORDS: tuple[str, ...] = (
    "food", "eat", "hungry", "meal", "snack", "treat", "yummy", "delicious", "tasty",
)
PRAISE_WORDS: tuple[str, ...] = (
    "good", "great", "awesome", "amazing", "wonderful", "excellent", "perfect",
    "love", "like", "best",
)
SCOLDING_WORDS: tuple[str, ...] = (
    "bad", "wrong", "no", "stop", "dont", "never", "hate", "stupid", "dumb",
)
QUESTION_WORDS: tuple[str, ...] = ("what", "why", "how", "when", "where", "who", "which")
EMOTION_WORDS: tuple[str, ...] = (
    "happy", "sad", "angry", "excited", "tired", "bored", "scared", "worried",
)
ACTION_WORDS: tuple[str, ...] = (
    "play", "feed", "pet", "clean", "sleep", "wake", "go", "come", "run", "walk",
)

POSITIVE_EMOTIONS: tuple[str, ...] = ("happy", "excited", "joy", "love")
NEGATIVE_EMOTIONS: tuple[str, ...] = ("sad", "angry", "scared", "worried")

# Order matters: a token matching several tables takes the first category.
# Question words match as a prefix; every other table matches as a substring.
_CATEGORY_TABLES: tuple[tuple[WordCategory, tuple[str, ...], bool], ...] = (
    ("greeting", GREETING_WORDS, False),
    ("food", FOOD_WORDS, False),
    ("praise", PRAISE_WORDS, False),
    ("scolding", SCOLDING_WORDS, False),
    ("question", QUESTION_WORDS, True),
    ("emotion", EMOTION_WORDS, False),
    ("action", ACTION_WORDS, False),
)

_STRIP_RE = re.compile(r"[^\w\s']")
_WORD_RE = re.compile(r"\b\w+\b")


def _contains_any(token: str, table: tuple[str, ...]) -> bool:
    return any(keyword in token for keyword in table)


def tokenize(text: str) -> list[str]:
    """Lowercase, drop punctuation except apostrophes, split, skip 1-char tokens."""
    cleaned = _STRIP_RE.sub("", text.lower()).replace("_", "")
    return [token for token in cleaned.split() if len(token) > 1]


def words_used(message: str) -> list[str]:
    """Every word token in a message, for the conversation log."""
    return _WORD_RE.findall(message.lower())


def classify_category(token: str) -> WordCategory:
    lower = token.lower()
    for category, table, prefix in _CATEGORY_TABLES:
        if prefix:
            if lower.startswith(table):
                return category
        elif _contains_any(lower, table):
            return category
    return "other"


def classify_sentiment(token: str) -> Sentiment:
    lower = token.lower()
    if _contains_any(lower, PRAISE_WORDS):
        return "positive"
    if _contains_any(lower, SCOLDING_WORDS):
        return "negative"
    if _contains_any(lower, EMOTION_WORDS):
        if _contains_any(lower, POSITIVE_EMOTIONS):
            return "positive"
        if _contains_any(lower, NEGATIVE_EMOTIONS):
            return "negative"
    return "neutral"


def classify(token: str) -> tuple[WordCategory, Sentiment]:
    """Category and sentiment for one token. Unknown tokens are ("other", "neutral")."""
    return classify_category(token), classify_sentiment(token)
