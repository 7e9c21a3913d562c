"""Phrase matchers for free text.

Both tables are plain data so new phrasings (or another language) only
need new entries.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"my name is (\w+)", re.IGNORECASE),
    re.compile(r"i am (\w+)", re.IGNORECASE),
    re.compile(r"call me (\w+)", re.IGNORECASE),
)


@dataclass(frozen=True)
class ReplyTrigger:
    topic: str
    phrases: tuple[str, ...]

    def matches(self, lowered: str) -> bool:
        return any(phrase in lowered for phrase in self.phrases)


# Checked in order; the first hit decides the topic of the reply.
REPLY_TRIGGERS: tuple[ReplyTrigger, ...] = (
    ReplyTrigger("name", ("name",)),
    ReplyTrigger("food", ("hungry", "food", "eat")),
    ReplyTrigger("play", ("play", "game")),
    ReplyTrigger("sleep", ("sleep", "tired")),
    ReplyTrigger("status", ("how are you", "how do you feel")),
)


def extract_user_name(text: str) -> str | None:
    """First capture of the first name phrase found in the raw text."""
    for pattern in NAME_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def match_triggers(text: str) -> list[str]:
    """Topics whose phrases appear in ``text``, in trigger order."""
    lowered = text.lower()
    return [t.topic for t in REPLY_TRIGGERS if t.matches(lowered)]
