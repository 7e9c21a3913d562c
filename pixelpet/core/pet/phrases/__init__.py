from __future__ import annotations

import json
from enum import StrEnum, auto
from functools import cache
from pathlib import Path
from typing import Any

from pixelpet import PIXELPET_ROOT

_PHRASES_DIR = PIXELPET_ROOT / "core" / "pet" / "phrases"


@cache
def _load(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


class PhraseBook(StrEnum):
    @property
    def path(self) -> Path:
        return (_PHRASES_DIR / self.value).with_suffix(".json")

    def read(self) -> Any:
        return _load(self.path)

    def lines(self, key: str) -> list[str]:
        return self.read()[key]

    # mood-indexed tables: {mood: [variant, ...]}
    GREETING = auto()
    FEED = auto()
    PLAY = auto()
    PET = auto()
    THOUGHT = auto()
    # everything that is not keyed by mood
    LINES = auto()


MOOD_TABLES: tuple[PhraseBook, ...] = (
    PhraseBook.GREETING,
    PhraseBook.FEED,
    PhraseBook.PLAY,
    PhraseBook.PET,
    PhraseBook.THOUGHT,
)

__all__ = ["MOOD_TABLES", "PhraseBook"]
