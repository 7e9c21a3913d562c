from __future__ import annotations

import re

# Opening fence with an optional language tag; the closing fence may be lost
# when a paste gets cut short.
_FENCE_RE = re.compile(r"^```[^\n]*\n(.*?)(?:\n\s*```)?$", re.DOTALL)
_QUOTES = "'\""


def clean_pasted_text(text: str) -> str:
    """Normalize save data copied out of a chat, an email or a text file.

    Drops a byte-order mark, surrounding whitespace and a markdown code
    fence. A quoted ``z:`` payload loses its quotes; other quoted text is
    left alone so JSON strings still fail validation.
    """
    text = text.lstrip("﻿").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1).strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in _QUOTES:
        inner = text[1:-1].strip()
        if inner.startswith("z:"):
            return inner
    return text
