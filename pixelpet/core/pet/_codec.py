"""Text encoding for saved games.

The same string form serves the on-disk blob and the export/import
transfer string: camelCase JSON without padding, optionally packed as
``z:`` followed by base64 of the zlib stream.
"""

from __future__ import annotations

import base64
import binascii
import json
import zlib

from pixelpet.core.pet._parsing import clean_pasted_text
from pixelpet.core.pet.models import GameState

PACKED_PREFIX = "z:"
# A fresh game is well under this; packing only starts to pay off once the
# interaction and conversation logs fill up.
PACK_THRESHOLD = 256


def pack_text(text: str) -> str:
    """Return the ``z:`` form of ``text`` when it is shorter, else ``text``."""
    raw = text.encode("utf-8")
    if len(raw) < PACK_THRESHOLD:
        return text
    packed = PACKED_PREFIX + base64.b64encode(zlib.compress(raw, 9)).decode("ascii")
    return packed if len(packed) < len(raw) else text


def unpack_text(text: str) -> str:
    """Undo ``pack_text``. Raises ValueError on a corrupt ``z:`` payload."""
    if not text.startswith(PACKED_PREFIX):
        return text
    try:
        raw = zlib.decompress(base64.b64decode(text[len(PACKED_PREFIX) :], validate=True))
        return raw.decode("utf-8")
    except (binascii.Error, zlib.error, UnicodeDecodeError) as exc:
        raise ValueError("corrupt packed save data") from exc


def encode_state(state: GameState, compress: bool = False) -> str:
    data = state.model_dump(mode="json", by_alias=True)
    text = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
    return pack_text(text) if compress else text


def decode_state(text: str) -> GameState:
    """Parse a saved game, pasted or stored.

    The document must be a JSON object with ``pet`` and ``memory`` objects.
    Raises ValueError (pydantic's ValidationError included) otherwise.
    """
    data = json.loads(unpack_text(clean_pasted_text(text)))
    if not isinstance(data, dict):
        raise ValueError("save data must be a JSON object")
    for key in ("pet", "memory"):
        if not isinstance(data.get(key), dict):
            raise ValueError(f"save data is missing {key!r}")
    return GameState.model_validate(data)
