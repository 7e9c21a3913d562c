from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from pixelpet.core.pet._codec import decode_state, encode_state
from pixelpet.core.pet.models import GameState, utc_now

logger = logging.getLogger(__name__)

STORAGE_KEY = "pixelpet_game_state"


class StorageError(Exception):
    """Raised when a stored game cannot be read or written."""


class BlobStore(Protocol):
    """Single-key text storage. ``load`` returns None when nothing is saved."""

    def load(self) -> str | None: ...

    def save(self, text: str) -> None: ...

    def clear(self) -> None: ...


class FileBlobStore:
    """One UTF-8 file per storage key, replaced atomically on every save."""

    def __init__(self, directory: Path, key: str = STORAGE_KEY) -> None:
        self.directory = Path(directory)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def load(self) -> str | None:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"cannot read {self.path}") from exc

    def save(self, text: str) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(
                dir=self.directory, prefix=f".{self.key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(text)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"cannot write {self.path}") from exc

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot remove {self.path}") from exc


class InMemoryBlobStore:
    """Blob store for tests and embedders that persist elsewhere."""

    def __init__(self, text: str | None = None) -> None:
        self.text = text
        self.saves = 0

    def load(self) -> str | None:
        return self.text

    def save(self, text: str) -> None:
        self.text = text
        self.saves += 1

    def clear(self) -> None:
        self.text = None


class GameStore:
    """Reads and writes whole ``GameState`` documents through a ``BlobStore``."""

    def __init__(self, blobs: BlobStore, compress: bool = False) -> None:
        self.blobs = blobs
        self.compress = compress

    def load(self) -> GameState | None:
        """The saved game, or None if nothing was saved.

        Raises StorageError when a blob exists but is not a valid game.
        """
        text = self.blobs.load()
        if text is None or not text.strip():
            return None
        try:
            return decode_state(text)
        except ValueError as exc:
            raise StorageError("stored game is corrupt") from exc

    def save(self, state: GameState) -> bool:
        """Write ``state`` stamped with the save time. Failures are logged, not raised."""
        stamped = state.model_copy(
            update={
                "game_stats": state.game_stats.model_copy(
                    update={"last_save": utc_now()}
                )
            }
        )
        try:
            self.blobs.save(encode_state(stamped, compress=self.compress))
        except StorageError:
            logger.warning("Saving game failed", exc_info=True)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.blobs.clear()
        except StorageError:
            logger.warning("Clearing saved game failed", exc_info=True)
            return False
        return True
