from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import TypeVar

from pixelpet.core.pet.models import GameState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DebouncedSaver:
    """Coalesces bursts of state changes into one write per quiet period.

    Only the latest snapshot is kept. Each ``schedule`` pushes the deadline
    back by ``delay`` seconds; a single worker task sleeps until the
    deadline holds still, then hands the snapshot to ``write`` on a thread.

    Outside a running event loop nothing is written automatically; the
    snapshot waits for ``flush_sync``.

    Every write runs under one lock and carries the generation it was taken
    in. ``supersede`` bumps the generation, so a snapshot taken before it is
    dropped instead of landing on top of whatever ``supersede`` did.
    """

    def __init__(
        self, write: Callable[[GameState], bool], delay: float = 1.0
    ) -> None:
        self._write = write
        self.delay = delay
        self._pending: GameState | None = None
        self._deadline = 0.0
        self._worker: asyncio.Task[None] | None = None
        self._generation = 0
        self._write_lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def schedule(self, snapshot: GameState) -> None:
        self._pending = snapshot
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._deadline = loop.time() + self.delay
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._run())

    def has_pending(self) -> bool:
        return self._pending is not None

    def discard(self) -> GameState | None:
        """Drop the pending snapshot and return it."""
        snapshot, self._pending = self._pending, None
        return snapshot

    def _take(self) -> tuple[GameState | None, int]:
        return self.discard(), self._generation

    def _write_safely(self, snapshot: GameState, generation: int) -> bool:
        with self._write_lock:
            if generation != self._generation:
                logger.debug("Dropped save from generation %d", generation)
                return False
            return self._call_write(snapshot)

    def _call_write(self, snapshot: GameState) -> bool:
        try:
            return self._write(snapshot)
        except Exception:
            logger.warning("Game save failed", exc_info=True)
            return False

    def supersede(self, action: Callable[[], T]) -> T:
        """Void the pending snapshot and any write in flight, then run ``action``.

        A write already holding the lock finishes first; one still waiting
        for it is dropped. ``action`` runs under the lock.
        """
        with self._write_lock:
            self._pending = None
            self._generation += 1
            return action()

    def write_now(self, snapshot: GameState) -> bool:
        """Write ``snapshot`` immediately, superseding older ones."""
        return self.supersede(lambda: self._call_write(snapshot))

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while self._pending is not None:
            remaining = self._deadline - loop.time()
            if remaining > 0:
                await asyncio.sleep(remaining)
                continue
            snapshot, generation = self._take()
            if snapshot is not None:
                await asyncio.to_thread(self._write_safely, snapshot, generation)

    async def flush(self) -> None:
        """Write the pending snapshot and wait for any write in flight.

        A worker already sleeping finishes its current nap first, so this
        can take up to ``delay`` seconds.
        """
        self._deadline = asyncio.get_running_loop().time()
        worker = self._worker
        if worker is not None and not worker.done():
            await worker
        snapshot, generation = self._take()
        if snapshot is not None:
            await asyncio.to_thread(self._write_safely, snapshot, generation)

    async def shutdown(self) -> None:
        await self.flush()
        self._worker = None

    def flush_sync(self) -> bool | None:
        """Write the pending snapshot on the calling thread.

        Returns None when nothing was pending, else whether the write worked.
        """
        snapshot, generation = self._take()
        if snapshot is None:
            return None
        return self._write_safely(snapshot, generation)
