from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from pixelpet.core.pet._codec import decode_state, encode_state
from pixelpet.core.pet.config import PetConfig
from pixelpet.core.pet.decay import apply_decay
from pixelpet.core.pet.models import (
    CustomItem,
    GameState,
    GameStats,
    LearnedWord,
    Memory,
    PetResponse,
    PetState,
    Sentiment,
    StatusMessage,
    WordCategory,
    utc_now,
)
from pixelpet.core.pet.mood import with_mood
from pixelpet.core.pet.responses import RandomSource, ResponseGenerator
from pixelpet.core.pet.saver import DebouncedSaver
from pixelpet.core.pet.state import PetStateMachine, relationship_score
from pixelpet.core.pet.storage import (
    BlobStore,
    FileBlobStore,
    GameStore,
    InMemoryBlobStore,
    StorageError,
)
from pixelpet.core.pet.vocabulary import VocabularyStore

logger = logging.getLogger(__name__)

__all__ = [
    "EngineMetrics",
    "FileBlobStore",
    "GameState",
    "InMemoryBlobStore",
    "PetConfig",
    "PetEngine",
    "PetResponse",
    "StatusMessage",
    "StorageError",
]


@dataclass
class EngineMetrics:
    """Per-session counters for engine operations."""

    actions_applied: int = 0
    ticks_applied: int = 0
    saves_scheduled: int = 0
    saves_written: int = 0
    saves_failed: int = 0
    loads_recovered: int = 0
    imports_accepted: int = 0
    imports_rejected: int = 0
    words_learned: int = 0


class PetEngine:
    """Facade for the pet: owns the one ``GameState`` and everything around it.

    Mutations build a new state from a copy and swap it in under a lock, so
    readers only ever see whole states. Every swap schedules a debounced
    save when autosave is on.
    """

    def __init__(
        self,
        config: PetConfig | None = None,
        store: BlobStore | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or PetConfig()
        self.metrics = EngineMetrics()
        self.status: StatusMessage | None = None

        if store is None:
            store = FileBlobStore(self.config.resolved_data_dir(), self.config.storage_key)
        self._store = GameStore(store, compress=self.config.compress_storage)
        self._clock = clock or utc_now
        self._machine = PetStateMachine(
            interaction_cap=self.config.interaction_cap,
            conversation_cap=self.config.conversation_cap,
            favorites_cap=self.config.favorites_cap,
        )
        self._responses = ResponseGenerator(rng)
        self._saver = DebouncedSaver(self._write, delay=self.config.save_debounce_seconds)
        self._lock = threading.RLock()
        self._state: GameState | None = None
        self._decay_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # State plumbing
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return self._clock()

    def _fresh_state(self) -> GameState:
        now = self._now()
        pet = PetState(
            name=self.config.default_pet_name,
            birth_date=now,
            last_fed=now,
            last_played=now,
            last_slept=now,
            last_cleaned=now,
        )
        state = GameState(pet=with_mood(pet))
        state.game_stats.last_save = now
        return state

    def _current(self) -> GameState:
        if self._state is None:
            return self._load_live()
        return self._state

    def _commit(self, state: GameState, *, save: bool = True) -> None:
        self._state = state
        if save and self.config.autosave:
            self.metrics.saves_scheduled += 1
            self._saver.schedule(state)

    def _write(self, snapshot: GameState) -> bool:
        ok = self._store.save(snapshot)
        if ok:
            self.metrics.saves_written += 1
        else:
            self.metrics.saves_failed += 1
            self.status = StatusMessage(kind="error", text="Failed to save game")
        return ok

    @property
    def loaded(self) -> bool:
        return self._state is not None

    # ------------------------------------------------------------------
    # Load / snapshots
    # ------------------------------------------------------------------

    def load(self) -> GameState:
        """Load the saved game, catching up on missed decay.

        A missing or unreadable save yields a fresh game.
        """
        with self._lock:
            return self._load_live().model_copy(deep=True)

    def _load_live(self) -> GameState:
        with self._lock:
            try:
                stored = self._store.load()
            except StorageError:
                logger.warning("Saved game unreadable, starting fresh", exc_info=True)
                self.metrics.loads_recovered += 1
                stored = None

            if stored is None:
                state = self._fresh_state()
                logger.info("Starting a new game with %s", state.pet.name)
            else:
                now = self._now()
                stored.pet = with_mood(apply_decay(stored.pet, now))
                state = stored
                logger.info(
                    "Loaded %s (mood=%s, %d words known)",
                    state.pet.name,
                    state.pet.mood,
                    len(state.memory.vocabulary.words),
                )
            self._commit(state)
            return state

    @property
    def state(self) -> GameState:
        with self._lock:
            return self._current().model_copy(deep=True)

    @property
    def pet(self) -> PetState:
        with self._lock:
            return self._current().pet.model_copy(deep=True)

    @property
    def memory(self) -> Memory:
        with self._lock:
            return self._current().memory.model_copy(deep=True)

    @property
    def inventory(self) -> list[CustomItem]:
        with self._lock:
            return [i.model_copy(deep=True) for i in self._current().inventory]

    @property
    def game_stats(self) -> GameStats:
        with self._lock:
            return self._current().game_stats.model_copy()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def _apply(self, action: Callable[[GameState], GameState]) -> GameState:
        with self._lock:
            new = action(self._current())
            self._commit(new)
            self.metrics.actions_applied += 1
            return new

    def feed(self, amount: float | None = None, food_name: str | None = None) -> PetResponse:
        if amount is None:
            amount = self.config.default_feed_amount
        with self._lock:
            now = self._now()
            state = self._apply(lambda s: self._machine.feed(s, now, amount, food_name))
            return self._responses.feed(state, food_name)

    def play(self, amount: float | None = None, game_name: str | None = None) -> PetResponse:
        if amount is None:
            amount = self.config.default_play_amount
        with self._lock:
            now = self._now()
            state = self._apply(lambda s: self._machine.play(s, now, amount, game_name))
            return self._responses.play(state, game_name)

    def pet_animal(self) -> PetResponse:
        with self._lock:
            now = self._now()
            state = self._apply(lambda s: self._machine.pet(s, now))
            return self._responses.pet(state)

    def _fixed(
        self,
        state: GameState,
        key: str,
        animation: str | None = None,
        **values: object,
    ) -> PetResponse:
        return PetResponse(
            message=self._responses.line(key, **values),
            mood=state.pet.mood,
            animation=animation,
        )

    def clean(self) -> PetResponse:
        with self._lock:
            now = self._now()
            state = self._apply(lambda s: self._machine.clean(s, now))
            return self._fixed(state, "clean", "happy")

    def toggle_sleep(self) -> PetResponse:
        with self._lock:
            now = self._now()
            state = self._apply(lambda s: self._machine.toggle_sleep(s, now))
            if state.pet.is_sleeping:
                return self._fixed(state, "sleep", "sleep")
            return self._fixed(state, "wake", "happy")

    def give_medicine(self) -> PetResponse:
        with self._lock:
            now = self._now()
            state = self._apply(lambda s: self._machine.give_medicine(s, now))
            return self._fixed(state, "medicine", "happy")

    def rename(self, name: str) -> PetResponse | None:
        """Rename the pet. Blank names are ignored and return None."""
        if not name.strip():
            return None
        with self._lock:
            state = self._apply(lambda s: self._machine.rename(s, name))
            return self._fixed(state, "rename", "happy", name=state.pet.name)

    def add_item(self, item: CustomItem) -> PetResponse:
        with self._lock:
            state = self._apply(lambda s: self._machine.add_item(s, item))
            return self._fixed(state, "new_item", "happy", item=item.name)

    def use_item(self, item_id: str) -> PetResponse | None:
        """Apply an inventory item's effect. Unknown ids are ignored and return None."""
        with self._lock:
            item = self._current().find_item(item_id)
            if item is None:
                return None
            now = self._now()
            state = self._apply(lambda s: self._machine.use_item(s, item_id, now))
            animation = "eat" if item.type == "food" else "happy"
            return self._fixed(state, "use_item", animation, item=item.name)

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    def talk(self, text: str, known_words: Iterable[str] | None = None) -> PetResponse:
        """Learn from ``text`` and answer it.

        ``known_words`` are words a caller already detected in this
        utterance; they are reported back with the ones learned here.
        """
        with self._lock:
            now = self._now()
            state, learned = self._machine.talk(
                self._current(), text, now, known_words or ()
            )
            fresh = state.game_stats.words_learned - self._current().game_stats.words_learned
            self.metrics.words_learned += fresh
            response = self._responses.reply(text, learned, state, now)
            state = self._machine.log_reply(state, response.message, now)
            self._commit(state)
            self.metrics.actions_applied += 1
            return response

    def greet(self) -> PetResponse:
        with self._lock:
            return self._responses.greeting(self._current(), self._now())

    def random_thought(self) -> PetResponse:
        with self._lock:
            return self._responses.random_thought(self._current(), self._now())

    def status_comment(self) -> PetResponse:
        with self._lock:
            return self._responses.status(self._current())

    def relationship(self) -> float:
        with self._lock:
            return relationship_score(self._current(), self._now())

    def words_by_category(self, category: WordCategory) -> list[LearnedWord]:
        with self._lock:
            store = VocabularyStore(self._current().memory.vocabulary)
            return [w.model_copy(deep=True) for w in store.by_category(category)]

    def words_by_sentiment(self, sentiment: Sentiment) -> list[LearnedWord]:
        with self._lock:
            store = VocabularyStore(self._current().memory.vocabulary)
            return [w.model_copy(deep=True) for w in store.by_sentiment(sentiment)]

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def tick(self, now: datetime | None = None) -> PetState:
        """Apply decay up to ``now`` (default: the engine clock)."""
        with self._lock:
            now = now or self._now()
            state = self._machine.tick(self._current(), now)
            self._commit(state)
            self.metrics.ticks_applied += 1
            return state.pet.model_copy(deep=True)

    async def run_decay_loop(self, interval: float | None = None) -> None:
        """Tick forever, once per ``interval`` seconds."""
        interval = self.config.tick_interval_seconds if interval is None else interval
        while True:
            await asyncio.sleep(interval)
            try:
                self.tick()
            except Exception:
                logger.warning("Decay tick failed", exc_info=True)

    def start(self) -> None:
        """Start the decay loop on the running event loop. Idempotent."""
        if self._decay_task is not None and not self._decay_task.done():
            return
        self._current()
        self._decay_task = asyncio.get_running_loop().create_task(self.run_decay_loop())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_save(self) -> str:
        with self._lock:
            text = encode_state(self._current())
        self.status = StatusMessage(kind="success", text="Data exported! Copy the code below.")
        return text

    def import_save(self, text: str) -> bool:
        """Replace the whole game with an exported one.

        Returns False, leaving the current game untouched, when ``text`` is
        not a valid save.
        """
        if not text.strip():
            self.status = StatusMessage(kind="error", text="Please paste save data")
            return False
        try:
            imported = decode_state(text)
        except ValueError:
            logger.warning("Rejected save import", exc_info=True)
            self.metrics.imports_rejected += 1
            self.status = StatusMessage(kind="error", text="Invalid save data")
            return False

        with_mood(imported.pet)
        with self._lock:
            self._commit(imported)
        self.metrics.imports_accepted += 1
        self.status = StatusMessage(kind="success", text="Data imported successfully!")
        logger.info("Imported game for %s", imported.pet.name)
        return True

    def reset(self) -> bool:
        """Start over with a fresh pet and remove the saved game."""
        with self._lock:
            self._commit(self._fresh_state(), save=False)
            ok = self._saver.supersede(self._store.clear)
        if ok:
            self.status = StatusMessage(kind="success", text="Game reset!")
        else:
            self.status = StatusMessage(kind="error", text="Failed to reset game")
        logger.info("Game reset")
        return ok

    def save_now(self) -> bool:
        """Write the current game immediately, superseding any pending save."""
        with self._lock:
            return self._saver.write_now(self._current())

    def has_pending_save(self) -> bool:
        return self._saver.has_pending()

    async def flush(self) -> None:
        await self._saver.flush()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _log_session(self) -> None:
        m = self.metrics
        logger.info(
            "Pet session: actions=%d ticks=%d saves=%d/%d failed=%d "
            "imports=%d rejected=%d words=%d",
            m.actions_applied,
            m.ticks_applied,
            m.saves_written,
            m.saves_scheduled,
            m.saves_failed,
            m.imports_accepted,
            m.imports_rejected,
            m.words_learned,
        )

    async def aclose(self) -> None:
        """Stop the decay loop and flush the pending save."""
        task, self._decay_task = self._decay_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._saver.shutdown()
        self._log_session()

    def close(self) -> None:
        """Sync close (best-effort, for non-async contexts)."""
        if self._decay_task is not None:
            self._decay_task.cancel()
            self._decay_task = None
        self._saver.flush_sync()
        self._log_session()
