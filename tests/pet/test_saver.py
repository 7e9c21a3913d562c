from __future__ import annotations

import asyncio
import threading
import time

import pytest

from pixelpet.core.pet.models import GameState
from pixelpet.core.pet.saver import DebouncedSaver


class Recorder:
    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.written: list[GameState] = []
        self.result = result
        self.error = error

    def __call__(self, snapshot: GameState) -> bool:
        if self.error is not None:
            raise self.error
        self.written.append(snapshot)
        return self.result


def _states(n: int) -> list[GameState]:
    return [GameState() for _ in range(n)]


@pytest.mark.asyncio
async def test_burst_coalesces_into_latest_snapshot() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder, delay=0.02)
    states = _states(5)
    for s in states:
        saver.schedule(s)
    assert saver.has_pending()

    await asyncio.sleep(0.15)
    assert len(recorder.written) == 1
    assert recorder.written[0] is states[-1]
    assert not saver.has_pending()


@pytest.mark.asyncio
async def test_nothing_written_before_quiet_period() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder, delay=0.2)
    saver.schedule(GameState())
    await asyncio.sleep(0.01)
    assert recorder.written == []
    await saver.shutdown()


@pytest.mark.asyncio
async def test_new_snapshot_pushes_deadline_back() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder, delay=0.1)
    first, second = _states(2)
    saver.schedule(first)
    await asyncio.sleep(0.06)
    saver.schedule(second)
    await asyncio.sleep(0.06)
    assert recorder.written == []

    await asyncio.sleep(0.2)
    assert recorder.written == [second]


@pytest.mark.asyncio
async def test_later_bursts_get_their_own_write() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder, delay=0.01)
    first, second = _states(2)
    saver.schedule(first)
    await asyncio.sleep(0.1)
    saver.schedule(second)
    await asyncio.sleep(0.1)
    assert recorder.written == [first, second]


@pytest.mark.asyncio
async def test_flush_writes_pending_snapshot() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder, delay=0.05)
    snapshot = GameState()
    saver.schedule(snapshot)
    await saver.flush()
    assert recorder.written == [snapshot]
    assert not saver.has_pending()


@pytest.mark.asyncio
async def test_write_errors_are_contained() -> None:
    recorder = Recorder(error=OSError("disk gone"))
    saver = DebouncedSaver(recorder, delay=0.01)
    saver.schedule(GameState())
    await asyncio.sleep(0.1)
    assert not saver.has_pending()

    recorder.error = None
    snapshot = GameState()
    saver.schedule(snapshot)
    await saver.shutdown()
    assert recorder.written == [snapshot]


def test_without_event_loop_snapshot_waits_for_flush_sync() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder, delay=0.01)
    snapshot = GameState()
    saver.schedule(snapshot)
    assert saver.has_pending()
    assert recorder.written == []

    assert saver.flush_sync() is True
    assert recorder.written == [snapshot]
    assert saver.flush_sync() is None


def test_flush_sync_reports_failure() -> None:
    saver = DebouncedSaver(Recorder(result=False))
    saver.schedule(GameState())
    assert saver.flush_sync() is False


def test_discard_drops_pending() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder)
    snapshot = GameState()
    saver.schedule(snapshot)
    assert saver.discard() is snapshot
    assert saver.flush_sync() is None
    assert recorder.written == []


# -- Superseding -------------------------------------------------------------


def test_write_now_replaces_pending() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder)
    saver.schedule(GameState())
    newer = GameState()
    assert saver.write_now(newer) is True
    assert recorder.written == [newer]
    assert not saver.has_pending()
    assert saver.flush_sync() is None


def test_supersede_drops_pending_and_bumps_generation() -> None:
    recorder = Recorder()
    saver = DebouncedSaver(recorder)
    saver.schedule(GameState())
    assert saver.supersede(lambda: "cleared") == "cleared"
    assert saver.generation == 1
    assert saver.flush_sync() is None
    assert recorder.written == []


@pytest.mark.asyncio
async def test_supersede_waits_for_write_in_flight() -> None:
    started = threading.Event()
    order: list[str] = []

    def slow_write(snapshot: GameState) -> bool:
        started.set()
        time.sleep(0.05)
        order.append("write")
        return True

    saver = DebouncedSaver(slow_write, delay=0.01)
    saver.schedule(GameState())
    assert await asyncio.to_thread(started.wait, 1.0)
    saver.supersede(lambda: order.append("clear"))
    assert order == ["write", "clear"]
    await saver.shutdown()
    assert order == ["write", "clear"]
