"""Shared fixtures for the pet engine tests.

Everything here is deterministic: a scripted random source, a clock that
only moves when told to, and an in-memory blob store.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

import pytest

from pixelpet.core.pet import PetEngine
from pixelpet.core.pet.config import PetConfig
from pixelpet.core.pet.models import GameState, PetState
from pixelpet.core.pet.responses import ResponseGenerator
from pixelpet.core.pet.state import PetStateMachine
from pixelpet.core.pet.storage import InMemoryBlobStore

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class ScriptedRandom:
    """Returns queued values in order, then ``default`` forever."""

    def __init__(self, values: Iterable[float] = (), default: float = 0.99) -> None:
        self.values = list(values)
        self.default = default
        self.calls = 0

    def push(self, *values: float) -> None:
        self.values.extend(values)

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_pet(now: datetime = T0, **overrides) -> PetState:
    fields = dict(
        birth_date=now,
        last_fed=now,
        last_played=now,
        last_slept=now,
        last_cleaned=now,
    )
    fields.update(overrides)
    return PetState(**fields)


def make_state(now: datetime = T0, **pet_overrides) -> GameState:
    return GameState(pet=make_pet(now, **pet_overrides))


@pytest.fixture
def t0() -> datetime:
    return T0


@pytest.fixture
def pet_factory() -> Callable[..., PetState]:
    return make_pet


@pytest.fixture
def state_factory() -> Callable[..., GameState]:
    return make_state


@pytest.fixture
def rng() -> ScriptedRandom:
    return ScriptedRandom()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def machine() -> PetStateMachine:
    return PetStateMachine()


@pytest.fixture
def generator(rng: ScriptedRandom) -> ResponseGenerator:
    return ResponseGenerator(rng)


@pytest.fixture
def state() -> GameState:
    return make_state()


@pytest.fixture
def engine_factory(
    blobs: InMemoryBlobStore, rng: ScriptedRandom, clock: FakeClock
) -> Callable[..., PetEngine]:
    def _make(**overrides) -> PetEngine:
        config = PetConfig(**{"save_debounce_seconds": 0.01, **overrides})
        return PetEngine(config, store=blobs, rng=rng, clock=clock)

    return _make


@pytest.fixture
def engine(engine_factory: Callable[..., PetEngine]) -> PetEngine:
    eng = engine_factory()
    eng.load()
    return eng
