from __future__ import annotations

from datetime import timedelta

import pytest

from pixelpet.core.pet.decay import apply_decay, decay_stats, hours_since
from pixelpet.core.pet.models import STAT_NAMES


def test_hours_since_never_negative(t0) -> None:
    assert hours_since(t0, t0 - timedelta(hours=1)) == 0.0
    assert hours_since(t0, t0 + timedelta(minutes=90)) == 1.5


def test_hours_since_respects_floor(t0) -> None:
    later = t0 + timedelta(hours=2)
    assert hours_since(t0, t0 + timedelta(hours=3), floor=later) == 1.0


def test_linear_rates(pet_factory, t0) -> None:
    pet = pet_factory(hunger=80, happiness=70, hygiene=90, energy=85, health=60)
    stats = decay_stats(pet, t0 + timedelta(hours=2))
    assert stats.hunger == 74.0
    assert stats.happiness == 66.0
    assert stats.hygiene == 87.0
    assert stats.energy == 81.0
    assert stats.health == 60.0


def test_energy_regenerates_while_sleeping(pet_factory, t0) -> None:
    pet = pet_factory(energy=50, is_sleeping=True)
    stats = decay_stats(pet, t0 + timedelta(hours=3))
    assert stats.energy == 80.0


def test_energy_regen_is_capped(pet_factory, t0) -> None:
    pet = pet_factory(energy=95, is_sleeping=True)
    assert decay_stats(pet, t0 + timedelta(hours=5)).energy == 100.0


def test_health_penalty_when_starving(pet_factory, t0) -> None:
    pet = pet_factory(hunger=10, health=50)
    stats = decay_stats(pet, t0 + timedelta(minutes=1))
    assert stats.health == 48.0


def test_health_penalty_when_dirty(pet_factory, t0) -> None:
    pet = pet_factory(hygiene=5, health=50)
    assert decay_stats(pet, t0 + timedelta(minutes=1)).health == 48.0


def test_health_bonus_when_happy_and_fed(pet_factory, t0) -> None:
    pet = pet_factory(happiness=90, hunger=90, health=50)
    assert decay_stats(pet, t0 + timedelta(minutes=1)).health == 51.0


def test_health_penalty_clamped_at_zero(pet_factory, t0) -> None:
    pet = pet_factory(hunger=0, health=1)
    assert decay_stats(pet, t0 + timedelta(minutes=1)).health == 0.0


@pytest.mark.parametrize("hours", [0, 0.5, 1, 10, 100, 10_000])
@pytest.mark.parametrize("sleeping", [False, True])
def test_decay_stays_in_bounds(pet_factory, t0, hours: float, sleeping: bool) -> None:
    pet = pet_factory(
        hunger=5, happiness=99, health=2, energy=98, hygiene=1, is_sleeping=sleeping
    )
    stats = decay_stats(pet, t0 + timedelta(hours=hours))
    for name in STAT_NAMES:
        assert 0.0 <= getattr(stats, name) <= 100.0


def test_decay_is_monotonic_in_elapsed_time(pet_factory, t0) -> None:
    pet = pet_factory(hunger=90, happiness=90, hygiene=90, energy=90)
    previous = decay_stats(pet, t0)
    for hours in range(1, 60):
        current = decay_stats(pet, t0 + timedelta(hours=hours))
        for name in ("hunger", "happiness", "hygiene", "energy"):
            assert getattr(current, name) <= getattr(previous, name)
        previous = current


def test_decay_does_not_touch_input(pet_factory, t0) -> None:
    pet = pet_factory(hunger=80)
    apply_decay(pet, t0 + timedelta(hours=4))
    assert pet.hunger == 80
    assert pet.decayed_at is None


def test_apply_decay_is_idempotent_for_same_now(pet_factory, t0) -> None:
    pet = pet_factory(hunger=10, health=50)
    now = t0 + timedelta(hours=1)
    once = apply_decay(pet, now)
    twice = apply_decay(once, now)
    assert once.stats == twice.stats
    assert twice.decayed_at == now


def test_apply_decay_keeps_action_timestamps(pet_factory, t0) -> None:
    pet = pet_factory()
    decayed = apply_decay(pet, t0 + timedelta(hours=1))
    assert decayed.last_fed == t0
    assert decayed.last_played == t0


def test_successive_ticks_add_up_to_one_long_tick(pet_factory, t0) -> None:
    pet = pet_factory(hunger=90, happiness=90, hygiene=90, energy=90)
    stepped = pet
    for minutes in range(60, 301, 60):
        stepped = apply_decay(stepped, t0 + timedelta(minutes=minutes))
    direct = apply_decay(pet, t0 + timedelta(hours=5))
    for name in ("hunger", "happiness", "hygiene", "energy"):
        assert getattr(stepped, name) == pytest.approx(getattr(direct, name))
