"""Time-based need decay.

Stats drop linearly with the hours elapsed since the matching last action:

    hunger     -3.0/h   since last_fed
    happiness  -2.0/h   since last_played
    hygiene    -1.5/h   since last_cleaned
    energy     +10/h while sleeping, -2.0/h awake, since last_slept

Health has no time term. It takes a -2 nudge when hunger or hygiene is
below 20 and a +1 nudge when happiness > 70 and hunger > 50, once per call
that covers new time.

Elapsed time is counted from ``max(last_action, decayed_at)``, so calling
twice with the same ``now`` is a no-op the second time.
"""

from __future__ import annotations

from datetime import datetime

from pixelpet.core.pet.models import PetState, PetStats, clamp

HUNGER_PER_HOUR = 3.0
HAPPINESS_PER_HOUR = 2.0
HYGIENE_PER_HOUR = 1.5
ENERGY_DRAIN_PER_HOUR = 2.0
ENERGY_REGEN_PER_HOUR = 10.0

HEALTH_PENALTY = 2.0
HEALTH_BONUS = 1.0
CRISIS_THRESHOLD = 20.0


def hours_since(then: datetime, now: datetime, floor: datetime | None = None) -> float:
    """Hours from ``then`` (or ``floor`` if later) to ``now``; never negative."""
    start = max(then, floor) if floor is not None else then
    return max(0.0, (now - start).total_seconds() / 3600.0)


def decay_stats(pet: PetState, now: datetime) -> PetStats:
    """Return the pet's stats after decaying up to ``now``. Pure."""
    floor = pet.decayed_at
    fed_h = hours_since(pet.last_fed, now, floor)
    played_h = hours_since(pet.last_played, now, floor)
    slept_h = hours_since(pet.last_slept, now, floor)
    cleaned_h = hours_since(pet.last_cleaned, now, floor)

    hunger = clamp(pet.hunger - fed_h * HUNGER_PER_HOUR)
    happiness = clamp(pet.happiness - played_h * HAPPINESS_PER_HOUR)
    hygiene = clamp(pet.hygiene - cleaned_h * HYGIENE_PER_HOUR)
    if pet.is_sleeping:
        energy = clamp(pet.energy + slept_h * ENERGY_REGEN_PER_HOUR)
    else:
        energy = clamp(pet.energy - slept_h * ENERGY_DRAIN_PER_HOUR)

    health = pet.health
    if floor is None or now > floor:
        if hunger < CRISIS_THRESHOLD or hygiene < CRISIS_THRESHOLD:
            health = clamp(health - HEALTH_PENALTY)
        if happiness > 70 and hunger > 50:
            health = clamp(health + HEALTH_BONUS)

    return PetStats(
        hunger=hunger,
        happiness=happiness,
        health=health,
        energy=energy,
        hygiene=hygiene,
    )


def apply_decay(pet: PetState, now: datetime) -> PetState:
    """Return a copy of ``pet`` with decayed stats and ``decayed_at`` advanced."""
    decayed = pet.model_copy(deep=True)
    decayed.apply_stats(decay_stats(pet, now))
    if pet.decayed_at is None or now > pet.decayed_at:
        decayed.decayed_at = now
    return decayed
