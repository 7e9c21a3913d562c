from __future__ import annotations

from pixelpet.core.pet.models import Mood, PetState


def calculate_mood(pet: PetState) -> Mood:
    """Derive the single mood label from flags and stats. First match wins."""
    if pet.is_sick:
        return "sick"
    if pet.is_sleeping:
        return "sleepy"
    if pet.hunger < 20:
        return "hungry"
    if pet.happiness > 80 and pet.health > 70:
        return "ecstatic"
    if pet.happiness > 60 and pet.health > 50:
        return "happy"
    if pet.happiness > 40:
        return "content"
    if pet.happiness > 20:
        return "neutral"
    if pet.happiness > 10:
        return "sad"
    return "angry"


def with_mood(pet: PetState) -> PetState:
    """Recompute ``pet.mood`` in place and return the pet."""
    pet.mood = calculate_mood(pet)
    return pet
