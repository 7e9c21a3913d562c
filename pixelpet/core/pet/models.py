from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal, get_args
from uuid import uuid4

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

Mood = Literal[
    "ecstatic",
    "happy",
    "content",
    "neutral",
    "sad",
    "angry",
    "sick",
    "sleepy",
    "hungry",
]

InteractionType = Literal[
    "feed", "play", "pet", "clean", "sleep", "wake", "medicine", "talk", "custom"
]

Sentiment = Literal["positive", "neutral", "negative"]

WordCategory = Literal[
    "greeting",
    "food",
    "emotion",
    "action",
    "name",
    "praise",
    "scolding",
    "question",
    "other",
]

ItemType = Literal["food", "toy", "accessory", "background", "decoration"]

Speaker = Literal["user", "pet"]

STAT_NAMES: tuple[str, ...] = ("hunger", "happiness", "health", "energy", "hygiene")

MOODS: tuple[str, ...] = get_args(Mood)

PET_NAME_MAX = 12
ITEM_NAME_MAX = 20


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, float(value)))


def _coerce_stat(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError("stat must be a number")
    return clamp(value)


Stat = Annotated[float, BeforeValidator(_coerce_stat)]


def _as_utc(value: datetime) -> datetime:
    # naive timestamps in old saves are UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


Timestamp = Annotated[datetime, AfterValidator(_as_utc)]


class _Model(BaseModel):
    """Base for persisted models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PetStats(_Model):
    """The five bounded needs. Higher is better for all of them."""

    hunger: Stat = 80.0
    happiness: Stat = 70.0
    health: Stat = 90.0
    energy: Stat = 85.0
    hygiene: Stat = 90.0


class PetState(PetStats):
    """The creature itself. Stats are stored flat, next to identity and flags."""

    id: str = Field(default_factory=lambda: new_id("pet"))
    name: str = "Rex"
    birth_date: Timestamp = Field(default_factory=utc_now)
    last_fed: Timestamp = Field(default_factory=utc_now)
    last_played: Timestamp = Field(default_factory=utc_now)
    last_slept: Timestamp = Field(default_factory=utc_now)
    last_cleaned: Timestamp = Field(default_factory=utc_now)
    decayed_at: Timestamp | None = None
    is_sleeping: bool = False
    is_sick: bool = False
    stage: Literal["adult"] = "adult"
    mood: Mood = "content"
    gender: Literal["male"] = "male"

    @field_validator("stage", mode="before")
    @classmethod
    def _always_adult(cls, value: object) -> str:
        return "adult"

    @field_validator("gender", mode="before")
    @classmethod
    def _always_male(cls, value: object) -> str:
        return "male"

    @field_validator("name")
    @classmethod
    def _cap_name(cls, value: str) -> str:
        return value[:PET_NAME_MAX]

    @property
    def stats(self) -> PetStats:
        return PetStats(**{name: getattr(self, name) for name in STAT_NAMES})

    def apply_stats(self, stats: PetStats) -> None:
        for name in STAT_NAMES:
            setattr(self, name, getattr(stats, name))


class Interaction(_Model):
    """One logged action. Append-only."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("int"))
    type: InteractionType
    timestamp: Timestamp = Field(default_factory=utc_now)
    value: float | None = None
    note: str | None = None


class LearnedWord(_Model):
    word: str
    learned_at: Timestamp = Field(default_factory=utc_now)
    usage_count: int = Field(default=1, ge=1)
    context: list[str] = Field(default_factory=list)
    sentiment: Sentiment = "neutral"
    category: WordCategory = "other"


class Vocabulary(_Model):
    words: list[LearnedWord] = Field(default_factory=list)
    total_words_learned: int = 0
    favorite_words: list[str] = Field(default_factory=list)
    user_name: str | None = None


class ConversationEntry(_Model):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("conv"))
    speaker: Speaker
    message: str
    timestamp: Timestamp = Field(default_factory=utc_now)
    words_used: list[str] = Field(default_factory=list)


class Memory(_Model):
    interactions: list[Interaction] = Field(default_factory=list)
    favorite_foods: list[str] = Field(default_factory=list)
    favorite_games: list[str] = Field(default_factory=list)
    vocabulary: Vocabulary = Field(default_factory=Vocabulary)
    conversation_history: list[ConversationEntry] = Field(default_factory=list)


class ItemEffect(_Model):
    """Signed stat deltas. Absent fields leave the stat alone."""

    hunger: float | None = None
    happiness: float | None = None
    health: float | None = None
    energy: float | None = None
    hygiene: float | None = None

    def deltas(self) -> dict[str, float]:
        return {
            name: getattr(self, name)
            for name in STAT_NAMES
            if getattr(self, name) is not None
        }


class CustomItem(_Model):
    id: str = Field(default_factory=lambda: new_id("item"))
    name: str
    type: ItemType = "food"
    pixel_data: str = ""
    color: str = "#ffffff"
    effect: ItemEffect = Field(default_factory=ItemEffect)
    unlocked: bool = True
    use_count: int = 0

    @field_validator("name")
    @classmethod
    def _cap_name(cls, value: str) -> str:
        return value[:ITEM_NAME_MAX]


class GameStats(_Model):
    total_interactions: int = 0
    words_learned: int = 0
    conversations_had: int = 0
    items_collected: int = 0
    last_save: Timestamp = Field(default_factory=utc_now)


class GameState(_Model):
    """Root aggregate and the unit of persistence."""

    pet: PetState = Field(default_factory=PetState)
    memory: Memory = Field(default_factory=Memory)
    inventory: list[CustomItem] = Field(default_factory=list)
    unlocked_items: list[str] = Field(default_factory=list)
    game_stats: GameStats = Field(default_factory=GameStats)

    def find_item(self, item_id: str) -> CustomItem | None:
        return next((i for i in self.inventory if i.id == item_id), None)


class PetResponse(BaseModel):
    """What the pet says back, tagged with its mood at the time."""

    message: str
    mood: Mood
    animation: str | None = None
    learned_words: list[str] = Field(default_factory=list)


class StatusMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success", "error"]
    text: str
