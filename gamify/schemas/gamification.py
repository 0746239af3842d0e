"""Core gamification records."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Star rating ("1".."5") -> signed base XP
RatingScores = dict[str, int]

XpEventType = Literal["evaluation", "achievement"]
SentimentLabel = Literal["positive", "negative", "neutral"]

_SENTIMENT_ALIASES = {
    "positivo": "positive",
    "negativo": "negative",
    "neutro": "neutral",
}


def normalize_sentiment(value: str) -> str:
    """Map classifier labels (any casing, pt-BR or en) to the canonical enum."""
    label = value.strip().lower()
    return _SENTIMENT_ALIASES.get(label, label)


class Attendant(BaseModel):
    """Staff member being evaluated."""

    id: str
    name: str = ""
    department_id: str | None = None


class Evaluation(BaseModel):
    """Customer evaluation of an attendant. xp_gained is a snapshot taken at creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    attendant_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = ""
    occurred_at: datetime
    xp_gained: int = 0


class SentimentAnalysis(BaseModel):
    """Output of the upstream comment classifier, passed through unmodified."""

    evaluation_id: str
    sentiment: SentimentLabel
    summary: str = ""

    @field_validator("sentiment", mode="before")
    @classmethod
    def canonical_sentiment(cls, v):
        if isinstance(v, str):
            return normalize_sentiment(v)
        return v


# evaluation_id -> analysis
SentimentIndex = dict[str, SentimentAnalysis]


class Season(BaseModel):
    """Time-boxed period with an extra XP multiplier.

    Bounds and multiplier are checked by the season registry, not here, so that
    corrupt stored records surface as ConfigurationError instead of failing to load.
    """

    id: str
    name: str
    start_time: datetime
    end_time: datetime
    active: bool = True
    xp_multiplier: float = 1.0


class SeasonDraft(BaseModel):
    """Partial season as submitted for creation or update."""

    name: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    active: bool = True
    xp_multiplier: float | None = None


class XpEvent(BaseModel):
    """Immutable XP ledger entry. Total XP is the sum of points."""

    id: str
    attendant_id: str
    base_points: int
    multiplier: float = 1.0
    points: int
    reason: str = ""
    type: XpEventType
    related_id: str
    occurred_at: datetime
    season_id: str | None = None


class UnlockedAchievement(BaseModel):
    """Append-only unlock fact, one per (attendant_id, achievement_id)."""

    id: str
    attendant_id: str
    achievement_id: str
    unlocked_at: datetime
    xp_gained: int = 0


class LevelReward(BaseModel):
    """Cosmetic reward attached to reaching a level."""

    level: int = Field(ge=1)
    title: str = ""
    description: str = ""
    active: bool = True
    icon: str | None = None  # icon name, resolved by the UI
