"""Achievement definitions and evaluation results.

Criteria are a closed tagged union keyed on ``kind``. Each kind carries data
parameters only, so catalogs stay serializable and can be fingerprinted.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from gamify.schemas.gamification import SentimentLabel, normalize_sentiment

CRITERIA_VERSION = 1


class EvaluationCount(BaseModel):
    """At least min_count evaluations."""

    kind: Literal["evaluation_count"] = "evaluation_count"
    min_count: int = Field(ge=0)


class RatingCount(BaseModel):
    """At least min_count evaluations with exactly this rating."""

    kind: Literal["rating_count"] = "rating_count"
    rating: int = Field(ge=1, le=5)
    min_count: int = Field(ge=0)


class ConsecutiveRating(BaseModel):
    """A run of streak evaluations with this rating, in occurred_at order."""

    kind: Literal["consecutive_rating"] = "consecutive_rating"
    rating: int = Field(ge=1, le=5)
    streak: int = Field(ge=1)


class AverageRating(BaseModel):
    """Average rating at (or above, when strict) min_average over min_evaluations or more."""

    kind: Literal["average_rating"] = "average_rating"
    min_average: float = Field(ge=1, le=5)
    min_evaluations: int = Field(1, ge=1)
    strict: bool = False


class PositiveShare(BaseModel):
    """Share of evaluations rated min_rating or higher reaches min_percent."""

    kind: Literal["positive_share"] = "positive_share"
    min_percent: float = Field(ge=0, le=100)
    min_evaluations: int = Field(1, ge=1)
    min_rating: int = Field(4, ge=1, le=5)


class SentimentCount(BaseModel):
    """At least min_count evaluations classified with this sentiment."""

    kind: Literal["sentiment_count"] = "sentiment_count"
    sentiment: SentimentLabel
    min_count: int = Field(ge=1)

    @field_validator("sentiment", mode="before")
    @classmethod
    def canonical_sentiment(cls, v):
        if isinstance(v, str):
            return normalize_sentiment(v)
        return v


Criterion = Annotated[
    Union[
        EvaluationCount,
        RatingCount,
        ConsecutiveRating,
        AverageRating,
        PositiveShare,
        SentimentCount,
    ],
    Field(discriminator="kind"),
]


class Achievement(BaseModel):
    """Catalog entry granting xp_reward once, when its criterion first holds."""

    id: str
    title: str
    description: str = ""
    icon: str | None = None
    xp_reward: int = Field(0, ge=0)
    active: bool = True
    criterion: Criterion


class AchievementCheck(BaseModel):
    """Result of running a catalog against one attendant."""

    unlocked: list[Achievement] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class AchievementStats(BaseModel):
    """Per-attendant achievement progress."""

    total: int
    unlocked_count: int
    locked_count: int
    progress_percent: float
    total_xp_from_achievements: int


class AchievementPopulationStat(BaseModel):
    """How many attendants currently satisfy one achievement."""

    achievement_id: str
    unlocked_count: int
    total_attendants: int
    progress_percent: float
    unlocked_by: list[str] = Field(default_factory=list)
