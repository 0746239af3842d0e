"""Level, season and XP progress projections."""

from typing import Literal

from pydantic import BaseModel, Field

from gamify.schemas.gamification import LevelReward


class ValidationResult(BaseModel):
    """Outcome of a configuration check."""

    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class LevelProgress(BaseModel):
    """Where a given XP total sits on the level curve."""

    level: int
    percent: float
    xp_into_level: int
    xp_to_next: int
    xp_for_level: int
    xp_for_next_level: int | None = None  # None at max level


class LevelInfo(BaseModel):
    """Level progress with the attached cosmetic rewards."""

    progress: LevelProgress
    reward: LevelReward | None = None
    next_reward: LevelReward | None = None


class RewardTrackStep(BaseModel):
    level: int
    xp_required: int
    reward: LevelReward | None = None
    is_unlocked: bool
    is_current: bool


class UpcomingReward(BaseModel):
    level: int
    xp_required: int
    xp_remaining: int
    reward: LevelReward


class LevelStats(BaseModel):
    """Level distribution over a group of attendants."""

    average_level: float
    level_distribution: dict[int, int] = Field(default_factory=dict)
    highest_level: int
    lowest_level: int
    total_levels: int


class LevelTimeEstimate(BaseModel):
    days_estimated: int | None  # None when recent gains cannot reach the next level
    xp_needed: int
    average_daily_xp: float
    confidence: Literal["high", "medium", "low"]


class SeasonProgress(BaseModel):
    percent: float
    days_elapsed: int
    days_remaining: int
    duration_days: int


class SeasonStats(BaseModel):
    progress: SeasonProgress
    is_active: bool
    status: Literal["upcoming", "active", "ended"]


class XpStats(BaseModel):
    """XP ledger summary for one attendant."""

    total_xp: int
    evaluation_count: int
    achievement_count: int
    average_xp_per_evaluation: float
