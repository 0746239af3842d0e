"""Gamification configuration schema."""

from pydantic import BaseModel, Field

from gamify.schemas.achievement import Achievement
from gamify.schemas.gamification import LevelReward, RatingScores, Season


class GamificationConfig(BaseModel):
    """Everything the engine needs, passed explicitly to each call."""

    rating_scores: RatingScores = Field(default_factory=dict)
    global_xp_multiplier: float = 1.0
    level_base_xp: int = 100
    max_level: int = 50
    achievements: list[Achievement] = Field(default_factory=list)
    level_rewards: list[LevelReward] = Field(default_factory=list)
    seasons: list[Season] = Field(default_factory=list)
