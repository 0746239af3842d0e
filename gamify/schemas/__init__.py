"""Pydantic schemas."""

from gamify.schemas.gamification import (
    Attendant,
    Evaluation,
    LevelReward,
    RatingScores,
    Season,
    SeasonDraft,
    SentimentAnalysis,
    SentimentIndex,
    UnlockedAchievement,
    XpEvent,
)
from gamify.schemas.achievement import (
    Achievement,
    AchievementCheck,
    AchievementPopulationStat,
    AchievementStats,
    AverageRating,
    ConsecutiveRating,
    EvaluationCount,
    PositiveShare,
    RatingCount,
    SentimentCount,
)
from gamify.schemas.leaderboard import DateRange, LeaderboardEntry, LeaderboardFilters

__all__ = [
    "Attendant",
    "Evaluation",
    "LevelReward",
    "RatingScores",
    "Season",
    "SeasonDraft",
    "SentimentAnalysis",
    "SentimentIndex",
    "UnlockedAchievement",
    "XpEvent",
    "Achievement",
    "AchievementCheck",
    "AchievementPopulationStat",
    "AchievementStats",
    "AverageRating",
    "ConsecutiveRating",
    "EvaluationCount",
    "PositiveShare",
    "RatingCount",
    "SentimentCount",
    "DateRange",
    "LeaderboardEntry",
    "LeaderboardFilters",
]
