"""Leaderboard filters, entries and insights."""

from datetime import datetime

from pydantic import BaseModel, Field

from gamify.schemas.gamification import Season


class DateRange(BaseModel):
    """Inclusive on both ends."""

    start: datetime
    end: datetime


class LeaderboardFilters(BaseModel):
    season_id: str | None = None
    department_id: str | None = None
    min_level: int | None = None
    max_level: int | None = None
    date_range: DateRange | None = None
    offset: int = Field(0, ge=0)
    limit: int | None = Field(None, ge=1)


class LeaderboardEntry(BaseModel):
    """Derived ranking row, never stored."""

    attendant_id: str
    attendant_name: str = ""
    department_id: str | None = None
    total_xp: int
    level: int
    position: int = 0
    evaluations_count: int = 0
    achievements_count: int = 0
    average_rating: float = 0.0
    last_activity: datetime | None = None


class PositionLookup(BaseModel):
    """position is 0 when the attendant is not part of the filtered population."""

    position: int
    entry: LeaderboardEntry | None = None
    total_participants: int


class PeriodSnapshot(BaseModel):
    xp: int
    position: int
    evaluations: int


class PerformanceComparison(BaseModel):
    current: PeriodSnapshot
    previous: PeriodSnapshot
    improvement: PeriodSnapshot


class LeaderboardStats(BaseModel):
    total_attendants: int
    total_xp: int
    average_xp: float
    top_performer: LeaderboardEntry | None = None
    most_improved: LeaderboardEntry | None = None
    active_season: Season | None = None


class LeaderboardTrends(BaseModel):
    average_xp_change: float
    participation_rate: float
    competitiveness: float


class LeaderboardInsights(BaseModel):
    top_performers: list[LeaderboardEntry] = Field(default_factory=list)
    rising_stars: list[LeaderboardEntry] = Field(default_factory=list)
    needs_attention: list[LeaderboardEntry] = Field(default_factory=list)
    trends: LeaderboardTrends
