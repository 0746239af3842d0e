"""Season registry - pure lookups over a season list and a reference time."""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Literal

from gamify.engine.errors import ConfigurationError
from gamify.schemas.gamification import Season, SeasonDraft
from gamify.schemas.progress import SeasonProgress, SeasonStats

logger = logging.getLogger(__name__)

MIN_SEASON_DURATION = timedelta(days=1)


def _check_bounds(season: Season) -> None:
    """Raise for seasons that break invariants the lookups depend on."""
    problems = []
    if season.end_time <= season.start_time:
        problems.append(f"Season {season.id}: end time must be after start time")
    if season.xp_multiplier <= 0:
        problems.append(f"Season {season.id}: XP multiplier must be greater than zero")
    if problems:
        raise ConfigurationError(problems)


def _covers(season: Season, at: datetime) -> bool:
    return season.start_time <= at <= season.end_time


def active_season(seasons: Sequence[Season], now: datetime) -> Season | None:
    """
    Active season containing now (bounds inclusive).
    Overlapping matches resolve to the most recently started season.
    """
    candidates = []
    for season in seasons:
        if not season.active:
            continue
        _check_bounds(season)
        if _covers(season, now):
            candidates.append(season)

    if len(candidates) > 1:
        logger.warning(
            "Overlapping active seasons at %s: %s",
            now.isoformat(),
            ", ".join(s.id for s in candidates),
        )
    # max() keeps the first of equal start times, so ties stay stable
    return max(candidates, key=lambda s: s.start_time, default=None)


def next_season(seasons: Sequence[Season], now: datetime) -> Season | None:
    """Earliest active season that has not started yet."""
    upcoming = []
    for season in seasons:
        if not season.active:
            continue
        _check_bounds(season)
        if season.start_time > now:
            upcoming.append(season)
    return min(upcoming, key=lambda s: s.start_time, default=None)


def previous_season(seasons: Sequence[Season], now: datetime) -> Season | None:
    """Most recently ended season, active or not."""
    past = []
    for season in seasons:
        _check_bounds(season)
        if season.end_time < now:
            past.append(season)
    return max(past, key=lambda s: s.end_time, default=None)


def is_season_active(season: Season, now: datetime) -> bool:
    if not season.active:
        return False
    _check_bounds(season)
    return _covers(season, now)


def season_duration_days(season: Season) -> int:
    return (season.end_time - season.start_time).days


def season_progress(season: Season, now: datetime) -> SeasonProgress:
    """Elapsed share of the season at now, clamped to [0, 100]."""
    _check_bounds(season)
    total = (season.end_time - season.start_time).total_seconds()
    elapsed = (now - season.start_time).total_seconds()
    percent = 100.0 * elapsed / total

    return SeasonProgress(
        percent=min(100.0, max(0.0, percent)),
        days_elapsed=max(0, (now - season.start_time).days),
        days_remaining=max(0, (season.end_time - now).days),
        duration_days=season_duration_days(season),
    )


def season_stats(season: Season, now: datetime) -> SeasonStats:
    progress = season_progress(season, now)
    if now > season.end_time:
        status = "ended"
    elif now < season.start_time:
        status = "upcoming"
    else:
        status = "active"
    return SeasonStats(
        progress=progress,
        is_active=is_season_active(season, now),
        status=status,
    )


def seasons_overlap(first: Season, second: Season) -> bool:
    return first.start_time <= second.end_time and second.start_time <= first.end_time


def find_overlapping_seasons(seasons: Sequence[Season]) -> list[tuple[str, str]]:
    """Pairs of active seasons whose windows intersect."""
    active = [s for s in seasons if s.active]
    pairs = []
    for i, first in enumerate(active):
        for second in active[i + 1 :]:
            if seasons_overlap(first, second):
                pairs.append((first.id, second.id))
    return pairs


def sort_seasons_by_start(seasons: Sequence[Season], ascending: bool = True) -> list[Season]:
    return sorted(seasons, key=lambda s: s.start_time, reverse=not ascending)


def filter_seasons_by_status(
    seasons: Sequence[Season],
    status: Literal["active", "upcoming", "past"],
    now: datetime,
) -> list[Season]:
    if status == "active":
        return [s for s in seasons if s.active and _covers(s, now)]
    if status == "upcoming":
        return [s for s in seasons if s.active and s.start_time > now]
    if status == "past":
        return [s for s in seasons if s.end_time < now]
    return []


def validate_season(season: SeasonDraft | Season) -> list[str]:
    """Return the problems that block creating or updating a season."""
    errors = []

    if not season.name or not season.name.strip():
        errors.append("Season name is required")
    if season.start_time is None:
        errors.append("Start time is required")
    if season.end_time is None:
        errors.append("End time is required")

    if season.start_time is not None and season.end_time is not None:
        if season.start_time >= season.end_time:
            errors.append("Start time must be before end time")
        if season.end_time - season.start_time < MIN_SEASON_DURATION:
            errors.append("Season must last at least 1 day")

    if season.xp_multiplier is not None and season.xp_multiplier <= 0:
        errors.append("XP multiplier must be greater than zero")

    return errors


def ensure_valid_season(season: SeasonDraft | Season) -> None:
    errors = validate_season(season)
    if errors:
        raise ConfigurationError(errors)
