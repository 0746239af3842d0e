"""XP engine - turns evaluations and achievement unlocks into ledger events."""

import logging
import math
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from gamify.engine.seasons import active_season
from gamify.schemas.achievement import Achievement
from gamify.schemas.gamification import Evaluation, RatingScores, Season, XpEvent
from gamify.schemas.progress import XpStats

logger = logging.getLogger(__name__)

DEFAULT_RATING_SCORES: RatingScores = {"1": -5, "2": -2, "3": 1, "4": 3, "5": 5}


def base_xp(rating: int, rating_scores: RatingScores) -> int:
    """Table lookup. Missing ratings score 0 instead of raising."""
    key = str(rating)
    if key not in rating_scores:
        logger.warning("No score configured for rating %s, defaulting to 0 XP", rating)
        return 0
    return int(rating_scores[key])


def final_xp(base: int, global_multiplier: float = 1.0, season_multiplier: float = 1.0) -> int:
    """Scaled XP rounded half up, so 2.5 -> 3 and -2.5 -> -2 on every client."""
    return math.floor(base * global_multiplier * season_multiplier + 0.5)


def resolve_season(seasons: Sequence[Season], at: datetime) -> Season | None:
    """Season whose multiplier applies to something that happened at `at`."""
    return active_season(seasons, at)


def _season_multiplier(season: Season | None, at: datetime) -> tuple[float, str | None]:
    if season is None:
        return 1.0, None
    if not (season.active and season.start_time <= at <= season.end_time):
        logger.debug("Season %s does not cover %s, multiplier ignored", season.id, at.isoformat())
        return 1.0, None
    return season.xp_multiplier, season.id


def xp_event_for_evaluation(
    evaluation: Evaluation,
    rating_scores: RatingScores,
    global_multiplier: float = 1.0,
    season: Season | None = None,
) -> XpEvent:
    """
    Ledger event for one evaluation.
    The season only applies if it was active at evaluation.occurred_at,
    so backfills of past evaluations get the multiplier of their own period.
    """
    base = base_xp(evaluation.rating, rating_scores)
    season_multiplier, season_id = _season_multiplier(season, evaluation.occurred_at)
    return XpEvent(
        id=f"evaluation:{evaluation.id}",
        attendant_id=evaluation.attendant_id,
        base_points=base,
        multiplier=global_multiplier * season_multiplier,
        points=final_xp(base, global_multiplier, season_multiplier),
        reason=f"Evaluation {evaluation.rating} stars",
        type="evaluation",
        related_id=evaluation.id,
        occurred_at=evaluation.occurred_at,
        season_id=season_id,
    )


def xp_events_for_evaluations(
    evaluations: Iterable[Evaluation],
    rating_scores: RatingScores,
    global_multiplier: float,
    seasons: Sequence[Season],
) -> list[XpEvent]:
    """Recompute evaluation events, each against the season active at its own timestamp."""
    return [
        xp_event_for_evaluation(
            evaluation,
            rating_scores,
            global_multiplier,
            resolve_season(seasons, evaluation.occurred_at),
        )
        for evaluation in evaluations
    ]


def xp_event_for_achievement(
    attendant_id: str,
    achievement: Achievement,
    global_multiplier: float = 1.0,
    season: Season | None = None,
    now: datetime | None = None,
) -> XpEvent:
    granted_at = now or datetime.now(timezone.utc)
    season_multiplier, season_id = _season_multiplier(season, granted_at)
    return XpEvent(
        id=f"achievement:{attendant_id}:{achievement.id}",
        attendant_id=attendant_id,
        base_points=achievement.xp_reward,
        multiplier=global_multiplier * season_multiplier,
        points=final_xp(achievement.xp_reward, global_multiplier, season_multiplier),
        reason=f"Achievement unlocked: {achievement.title}",
        type="achievement",
        related_id=achievement.id,
        occurred_at=granted_at,
        season_id=season_id,
    )


def apply_xp_event(total: int, event: XpEvent) -> int:
    """Incremental step. Folding every event must equal total_xp of the ledger."""
    return total + event.points


def total_xp(events: Iterable[XpEvent]) -> int:
    return sum(event.points for event in events)


def group_events_by_attendant(events: Iterable[XpEvent]) -> dict[str, list[XpEvent]]:
    grouped: dict[str, list[XpEvent]] = {}
    for event in events:
        grouped.setdefault(event.attendant_id, []).append(event)
    return grouped


def filter_events_by_season(events: Iterable[XpEvent], season: Season) -> list[XpEvent]:
    """Events whose timestamp falls inside the season window."""
    return [e for e in events if season.start_time <= e.occurred_at <= season.end_time]


def attendant_xp_stats(events: Sequence[XpEvent]) -> XpStats:
    evaluation_events = [e for e in events if e.type == "evaluation"]
    achievement_events = [e for e in events if e.type == "achievement"]
    average = (
        sum(e.points for e in evaluation_events) / len(evaluation_events)
        if evaluation_events
        else 0.0
    )
    return XpStats(
        total_xp=total_xp(events),
        evaluation_count=len(evaluation_events),
        achievement_count=len(achievement_events),
        average_xp_per_evaluation=average,
    )
