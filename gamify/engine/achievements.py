"""Achievement evaluator - runs the criterion catalog against evaluation history."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime

from gamify.engine.errors import DuplicateUnlockError, PredicateError
from gamify.engine.xp import xp_event_for_achievement
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
from gamify.schemas.gamification import (
    Attendant,
    Evaluation,
    Season,
    SentimentAnalysis,
    SentimentIndex,
    UnlockedAchievement,
    XpEvent,
)

logger = logging.getLogger(__name__)


def build_sentiment_index(analyses: Iterable[SentimentAnalysis]) -> SentimentIndex:
    """Index classifier output by evaluation id. Later entries win."""
    return {a.evaluation_id: a for a in analyses}


def _longest_run(evaluations: Sequence[Evaluation], rating: int) -> int:
    ordered = sorted(evaluations, key=lambda e: e.occurred_at)
    best = current = 0
    for evaluation in ordered:
        if evaluation.rating == rating:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def _eval_criterion(
    criterion,
    evaluations: Sequence[Evaluation],
    sentiment_index: Mapping[str, SentimentAnalysis] | None,
) -> bool:
    """Evaluate a single criterion against an attendant's evaluations."""
    if isinstance(criterion, EvaluationCount):
        return len(evaluations) >= criterion.min_count
    if isinstance(criterion, RatingCount):
        matching = sum(1 for e in evaluations if e.rating == criterion.rating)
        return matching >= criterion.min_count
    if isinstance(criterion, ConsecutiveRating):
        return _longest_run(evaluations, criterion.rating) >= criterion.streak
    if isinstance(criterion, AverageRating):
        if not evaluations or len(evaluations) < criterion.min_evaluations:
            return False
        average = sum(e.rating for e in evaluations) / len(evaluations)
        if criterion.strict:
            return average > criterion.min_average
        return average >= criterion.min_average
    if isinstance(criterion, PositiveShare):
        if not evaluations or len(evaluations) < criterion.min_evaluations:
            return False
        positive = sum(1 for e in evaluations if e.rating >= criterion.min_rating)
        return positive / len(evaluations) * 100 >= criterion.min_percent
    if isinstance(criterion, SentimentCount):
        if not sentiment_index:
            return False
        matching = 0
        for evaluation in evaluations:
            analysis = sentiment_index.get(evaluation.id)
            if analysis is not None and analysis.sentiment == criterion.sentiment:
                matching += 1
        return matching >= criterion.min_count
    raise TypeError(f"Unsupported criterion: {type(criterion).__name__}")


def is_unlocked(
    achievement: Achievement,
    attendant: Attendant,
    attendant_evaluations: Sequence[Evaluation],
    all_evaluations: Sequence[Evaluation] | None = None,
    all_attendants: Sequence[Attendant] | None = None,
    sentiment_index: Mapping[str, SentimentAnalysis] | None = None,
) -> bool:
    """
    Whether the achievement's criterion holds for this attendant.
    Inactive achievements are never unlocked. Raises PredicateError when the
    criterion cannot be evaluated.
    """
    if not achievement.active:
        return False
    try:
        return _eval_criterion(achievement.criterion, attendant_evaluations, sentiment_index)
    except (TypeError, ValueError, ArithmeticError) as exc:
        raise PredicateError(achievement.id, str(exc)) from exc


def check_achievements(
    achievements: Sequence[Achievement],
    attendant: Attendant,
    attendant_evaluations: Sequence[Evaluation],
    all_evaluations: Sequence[Evaluation] | None = None,
    all_attendants: Sequence[Attendant] | None = None,
    sentiment_index: Mapping[str, SentimentAnalysis] | None = None,
) -> AchievementCheck:
    """Run the whole catalog. A failing criterion counts as locked and is reported in errors."""
    check = AchievementCheck()
    for achievement in achievements:
        try:
            unlocked = is_unlocked(
                achievement,
                attendant,
                attendant_evaluations,
                all_evaluations,
                all_attendants,
                sentiment_index,
            )
        except PredicateError as exc:
            logger.warning("Skipping achievement for attendant %s: %s", attendant.id, exc)
            check.errors.append(str(exc))
            continue
        if unlocked:
            check.unlocked.append(achievement)
    return check


def unlocked_set(
    achievements: Sequence[Achievement],
    attendant: Attendant,
    attendant_evaluations: Sequence[Evaluation],
    all_evaluations: Sequence[Evaluation] | None = None,
    all_attendants: Sequence[Attendant] | None = None,
    sentiment_index: Mapping[str, SentimentAnalysis] | None = None,
    errors: list[str] | None = None,
) -> list[Achievement]:
    """Satisfied achievements. Criterion failures are appended to errors when given."""
    check = check_achievements(
        achievements,
        attendant,
        attendant_evaluations,
        all_evaluations,
        all_attendants,
        sentiment_index,
    )
    if errors is not None:
        errors.extend(check.errors)
    return check.unlocked


def _unlocked_ids(attendant_id: str, previously_unlocked: Iterable[UnlockedAchievement]) -> set[str]:
    return {u.achievement_id for u in previously_unlocked if u.attendant_id == attendant_id}


def newly_unlocked(
    achievements: Sequence[Achievement],
    attendant: Attendant,
    attendant_evaluations: Sequence[Evaluation],
    previously_unlocked: Sequence[UnlockedAchievement],
    all_evaluations: Sequence[Evaluation] | None = None,
    all_attendants: Sequence[Attendant] | None = None,
    sentiment_index: Mapping[str, SentimentAnalysis] | None = None,
    errors: list[str] | None = None,
) -> list[Achievement]:
    """
    Achievements satisfied now that this attendant has not been granted yet.
    Only this difference may trigger a grant; re-running after the grant is a no-op.
    Achievements whose criterion fails stay locked and their messages go to errors.
    """
    already = _unlocked_ids(attendant.id, previously_unlocked)
    current = unlocked_set(
        achievements,
        attendant,
        attendant_evaluations,
        all_evaluations,
        all_attendants,
        sentiment_index,
        errors,
    )
    return [a for a in current if a.id not in already]


def grant_achievements(
    achievements: Sequence[Achievement],
    attendant_id: str,
    previously_unlocked: Sequence[UnlockedAchievement],
    global_multiplier: float = 1.0,
    season: Season | None = None,
    now: datetime | None = None,
) -> list[tuple[UnlockedAchievement, XpEvent]]:
    """Build unlock records and their XP events. Raises DuplicateUnlockError on re-grants."""
    already = _unlocked_ids(attendant_id, previously_unlocked)
    grants = []
    for achievement in achievements:
        if achievement.id in already:
            raise DuplicateUnlockError(attendant_id, achievement.id)
        already.add(achievement.id)

        event = xp_event_for_achievement(
            attendant_id, achievement, global_multiplier, season, now
        )
        unlock = UnlockedAchievement(
            id=f"{attendant_id}:{achievement.id}",
            attendant_id=attendant_id,
            achievement_id=achievement.id,
            unlocked_at=event.occurred_at,
            xp_gained=event.points,
        )
        logger.info(
            "Achievement %s unlocked for attendant %s (+%d XP)",
            achievement.id,
            attendant_id,
            event.points,
        )
        grants.append((unlock, event))
    return grants


def attendant_stats(
    achievements: Sequence[Achievement],
    attendant: Attendant,
    attendant_evaluations: Sequence[Evaluation],
    previously_unlocked: Sequence[UnlockedAchievement],
    all_evaluations: Sequence[Evaluation] | None = None,
    all_attendants: Sequence[Attendant] | None = None,
    sentiment_index: Mapping[str, SentimentAnalysis] | None = None,
) -> AchievementStats:
    active = [a for a in achievements if a.active]
    unlocked = unlocked_set(
        active,
        attendant,
        attendant_evaluations,
        all_evaluations,
        all_attendants,
        sentiment_index,
    )
    total = len(active)
    granted_xp = sum(
        u.xp_gained for u in previously_unlocked if u.attendant_id == attendant.id
    )
    return AchievementStats(
        total=total,
        unlocked_count=len(unlocked),
        locked_count=total - len(unlocked),
        progress_percent=len(unlocked) / total * 100 if total else 0.0,
        total_xp_from_achievements=granted_xp,
    )


def population_stats(
    achievements: Sequence[Achievement],
    attendants: Sequence[Attendant],
    all_evaluations: Sequence[Evaluation],
    sentiment_index: Mapping[str, SentimentAnalysis] | None = None,
) -> list[AchievementPopulationStat]:
    """For each active achievement, how many attendants satisfy it right now."""
    by_attendant: dict[str, list[Evaluation]] = {}
    for evaluation in all_evaluations:
        by_attendant.setdefault(evaluation.attendant_id, []).append(evaluation)

    stats = []
    for achievement in achievements:
        if not achievement.active:
            continue
        unlocked_by = []
        for attendant in attendants:
            try:
                unlocked = is_unlocked(
                    achievement,
                    attendant,
                    by_attendant.get(attendant.id, []),
                    all_evaluations,
                    attendants,
                    sentiment_index,
                )
            except PredicateError as exc:
                logger.warning("Population stats skipped %s: %s", attendant.id, exc)
                continue
            if unlocked:
                unlocked_by.append(attendant.id)

        total = len(attendants)
        stats.append(
            AchievementPopulationStat(
                achievement_id=achievement.id,
                unlocked_count=len(unlocked_by),
                total_attendants=total,
                progress_percent=len(unlocked_by) / total * 100 if total else 0.0,
                unlocked_by=unlocked_by,
            )
        )
    return stats


def sort_achievements_by_difficulty(
    achievements: Sequence[Achievement], ascending: bool = True
) -> list[Achievement]:
    return sorted(achievements, key=lambda a: a.xp_reward, reverse=not ascending)
