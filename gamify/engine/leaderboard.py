"""Leaderboard generation - a stateless, deterministic projection of the XP ledger.

Ranking order: total_xp DESC, then evaluations_count DESC, then average_rating DESC.
Remaining ties keep the order of the attendants list (sorted() is stable).
Positions are assigned before pagination so pages carry global positions.
"""

import calendar
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Literal

from gamify.engine.levels import BASE_XP, MAX_LEVEL, level_from_xp
from gamify.engine.seasons import active_season
from gamify.engine.xp import group_events_by_attendant, total_xp
from gamify.schemas.gamification import Attendant, Evaluation, Season, XpEvent
from gamify.schemas.leaderboard import (
    DateRange,
    LeaderboardEntry,
    LeaderboardFilters,
    LeaderboardInsights,
    LeaderboardStats,
    LeaderboardTrends,
    PerformanceComparison,
    PeriodSnapshot,
    PositionLookup,
)

Period = Literal["daily", "weekly", "monthly"]


def _filter_events(events: Sequence[XpEvent], filters: LeaderboardFilters) -> list[XpEvent]:
    result = list(events)
    if filters.date_range is not None:
        start, end = filters.date_range.start, filters.date_range.end
        result = [e for e in result if start <= e.occurred_at <= end]
    if filters.season_id:
        result = [e for e in result if e.season_id == filters.season_id]
    return result


def _ranking_key(entry: LeaderboardEntry) -> tuple:
    return (-entry.total_xp, -entry.evaluations_count, -entry.average_rating)


def generate(
    attendants: Sequence[Attendant],
    xp_events: Sequence[XpEvent],
    filters: LeaderboardFilters | None = None,
    evaluations: Sequence[Evaluation] | None = None,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> list[LeaderboardEntry]:
    """
    Rank attendants by XP earned within the filters.
    average_rating uses the evaluations behind the filtered evaluation events;
    it is 0.0 when evaluations are not supplied.
    """
    filters = filters or LeaderboardFilters()
    events = _filter_events(xp_events, filters)
    grouped = group_events_by_attendant(events)
    ratings = {e.id: e.rating for e in evaluations or []}

    entries = []
    for attendant in attendants:
        if filters.department_id and attendant.department_id != filters.department_id:
            continue

        own = grouped.get(attendant.id, [])
        total = total_xp(own)
        level = level_from_xp(total, base_xp, max_level)
        if filters.min_level is not None and level < filters.min_level:
            continue
        if filters.max_level is not None and level > filters.max_level:
            continue

        evaluation_events = [e for e in own if e.type == "evaluation"]
        rated = [ratings[e.related_id] for e in evaluation_events if e.related_id in ratings]

        entries.append(
            LeaderboardEntry(
                attendant_id=attendant.id,
                attendant_name=attendant.name,
                department_id=attendant.department_id,
                total_xp=total,
                level=level,
                evaluations_count=len(evaluation_events),
                achievements_count=sum(1 for e in own if e.type == "achievement"),
                average_rating=sum(rated) / len(rated) if rated else 0.0,
                last_activity=max((e.occurred_at for e in own), default=None),
            )
        )

    entries = sorted(entries, key=_ranking_key)
    for index, entry in enumerate(entries):
        entry.position = index + 1

    start = filters.offset
    end = start + filters.limit if filters.limit else None
    return entries[start:end]


def find_position(
    attendant_id: str,
    attendants: Sequence[Attendant],
    xp_events: Sequence[XpEvent],
    filters: LeaderboardFilters | None = None,
    evaluations: Sequence[Evaluation] | None = None,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> PositionLookup:
    """Locate one attendant. position is 0 when filtered out or not on the page."""
    board = generate(attendants, xp_events, filters, evaluations, base_xp, max_level)
    entry = next((e for e in board if e.attendant_id == attendant_id), None)
    return PositionLookup(
        position=entry.position if entry else 0,
        entry=entry,
        total_participants=len(board),
    )


def department_leaderboards(
    attendants: Sequence[Attendant],
    xp_events: Sequence[XpEvent],
    filters: LeaderboardFilters | None = None,
    evaluations: Sequence[Evaluation] | None = None,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> dict[str, list[LeaderboardEntry]]:
    filters = filters or LeaderboardFilters()
    departments = dict.fromkeys(a.department_id for a in attendants if a.department_id)
    return {
        department: generate(
            attendants,
            xp_events,
            filters.model_copy(update={"department_id": department}),
            evaluations,
            base_xp,
            max_level,
        )
        for department in departments
    }


def period_range(period: Period, reference: datetime) -> DateRange:
    """Calendar day, Sunday-started week or month containing reference."""
    day_start = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    day_end = reference.replace(hour=23, minute=59, second=59, microsecond=999999)

    if period == "daily":
        return DateRange(start=day_start, end=day_end)
    if period == "weekly":
        since_sunday = (reference.weekday() + 1) % 7
        start = day_start - timedelta(days=since_sunday)
        end = day_end + timedelta(days=6 - since_sunday)
        return DateRange(start=start, end=end)
    if period == "monthly":
        last_day = calendar.monthrange(reference.year, reference.month)[1]
        return DateRange(start=day_start.replace(day=1), end=day_end.replace(day=last_day))
    raise ValueError(f"Unknown period: {period}")


def period_ranking(
    attendants: Sequence[Attendant],
    xp_events: Sequence[XpEvent],
    period: Period,
    reference: datetime,
    evaluations: Sequence[Evaluation] | None = None,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> list[LeaderboardEntry]:
    filters = LeaderboardFilters(date_range=period_range(period, reference))
    return generate(attendants, xp_events, filters, evaluations, base_xp, max_level)


def _snapshot(lookup: PositionLookup) -> PeriodSnapshot:
    entry = lookup.entry
    return PeriodSnapshot(
        xp=entry.total_xp if entry else 0,
        position=lookup.position,
        evaluations=entry.evaluations_count if entry else 0,
    )


def compare_performance(
    attendant_id: str,
    attendants: Sequence[Attendant],
    xp_events: Sequence[XpEvent],
    current: DateRange,
    previous: DateRange,
    evaluations: Sequence[Evaluation] | None = None,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> PerformanceComparison:
    """Deltas between two windows. A positive position delta means the attendant moved up."""
    now = _snapshot(
        find_position(
            attendant_id,
            attendants,
            xp_events,
            LeaderboardFilters(date_range=current),
            evaluations,
            base_xp,
            max_level,
        )
    )
    before = _snapshot(
        find_position(
            attendant_id,
            attendants,
            xp_events,
            LeaderboardFilters(date_range=previous),
            evaluations,
            base_xp,
            max_level,
        )
    )
    return PerformanceComparison(
        current=now,
        previous=before,
        improvement=PeriodSnapshot(
            xp=now.xp - before.xp,
            position=before.position - now.position,
            evaluations=now.evaluations - before.evaluations,
        ),
    )


def most_improved(
    board: Sequence[LeaderboardEntry],
    xp_events: Sequence[XpEvent],
    now: datetime,
    window_days: int = 30,
) -> LeaderboardEntry | None:
    """Entry with the most XP earned in the last window_days."""
    since = now - timedelta(days=window_days)
    grouped = group_events_by_attendant(e for e in xp_events if e.occurred_at >= since)
    best, best_xp = None, 0
    for entry in board:
        recent = total_xp(grouped.get(entry.attendant_id, []))
        if recent > best_xp:
            best, best_xp = entry, recent
    return best


def leaderboard_stats(
    attendants: Sequence[Attendant],
    xp_events: Sequence[XpEvent],
    seasons: Sequence[Season],
    now: datetime,
    filters: LeaderboardFilters | None = None,
    evaluations: Sequence[Evaluation] | None = None,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> LeaderboardStats:
    board = generate(attendants, xp_events, filters, evaluations, base_xp, max_level)
    total = sum(e.total_xp for e in board)
    return LeaderboardStats(
        total_attendants=len(board),
        total_xp=total,
        average_xp=total / len(board) if board else 0.0,
        top_performer=board[0] if board else None,
        most_improved=most_improved(board, xp_events, now),
        active_season=active_season(seasons, now),
    )


def _rising_stars(
    current: Sequence[LeaderboardEntry], previous: Sequence[LeaderboardEntry]
) -> list[LeaderboardEntry]:
    before = {e.attendant_id: e.position for e in previous}
    climbs = []
    for entry in current:
        if entry.attendant_id not in before:
            continue
        gained = before[entry.attendant_id] - entry.position
        if gained > 0:
            climbs.append((gained, entry))
    climbs.sort(key=lambda c: -c[0])
    return [entry for _, entry in climbs[:3]]


def leaderboard_insights(
    current: Sequence[LeaderboardEntry],
    now: datetime,
    previous: Sequence[LeaderboardEntry] | None = None,
) -> LeaderboardInsights:
    """Compare a board against an earlier snapshot. Never changes the boards."""
    top_xp = current[0].total_xp if current else 0
    inactive_since = now - timedelta(days=7)

    needs_attention = [
        e
        for e in current
        if e.total_xp < top_xp * 0.1
        or e.last_activity is None
        or e.last_activity < inactive_since
    ][:5]

    average = sum(e.total_xp for e in current) / len(current) if current else 0.0
    if previous:
        previous_average = sum(e.total_xp for e in previous) / len(previous)
    else:
        previous_average = average

    tenth_xp = current[9].total_xp if len(current) >= 10 else 0
    return LeaderboardInsights(
        top_performers=list(current[:3]),
        rising_stars=_rising_stars(current, previous) if previous else [],
        needs_attention=needs_attention,
        trends=LeaderboardTrends(
            average_xp_change=average - previous_average,
            participation_rate=(
                sum(1 for e in current if e.total_xp > 0) / len(current) if current else 0.0
            ),
            competitiveness=tenth_xp / top_xp if top_xp > 0 else 0.0,
        ),
    )
