"""Unit tests for the XP engine."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from gamify.engine.xp import (
    DEFAULT_RATING_SCORES,
    apply_xp_event,
    attendant_xp_stats,
    base_xp,
    filter_events_by_season,
    final_xp,
    group_events_by_attendant,
    total_xp,
    xp_event_for_achievement,
    xp_event_for_evaluation,
    xp_events_for_evaluations,
)
from gamify.schemas.achievement import Achievement, EvaluationCount
from gamify.schemas.gamification import Evaluation, Season

SCORES = {"1": -5, "2": -2, "3": 1, "4": 3, "5": 5}
NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

SEASON = Season(
    id="s1",
    name="Summer",
    start_time=NOW - timedelta(days=5),
    end_time=NOW + timedelta(days=5),
    xp_multiplier=1.5,
)


def _evaluation(id="ev-1", rating=5, at=NOW, attendant_id="att-1"):
    return Evaluation(id=id, attendant_id=attendant_id, rating=rating, occurred_at=at)


def test_default_table():
    assert DEFAULT_RATING_SCORES == SCORES


def test_base_xp_lookup():
    assert base_xp(5, SCORES) == 5
    assert base_xp(1, SCORES) == -5


def test_missing_rating_defaults_to_zero():
    """A missing key never raises."""
    assert base_xp(4, {"5": 5}) == 0


def test_final_xp_rounds_half_up():
    assert final_xp(5, 1.0, 1.5) == 8
    assert final_xp(5, 1.0, 1.0) == 5
    assert final_xp(-5, 1.0, 1.5) == -7


def test_five_stars_without_season():
    """5-star evaluation, no season, global 1.0 -> 5 points."""
    event = xp_event_for_evaluation(_evaluation(), SCORES, 1.0, None)
    assert event.points == 5
    assert event.base_points == 5
    assert event.multiplier == 1.0
    assert event.type == "evaluation"
    assert event.related_id == "ev-1"
    assert event.season_id is None


def test_five_stars_with_season_multiplier():
    """5-star evaluation in a 1.5x season -> round(7.5) = 8 points."""
    event = xp_event_for_evaluation(_evaluation(), SCORES, 1.0, SEASON)
    assert event.points == 8
    assert event.multiplier == pytest.approx(1.5)
    assert event.season_id == "s1"


def test_season_applies_at_evaluation_time():
    """An evaluation from before the season gets no season bonus, even if passed the season."""
    old = _evaluation(at=NOW - timedelta(days=30))
    event = xp_event_for_evaluation(old, SCORES, 1.0, SEASON)
    assert event.points == 5
    assert event.season_id is None


def test_backfill_resolves_each_timestamp():
    """Batch recomputation resolves the season for each evaluation separately."""
    evaluations = [
        _evaluation("ev-old", 5, NOW - timedelta(days=30)),
        _evaluation("ev-in", 5, NOW),
    ]
    events = xp_events_for_evaluations(evaluations, SCORES, 2.0, [SEASON])
    assert [e.points for e in events] == [10, 15]
    assert [e.season_id for e in events] == [None, "s1"]


def test_event_ids_are_deterministic():
    """The same evaluation always maps to the same ledger id."""
    first = xp_event_for_evaluation(_evaluation(), SCORES)
    second = xp_event_for_evaluation(_evaluation(), SCORES)
    assert first.id == second.id == "evaluation:ev-1"


def test_achievement_event_uses_grant_time():
    achievement = Achievement(
        id="gaining-pace", title="Gaining Pace", xp_reward=50, criterion=EvaluationCount(min_count=10)
    )
    event = xp_event_for_achievement("att-1", achievement, 1.0, SEASON, now=NOW)
    assert event.points == 75
    assert event.type == "achievement"
    assert event.related_id == "gaining-pace"
    assert event.occurred_at == NOW
    assert "Gaining Pace" in event.reason


def test_total_matches_incremental_fold():
    """Folding events one by one equals summing the whole ledger."""
    evaluations = [_evaluation(f"ev-{i}", (i % 5) + 1, NOW + timedelta(hours=i)) for i in range(20)]
    events = xp_events_for_evaluations(evaluations, SCORES, 1.0, [SEASON])

    running = 0
    for event in events:
        running = apply_xp_event(running, event)
    assert running == total_xp(events)
    assert total_xp(reversed(events)) == total_xp(events)


def test_group_and_stats():
    events = [
        xp_event_for_evaluation(_evaluation("a1", 5, attendant_id="a"), SCORES),
        xp_event_for_evaluation(_evaluation("a2", 3, attendant_id="a"), SCORES),
        xp_event_for_evaluation(_evaluation("b1", 1, attendant_id="b"), SCORES),
    ]
    grouped = group_events_by_attendant(events)
    assert sorted(grouped) == ["a", "b"]

    stats = attendant_xp_stats(grouped["a"])
    assert stats.total_xp == 6
    assert stats.evaluation_count == 2
    assert stats.achievement_count == 0
    assert stats.average_xp_per_evaluation == pytest.approx(3.0)


def test_filter_events_by_season():
    events = [
        xp_event_for_evaluation(_evaluation("in", 5, NOW), SCORES),
        xp_event_for_evaluation(_evaluation("out", 5, NOW - timedelta(days=30)), SCORES),
    ]
    assert [e.related_id for e in filter_events_by_season(events, SEASON)] == ["in"]


def test_evaluations_are_immutable():
    """xp_gained is recorded on a copy; the created evaluation never changes."""
    evaluation = _evaluation()
    event = xp_event_for_evaluation(evaluation, SCORES, 1.0, SEASON)
    with pytest.raises(ValidationError):
        evaluation.xp_gained = event.points

    recorded = evaluation.model_copy(update={"xp_gained": event.points})
    assert recorded.xp_gained == 8
    assert evaluation.xp_gained == 0
