"""Unit tests for the level curve."""

import pytest
from pydantic import ValidationError

from gamify.engine.errors import ConfigurationError
from gamify.engine.levels import (
    MAX_LEVEL,
    estimate_time_to_next_level,
    level_from_xp,
    level_info,
    level_progress,
    level_stats,
    recently_unlocked_rewards,
    reward_track,
    upcoming_rewards,
    validate_level_rewards,
    xp_for_level,
)
from gamify.schemas.gamification import LevelReward


def test_level_one_needs_no_xp():
    """Level 1 starts at 0 XP and 0 XP is level 1 with no progress."""
    assert xp_for_level(1) == 0
    assert level_from_xp(0) == 1
    progress = level_progress(0)
    assert progress.level == 1
    assert progress.percent == 0
    assert progress.xp_to_next == xp_for_level(2)


def test_thresholds_follow_quadratic_curve():
    """Thresholds grow as (level - 1)^2 * 100."""
    assert xp_for_level(2) == 100
    assert xp_for_level(3) == 400
    assert xp_for_level(10) == 8100


@pytest.mark.parametrize(
    "xp,level",
    [(99, 1), (100, 2), (399, 2), (400, 3), (8099, 9), (8100, 10)],
)
def test_level_boundaries(xp, level):
    """A level is reached exactly at its threshold."""
    assert level_from_xp(xp) == level


def test_level_is_monotonic():
    """More XP never means a lower level."""
    previous = level_from_xp(0)
    for xp in range(0, 300_000, 37):
        current = level_from_xp(xp)
        assert current >= previous
        previous = current


def test_level_from_xp_agrees_with_thresholds():
    """level_from_xp is the largest level whose threshold is <= xp."""
    for level in range(1, MAX_LEVEL):
        assert level_from_xp(xp_for_level(level)) == level
        assert level_from_xp(xp_for_level(level + 1) - 1) == level


def test_negative_xp_is_level_one():
    assert level_from_xp(-500) == 1
    assert level_progress(-500).percent == 0


def test_level_is_clamped_to_max():
    """XP far beyond the last threshold stays at max level with full progress."""
    xp = xp_for_level(MAX_LEVEL) * 10
    assert level_from_xp(xp) == MAX_LEVEL
    progress = level_progress(xp)
    assert progress.percent == 100
    assert progress.xp_for_next_level is None
    assert progress.xp_to_next == 0


def test_progress_halfway():
    """250 XP is halfway between level 2 (100) and level 3 (400)."""
    progress = level_progress(250)
    assert progress.level == 2
    assert progress.percent == pytest.approx(50.0)
    assert progress.xp_into_level == 150
    assert progress.xp_to_next == 150


def test_progress_is_deterministic():
    """Repeated calls return the same answer."""
    assert level_progress(1234) == level_progress(1234)


def test_invalid_curve_raises():
    with pytest.raises(ConfigurationError):
        level_from_xp(100, base_xp=0)


REWARDS = [
    LevelReward(level=1, title="Beginner"),
    LevelReward(level=2, title="Apprentice"),
    LevelReward(level=3, title="Hidden", active=False),
    LevelReward(level=5, title="Bronze"),
]


def test_level_info_attaches_rewards():
    """Current and next rewards are resolved from active rewards only."""
    info = level_info(150, REWARDS)
    assert info.progress.level == 2
    assert info.reward.title == "Apprentice"
    assert info.next_reward is None  # level 3 reward is inactive


def test_recently_unlocked_rewards():
    """Crossing from level 1 to level 5 unlocks every active reward in between."""
    unlocked = recently_unlocked_rewards(1600, REWARDS, xp_gained=1600)
    assert [r.level for r in unlocked] == [2, 5]
    assert recently_unlocked_rewards(1600, REWARDS, xp_gained=0) == []


def test_reward_track_marks_current_level():
    track = reward_track(REWARDS, current_xp=450, max_levels=5)
    assert len(track) == 5
    assert [s.is_unlocked for s in track] == [True, True, True, False, False]
    assert [s.level for s in track if s.is_current] == [3]


def test_level_stats():
    stats = level_stats([0, 100, 450, 450])
    assert stats.level_distribution == {1: 1, 2: 1, 3: 2}
    assert stats.highest_level == 3
    assert stats.lowest_level == 1
    assert stats.average_level == pytest.approx(2.25)


def test_level_stats_empty():
    stats = level_stats([])
    assert stats.average_level == 1
    assert stats.total_levels == 0


def test_upcoming_rewards():
    upcoming = upcoming_rewards(150, REWARDS)
    assert [u.level for u in upcoming] == [5]
    assert upcoming[0].xp_remaining == xp_for_level(5) - 150


def test_reward_level_must_be_positive():
    with pytest.raises(ValidationError):
        LevelReward(level=0, title="Zero")
    with pytest.raises(ValidationError):
        LevelReward(level=-3, title="Negative")


def test_validate_level_rewards():
    """Duplicates and non-positive levels are errors; sparse tracks only warn."""
    # stored rows skip schema validation
    zero = LevelReward.model_construct(level=0, title="Zero", description="", active=True, icon=None)
    result = validate_level_rewards(
        [zero, LevelReward(level=10, title=""), LevelReward(level=10, title="Ten")]
    )
    assert not result.is_valid
    assert any("Duplicated" in e for e in result.errors)
    assert any("greater than 0" in e for e in result.errors)
    assert any("no title" in w for w in result.warnings)
    assert any("gaps" in w for w in result.warnings)


def test_estimate_time_to_next_level():
    """Steady daily gains give a high-confidence estimate."""
    estimate = estimate_time_to_next_level(100, [50, 50, 50])
    assert estimate.xp_needed == 300
    assert estimate.days_estimated == 6
    assert estimate.confidence == "high"


def test_estimate_without_history():
    estimate = estimate_time_to_next_level(100, [])
    assert estimate.days_estimated is None
    assert estimate.confidence == "low"
