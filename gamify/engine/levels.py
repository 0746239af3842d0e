"""Level curve - maps cumulative XP to levels and progress.

Levels are derived on read and never stored, so every function here is pure:
the same XP always yields the same level wherever it is computed.

Curve: xp_for_level(L) = (L - 1)^2 * base_xp, capped at MAX_LEVEL.
"""

import math
from collections.abc import Iterable, Sequence

from gamify.engine.errors import ConfigurationError
from gamify.schemas.gamification import LevelReward
from gamify.schemas.progress import (
    LevelInfo,
    LevelProgress,
    LevelStats,
    LevelTimeEstimate,
    RewardTrackStep,
    UpcomingReward,
    ValidationResult,
)

MAX_LEVEL = 50
BASE_XP = 100


def _check_curve(base_xp: int, max_level: int) -> None:
    if base_xp <= 0:
        raise ConfigurationError(f"Level base XP must be greater than zero (got {base_xp})")
    if max_level < 1:
        raise ConfigurationError(f"Max level must be at least 1 (got {max_level})")


def xp_for_level(level: int, base_xp: int = BASE_XP) -> int:
    """Cumulative XP needed to reach level. Level 1 (and below) needs 0."""
    if level <= 1:
        return 0
    return (level - 1) ** 2 * base_xp


def xp_for_next_level(level: int, base_xp: int = BASE_XP) -> int:
    return xp_for_level(level + 1, base_xp)


def level_from_xp(xp: float, base_xp: int = BASE_XP, max_level: int = MAX_LEVEL) -> int:
    """Largest level whose threshold is <= xp, clamped to [1, max_level]."""
    _check_curve(base_xp, max_level)
    if xp <= 0:
        return 1
    # floor(sqrt(xp / base)) computed in integers to stay exact for large totals
    level = math.isqrt(int(xp) // base_xp) + 1
    return min(level, max_level)


def level_progress(xp: float, base_xp: int = BASE_XP, max_level: int = MAX_LEVEL) -> LevelProgress:
    """Progress towards the next level. percent is 100 exactly at max level."""
    xp = max(0, int(xp))
    level = level_from_xp(xp, base_xp, max_level)
    floor = xp_for_level(level, base_xp)

    if level >= max_level:
        return LevelProgress(
            level=level,
            percent=100.0,
            xp_into_level=xp - floor,
            xp_to_next=0,
            xp_for_level=floor,
            xp_for_next_level=None,
        )

    ceiling = xp_for_level(level + 1, base_xp)
    span = ceiling - floor
    percent = 100.0 * (xp - floor) / span if span > 0 else 100.0
    return LevelProgress(
        level=level,
        percent=min(100.0, max(0.0, percent)),
        xp_into_level=xp - floor,
        xp_to_next=max(0, ceiling - xp),
        xp_for_level=floor,
        xp_for_next_level=ceiling,
    )


def _reward_for(level: int, rewards: Iterable[LevelReward]) -> LevelReward | None:
    for reward in rewards:
        if reward.active and reward.level == level:
            return reward
    return None


def level_info(
    xp: float,
    rewards: Sequence[LevelReward],
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> LevelInfo:
    """Level progress plus the rewards for the current and next level."""
    progress = level_progress(xp, base_xp, max_level)
    return LevelInfo(
        progress=progress,
        reward=_reward_for(progress.level, rewards),
        next_reward=_reward_for(progress.level + 1, rewards)
        if progress.level < max_level
        else None,
    )


def recently_unlocked_rewards(
    total_xp: float,
    rewards: Sequence[LevelReward],
    xp_gained: float = 0,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> list[LevelReward]:
    """Rewards for every level crossed by the last xp_gained."""
    if xp_gained <= 0:
        return []

    previous_level = level_from_xp(total_xp - xp_gained, base_xp, max_level)
    current_level = level_from_xp(total_xp, base_xp, max_level)
    unlocked = []
    for level in range(previous_level + 1, current_level + 1):
        reward = _reward_for(level, rewards)
        if reward:
            unlocked.append(reward)
    return unlocked


def reward_track(
    rewards: Sequence[LevelReward],
    current_xp: float,
    max_levels: int = MAX_LEVEL,
    base_xp: int = BASE_XP,
) -> list[RewardTrackStep]:
    current_level = level_from_xp(current_xp, base_xp, max_levels)
    track = []
    for level in range(1, max_levels + 1):
        required = xp_for_level(level, base_xp)
        track.append(
            RewardTrackStep(
                level=level,
                xp_required=required,
                reward=_reward_for(level, rewards),
                is_unlocked=current_xp >= required,
                is_current=level == current_level,
            )
        )
    return track


def level_stats(
    totals: Iterable[float], base_xp: int = BASE_XP, max_level: int = MAX_LEVEL
) -> LevelStats:
    """Level distribution for a group of XP totals."""
    levels = [level_from_xp(xp, base_xp, max_level) for xp in totals]
    if not levels:
        return LevelStats(
            average_level=1.0, highest_level=1, lowest_level=1, total_levels=0
        )

    distribution: dict[int, int] = {}
    for level in levels:
        distribution[level] = distribution.get(level, 0) + 1

    return LevelStats(
        average_level=sum(levels) / len(levels),
        level_distribution=distribution,
        highest_level=max(levels),
        lowest_level=min(levels),
        total_levels=len(distribution),
    )


def upcoming_rewards(
    current_xp: float,
    rewards: Sequence[LevelReward],
    count: int = 3,
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> list[UpcomingReward]:
    current_level = level_from_xp(current_xp, base_xp, max_level)
    ahead = sorted(
        (r for r in rewards if r.active and r.level > current_level),
        key=lambda r: r.level,
    )
    result = []
    for reward in ahead[:count]:
        required = xp_for_level(reward.level, base_xp)
        result.append(
            UpcomingReward(
                level=reward.level,
                xp_required=required,
                xp_remaining=max(0, required - int(current_xp)),
                reward=reward,
            )
        )
    return result


def validate_level_rewards(rewards: Sequence[LevelReward]) -> ValidationResult:
    """Check a level reward table for duplicates, bad levels and sparse tracks."""
    result = ValidationResult()
    levels = [r.level for r in rewards]

    seen: set[int] = set()
    duplicates: list[int] = []
    for level in levels:
        if level in seen and level not in duplicates:
            duplicates.append(level)
        seen.add(level)
    if duplicates:
        result.errors.append(
            f"Duplicated reward levels: {', '.join(str(d) for d in duplicates)}"
        )

    if any(level < 1 for level in levels):
        result.errors.append("Reward levels must be greater than 0")

    if any(not r.title or not r.title.strip() for r in rewards):
        result.warnings.append("Some rewards have no title")

    ordered = sorted(levels)
    gaps = [
        ordered[i - 1]
        for i in range(1, len(ordered))
        if ordered[i] - ordered[i - 1] > 5
    ]
    if gaps:
        result.warnings.append(
            f"Large gaps between reward levels after: {', '.join(str(g) for g in gaps)}"
        )

    if not any(level <= 5 for level in levels):
        result.warnings.append("Consider adding rewards in the first levels")

    return result


def estimate_time_to_next_level(
    current_xp: float,
    recent_daily_gains: Sequence[float],
    base_xp: int = BASE_XP,
    max_level: int = MAX_LEVEL,
) -> LevelTimeEstimate:
    """Estimate days until the next level from recent daily XP gains."""
    progress = level_progress(current_xp, base_xp, max_level)
    xp_needed = progress.xp_to_next

    if progress.xp_for_next_level is None:
        return LevelTimeEstimate(
            days_estimated=0, xp_needed=0, average_daily_xp=0.0, confidence="high"
        )
    if not recent_daily_gains:
        return LevelTimeEstimate(
            days_estimated=None, xp_needed=xp_needed, average_daily_xp=0.0, confidence="low"
        )

    average = sum(recent_daily_gains) / len(recent_daily_gains)
    days = math.ceil(xp_needed / average) if average > 0 else None

    variance = sum((g - average) ** 2 for g in recent_daily_gains) / len(recent_daily_gains)
    variation = math.sqrt(variance) / average if average > 0 else 1.0
    if variation < 0.3:
        confidence = "high"
    elif variation < 0.7:
        confidence = "medium"
    else:
        confidence = "low"

    return LevelTimeEstimate(
        days_estimated=days,
        xp_needed=xp_needed,
        average_daily_xp=average,
        confidence=confidence,
    )
