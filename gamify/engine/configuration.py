"""Configuration service - defaults, merging and validation of gamification settings."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from gamify.config import settings
from gamify.engine.catalog import DEFAULT_ACHIEVEMENTS, DEFAULT_LEVEL_REWARDS
from gamify.engine.errors import ConfigurationError
from gamify.engine.levels import validate_level_rewards
from gamify.engine.seasons import find_overlapping_seasons, validate_season
from gamify.engine.xp import DEFAULT_RATING_SCORES
from gamify.schemas.achievement import Achievement
from gamify.schemas.configuration import GamificationConfig
from gamify.schemas.gamification import LevelReward
from gamify.schemas.progress import ValidationResult
from gamify.utils.canonical import fingerprint

logger = logging.getLogger(__name__)

RATING_KEYS = ("1", "2", "3", "4", "5")


def _format_errors(exc: ValidationError, prefix: str = "") -> list[str]:
    messages = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err["loc"])
        messages.append(f"{prefix}{location}: {err['msg']}")
    return messages


def default_config() -> GamificationConfig:
    return GamificationConfig(
        rating_scores=dict(DEFAULT_RATING_SCORES),
        global_xp_multiplier=settings.global_xp_multiplier,
        level_base_xp=settings.level_base_xp,
        max_level=settings.max_level,
        achievements=[a.model_copy(deep=True) for a in DEFAULT_ACHIEVEMENTS],
        level_rewards=[r.model_copy(deep=True) for r in DEFAULT_LEVEL_REWARDS],
        seasons=[],
    )


def merge_with_defaults(user: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """
    Recursive merge. Nested dicts merge key by key, everything else
    (scalars, lists) is replaced. None in user config means "keep default".
    """
    merged = dict(defaults)
    for key, value in user.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_with_defaults(value, merged[key])
        else:
            merged[key] = value
    return merged


def merge_achievements_with_defaults(
    saved: Sequence[Mapping[str, Any]],
    defaults: Sequence[Achievement] = DEFAULT_ACHIEVEMENTS,
) -> list[Achievement]:
    """
    Overlay stored achievement overrides on the default catalog by id.
    Default order is kept; stored achievements unknown to the defaults follow.
    """
    saved_by_id = {item["id"]: item for item in saved if "id" in item}
    raw = [
        merge_with_defaults(saved_by_id.pop(default.id, {}), default.model_dump(mode="json"))
        for default in defaults
    ]
    raw.extend(saved_by_id.values())

    achievements = []
    errors = []
    for item in raw:
        try:
            achievements.append(Achievement.model_validate(item))
        except ValidationError as exc:
            errors.extend(_format_errors(exc, f"achievement {item.get('id', '?')}: "))
    if errors:
        raise ConfigurationError(errors)
    return achievements


def merge_level_rewards_with_defaults(
    saved: Sequence[Mapping[str, Any]],
    defaults: Sequence[LevelReward] = DEFAULT_LEVEL_REWARDS,
) -> list[LevelReward]:
    """Overlay stored level rewards on the defaults by level."""
    saved_by_level = {item["level"]: item for item in saved if "level" in item}
    raw = [
        merge_with_defaults(saved_by_level.pop(default.level, {}), default.model_dump(mode="json"))
        for default in defaults
    ]
    raw.extend(saved_by_level.values())
    try:
        return [LevelReward.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise ConfigurationError(_format_errors(exc, "level reward: ")) from exc


def load_config(raw: Mapping[str, Any] | None = None) -> GamificationConfig:
    """Build a config from stored values layered over the defaults."""
    raw = dict(raw or {})
    saved_achievements = raw.pop("achievements", None) or []
    saved_rewards = raw.pop("level_rewards", None) or []

    defaults = default_config().model_dump(
        mode="json", exclude={"achievements", "level_rewards"}
    )
    merged = merge_with_defaults(raw, defaults)
    merged["achievements"] = merge_achievements_with_defaults(saved_achievements)
    merged["level_rewards"] = merge_level_rewards_with_defaults(saved_rewards)

    try:
        return GamificationConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(_format_errors(exc)) from exc


def _validate_rating_scores(scores: Mapping[str, int], result: ValidationResult) -> None:
    missing = [k for k in RATING_KEYS if k not in scores]
    if missing:
        result.warnings.append(
            f"No score for ratings {', '.join(missing)}; they will award 0 XP"
        )
    unknown = [k for k in scores if k not in RATING_KEYS]
    if unknown:
        result.errors.append(f"Unknown rating keys: {', '.join(sorted(unknown))}")

    if all(k in scores for k in ("3", "4", "5")):
        if scores["5"] <= scores["4"]:
            result.errors.append("Rating 5 must score more than rating 4")
        if scores["4"] <= scores["3"]:
            result.errors.append("Rating 4 must score more than rating 3")
    if scores.get("1", -1) >= 0:
        result.warnings.append("Consider a negative score for rating 1 to discourage low ratings")
    if scores.get("5", 1) <= 0:
        result.warnings.append("Rating 5 awards no XP, which gives little motivation")


def validate_config(config: GamificationConfig) -> ValidationResult:
    result = ValidationResult()

    _validate_rating_scores(config.rating_scores, result)

    if config.global_xp_multiplier <= 0:
        result.errors.append("Global XP multiplier must be greater than zero")
    elif config.global_xp_multiplier > 10:
        result.warnings.append(
            f"Global XP multiplier may be too high ({config.global_xp_multiplier})"
        )

    if config.level_base_xp <= 0:
        result.errors.append("Level base XP must be greater than zero")
    if config.max_level < 1:
        result.errors.append("Max level must be at least 1")

    ids = [a.id for a in config.achievements]
    duplicates = sorted({i for i in ids if ids.count(i) > 1})
    if duplicates:
        result.errors.append(f"Duplicated achievement ids: {', '.join(duplicates)}")

    rewards = validate_level_rewards(config.level_rewards)
    result.errors.extend(rewards.errors)
    result.warnings.extend(rewards.warnings)
    beyond = [r.level for r in config.level_rewards if r.level > config.max_level]
    if beyond:
        result.warnings.append(
            f"Rewards above max level {config.max_level} can never be reached: "
            f"{', '.join(str(level) for level in beyond)}"
        )

    for season in config.seasons:
        result.errors.extend(f"Season {season.id}: {e}" for e in validate_season(season))
    for first, second in find_overlapping_seasons(config.seasons):
        result.warnings.append(f"Active seasons {first} and {second} overlap")

    return result


def ensure_valid_config(config: GamificationConfig) -> GamificationConfig:
    """Raise ConfigurationError for invalid configs, log warnings otherwise."""
    result = validate_config(config)
    for warning in result.warnings:
        logger.warning("Gamification config: %s", warning)
    if not result.is_valid:
        raise ConfigurationError(result.errors)
    return config


def config_fingerprint(config: GamificationConfig) -> str:
    return fingerprint(config)
