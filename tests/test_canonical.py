"""Unit tests for canonical JSON and fingerprints."""

from datetime import datetime, timezone

from gamify.engine.catalog import DEFAULT_ACHIEVEMENTS, catalog_fingerprint
from gamify.engine.configuration import config_fingerprint, default_config
from gamify.schemas.gamification import LevelReward
from gamify.utils.canonical import canonical_json, fingerprint


def test_canonical_json_sorts_keys():
    """Canonical JSON sorts keys."""
    obj = {"b": 1, "a": 2}
    assert canonical_json(obj) == '{"a":2,"b":1}'


def test_canonical_json_handles_models_and_datetimes():
    reward = LevelReward(level=5, title="Bronze")
    assert canonical_json(reward) == canonical_json(reward.model_dump(mode="json"))
    at = datetime(2025, 6, 15, tzinfo=timezone.utc)
    assert canonical_json({"at": at}) == '{"at":"2025-06-15T00:00:00+00:00"}'


def test_fingerprint_deterministic():
    """Fingerprint is deterministic and independent of key order."""
    assert fingerprint({"x": 1, "y": [1, 2]}) == fingerprint({"y": [1, 2], "x": 1})
    assert len(fingerprint({"x": 1})) == 64  # SHA256 hex


def test_catalog_fingerprint_changes_with_content():
    h1 = catalog_fingerprint(DEFAULT_ACHIEVEMENTS)
    h2 = catalog_fingerprint(list(DEFAULT_ACHIEVEMENTS))
    assert h1 == h2

    changed = [DEFAULT_ACHIEVEMENTS[0].model_copy(update={"xp_reward": 11})] + DEFAULT_ACHIEVEMENTS[1:]
    assert catalog_fingerprint(changed) != h1


def test_config_fingerprint():
    assert config_fingerprint(default_config()) == config_fingerprint(default_config())
    bumped = default_config().model_copy(update={"global_xp_multiplier": 2.0})
    assert config_fingerprint(bumped) != config_fingerprint(default_config())
