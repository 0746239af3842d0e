#!/usr/bin/env python3
"""
Simulate a month of evaluations and print the resulting leaderboard.
Runs the engine in-memory (no DB/API needed).
Usage: python scripts/simulate_leaderboard.py [seed]
"""

import json
import logging
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from gamify.config import settings
from gamify.engine.achievements import grant_achievements, newly_unlocked
from gamify.engine.catalog import catalog_fingerprint
from gamify.engine.configuration import default_config, ensure_valid_config
from gamify.engine.leaderboard import generate, leaderboard_insights
from gamify.engine.levels import level_progress
from gamify.engine.xp import resolve_season, total_xp, xp_event_for_evaluation
from gamify.schemas import (
    Attendant,
    Evaluation,
    LeaderboardFilters,
    Season,
    SentimentAnalysis,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

START = datetime(2025, 9, 1, 8, 0, tzinfo=timezone.utc)

ATTENDANTS = [
    Attendant(id="att-ana", name="Ana", department_id="support"),
    Attendant(id="att-bruno", name="Bruno", department_id="support"),
    Attendant(id="att-carla", name="Carla", department_id="sales"),
    Attendant(id="att-diego", name="Diego", department_id="sales"),
    Attendant(id="att-elisa", name="Elisa", department_id="billing"),
]

SEASONS = [
    Season(
        id="season-spring",
        name="Spring Sprint",
        start_time=START + timedelta(days=10),
        end_time=START + timedelta(days=20),
        xp_multiplier=1.5,
    ),
]


def main():
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 7
    rng = random.Random(seed)

    config = ensure_valid_config(default_config().model_copy(update={"seasons": SEASONS}))
    logger.info("Catalog fingerprint %s", catalog_fingerprint(config.achievements))

    evaluations = []
    analyses = []
    for day in range(30):
        for attendant in ATTENDANTS:
            for _ in range(rng.randint(0, 3)):
                rating = rng.choices([1, 2, 3, 4, 5], weights=[1, 1, 2, 4, 6])[0]
                evaluation = Evaluation(
                    id=f"ev-{len(evaluations) + 1}",
                    attendant_id=attendant.id,
                    rating=rating,
                    occurred_at=START + timedelta(days=day, minutes=rng.randint(0, 600)),
                )
                evaluations.append(evaluation)
                if rng.random() < 0.3:
                    analyses.append(
                        SentimentAnalysis(
                            evaluation_id=evaluation.id,
                            sentiment="Positivo" if rating >= 4 else "Negativo",
                        )
                    )

    events = []
    recorded = []
    for evaluation in sorted(evaluations, key=lambda e: e.occurred_at):
        event = xp_event_for_evaluation(
            evaluation,
            config.rating_scores,
            config.global_xp_multiplier,
            resolve_season(config.seasons, evaluation.occurred_at),
        )
        # xp_gained is set once, when the evaluation is recorded
        recorded.append(evaluation.model_copy(update={"xp_gained": event.points}))
        events.append(event)
    evaluations = recorded

    sentiment_index = {a.evaluation_id: a for a in analyses}
    unlocks = []
    errors = []
    granted_at = START + timedelta(days=30)
    for attendant in ATTENDANTS:
        own = [e for e in evaluations if e.attendant_id == attendant.id]
        fresh = newly_unlocked(
            config.achievements,
            attendant,
            own,
            unlocks,
            evaluations,
            ATTENDANTS,
            sentiment_index,
            errors,
        )
        for unlock, event in grant_achievements(
            fresh,
            attendant.id,
            unlocks,
            config.global_xp_multiplier,
            resolve_season(config.seasons, granted_at),
            granted_at,
        ):
            unlocks.append(unlock)
            events.append(event)

    board = generate(
        ATTENDANTS,
        events,
        LeaderboardFilters(limit=settings.leaderboard_page_size),
        evaluations,
        config.level_base_xp,
        config.max_level,
    )
    insights = leaderboard_insights(board, now=granted_at)

    output = {
        "total_xp": total_xp(events),
        "leaderboard": [
            {
                **entry.model_dump(mode="json"),
                "progress": level_progress(
                    entry.total_xp, config.level_base_xp, config.max_level
                ).model_dump(),
            }
            for entry in board
        ],
        "insights": insights.trends.model_dump(),
        "achievement_errors": errors,
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
