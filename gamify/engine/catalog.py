"""Default achievement catalog and level rewards."""

from collections.abc import Sequence

from gamify.schemas.achievement import (
    CRITERIA_VERSION,
    Achievement,
    AverageRating,
    ConsecutiveRating,
    EvaluationCount,
    PositiveShare,
    RatingCount,
    SentimentCount,
)
from gamify.schemas.gamification import LevelReward
from gamify.utils.canonical import fingerprint

DEFAULT_ACHIEVEMENTS: list[Achievement] = [
    Achievement(
        id="first-impression",
        title="First Impression",
        description="Receive your first evaluation",
        icon="sparkles",
        xp_reward=10,
        criterion=EvaluationCount(min_count=1),
    ),
    Achievement(
        id="ai-first-positive",
        title="Positive Feedback (AI)",
        description="Receive a comment classified as positive",
        icon="message-square-heart",
        xp_reward=25,
        criterion=SentimentCount(sentiment="positive", min_count=1),
    ),
    Achievement(
        id="gaining-pace",
        title="Gaining Pace",
        description="Receive 10 evaluations",
        icon="target",
        xp_reward=50,
        criterion=EvaluationCount(min_count=10),
    ),
    Achievement(
        id="perfect-trio",
        title="Perfect Trio",
        description="Receive 3 consecutive 5-star evaluations",
        icon="smile",
        xp_reward=100,
        criterion=ConsecutiveRating(rating=5, streak=3),
    ),
    Achievement(
        id="ai-attentive-listener",
        title="Attentive Listener (AI)",
        description="Receive a comment classified as negative and stay open to criticism",
        icon="message-square-warning",
        xp_reward=75,
        criterion=SentimentCount(sentiment="negative", min_count=1),
    ),
    Achievement(
        id="veteran",
        title="Veteran",
        description="Receive 50 evaluations",
        icon="badge-cent",
        xp_reward=150,
        criterion=EvaluationCount(min_count=50),
    ),
    Achievement(
        id="ai-critics-favourite",
        title="Critics' Favourite (AI)",
        description="Receive 10 comments classified as positive",
        icon="message-square-plus",
        xp_reward=200,
        criterion=SentimentCount(sentiment="positive", min_count=10),
    ),
    Achievement(
        id="centurion",
        title="Centurion",
        description="Receive 100 evaluations",
        icon="trophy",
        xp_reward=300,
        criterion=EvaluationCount(min_count=100),
    ),
    Achievement(
        id="guaranteed-satisfaction",
        title="Guaranteed Satisfaction",
        description="Reach 90% positive evaluations (4-5 stars) over at least 20",
        icon="trending-up",
        xp_reward=500,
        criterion=PositiveShare(min_percent=90, min_evaluations=20, min_rating=4),
    ),
    Achievement(
        id="consistent-excellence",
        title="Consistent Excellence",
        description="Keep an average above 4.5 with 50+ evaluations",
        icon="award",
        xp_reward=750,
        criterion=AverageRating(min_average=4.5, min_evaluations=50, strict=True),
    ),
    Achievement(
        id="unstoppable",
        title="Unstoppable",
        description="Receive 250 evaluations",
        icon="zap",
        xp_reward=1000,
        criterion=EvaluationCount(min_count=250),
    ),
    Achievement(
        id="pursuit-of-perfection",
        title="Pursuit of Perfection",
        description="Keep a 5.0 average with at least 25 evaluations",
        icon="crown",
        xp_reward=1500,
        criterion=AverageRating(min_average=5, min_evaluations=25),
    ),
    Achievement(
        id="quality-master",
        title="Quality Master",
        description="Receive 50 five-star evaluations",
        icon="gem",
        xp_reward=1200,
        criterion=RatingCount(rating=5, min_count=50),
    ),
    Achievement(
        id="ai-resilience-master",
        title="Resilience Master (AI)",
        description="Receive 5 comments classified as negative and keep improving",
        icon="message-square-warning",
        xp_reward=500,
        criterion=SentimentCount(sentiment="negative", min_count=5),
    ),
    Achievement(
        id="service-legend",
        title="Service Legend",
        description="Receive 500 evaluations",
        icon="rocket",
        xp_reward=2500,
        criterion=EvaluationCount(min_count=500),
    ),
]

DEFAULT_LEVEL_REWARDS: list[LevelReward] = [
    LevelReward(level=1, title="Beginner", description="Your journey has started!", icon="shield-check"),
    LevelReward(level=5, title="Bronze Seal", description="Recognition for your early effort.", icon="medal"),
    LevelReward(level=10, title="Training Specialist", description="Access to new training material.", icon="book-open"),
    LevelReward(level=15, title="Silver Seal", description="A milestone of consistency and quality.", icon="medal"),
    LevelReward(level=20, title="Peer Mentor", description="Invited to help train new colleagues.", icon="users"),
    LevelReward(level=25, title="Gold Seal", description="Proof of dedication and excellence.", icon="medal"),
    LevelReward(level=30, title="Brand Ambassador", description="Represent the team at internal events.", icon="user-check"),
    LevelReward(level=40, title="Platinum Seal", description="One of the pillars of service excellence.", icon="medal"),
    LevelReward(level=50, title="Service Legend", description="You reached the peak of mastery!", icon="crown"),
]


def catalog_fingerprint(achievements: Sequence[Achievement]) -> str:
    """Stable hash of a catalog, tied to the criteria version it was written for."""
    return fingerprint({"version": CRITERIA_VERSION, "achievements": list(achievements)})
