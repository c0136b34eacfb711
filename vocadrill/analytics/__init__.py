"""
Analytics package exports.
"""

from vocadrill.analytics.service import build_deck_dashboard
from vocadrill.analytics.types import DeckDashboardData, DifficultyBuckets, RatingDistribution

__all__ = [
    "build_deck_dashboard",
    "DeckDashboardData",
    "DifficultyBuckets",
    "RatingDistribution",
]
