"""
Review package exports.
"""

from review.normalize import normalize_application
from review.mutations import ApplicationReview
from review.schema import ApplicationRecord, CrewMember, ReviewStatus, ScoreEntry

__all__ = [
    "ApplicationRecord",
    "ApplicationReview",
    "CrewMember",
    "ReviewStatus",
    "ScoreEntry",
    "normalize_application",
]
