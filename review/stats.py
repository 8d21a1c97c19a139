"""
Dashboard statistics across all applications.
"""

from collections import Counter
from typing import Dict, List, Sequence

from pydantic import BaseModel

from review.schema import ApplicationRecord, ReviewStatus


class GenreStats(BaseModel):
    genre: str
    count: int
    percentage: float


def genre_distribution(applications: Sequence[ApplicationRecord]) -> List[GenreStats]:
    """
    Count applications per genre, most common first.

    An application listing several genres counts once for each. Percentages
    are shares of all genre mentions, rounded to one decimal.
    """
    counts = Counter(
        genre.strip()
        for application in applications
        for genre in application.genres
        if genre and genre.strip()
    )
    total = sum(counts.values())
    if not total:
        return []
    # Counter.most_common keeps first-seen order for ties
    return [
        GenreStats(genre=genre, count=count, percentage=round(count * 100 / total, 1))
        for genre, count in counts.most_common()
    ]


def review_status_counts(applications: Sequence[ApplicationRecord]) -> Dict[str, int]:
    """Applications per review status, every status present (zero when unused)."""
    counts = {status.value: 0 for status in ReviewStatus}
    for application in applications:
        counts[application.review_status.value] += 1
    counts["flagged"] = sum(1 for application in applications if application.flagged)
    counts["total"] = len(applications)
    return counts
