"""
Score aggregation over reviewer score entries.
"""

import math
from typing import Any, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from review.schema import ScoreEntry


MAX_TOTAL_SCORE = 40
MIN_TOTAL_SCORE = 0

# Criteria on the scoring form; each 0-10, summing to the 0-40 total.
SCORE_CRITERIA = ("technical", "story", "creativity", "impact")
MAX_CRITERION_SCORE = 10
MIN_CRITERION_SCORE = 0

# Fields read from the scoring form; reviewer identity is set by the server.
_FORM_FIELDS = ("totalScore", "comments") + SCORE_CRITERIA


class ScoreSummary(BaseModel):
    average_score: float = 0
    count: int = 0


def average_score(scores: Sequence[ScoreEntry]) -> float:
    """Straight mean of total_score. 0 for an empty list."""
    if not scores:
        return 0
    return sum(score.total_score for score in scores) / len(scores)


def summarize_scores(scores: Sequence[ScoreEntry]) -> ScoreSummary:
    return ScoreSummary(average_score=average_score(scores), count=len(scores))


def find_reviewer_score(scores: Sequence[ScoreEntry], admin_id: Optional[str]) -> Optional[ScoreEntry]:
    """Return the entry owned by ``admin_id`` (used to pre-fill the scoring form)."""
    if not admin_id:
        return None
    for score in scores:
        if score.admin_id == admin_id:
            return score
    return None


def replace_reviewer_score(scores: Sequence[ScoreEntry], entry: ScoreEntry) -> List[ScoreEntry]:
    """
    Drop any entry with ``entry.admin_id`` and append ``entry``.

    Keeps at most one entry per reviewer. The input list is not modified.
    """
    kept = [score for score in scores if score.admin_id != entry.admin_id]
    kept.append(entry)
    return kept


def is_valid_total_score(total_score: float) -> bool:
    return MIN_TOTAL_SCORE <= total_score <= MAX_TOTAL_SCORE


def _criterion_value(name: str, value: Any) -> float:
    if value is None or value == "" or isinstance(value, bool):
        raise ValueError(f"Criterion score '{name}' is required")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Criterion score '{name}' must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"Criterion score '{name}' must be a number, got {value!r}")
    return number


def criteria_total(sub_scores: Mapping[str, float]) -> float:
    return sum(sub_scores[name] for name in SCORE_CRITERIA if name in sub_scores)


def validate_criteria(entry: ScoreEntry) -> None:
    """
    Raise ValueError if a criterion score is outside 0-10, or if a full set of
    criterion scores does not add up to the entry's total.

    Entries without criterion scores (total only) pass.
    """
    criteria = {name: value for name, value in entry.sub_scores.items() if name in SCORE_CRITERIA}
    for name, value in criteria.items():
        if not MIN_CRITERION_SCORE <= value <= MAX_CRITERION_SCORE:
            raise ValueError(
                f"Criterion score '{name}' must be between {MIN_CRITERION_SCORE} and {MAX_CRITERION_SCORE}, got {value}"
            )
    if len(criteria) == len(SCORE_CRITERIA) and not math.isclose(criteria_total(criteria), entry.total_score):
        raise ValueError(
            f"Total score {entry.total_score} does not match criterion scores ({criteria_total(criteria)})"
        )


def score_entry_from_form(data: Mapping[str, Any], admin_id: str, admin_name: str = "") -> ScoreEntry:
    """
    Build the signed-in reviewer's ScoreEntry from submitted fields.

    Only totalScore, comments and the criterion scores are read. When any
    criterion score is sent, all of SCORE_CRITERIA are required and
    the total is their sum; otherwise ``totalScore`` is required. Reviewer
    identity always comes from the arguments.

    Raises:
        ValueError: missing or non-numeric scores (pydantic's ValidationError included)
    """
    fields = {key: data[key] for key in _FORM_FIELDS if key in data}

    if any(name in fields for name in SCORE_CRITERIA):
        for name in SCORE_CRITERIA:
            fields[name] = _criterion_value(name, fields.get(name))
        fields["totalScore"] = criteria_total(fields)
    elif fields.get("totalScore") in (None, ""):
        raise ValueError("totalScore is required")

    return ScoreEntry.model_validate({**fields, "adminId": admin_id, "adminName": admin_name})
