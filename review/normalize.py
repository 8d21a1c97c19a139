"""
Deterministic normalization of raw submission documents.

Raw documents come from two schema generations: newer records use
``submitterX`` fields, older world-category records use ``directorX``.
Every field is resolved through FIELD_FALLBACKS: new name, then legacy
name, then a type default. Nothing here raises; bad values take defaults.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from review.schema import (
    ApplicationFiles,
    ApplicationRecord,
    CompetitionCategory,
    CrewMember,
    FileRef,
    FilmFormat,
    ReviewStatus,
    ScoreEntry,
)

logger = logging.getLogger(__name__)


# Field -> ordered raw keys. First non-empty value wins.
FIELD_FALLBACKS: Dict[str, Tuple[str, ...]] = {
    "user_id": ("userId",),
    "competition_category": ("competitionCategory", "category"),
    "status": ("status",),
    "film_title": ("filmTitle",),
    "film_title_th": ("filmTitleTh",),
    "genres": ("genres",),
    "format": ("format",),
    "duration": ("duration",),
    "synopsis": ("synopsis",),
    "chiangmai_connection": ("chiangmaiConnection",),
    "nationality": ("nationality",),
    "submitter_name": ("submitterName", "directorName"),
    "submitter_name_th": ("submitterNameTh", "directorNameTh"),
    "submitter_age": ("submitterAge", "directorAge"),
    "submitter_phone": ("submitterPhone", "directorPhone"),
    "submitter_email": ("submitterEmail", "directorEmail"),
    "submitter_role": ("submitterRole", "directorRole"),
    "submitter_custom_role": ("submitterCustomRole", "directorCustomRole"),
    "school_name": ("schoolName",),
    "student_id": ("studentId",),
    "university_name": ("universityName",),
    "faculty": ("faculty",),
    "university_id": ("universityId",),
    "crew_members": ("crewMembers",),
    "scores": ("scores",),
    "admin_notes": ("adminNotes",),
    "review_status": ("reviewStatus",),
    "flagged": ("flagged",),
    "flag_reason": ("flagReason",),
    "assigned_reviewers": ("assignedReviewers",),
    "created_at": ("createdAt",),
    "last_modified": ("lastModified",),
    "submitted_at": ("submittedAt",),
    "last_reviewed_at": ("lastReviewedAt",),
}

# files.<slot> keys: upload metadata names first, then the short names.
FILE_FIELD_FALLBACKS: Dict[str, Tuple[str, ...]] = {
    "url": ("downloadURL", "url"),
    "name": ("fileName", "name"),
    "size": ("fileSize", "size"),
}


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def first_non_empty(raw: Mapping[str, Any], keys: Iterable[str], default: Any = None) -> Any:
    """Return the first value under ``keys`` that is not None/empty, else ``default``."""
    for key in keys:
        value = raw.get(key)
        if not _is_empty(value):
            return value
    return default


def resolve(raw: Mapping[str, Any], field: str, default: Any = None) -> Any:
    """Resolve a record field through FIELD_FALLBACKS."""
    return first_non_empty(raw, FIELD_FALLBACKS[field], default)


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip() if isinstance(value, str) else str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    text = _as_str(value)
    return text or None


def _as_non_negative_int(value: Any, default: int = 0) -> int:
    """Coerce counts/sizes/ages. Rejects bools, negatives, non-finite numbers and garbage."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return int(number)


def _as_optional_int(value: Any) -> Optional[int]:
    if _is_empty(value):
        return None
    number = _as_non_negative_int(value, default=-1)
    return None if number < 0 else number


def _as_number(value: Any, default: Optional[float] = 0) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)


def _as_str_list(value: Any) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if not _is_empty(item)]


def _as_enum(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        if not _is_empty(value):
            logger.debug(f"Unknown {enum_cls.__name__} value {value!r}, using {default.value}")
        return default


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Convert a stored timestamp to an aware datetime.

    Accepts datetimes, ISO-8601 strings, epoch seconds or milliseconds,
    Firestore-style {"seconds", "nanoseconds"} mappings and timestamp objects
    exposing ``to_datetime()`` or ``ToDatetime()``. Naive values are UTC.
    Returns None for anything unparseable.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None

    result: Optional[datetime] = None
    try:
        if isinstance(value, datetime):
            result = value
        elif isinstance(value, str):
            text = value.strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            result = datetime.fromisoformat(text)
        elif isinstance(value, (int, float)):
            seconds = value / 1000 if value > 1e11 else value
            result = datetime.fromtimestamp(seconds, tz=timezone.utc)
        elif isinstance(value, Mapping):
            seconds = value.get("seconds", value.get("_seconds"))
            nanos = value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0
            if seconds is not None:
                result = datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)
        elif hasattr(value, "to_datetime"):
            result = value.to_datetime()
        elif hasattr(value, "ToDatetime"):
            result = value.ToDatetime()
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug(f"Could not parse timestamp {value!r}: {e}")
        return None

    if result is None:
        return None
    if result.tzinfo is None:
        result = result.replace(tzinfo=timezone.utc)
    return result


def normalize_file_ref(raw_file: Any) -> FileRef:
    """Resolve a ``files.<slot>`` object (downloadURL/fileName/fileSize variants)."""
    if not isinstance(raw_file, Mapping):
        return FileRef()
    return FileRef(
        url=_as_str(first_non_empty(raw_file, FILE_FIELD_FALLBACKS["url"], "")),
        name=_as_str(first_non_empty(raw_file, FILE_FIELD_FALLBACKS["name"], "")),
        size=_as_non_negative_int(first_non_empty(raw_file, FILE_FIELD_FALLBACKS["size"], 0)),
    )


def normalize_files(raw_files: Any) -> ApplicationFiles:
    if not isinstance(raw_files, Mapping):
        raw_files = {}
    proof = raw_files.get("proofFile")
    return ApplicationFiles(
        film_file=normalize_file_ref(raw_files.get("filmFile")),
        poster_file=normalize_file_ref(raw_files.get("posterFile")),
        proof_file=normalize_file_ref(proof) if isinstance(proof, Mapping) and proof else None,
    )


def normalize_crew_member(raw_member: Any, index: int = 0) -> Optional[CrewMember]:
    """Normalize one crew entry. Non-mapping entries are dropped (None)."""
    if not isinstance(raw_member, Mapping):
        return None
    return CrewMember(
        id=_as_str(raw_member.get("id")) or f"crew-{index}",
        full_name=_as_str(raw_member.get("fullName")),
        full_name_th=_as_optional_str(raw_member.get("fullNameTh")),
        role=_as_str(raw_member.get("role")),
        custom_role=_as_optional_str(raw_member.get("customRole")),
        age=_as_non_negative_int(raw_member.get("age")),
        phone=_as_optional_str(raw_member.get("phone")),
        email=_as_optional_str(raw_member.get("email")),
        school_name=_as_optional_str(raw_member.get("schoolName")),
        student_id=_as_optional_str(raw_member.get("studentId")),
    )


# Keys of a raw score entry that are not criterion sub-scores.
_SCORE_KNOWN_KEYS = {"adminId", "adminName", "totalScore", "comments", "scoredAt"} | set(ScoreEntry.model_fields)


def normalize_score_entry(raw_score: Any) -> Optional[ScoreEntry]:
    """Normalize one reviewer score. Entries without a reviewer id are dropped."""
    if not isinstance(raw_score, Mapping):
        return None
    admin_id = _as_str(raw_score.get("adminId"))
    if not admin_id:
        return None
    sub_scores = {
        key: value
        for key, value in raw_score.items()
        if key not in _SCORE_KNOWN_KEYS
        and isinstance(value, (int, float))
        and not isinstance(value, bool)
        and _as_number(value, default=None) is not None
    }
    return ScoreEntry(
        admin_id=admin_id,
        admin_name=_as_str(raw_score.get("adminName")),
        total_score=_as_number(raw_score.get("totalScore")),
        comments=_as_optional_str(raw_score.get("comments")),
        scored_at=to_datetime(raw_score.get("scoredAt")),
        **sub_scores,
    )


def normalize_crew(raw_crew: Any) -> List[CrewMember]:
    if not isinstance(raw_crew, (list, tuple)):
        return []
    members = (normalize_crew_member(item, index) for index, item in enumerate(raw_crew))
    return [member for member in members if member is not None]


def normalize_scores(raw_scores: Any) -> List[ScoreEntry]:
    if not isinstance(raw_scores, (list, tuple)):
        return []
    entries = (normalize_score_entry(item) for item in raw_scores)
    return [entry for entry in entries if entry is not None]


def normalize_application(raw: Optional[Mapping[str, Any]], doc_id: str) -> ApplicationRecord:
    """
    Map a raw ``submissions`` document to an ApplicationRecord.

    Args:
        raw: Document fields as returned by the store (may be None or partial)
        doc_id: Document identifier (the application id)

    Returns:
        Fully populated ApplicationRecord
    """
    if not isinstance(raw, Mapping):
        raw = {}

    created_at = to_datetime(resolve(raw, "created_at")) or datetime.now(timezone.utc)
    last_modified = to_datetime(resolve(raw, "last_modified")) or created_at

    flagged = _as_bool(resolve(raw, "flagged", False))

    return ApplicationRecord(
        id=doc_id,
        application_id=_as_str(raw.get("applicationId")) or doc_id,
        user_id=_as_str(resolve(raw, "user_id", "")),
        competition_category=_as_enum(
            CompetitionCategory, resolve(raw, "competition_category"), CompetitionCategory.YOUTH
        ),
        status=_as_str(resolve(raw, "status", "draft")),
        film_title=_as_str(resolve(raw, "film_title", "")),
        film_title_th=_as_optional_str(resolve(raw, "film_title_th")),
        genres=_as_str_list(resolve(raw, "genres", [])),
        format=_as_enum(FilmFormat, resolve(raw, "format"), FilmFormat.LIVE_ACTION),
        duration=_as_non_negative_int(resolve(raw, "duration", 0)),
        synopsis=_as_str(resolve(raw, "synopsis", "")),
        chiangmai_connection=_as_optional_str(resolve(raw, "chiangmai_connection")),
        nationality=_as_str(resolve(raw, "nationality", "Unknown")),
        submitter_name=_as_str(resolve(raw, "submitter_name", "")),
        submitter_name_th=_as_optional_str(resolve(raw, "submitter_name_th")),
        submitter_age=_as_optional_int(resolve(raw, "submitter_age")),
        submitter_phone=_as_str(resolve(raw, "submitter_phone", "")),
        submitter_email=_as_str(resolve(raw, "submitter_email", "")),
        submitter_role=_as_str(resolve(raw, "submitter_role", "")),
        submitter_custom_role=_as_optional_str(resolve(raw, "submitter_custom_role")),
        school_name=_as_optional_str(resolve(raw, "school_name")),
        student_id=_as_optional_str(resolve(raw, "student_id")),
        university_name=_as_optional_str(resolve(raw, "university_name")),
        faculty=_as_optional_str(resolve(raw, "faculty")),
        university_id=_as_optional_str(resolve(raw, "university_id")),
        files=normalize_files(raw.get("files")),
        crew_members=normalize_crew(resolve(raw, "crew_members", [])),
        scores=normalize_scores(resolve(raw, "scores", [])),
        admin_notes=_as_str(resolve(raw, "admin_notes", "")),
        review_status=_as_enum(ReviewStatus, resolve(raw, "review_status"), ReviewStatus.PENDING),
        flagged=flagged,
        flag_reason=_as_optional_str(resolve(raw, "flag_reason")),
        assigned_reviewers=_as_str_list(resolve(raw, "assigned_reviewers", [])),
        created_at=created_at,
        last_modified=last_modified,
        submitted_at=to_datetime(resolve(raw, "submitted_at")),
        last_reviewed_at=to_datetime(resolve(raw, "last_reviewed_at")),
    )
