"""
Data models for festival application review.
Uses Pydantic for validation and type safety.

Field names are snake_case in Python; documents in the store use camelCase,
so every model accepts and dumps the camelCase alias.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CompetitionCategory(str, Enum):
    YOUTH = "youth"    # High-school entrants (school + student id)
    FUTURE = "future"  # University entrants (university + faculty + id)
    WORLD = "world"    # Open category, older records use director* fields


class FilmFormat(str, Enum):
    LIVE_ACTION = "live-action"
    ANIMATION = "animation"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    REJECTED = "rejected"


class StoreModel(BaseModel):
    """Base for models that map to camelCase documents."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FileRef(StoreModel):
    url: str = ""
    name: str = ""
    size: int = Field(default=0, ge=0)


class ApplicationFiles(StoreModel):
    film_file: FileRef = Field(default_factory=FileRef)
    poster_file: FileRef = Field(default_factory=FileRef)
    proof_file: Optional[FileRef] = None


class CrewMember(StoreModel):
    id: str = ""
    full_name: str = ""
    full_name_th: Optional[str] = None
    role: str = ""
    custom_role: Optional[str] = None
    age: int = Field(default=0, ge=0)
    phone: Optional[str] = None
    email: Optional[str] = None
    school_name: Optional[str] = None
    student_id: Optional[str] = None


class ScoreEntry(StoreModel):
    """
    One reviewer's assessment of an application.

    Criterion sub-scores are stored flat next to the total (``technical``,
    ``story``, ...). They are kept as extra fields so whatever criteria set the
    scoring form uses survives a load/save cycle.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    admin_id: str
    admin_name: str = ""
    total_score: float = 0
    comments: Optional[str] = None
    scored_at: Optional[datetime] = None

    @property
    def sub_scores(self) -> Dict[str, float]:
        extras = self.model_extra or {}
        return {
            key: value
            for key, value in extras.items()
            if isinstance(value, (int, float)) and not isinstance(value, bool)
        }


class ApplicationRecord(StoreModel):
    """Canonical, fully populated view of one festival submission."""

    # Identity
    id: str
    application_id: str
    user_id: str = ""

    # Film
    competition_category: CompetitionCategory = CompetitionCategory.YOUTH
    status: str = "draft"
    film_title: str = ""
    film_title_th: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    format: FilmFormat = FilmFormat.LIVE_ACTION
    duration: int = Field(default=0, ge=0)
    synopsis: str = ""
    chiangmai_connection: Optional[str] = None
    nationality: str = "Unknown"

    # Submitter (director* on older world-category records)
    submitter_name: str = ""
    submitter_name_th: Optional[str] = None
    submitter_age: Optional[int] = None
    submitter_phone: str = ""
    submitter_email: str = ""
    submitter_role: str = ""
    submitter_custom_role: Optional[str] = None

    # Education (youth: school; future: university)
    school_name: Optional[str] = None
    student_id: Optional[str] = None
    university_name: Optional[str] = None
    faculty: Optional[str] = None
    university_id: Optional[str] = None

    files: ApplicationFiles = Field(default_factory=ApplicationFiles)
    crew_members: List[CrewMember] = Field(default_factory=list)

    # Review state
    scores: List[ScoreEntry] = Field(default_factory=list)
    admin_notes: str = ""
    review_status: ReviewStatus = ReviewStatus.PENDING
    flagged: bool = False
    flag_reason: Optional[str] = None
    assigned_reviewers: List[str] = Field(default_factory=list)

    # Timestamps
    created_at: datetime
    last_modified: datetime
    submitted_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None


class MutationResult(BaseModel):
    """Outcome of one review mutation."""
    success: bool
    operation: str
    patch: Dict = Field(default_factory=dict)
    error: Optional[str] = None
    error_type: Optional[str] = None  # invalid | not_found | store
