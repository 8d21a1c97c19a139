"""
Presentation helpers for the application detail page.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from review.schema import ApplicationRecord, CompetitionCategory, FileRef


class ContactInfo(BaseModel):
    name: str = ""
    name_th: Optional[str] = None
    age: Optional[int] = None
    phone: str = ""
    email: str = ""
    role: str = ""
    custom_role: Optional[str] = None


class EducationInfo(BaseModel):
    type: str  # school | university
    institution: str = ""
    faculty: Optional[str] = None
    id: str = ""


class TimelineEvent(BaseModel):
    label_key: str
    at: datetime


COUNTRY_FLAGS: Dict[str, str] = {
    "Thailand": "🇹🇭",
    "Japan": "🇯🇵",
    "South Korea": "🇰🇷",
    "Singapore": "🇸🇬",
    "Malaysia": "🇲🇾",
    "Philippines": "🇵🇭",
    "Vietnam": "🇻🇳",
    "Indonesia": "🇮🇩",
    "Taiwan": "🇹🇼",
    "China": "🇨🇳",
    "India": "🇮🇳",
    "Australia": "🇦🇺",
    "United States": "🇺🇸",
    "United Kingdom": "🇬🇧",
    "Germany": "🇩🇪",
    "France": "🇫🇷",
}
DEFAULT_FLAG = "🌍"

_EN_MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_TH_MONTHS = ["ม.ค.", "ก.พ.", "มี.ค.", "เม.ย.", "พ.ค.", "มิ.ย.", "ก.ค.", "ส.ค.", "ก.ย.", "ต.ค.", "พ.ย.", "ธ.ค."]
BUDDHIST_ERA_OFFSET = 543


def contact_info(application: ApplicationRecord) -> ContactInfo:
    """Submitter contact block. Legacy director* fields are already folded in by normalization."""
    return ContactInfo(
        name=application.submitter_name,
        name_th=application.submitter_name_th,
        age=application.submitter_age,
        phone=application.submitter_phone,
        email=application.submitter_email,
        role=application.submitter_role,
        custom_role=application.submitter_custom_role,
    )


def education_info(application: ApplicationRecord) -> Optional[EducationInfo]:
    """School details for youth, university details for future, nothing for world."""
    if application.competition_category == CompetitionCategory.YOUTH:
        return EducationInfo(
            type="school",
            institution=application.school_name or "",
            id=application.student_id or "",
        )
    if application.competition_category == CompetitionCategory.FUTURE:
        return EducationInfo(
            type="university",
            institution=application.university_name or "",
            faculty=application.faculty or "",
            id=application.university_id or "",
        )
    return None


def format_file_size(size_bytes: Optional[int]) -> str:
    """Bytes as megabytes with two decimals ("0 MB" when unknown)."""
    if not size_bytes:
        return "0 MB"
    return f"{size_bytes / (1024 * 1024):.2f} MB"


def format_date(value: Optional[datetime], lang: str = "en") -> str:
    """
    Short date and time for the page, "-" when missing.

    Thai output uses Thai month abbreviations and Buddhist-era years.
    """
    if value is None:
        return "-"
    if lang == "th":
        return f"{value.day} {_TH_MONTHS[value.month - 1]} {value.year + BUDDHIST_ERA_OFFSET} {value:%H:%M}"
    return f"{_EN_MONTHS[value.month - 1]} {value.day}, {value.year}, {value:%I:%M %p}"


def file_status(file_ref: Optional[FileRef]) -> str:
    """Message key for a file slot: "verified" when it has a URL, else "missing"."""
    if file_ref is None or not file_ref.url:
        return "missing"
    return "verified"


def country_flag(nationality: str) -> str:
    return COUNTRY_FLAGS.get(nationality, DEFAULT_FLAG)


def build_timeline(application: ApplicationRecord) -> List[TimelineEvent]:
    """Timeline entries in chronological order; missing timestamps are skipped."""
    candidates = [
        ("draft_created", application.created_at),
        ("submitted", application.submitted_at),
        ("last_modified", application.last_modified),
        ("reviewed", application.last_reviewed_at),
    ]
    events = [TimelineEvent(label_key=key, at=at) for key, at in candidates if at is not None]
    return sorted(events, key=lambda event: event.at)
