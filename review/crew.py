"""
Crew table view: free-text filter, sort and preview truncation.
"""

from enum import Enum
from typing import List, Sequence, Union

from pydantic import BaseModel, Field

from review.schema import CrewMember


CREW_PREVIEW_LIMIT = 5


class CrewSortKey(str, Enum):
    NAME = "name"
    ROLE = "role"
    AGE = "age"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CrewView(BaseModel):
    """Rows to render plus counts for the "show all" control."""
    members: List[CrewMember] = Field(default_factory=list)
    matched: int = 0    # rows passing the filter
    total: int = 0      # full roster size
    remaining: int = 0  # matched rows hidden by truncation


def _matches(member: CrewMember, needle: str) -> bool:
    haystacks = (member.full_name, member.full_name_th or "", member.role)
    return any(needle in text.lower() for text in haystacks)


def _sort_value(member: CrewMember, sort_key: CrewSortKey):
    if sort_key == CrewSortKey.AGE:
        return member.age
    if sort_key == CrewSortKey.ROLE:
        return member.role
    return member.full_name


def filter_and_sort_crew(
    crew: Sequence[CrewMember],
    query: str = "",
    sort_key: Union[CrewSortKey, str] = CrewSortKey.NAME,
    sort_order: Union[SortOrder, str] = SortOrder.ASC,
    reveal_all: bool = False,
) -> CrewView:
    """
    Filter the roster by ``query`` (case-insensitive substring of name, Thai
    name or role), sort by ``sort_key`` and truncate to CREW_PREVIEW_LIMIT
    rows unless ``reveal_all``.

    Equal keys keep roster order (Python's sort is stable in both directions).
    """
    sort_key = CrewSortKey(sort_key)
    sort_order = SortOrder(sort_order)

    needle = (query or "").lower()
    matched = [member for member in crew if not needle or _matches(member, needle)]
    ordered = sorted(
        matched,
        key=lambda member: _sort_value(member, sort_key),
        reverse=sort_order == SortOrder.DESC,
    )

    shown = ordered if reveal_all else ordered[:CREW_PREVIEW_LIMIT]
    return CrewView(
        members=shown,
        matched=len(ordered),
        total=len(crew),
        remaining=len(ordered) - len(shown),
    )
