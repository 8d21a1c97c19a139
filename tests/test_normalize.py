"""
Unit tests for submission document normalization.
Covers both schema generations, defaults and timestamp parsing.
"""

from datetime import datetime, timezone

import pytest

from conftest import make_raw_submission
from review.normalize import (
    FIELD_FALLBACKS,
    first_non_empty,
    normalize_application,
    normalize_file_ref,
    normalize_score_entry,
    to_datetime,
)
from review.schema import CompetitionCategory, FilmFormat, ReviewStatus


class TestDefaults:
    """Missing fields take their documented defaults."""

    def test_empty_document_is_fully_populated(self):
        record = normalize_application({}, "doc-1")

        assert record.id == "doc-1"
        assert record.application_id == "doc-1"
        assert record.user_id == ""
        assert record.film_title == ""
        assert record.genres == []
        assert record.duration == 0
        assert record.synopsis == ""
        assert record.crew_members == []
        assert record.scores == []
        assert record.admin_notes == ""
        assert record.flagged is False
        assert record.flag_reason is None
        assert record.review_status == ReviewStatus.PENDING
        assert record.competition_category == CompetitionCategory.YOUTH
        assert record.format == FilmFormat.LIVE_ACTION
        assert record.nationality == "Unknown"
        assert record.submitted_at is None
        assert record.last_reviewed_at is None

    def test_none_document_does_not_raise(self):
        record = normalize_application(None, "doc-2")
        assert record.id == "doc-2"

    def test_missing_duration_defaults_to_zero(self, raw_submission):
        del raw_submission["duration"]
        assert normalize_application(raw_submission, "a1").duration == 0

    def test_missing_crew_defaults_to_empty_list(self, raw_submission):
        del raw_submission["crewMembers"]
        assert normalize_application(raw_submission, "a1").crew_members == []

    def test_missing_created_at_defaults_to_now(self):
        before = datetime.now(timezone.utc)
        record = normalize_application({}, "doc-3")
        after = datetime.now(timezone.utc)

        assert before <= record.created_at <= after
        assert record.last_modified == record.created_at

    def test_missing_last_modified_uses_created_at(self):
        record = normalize_application({"createdAt": "2025-01-01T00:00:00Z"}, "doc-4")
        assert record.last_modified == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_bad_values_fall_back(self):
        record = normalize_application(
            {"duration": "abc", "genres": "Drama", "reviewStatus": "archived", "format": "3d", "crewMembers": "none"},
            "doc-5",
        )
        assert record.duration == 0
        assert record.genres == []
        assert record.review_status == ReviewStatus.PENDING
        assert record.format == FilmFormat.LIVE_ACTION
        assert record.crew_members == []

    def test_negative_duration_falls_back_to_zero(self):
        assert normalize_application({"duration": -5}, "doc-6").duration == 0

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan"), "1e400", "Infinity", 10**400])
    def test_non_finite_numbers_fall_back(self, value):
        record = normalize_application(
            {
                "duration": value,
                "submitterAge": value,
                "crewMembers": [{"id": "c1", "fullName": "A", "age": value}],
                "files": {"filmFile": {"url": "https://files.example.com/f.mp4", "size": value}},
                "scores": [{"adminId": "r1", "totalScore": value, "technical": value}],
            },
            "doc-8",
        )
        assert record.duration == 0
        assert record.submitter_age is None
        assert record.crew_members[0].age == 0
        assert record.files.film_file.size == 0
        assert record.scores[0].total_score == 0
        assert record.scores[0].sub_scores == {}

    def test_application_id_prefers_stored_value(self, raw_submission):
        assert normalize_application(raw_submission, "doc-7").application_id == "CIFAN-2025-001"


class TestSchemaGenerations:
    """submitter* fields win; director* fields fill in for older records."""

    def test_world_record_with_only_director_fields(self):
        raw = {
            "competitionCategory": "world",
            "directorName": "Ana Lima",
            "directorNameTh": "อานา ลิมา",
            "directorAge": 34,
            "directorPhone": "+55 11 5555 0000",
            "directorEmail": "ana@example.com",
            "directorRole": "Director",
            "directorCustomRole": "Director / Writer",
        }
        record = normalize_application(raw, "w1")

        assert record.competition_category == CompetitionCategory.WORLD
        assert record.submitter_name == "Ana Lima"
        assert record.submitter_name_th == "อานา ลิมา"
        assert record.submitter_age == 34
        assert record.submitter_phone == "+55 11 5555 0000"
        assert record.submitter_email == "ana@example.com"
        assert record.submitter_role == "Director"
        assert record.submitter_custom_role == "Director / Writer"

    def test_new_field_wins_over_legacy(self):
        raw = {"submitterName": "New Name", "directorName": "Old Name"}
        assert normalize_application(raw, "w2").submitter_name == "New Name"

    def test_empty_new_field_falls_back_to_legacy(self):
        raw = {"submitterEmail": "", "directorEmail": "old@example.com"}
        assert normalize_application(raw, "w3").submitter_email == "old@example.com"

    def test_legacy_category_key(self):
        assert normalize_application({"category": "future"}, "f1").competition_category == CompetitionCategory.FUTURE

    def test_fallback_table_lists_new_name_first(self):
        assert FIELD_FALLBACKS["submitter_name"] == ("submitterName", "directorName")


class TestFiles:

    def test_upload_metadata_names(self, raw_submission):
        files = normalize_application(raw_submission, "a1").files

        assert files.film_file.url == "https://files.example.com/film.mp4"
        assert files.film_file.name == "film.mp4"
        assert files.film_file.size == 52428800

    def test_short_names(self, raw_submission):
        poster = normalize_application(raw_submission, "a1").files.poster_file
        assert poster.url == "https://files.example.com/poster.jpg"
        assert poster.name == "poster.jpg"
        assert poster.size == 1048576

    def test_download_url_preferred_over_url(self):
        ref = normalize_file_ref({"downloadURL": "https://a", "url": "https://b"})
        assert ref.url == "https://a"

    def test_proof_file_only_when_present(self, raw_submission):
        assert normalize_application(raw_submission, "a1").files.proof_file is None

        raw_submission["files"]["proofFile"] = {"url": "https://files.example.com/proof.pdf"}
        proof = normalize_application(raw_submission, "a1").files.proof_file
        assert proof is not None
        assert proof.url == "https://files.example.com/proof.pdf"
        assert proof.name == ""
        assert proof.size == 0

    def test_missing_files_group(self):
        files = normalize_application({}, "x").files
        assert files.film_file.url == ""
        assert files.poster_file.size == 0


class TestCrewAndScores:

    def test_crew_members(self, raw_submission):
        crew = normalize_application(raw_submission, "a1").crew_members
        assert [member.full_name for member in crew] == ["Nok Srisuk", "Bank Thongdee"]
        assert crew[1].full_name_th == "แบงค์ ทองดี"
        assert crew[0].age == 16

    def test_crew_entries_without_id_get_one(self):
        crew = normalize_application({"crewMembers": [{"fullName": "A"}, "junk"]}, "x").crew_members
        assert len(crew) == 1
        assert crew[0].id == "crew-0"

    def test_score_entry_keeps_sub_scores(self):
        entry = normalize_score_entry({
            "adminId": "r1",
            "adminName": "Judge",
            "totalScore": 31,
            "technical": 8,
            "story": 9,
            "scoredAt": {"seconds": 1735689600, "nanoseconds": 0},
        })
        assert entry.admin_id == "r1"
        assert entry.total_score == 31
        assert entry.sub_scores == {"technical": 8, "story": 9}
        assert entry.scored_at == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_score_without_reviewer_is_dropped(self):
        scores = normalize_application({"scores": [{"totalScore": 10}, {"adminId": "r2", "totalScore": 20}]}, "x").scores
        assert [score.admin_id for score in scores] == ["r2"]


class TestTimestamps:

    @pytest.mark.parametrize("value", [
        "2025-01-01T00:00:00Z",
        "2025-01-01T00:00:00+00:00",
        "2025-01-01T00:00:00",
        1735689600,
        1735689600000,
        {"seconds": 1735689600, "nanoseconds": 0},
        {"_seconds": 1735689600, "_nanoseconds": 0},
        datetime(2025, 1, 1),
    ])
    def test_accepted_shapes(self, value):
        assert to_datetime(value) == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_timestamp_object_with_to_datetime(self):
        class StoreTimestamp:
            def to_datetime(self):
                return datetime(2025, 1, 1, tzinfo=timezone.utc)

        assert to_datetime(StoreTimestamp()) == datetime(2025, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, {"nanoseconds": 5}])
    def test_unparseable_values(self, value):
        assert to_datetime(value) is None


def test_first_non_empty_skips_empty_values():
    assert first_non_empty({"a": "", "b": None, "c": "x"}, ("a", "b", "c")) == "x"
    assert first_non_empty({}, ("a",), default=0) == 0


def test_flag_reason_kept_when_flagged():
    record = normalize_application(make_raw_submission(flagged=True, flagReason="Duplicate entry"), "a1")
    assert record.flagged is True
    assert record.flag_reason == "Duplicate entry"
