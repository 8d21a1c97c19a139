"""Pytest fixtures shared by the review dashboard tests."""

import os

import pytest

from review.store import SQLiteDocumentStore


def pytest_configure(config):
    """Keep tests off the real Supabase project even if a .env is present."""
    os.environ["DOCUMENT_STORE"] = "sqlite"
    os.environ.pop("REDIS_URL", None)


def make_raw_submission(**overrides):
    """A raw ``submissions`` document in the current (submitter*) schema."""
    raw = {
        "applicationId": "CIFAN-2025-001",
        "userId": "user-1",
        "competitionCategory": "youth",
        "status": "submitted",
        "filmTitle": "Rain Over Doi Suthep",
        "filmTitleTh": "ฝนเหนือดอยสุเทพ",
        "genres": ["Drama", "Fantasy"],
        "format": "live-action",
        "duration": 12,
        "synopsis": "A student chases a lost kite across the old city.",
        "nationality": "Thailand",
        "submitterName": "Ploy Chaiyasit",
        "submitterAge": 17,
        "submitterPhone": "0812345678",
        "submitterEmail": "ploy@example.com",
        "submitterRole": "Director",
        "schoolName": "Yupparaj Wittayalai",
        "studentId": "S-4410",
        "files": {
            "filmFile": {"downloadURL": "https://files.example.com/film.mp4", "fileName": "film.mp4", "fileSize": 52428800},
            "posterFile": {"url": "https://files.example.com/poster.jpg", "name": "poster.jpg", "size": 1048576},
        },
        "crewMembers": [
            {"id": "c1", "fullName": "Nok Srisuk", "role": "Editor", "age": 16},
            {"id": "c2", "fullName": "Bank Thongdee", "fullNameTh": "แบงค์ ทองดี", "role": "Camera", "age": 18},
        ],
        "scores": [],
        "adminNotes": "",
        "reviewStatus": "pending",
        "flagged": False,
        "createdAt": "2025-06-01T08:00:00+00:00",
        "lastModified": "2025-06-02T09:30:00+00:00",
        "submittedAt": "2025-06-02T09:30:00+00:00",
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def raw_submission():
    return make_raw_submission()


@pytest.fixture
def temp_store(tmp_path):
    """SQLite document store in a temporary directory."""
    store = SQLiteDocumentStore(str(tmp_path / "test_submissions.db"))
    store.init_database()
    return store
