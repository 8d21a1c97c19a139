"""
Environment-driven settings for the review dashboard.

Values come from the process environment; ``flask_app`` calls
``load_dotenv()`` first so a local ``.env`` file works in development.
"""

import os
from dataclasses import dataclass
from typing import Optional


SUPPORTED_LANGUAGES = ("en", "th")


@dataclass(frozen=True)
class DashboardConfig:
    """Settings read once at startup."""

    supabase_url: Optional[str] = None
    submissions_table: str = "submissions"
    document_store: str = "supabase"  # supabase | sqlite
    sqlite_db_path: str = "submissions.db"
    redis_url: Optional[str] = None
    stats_ttl_seconds: int = 60
    default_language: str = "en"
    file_download_timeout: int = 30

    @classmethod
    def from_env(cls) -> "DashboardConfig":
        default_language = os.environ.get("DEFAULT_LANGUAGE", "en").lower()
        if default_language not in SUPPORTED_LANGUAGES:
            default_language = "en"

        supabase_url = os.environ.get("SUPABASE_URL")
        store = os.environ.get("DOCUMENT_STORE", "").lower()
        if store not in ("supabase", "sqlite"):
            # No Supabase credentials: fall back to the local store
            store = "supabase" if supabase_url else "sqlite"

        return cls(
            supabase_url=supabase_url,
            submissions_table=os.environ.get("SUBMISSIONS_TABLE", "submissions"),
            document_store=store,
            sqlite_db_path=os.environ.get("SQLITE_DB_PATH", os.path.join(os.getcwd(), "submissions.db")),
            redis_url=os.environ.get("REDIS_URL"),
            stats_ttl_seconds=int(os.environ.get("STATS_TTL_SECONDS", 60)),
            default_language=default_language,
            file_download_timeout=int(os.environ.get("FILE_DOWNLOAD_TIMEOUT", 30)),
        )
