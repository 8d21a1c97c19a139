"""
Document store access for the ``submissions`` collection.

Two backends share one small interface (get / update / list):
- SupabaseDocumentStore: production, one row per application keyed by ``id``
- SQLiteDocumentStore: local development and tests, one JSON document per row
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from review.config import DashboardConfig

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """A read or write against the document store failed."""


class ApplicationNotFoundError(LookupError):
    """The requested application id does not exist."""

    def __init__(self, application_id: str):
        super().__init__(f"Application not found: {application_id}")
        self.application_id = application_id


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Round-trip through JSON so datetimes become ISO strings."""
    return json.loads(json.dumps(data, default=_json_default))


class DocumentStore:
    """Minimal document-store interface used by the dashboard."""

    collection = "submissions"

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document fields, or None if it does not exist."""
        raise NotImplementedError

    def update(self, doc_id: str, patch: Dict[str, Any]) -> None:
        """Merge ``patch`` into the top-level fields of an existing document."""
        raise NotImplementedError

    def list(self, limit: Optional[int] = None) -> List[Tuple[str, Dict[str, Any]]]:
        """Return (doc_id, fields) pairs, newest first."""
        raise NotImplementedError


class SupabaseDocumentStore(DocumentStore):
    """Supabase/PostgREST table where each row is one application document."""

    def __init__(self, client_factory: Callable, table: str = "submissions", access_token: Optional[str] = None):
        self.client_factory = client_factory
        self.collection = table
        self.access_token = access_token

    def _client(self):
        supabase = self.client_factory(access_token=self.access_token) if self.access_token else self.client_factory()
        if not supabase:
            raise DocumentStoreError("Could not initialize Supabase client")
        return supabase

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            result = self._client().table(self.collection).select("*").eq("id", doc_id).limit(1).execute()
        except DocumentStoreError:
            raise
        except Exception as e:
            logger.error(f"❌ Error getting {doc_id} from Supabase: {e}")
            raise DocumentStoreError(str(e)) from e

        if result.data:
            return result.data[0]
        return None

    def update(self, doc_id: str, patch: Dict[str, Any]) -> None:
        try:
            result = (
                self._client()
                .table(self.collection)
                .update(to_json_document(patch))
                .eq("id", doc_id)
                .execute()
            )
        except DocumentStoreError:
            raise
        except Exception as e:
            logger.error(f"❌ Error updating {doc_id} in Supabase: {e}")
            raise DocumentStoreError(str(e)) from e

        if not result.data:
            logger.warning(f"⚠️ Update query returned no data for {doc_id}")
            raise DocumentStoreError(f"No document updated for {doc_id}")
        logger.info(f"✅ Updated {doc_id} in Supabase ({', '.join(sorted(patch))})")

    def list(self, limit: Optional[int] = None) -> List[Tuple[str, Dict[str, Any]]]:
        try:
            query = self._client().table(self.collection).select("*").order("createdAt", desc=True)
            if limit:
                query = query.limit(limit)
            result = query.execute()
        except DocumentStoreError:
            raise
        except Exception as e:
            logger.error(f"❌ Error listing {self.collection} from Supabase: {e}")
            raise DocumentStoreError(str(e)) from e
        return [(row.get("id", ""), row) for row in (result.data or [])]


class SQLiteDocumentStore(DocumentStore):
    """Local JSON-document store backed by SQLite."""

    def __init__(self, db_path: str, table: str = "submissions"):
        self.db_path = db_path
        self.collection = table

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_database(self) -> None:
        """Create the documents table if it does not exist."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.collection} (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

    def put(self, doc_id: str, data: Dict[str, Any]) -> None:
        """Insert or replace a whole document (seeding and imports)."""
        payload = json.dumps(data, default=_json_default)
        try:
            with self._connect() as conn:
                conn.execute(
                    f"INSERT OR REPLACE INTO {self.collection} (id, data, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
                    (doc_id, payload),
                )
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e

    def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT data FROM {self.collection} WHERE id = ?", (doc_id,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.error(f"❌ Error getting {doc_id} from SQLite: {e}")
            raise DocumentStoreError(str(e)) from e
        return json.loads(row[0]) if row else None

    def update(self, doc_id: str, patch: Dict[str, Any]) -> None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    f"SELECT data FROM {self.collection} WHERE id = ?", (doc_id,)
                ).fetchone()
                if not row:
                    raise DocumentStoreError(f"No document to update: {doc_id}")
                data = json.loads(row[0])
                data.update(to_json_document(patch))
                conn.execute(
                    f"UPDATE {self.collection} SET data = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                    (json.dumps(data), doc_id),
                )
        except sqlite3.Error as e:
            logger.error(f"❌ Error updating {doc_id} in SQLite: {e}")
            raise DocumentStoreError(str(e)) from e
        logger.info(f"✅ Updated {doc_id} ({', '.join(sorted(patch))})")

    def list(self, limit: Optional[int] = None) -> List[Tuple[str, Dict[str, Any]]]:
        sql = f"SELECT id, data FROM {self.collection} ORDER BY created_at DESC, id"
        params: tuple = ()
        if limit:
            sql += " LIMIT ?"
            params = (limit,)
        try:
            with self._connect() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise DocumentStoreError(str(e)) from e
        return [(doc_id, json.loads(data)) for doc_id, data in rows]


def create_document_store(config: DashboardConfig, access_token: Optional[str] = None) -> DocumentStore:
    """Build the configured backend."""
    if config.document_store == "sqlite":
        store = SQLiteDocumentStore(config.sqlite_db_path, table=config.submissions_table)
        store.init_database()
        return store

    from auth.supabase_client import get_supabase_client
    return SupabaseDocumentStore(get_supabase_client, table=config.submissions_table, access_token=access_token)
