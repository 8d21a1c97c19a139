"""
Review mutations: status, notes, flag and per-reviewer scores.

Every operation reads the stored document, writes a minimal patch with a fresh
``lastModified`` (plus ``lastReviewedAt`` for review actions) and only then
mirrors the change into the in-memory ApplicationRecord. A failed read, an
invalid argument or a failed write leaves the local record untouched.

There is no compare-and-set: two reviewers saving at the same time race, and
the store's last write wins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from review.normalize import normalize_scores
from review.schema import ApplicationRecord, MutationResult, ReviewStatus, ScoreEntry
from review.scoring import is_valid_total_score, replace_reviewer_score, validate_criteria
from review.store import ApplicationNotFoundError, DocumentStore, DocumentStoreError, to_json_document

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApplicationReview:
    """
    One reviewer's working copy of an application.

    Args:
        store: Document store holding the ``submissions`` collection
        application: Normalized record currently shown to the reviewer
        clock: Returns "now"; injectable for tests
    """

    def __init__(self, store: DocumentStore, application: ApplicationRecord, clock=utcnow):
        self.store = store
        self.application = application
        self.clock = clock

    @property
    def application_id(self) -> str:
        return self.application.id

    def _read_current(self) -> Dict[str, Any]:
        current = self.store.get(self.application_id)
        if current is None:
            raise ApplicationNotFoundError(self.application_id)
        return current

    def _commit(self, operation: str, patch: Dict[str, Any], local_changes: Dict[str, Any]) -> MutationResult:
        """Write ``patch`` then mirror ``local_changes``. Raises on write failure."""
        self.store.update(self.application_id, patch)
        self.application = self.application.model_copy(update=local_changes)
        logger.info(f"✅ {operation} applied to {self.application_id}")
        return MutationResult(success=True, operation=operation, patch=to_json_document(patch))

    def _run(self, operation: str, build) -> MutationResult:
        """Run one read-modify-write; convert every failure into a failed result."""
        try:
            patch, local_changes = build()
            return self._commit(operation, patch, local_changes)
        except ValueError as e:
            logger.warning(f"⚠️ {operation} rejected for {self.application_id}: {e}")
            return MutationResult(success=False, operation=operation, error=str(e), error_type="invalid")
        except ApplicationNotFoundError as e:
            logger.warning(f"⚠️ {operation} failed: {e}")
            return MutationResult(success=False, operation=operation, error=str(e), error_type="not_found")
        except DocumentStoreError as e:
            logger.error(f"❌ {operation} failed for {self.application_id}: {e}")
            return MutationResult(success=False, operation=operation, error=str(e), error_type="store")

    def set_review_status(self, status: Union[ReviewStatus, str]) -> MutationResult:
        """Set reviewStatus. Values outside ReviewStatus are rejected before any write."""
        def build():
            new_status = ReviewStatus(status)
            self._read_current()
            now = self.clock()
            patch = {
                "reviewStatus": new_status.value,
                "lastReviewedAt": now,
                "lastModified": now,
            }
            return patch, {"review_status": new_status, "last_reviewed_at": now, "last_modified": now}

        return self._run("set_review_status", build)

    def set_admin_notes(self, notes: str) -> MutationResult:
        def build():
            text = notes or ""
            self._read_current()
            now = self.clock()
            return (
                {"adminNotes": text, "lastModified": now},
                {"admin_notes": text, "last_modified": now},
            )

        return self._run("set_admin_notes", build)

    def set_flag(self, flagged: bool, reason: Optional[str] = None) -> MutationResult:
        """
        Flag or unflag the application.

        Unflagging always clears the reason. Flagging writes the reason only
        when one is given, so an existing reason survives a re-flag.
        """
        def build():
            self._read_current()
            now = self.clock()
            patch: Dict[str, Any] = {"flagged": bool(flagged), "lastModified": now}
            local: Dict[str, Any] = {"flagged": bool(flagged), "last_modified": now}
            if not flagged:
                patch["flagReason"] = ""
                local["flag_reason"] = None
            elif reason:
                patch["flagReason"] = reason
                local["flag_reason"] = reason
            return patch, local

        return self._run("set_flag", build)

    def upsert_score(self, entry: ScoreEntry, reviewer_id: str) -> MutationResult:
        """
        Save ``reviewer_id``'s score, replacing any earlier entry of theirs.

        The stored score list is re-read so entries other reviewers saved since
        the page loaded are kept.
        """
        def build():
            if not reviewer_id:
                raise ValueError("Reviewer id is required to save a score")
            if not is_valid_total_score(entry.total_score):
                raise ValueError(f"Total score must be between 0 and 40, got {entry.total_score}")
            validate_criteria(entry)

            current = self._read_current()
            now = self.clock()
            stamped = entry.model_copy(update={"admin_id": reviewer_id, "scored_at": now})
            scores = replace_reviewer_score(normalize_scores(current.get("scores")), stamped)
            patch = {
                "scores": [score.model_dump(by_alias=True, mode="json", exclude_none=True) for score in scores],
                "lastReviewedAt": now,
                "lastModified": now,
            }
            return patch, {"scores": scores, "last_reviewed_at": now, "last_modified": now}

        return self._run("upsert_score", build)
