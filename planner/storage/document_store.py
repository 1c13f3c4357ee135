"""JSON-file document store for curricula and their derived artifacts.

Each collection lives in its own `<collection>.json` file holding a list of
documents. Documents are plain dicts with an `id`, `createdAt` and
`updatedAt`; derived artifacts point at their owners through foreign keys:

    curricula   <- flows (tpId), allocations (tpId), criteria (tpId, atpId),
                   schedules (tpId, protaId)
    flows       <- criteria (atpId)
    allocations <- schedules (protaId)

Deleting a document deletes everything derived from it.
"""

from __future__ import annotations

import json
import logging
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from planner.errors import DocumentNotFoundError

logger = logging.getLogger(__name__)

CURRICULA = "curricula"
FLOWS = "flows"
ALLOCATIONS = "allocations"
CRITERIA = "criteria"
SCHEDULES = "schedules"

COLLECTIONS = (CURRICULA, FLOWS, ALLOCATIONS, CRITERIA, SCHEDULES)

# Foreign key each collection is usually listed by
OWNER_KEYS: dict[str, str | None] = {
    CURRICULA: None,
    FLOWS: "tpId",
    ALLOCATIONS: "tpId",
    CRITERIA: "atpId",
    SCHEDULES: "protaId",
}

# (dependent collection, foreign key) removed when an owner is deleted
CASCADES: dict[str, list[tuple[str, str]]] = {
    CURRICULA: [(FLOWS, "tpId"), (ALLOCATIONS, "tpId"), (CRITERIA, "tpId"), (SCHEDULES, "tpId")],
    FLOWS: [(CRITERIA, "atpId")],
    ALLOCATIONS: [(SCHEDULES, "protaId")],
    CRITERIA: [],
    SCHEDULES: [],
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentStore:
    """Key-addressable CRUD over one JSON file per collection."""

    def __init__(self, root: Path | str, clock: Callable[[], datetime] = _utcnow):
        """Initialize the store.

        Args:
            root: Directory holding the collection files (created on first write).
            clock: Source of timestamps (injectable for tests).
        """
        self.root = Path(root)
        self.clock = clock
        # Re-entrant: cascading deletes call back into delete()
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # File access
    # -------------------------------------------------------------------------

    def _path(self, collection: str) -> Path:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return self.root / f"{collection}.json"

    def _load(self, collection: str) -> list[dict[str, Any]]:
        path = self._path(collection)
        if not path.exists():
            return []
        with path.open(encoding="utf-8") as f:
            return json.load(f)

    def _save(self, collection: str, documents: list[dict[str, Any]]) -> None:
        """Write a collection atomically: temp file in the same directory, then rename."""
        path = self._path(collection)
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        try:
            with open(fd, "w", encoding="utf-8") as f:
                json.dump(documents, f, ensure_ascii=False, indent=2)
            Path(tmp_path).replace(path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(self, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a new document and return it with `id` and timestamps."""
        with self._lock:
            documents = self._load(collection)
            now = self.clock().isoformat()
            document = {**data, "id": uuid.uuid4().hex, "createdAt": now, "updatedAt": now}
            documents.append(document)
            self._save(collection, documents)
        logger.info("Created %s/%s", collection, document["id"])
        return document

    def get(self, collection: str, doc_id: str) -> dict[str, Any]:
        with self._lock:
            documents = self._load(collection)
        for document in documents:
            if document.get("id") == doc_id:
                return document
        raise DocumentNotFoundError(f"{collection}/{doc_id} not found")

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Merge `changes` into a document. `id` and `createdAt` are kept."""
        with self._lock:
            documents = self._load(collection)
            for position, document in enumerate(documents):
                if document.get("id") != doc_id:
                    continue
                protected = {"id": document["id"], "createdAt": document.get("createdAt")}
                updated = {**document, **changes, **protected, "updatedAt": self.clock().isoformat()}
                documents[position] = updated
                self._save(collection, documents)
                logger.info("Updated %s/%s", collection, doc_id)
                return updated
        raise DocumentNotFoundError(f"{collection}/{doc_id} not found")

    def delete(self, collection: str, doc_id: str) -> int:
        """
        Delete a document and, recursively, every document derived from it.

        Returns:
            Number of documents removed, the document itself included.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        with self._lock:
            documents = self._load(collection)
            kept = [d for d in documents if d.get("id") != doc_id]
            if len(kept) == len(documents):
                raise DocumentNotFoundError(f"{collection}/{doc_id} not found")
            self._save(collection, kept)

            removed = 1 + self.delete_dependents(collection, doc_id)
        logger.info("Deleted %s/%s (%d documents)", collection, doc_id, removed)
        return removed

    def delete_dependents(self, collection: str, doc_id: str) -> int:
        """Delete every document derived from `collection/doc_id`, keeping the document itself."""
        removed = 0
        with self._lock:
            for dependent, key in CASCADES[collection]:
                removed += self.delete_by_owner(dependent, key, doc_id)
        return removed

    def delete_by_owner(self, collection: str, owner_key: str, owner_id: str) -> int:
        """Delete every document of `collection` whose `owner_key` is `owner_id`, cascading."""
        removed = 0
        with self._lock:
            targets = [d["id"] for d in self._load(collection) if d.get(owner_key) == owner_id]
            for doc_id in targets:
                try:
                    removed += self.delete(collection, doc_id)
                except DocumentNotFoundError:
                    # Already removed by an earlier cascade in this call
                    continue
        return removed

    def list(
        self,
        collection: str,
        subject: str | None = None,
        owner_id: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List documents, newest first.

        Args:
            collection: Collection name.
            subject: Keep only documents of this subject.
            owner_id: Keep only documents whose owner key (see OWNER_KEYS)
                equals this id.
        """
        with self._lock:
            documents = self._load(collection)
        if subject is not None:
            documents = [d for d in documents if d.get("subject") == subject]
        if owner_id is not None:
            owner_key = OWNER_KEYS[collection]
            if owner_key is None:
                raise ValueError(f"Collection {collection} has no owner key")
            documents = [d for d in documents if d.get(owner_key) == owner_id]

        ranked = sorted(enumerate(documents), key=lambda pair: (pair[1].get("createdAt", ""), pair[0]), reverse=True)
        return [document for _, document in ranked]
