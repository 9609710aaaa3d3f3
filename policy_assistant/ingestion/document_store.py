"""
Persistent collection of processed documents.

The store owns every ProcessedDocument. It is loaded once when opened,
and every mutation is persisted before the call returns. Loading is
best-effort: missing or unreadable storage simply yields an empty
collection. A failed write is logged but the in-memory change stands.
"""

import json
import threading
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .document import ProcessedDocument
from .storage import KeyValueStore
from ..exceptions import StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "company_documents_ai"
SCHEMA_FORMAT = "policy-assistant/documents"
SCHEMA_VERSION = 1


class DocumentStore:
    """Insertion-ordered, persisted mapping from document id to document."""

    def __init__(self, backend: KeyValueStore, key: str = DEFAULT_STORAGE_KEY):
        self.backend = backend
        self.key = key
        self._documents: Dict[str, ProcessedDocument] = {}
        self._lock = threading.RLock()
        self._is_open = False

    # ─── Lifecycle ────────────────────────────────────────────────────

    def open(self) -> "DocumentStore":
        """Load persisted documents. Safe to call more than once."""
        with self._lock:
            if not self._is_open:
                self.load()
                self._is_open = True
        return self

    def close(self) -> None:
        """Drop the in-memory collection. Persisted data is untouched."""
        with self._lock:
            self._documents = {}
            self._is_open = False

    def __enter__(self) -> "DocumentStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ─── Mutations ────────────────────────────────────────────────────

    def load(self) -> List[ProcessedDocument]:
        """
        Replace the in-memory collection with the persisted one.

        Never raises: absent, corrupt or incompatible storage results in
        an empty collection.
        """
        with self._lock:
            self._documents = {}
            try:
                blob = self.backend.get(self.key)
                if blob is None:
                    logger.debug("No stored documents under key %s", self.key)
                    return []
                documents = _decode(blob)
            except Exception as e:
                logger.warning("Error loading stored documents: %s", e)
                return []

            for doc in documents:
                if doc.id in self._documents:
                    logger.warning("Skipping stored document with duplicate id %s", doc.id)
                    continue
                self._documents[doc.id] = doc
            logger.info("Loaded stored documents: %d", len(self._documents))
            return list(self._documents.values())

    def add(self, documents: Sequence[ProcessedDocument]) -> None:
        """
        Append documents after the existing ones and persist.

        Raises:
            ValueError: A document id is already stored or repeats within
                ``documents``. Nothing is added in that case.
        """
        with self._lock:
            seen = set(self._documents)
            for doc in documents:
                if doc.id in seen:
                    raise ValueError(f"Duplicate document id: {doc.id}")
                seen.add(doc.id)
            for doc in documents:
                self._documents[doc.id] = doc
            self._persist()

    def delete_by_id(self, doc_id: str) -> bool:
        """
        Remove the document with the given id and persist.

        Returns:
            True if a document was removed, False if the id was unknown.
        """
        with self._lock:
            removed = self._documents.pop(doc_id, None) is not None
            self._persist()
            if not removed:
                logger.debug("Delete ignored, no document with id %s", doc_id)
            return removed

    def clear_all(self) -> None:
        """Empty the collection and erase persisted storage."""
        with self._lock:
            self._documents = {}
            try:
                self.backend.remove(self.key)
            except StorageError as e:
                logger.error("Failed to erase stored documents: %s", e)

    # ─── Queries ──────────────────────────────────────────────────────

    @property
    def documents(self) -> List[ProcessedDocument]:
        """All documents in insertion order."""
        with self._lock:
            return list(self._documents.values())

    def get(self, doc_id: str) -> Optional[ProcessedDocument]:
        with self._lock:
            return self._documents.get(doc_id)

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._documents

    def __iter__(self) -> Iterator[ProcessedDocument]:
        return iter(self.documents)

    def __repr__(self) -> str:
        return f"DocumentStore(documents={len(self)}, backend={self.backend!r})"

    def _persist(self) -> None:
        try:
            self.backend.set(self.key, _encode(self._documents.values()))
            logger.debug("Saved documents to storage: %d", len(self._documents))
        except (StorageError, OSError, TypeError, ValueError) as e:
            logger.error("Failed to persist documents: %s", e)


def _encode(documents) -> str:
    payload = {
        "format": SCHEMA_FORMAT,
        "version": SCHEMA_VERSION,
        "documents": [doc.to_dict() for doc in documents],
    }
    return json.dumps(payload)


def _decode(blob: str) -> List[ProcessedDocument]:
    data: Any = json.loads(blob)

    # Bare arrays are the unversioned layout written by earlier releases
    if isinstance(data, list):
        records = data
    elif isinstance(data, dict) and data.get("format") == SCHEMA_FORMAT:
        version = data.get("version")
        if version != SCHEMA_VERSION:
            raise ValueError(f"Unsupported storage version: {version}")
        records = data.get("documents", [])
    else:
        raise ValueError("Unrecognised storage format")

    return [ProcessedDocument.from_dict(record) for record in records]
