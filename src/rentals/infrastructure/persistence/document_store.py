"""Document store backing the repositories.

Committed state is one document: ``{collection: {key: record}}`` where a
record is a JSON-serializable dict.  A unit of work stages its writes in a
``StagedChanges`` buffer and hands them to ``DocumentStore.apply`` on
commit, which swaps in the new document in one step.  Readers therefore
see either all of a unit of work's writes or none of them.

``JsonDocumentStore`` persists the document to a single file, written to a
temporary file first and moved into place with ``os.replace`` so a crash
mid-write leaves the previous document intact.  Every unit of work runs
inside ``session()``, which holds an inter-process file lock and reloads
the file first, so several processes can share one store.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from rentals.domain.exceptions import LockTimeoutError, StorageError

logger = logging.getLogger(__name__)

COLLECTIONS = ("products", "orders", "reservations", "coupons", "invoices", "audit_log")

Document = dict[str, dict[str, dict]]


class StagedChanges:
    """Writes buffered by one unit of work; ``None`` marks a deletion."""

    def __init__(self) -> None:
        self._writes: dict[str, dict[str, dict | None]] = {c: {} for c in COLLECTIONS}

    def put(self, collection: str, key: str, record: dict) -> None:
        self._writes[collection][key] = copy.deepcopy(record)

    def delete(self, collection: str, key: str) -> None:
        self._writes[collection][key] = None

    def lookup(self, collection: str, key: str) -> tuple[bool, dict | None]:
        """Return ``(staged, record)``; ``staged`` is False if untouched."""
        writes = self._writes[collection]
        if key not in writes:
            return False, None
        return True, copy.deepcopy(writes[key])

    def items(self, collection: str) -> dict[str, dict | None]:
        return self._writes[collection]

    def clear(self) -> None:
        for writes in self._writes.values():
            writes.clear()

    def __bool__(self) -> bool:
        return any(self._writes.values())


class DocumentStore:
    """In-memory committed state shared by every unit of work."""

    def __init__(self, document: Document | None = None) -> None:
        self._lock = threading.RLock()
        self._sequences = {c: 0 for c in COLLECTIONS}
        self._document: Document = {}
        self._replace_document(document or {})

    @contextmanager
    def session(self) -> Iterator[None]:
        """Scope of one unit of work.  The in-memory store needs no setup."""
        yield

    # --- Reads ----------------------------------------------------------------

    def read(self, collection: str, key: str) -> dict | None:
        with self._lock:
            record = self._document[collection].get(key)
            return copy.deepcopy(record) if record is not None else None

    def scan(self, collection: str) -> dict[str, dict]:
        with self._lock:
            return copy.deepcopy(self._document[collection])

    # --- Writes ---------------------------------------------------------------

    def next_sequence(self, collection: str) -> int:
        """Hand out the next numeric key.  Like a database sequence, values
        taken by a unit of work that rolls back are not reused."""
        with self._lock:
            self._sequences[collection] += 1
            return self._sequences[collection]

    def apply(self, changes: StagedChanges) -> None:
        """Apply every staged write or, on failure, none of them."""
        if not changes:
            return
        with self._lock:
            updated = {c: dict(records) for c, records in self._document.items()}
            for collection in COLLECTIONS:
                for key, record in changes.items(collection).items():
                    if record is None:
                        updated[collection].pop(key, None)
                    else:
                        updated[collection][key] = copy.deepcopy(record)
            self._persist(updated)
            self._document = updated

    def _persist(self, document: Document) -> None:
        """Hook for durable stores; the in-memory store keeps nothing else."""

    def _replace_document(self, document: Document) -> None:
        """Install *document* as committed state; sequences never move back."""
        with self._lock:
            self._document = {c: dict(document.get(c, {})) for c in COLLECTIONS}
            for collection in COLLECTIONS:
                self._sequences[collection] = max(
                    self._sequences[collection], self._max_numeric_key(collection)
                )

    def _max_numeric_key(self, collection: str) -> int:
        numeric = [int(k) for k in self._document[collection] if k.isdigit()]
        return max(numeric, default=0)


def _sort_key(key: str) -> tuple[int, int | str]:
    return (0, int(key)) if key.isdigit() else (1, key)


class StagedCollection:
    """Base for repositories: committed records overlaid with staged writes."""

    collection: str = ""

    def __init__(self, store: DocumentStore, changes: StagedChanges) -> None:
        self._store = store
        self._changes = changes

    def _get_raw(self, key: str) -> dict | None:
        staged, record = self._changes.lookup(self.collection, key)
        if staged:
            return record
        return self._store.read(self.collection, key)

    def _scan_raw(self) -> list[dict]:
        records = self._store.scan(self.collection)
        for key, record in self._changes.items(self.collection).items():
            if record is None:
                records.pop(key, None)
            else:
                records[key] = copy.deepcopy(record)
        return [records[k] for k in sorted(records, key=_sort_key)]

    def _put_raw(self, key: str, record: dict) -> None:
        self._changes.put(self.collection, key, record)

    def _delete_raw(self, key: str) -> None:
        self._changes.delete(self.collection, key)


class JsonDocumentStore(DocumentStore):
    """DocumentStore persisted to one JSON file.

    The file lock lives beside the store (``store.json.lock``).  It is
    re-entrant within a thread, so nested units of work in one thread do
    not block each other.
    """

    def __init__(self, file_path: Path, lock_timeout: float | None = None) -> None:
        self._file_path = Path(file_path)
        self._file_lock = FileLock(
            str(self._file_path.with_name(self._file_path.name + ".lock")),
            timeout=-1 if lock_timeout is None else lock_timeout,
        )
        super().__init__(self._load())

    @contextmanager
    def session(self) -> Iterator[None]:
        """Hold the file lock and work on the latest committed document."""
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_lock.acquire()
        except Timeout as exc:
            logger.warning("Timed out waiting for store lock %s", self._file_lock.lock_file)
            raise LockTimeoutError(
                f"Timed out waiting for store {self._file_path}; try again"
            ) from exc
        except OSError as exc:
            raise StorageError(f"Could not lock store {self._file_path}: {exc}") from exc
        try:
            self._replace_document(self._load())
            yield
        finally:
            self._file_lock.release()

    def _load(self) -> Document:
        if not self._file_path.exists():
            return {}
        try:
            return json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Could not read store %s: %s", self._file_path, exc)
            raise StorageError(f"Could not read store {self._file_path}: {exc}") from exc

    def _persist(self, document: Document) -> None:
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._file_path.parent, prefix=f".{self._file_path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2, sort_keys=True)
                    fh.write("\n")
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self._file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.error("Could not write store %s: %s", self._file_path, exc)
            raise StorageError(f"Could not write store {self._file_path}: {exc}") from exc
