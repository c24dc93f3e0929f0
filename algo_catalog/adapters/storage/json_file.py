"""JSON-file catalog store.

The whole state (entries + submissions) lives in memory and is mirrored to a
single JSON file that is fully rewritten after every mutation. All access goes
through one reader/writer lock: shared for reads, exclusive for mutations.
The file write happens while the exclusive lock is held, so disk latency is on
every write path. Fine at catalog scale, nothing more.

If a write fails after a mutation, the failure is logged and the in-memory
change is kept; memory and disk can diverge until the next successful save.
"""

from __future__ import annotations

import logging
import os
import secrets
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable

from pydantic import TypeAdapter, ValidationError

from algo_catalog.adapters.storage.base import AbstractCatalogStore
from algo_catalog.core.errors import (
    StorageAppError,
    SubmissionAlreadyReviewedError,
    SubmissionNotFoundError,
)
from algo_catalog.schemas.catalog import (
    CatalogEntry,
    CatalogSnapshot,
    Submission,
    SubmissionStatus,
    utcnow,
)
from algo_catalog.utils.rwlock import ReadWriteLock
from algo_catalog.utils.slug import unique_slug

logger = logging.getLogger(__name__)

_SEED_ADAPTER = TypeAdapter(list[CatalogEntry])


def new_submission_id() -> str:
    """128 random bits, hex encoded."""
    return secrets.token_hex(16)


class JsonFileCatalogStore(AbstractCatalogStore):
    """Catalog store persisted as one pretty-printed JSON document."""

    def __init__(
        self,
        data_file: str | Path,
        *,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[], str] = new_submission_id,
    ) -> None:
        self._data_file = Path(data_file)
        self._clock = clock
        self._id_factory = id_factory
        self._lock = ReadWriteLock()
        self._algorithms: list[CatalogEntry] = []
        self._submissions: list[Submission] = []

    @property
    def data_file(self) -> Path:
        return self._data_file

    # -- loading -----------------------------------------------------------

    def load(self) -> None:
        """Replace in-memory state with the contents of the data file.

        Raises:
            StorageAppError: If the file is missing, unreadable or malformed.
        """
        try:
            raw = self._data_file.read_bytes()
        except OSError as exc:
            raise StorageAppError(
                code="data_file_unreadable",
                message=f"Cannot read {self._data_file}: {exc.strerror or exc}",
                details={"path": str(self._data_file)},
            ) from exc

        try:
            snapshot = CatalogSnapshot.model_validate_json(raw)
        except ValidationError as exc:
            raise StorageAppError(
                code="data_file_malformed",
                message=f"Cannot parse {self._data_file}",
                details={"path": str(self._data_file), "context": {"errors": exc.error_count()}},
            ) from exc

        with self._lock.write():
            self._algorithms = snapshot.algorithms
            self._submissions = snapshot.submissions

        logger.info(
            "store.loaded",
            extra={
                "path": str(self._data_file),
                "algorithms": len(snapshot.algorithms),
                "submissions": len(snapshot.submissions),
            },
        )

    def load_seed(self, seed_file: str | Path) -> None:
        """Reset state from a bundled list of entries and persist it.

        Every seeded entry is marked approved with a fresh timestamp and all
        submissions are discarded.

        Raises:
            StorageAppError: If the seed file cannot be read or parsed.
        """
        seed_path = Path(seed_file)
        try:
            entries = _SEED_ADAPTER.validate_json(seed_path.read_bytes())
        except OSError as exc:
            raise StorageAppError(
                code="seed_file_unreadable",
                message=f"Cannot read seed file {seed_path}",
                details={"path": str(seed_path)},
            ) from exc
        except ValidationError as exc:
            raise StorageAppError(
                code="seed_file_malformed",
                message=f"Cannot parse seed file {seed_path}",
                details={"path": str(seed_path)},
            ) from exc

        now = self._clock()
        for entry in entries:
            entry.approved = True
            entry.created_at = now

        with self._lock.write():
            self._algorithms = entries
            self._submissions = []
            self._persist_locked("store.seeded")

        logger.info("store.seeded", extra={"path": str(seed_path), "algorithms": len(entries)})

    def bootstrap(self, seed_file: str | Path, *, reseed: bool = False) -> None:
        """Load the data file, falling back to the seed when it is unusable.

        Raises:
            StorageAppError: If the seed is needed and cannot be loaded.
        """
        if reseed:
            logger.info("store.reseed_requested", extra={"seed_file": str(seed_file)})
            self.load_seed(seed_file)
            return

        try:
            self.load()
        except StorageAppError as exc:
            logger.warning(
                "store.load_failed_using_seed",
                extra={"error_code": exc.code, "error_message": exc.message},
            )
            self.load_seed(seed_file)

    # -- persistence -------------------------------------------------------

    def save(self) -> None:
        """Write the full state to disk.

        Raises:
            StorageAppError: If serialization or the write fails.
        """
        with self._lock.write():
            self._write_locked()

    def _write_locked(self) -> None:
        snapshot = CatalogSnapshot(algorithms=self._algorithms, submissions=self._submissions)
        payload = snapshot.model_dump_json(by_alias=True, exclude_none=True, indent=2)

        directory = self._data_file.parent
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._data_file.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self._data_file)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageAppError(
                code="data_file_write_failed",
                message=f"Cannot write {self._data_file}",
                details={"path": str(self._data_file)},
            ) from exc

    def _persist_locked(self, event: str) -> None:
        try:
            self._write_locked()
        except StorageAppError as exc:
            logger.error(
                "store.persist_failed",
                extra={"event": event, "error_code": exc.code, "path": str(self._data_file)},
                exc_info=exc,
            )

    # -- reads -------------------------------------------------------------

    def list_approved(self) -> list[CatalogEntry]:
        with self._lock.read():
            return [entry.model_copy(deep=True) for entry in self._algorithms if entry.approved]

    def get_by_id(self, algorithm_id: str) -> CatalogEntry | None:
        with self._lock.read():
            for entry in self._algorithms:
                if entry.id == algorithm_id and entry.approved:
                    return entry.model_copy(deep=True)
        return None

    def list_pending(self) -> list[Submission]:
        with self._lock.read():
            return [
                sub.model_copy(deep=True)
                for sub in self._submissions
                if sub.status is SubmissionStatus.PENDING
            ]

    def all_submissions(self) -> list[Submission]:
        with self._lock.read():
            return [sub.model_copy(deep=True) for sub in self._submissions]

    def all_entries(self) -> list[CatalogEntry]:
        """Every stored entry, approved or not."""
        with self._lock.read():
            return [entry.model_copy(deep=True) for entry in self._algorithms]

    # -- mutations ---------------------------------------------------------

    def add_submission(self, entry: CatalogEntry, submitted_by: str) -> str:
        algorithm = entry.model_copy(deep=True)
        with self._lock.write():
            now = self._clock()
            submission_id = self._id_factory()
            algorithm.approved = False
            algorithm.created_at = now
            algorithm.submitted_by = submitted_by or None

            self._submissions.append(
                Submission(
                    id=submission_id,
                    algorithm=algorithm,
                    submitted_at=now,
                    status=SubmissionStatus.PENDING,
                )
            )
            self._persist_locked("store.submission_added")

        logger.info(
            "store.submission_added",
            extra={"submission_id": submission_id, "algorithm_name": algorithm.name},
        )
        return submission_id

    def _find_pending_locked(self, submission_id: str) -> Submission:
        for sub in self._submissions:
            if sub.id != submission_id:
                continue
            if sub.status is not SubmissionStatus.PENDING:
                raise SubmissionAlreadyReviewedError(
                    code="submission_already_reviewed",
                    message="Submission was already reviewed",
                    details={"submission_id": submission_id, "status": sub.status.value},
                )
            return sub
        raise SubmissionNotFoundError(
            code="submission_not_found",
            message="Submission not found",
            details={"submission_id": submission_id},
        )

    def approve(self, submission_id: str) -> CatalogEntry:
        with self._lock.write():
            sub = self._find_pending_locked(submission_id)
            sub.status = SubmissionStatus.APPROVED
            sub.reviewed_at = self._clock()

            entry = sub.algorithm.model_copy(deep=True)
            entry.id = unique_slug(entry.name, {e.id for e in self._algorithms})
            entry.approved = True
            self._algorithms.append(entry)
            self._persist_locked("store.submission_approved")
            published = entry.model_copy(deep=True)

        logger.info(
            "store.submission_approved",
            extra={"submission_id": submission_id, "algorithm_id": published.id},
        )
        return published

    def reject(self, submission_id: str) -> Submission:
        with self._lock.write():
            sub = self._find_pending_locked(submission_id)
            sub.status = SubmissionStatus.REJECTED
            sub.reviewed_at = self._clock()
            self._persist_locked("store.submission_rejected")
            rejected = sub.model_copy(deep=True)

        logger.info("store.submission_rejected", extra={"submission_id": submission_id})
        return rejected
