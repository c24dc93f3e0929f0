"""Catalog store interface.

Routes and services depend on this abstraction so the JSON file can later be
replaced by an embedded key-value store without touching the HTTP layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from algo_catalog.schemas.catalog import CatalogEntry, Submission


class AbstractCatalogStore(ABC):
    """Home of catalog entries and moderation submissions."""

    @abstractmethod
    def list_approved(self) -> list[CatalogEntry]:
        """Snapshot of approved entries in insertion order."""
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, algorithm_id: str) -> CatalogEntry | None:
        """Return the approved entry with this id, or None."""
        raise NotImplementedError

    @abstractmethod
    def add_submission(self, entry: CatalogEntry, submitted_by: str) -> str:
        """Queue ``entry`` for review and return the new submission id."""
        raise NotImplementedError

    @abstractmethod
    def list_pending(self) -> list[Submission]:
        raise NotImplementedError

    @abstractmethod
    def approve(self, submission_id: str) -> CatalogEntry:
        """Publish a pending submission as a new approved entry.

        Raises:
            SubmissionNotFoundError: No submission has this id.
            SubmissionAlreadyReviewedError: It was already approved/rejected.
        """
        raise NotImplementedError

    @abstractmethod
    def reject(self, submission_id: str) -> Submission:
        """Mark a pending submission as rejected.

        Raises:
            SubmissionNotFoundError: No submission has this id.
            SubmissionAlreadyReviewedError: It was already approved/rejected.
        """
        raise NotImplementedError
