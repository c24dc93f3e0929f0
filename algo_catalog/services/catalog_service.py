"""Catalog read/query logic and submission payload validation.

Sits between the HTTP routes and the store: the store knows nothing about
query filters or input caps, and the routes know nothing about how entries
are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from algo_catalog.adapters.storage.base import AbstractCatalogStore
from algo_catalog.core.config import AppSettings, settings
from algo_catalog.core.errors import AlgorithmNotFoundError, ValidationAppError
from algo_catalog.schemas.catalog import CatalogEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionLimits:
    """Size caps applied to submitted entries."""

    max_name_chars: int = 200
    max_description_chars: int = 5000
    max_pseudocode_chars: int = 50000
    max_field_chars: int = 1000
    max_list_items: int = 50

    @classmethod
    def from_settings(cls, app_settings: AppSettings) -> "SubmissionLimits":
        return cls(
            max_name_chars=app_settings.max_name_chars,
            max_description_chars=app_settings.max_description_chars,
            max_pseudocode_chars=app_settings.max_pseudocode_chars,
            max_field_chars=app_settings.max_field_chars,
            max_list_items=app_settings.max_list_items,
        )


@dataclass(frozen=True)
class CatalogFilter:
    """Optional listing filters; all given filters must match."""

    category: str | None = None
    tag: str | None = None
    search: str | None = None
    difficulty: str | None = None

    def matches(self, entry: CatalogEntry) -> bool:
        if self.category and entry.category != self.category:
            return False
        if self.difficulty and entry.difficulty != self.difficulty:
            return False
        if self.tag and self.tag not in entry.tags:
            return False
        if self.search:
            needle = self.search.lower()
            if not (
                needle in entry.name.lower()
                or needle in entry.description.lower()
                or any(needle in t.lower() for t in entry.tags)
            ):
                return False
        return True


def _distinct(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _too_long(field: str, value: str | None, limit: int) -> None:
    if value is not None and len(value) > limit:
        raise ValidationAppError(
            code=f"{field}_too_long",
            message=f"{field} exceeds maximum length",
            details={"field": field, "max_value": limit, "actual_value": len(value)},
        )


def _too_many(field: str, values: list | None, limit: int) -> None:
    if values is not None and len(values) > limit:
        raise ValidationAppError(
            code=f"too_many_{field}",
            message=f"Too many {field} items",
            details={"field": field, "max_value": limit, "actual_value": len(values)},
        )


def validate_submission(entry: CatalogEntry, submitted_by: str, limits: SubmissionLimits) -> None:
    """Reject entries missing required fields or exceeding the size caps.

    Raises:
        ValidationAppError: On the first violated rule.
    """
    missing = [
        field
        for field, value in (
            ("name", entry.name),
            ("category", entry.category),
            ("description", entry.description),
            ("pseudoCode", entry.pseudo_code),
        )
        if not value.strip()
    ]
    if missing:
        raise ValidationAppError(
            code="missing_required_fields",
            message="Missing required fields",
            details={"context": {"fields": missing}},
        )

    _too_long("name", entry.name, limits.max_name_chars)
    _too_long("description", entry.description, limits.max_description_chars)
    _too_long("pseudoCode", entry.pseudo_code, limits.max_pseudocode_chars)

    for field, value in (
        ("submittedBy", submitted_by),
        ("category", entry.category),
        ("difficulty", entry.difficulty),
        ("keyInsight", entry.key_insight),
        ("complexity.time", entry.complexity.time),
        ("complexity.space", entry.complexity.space),
    ):
        _too_long(field, value, limits.max_field_chars)

    list_fields: tuple[tuple[str, list | None], ...] = (
        ("tags", entry.tags),
        ("whenToUse", entry.when_to_use),
        ("examples", entry.examples),
        ("aocExamples", entry.aoc_examples),
        ("resources", entry.resources),
        ("prerequisites", entry.prerequisites),
        ("commonPitfalls", entry.common_pitfalls),
        ("relatedAlgos", entry.related_algos),
        ("recognitionHints", entry.recognition_hints),
    )
    for field, values in list_fields:
        _too_many(field, values, limits.max_list_items)
        for item in values or []:
            if isinstance(item, str):
                _too_long(field, item, limits.max_field_chars)

    for example in entry.examples:
        _too_many("steps", example.steps, limits.max_list_items)


class CatalogService:
    """Query and submission operations over a catalog store."""

    def __init__(self, store: AbstractCatalogStore, limits: SubmissionLimits | None = None) -> None:
        self._store = store
        self._limits = limits or SubmissionLimits.from_settings(settings.app)

    @property
    def limits(self) -> SubmissionLimits:
        return self._limits

    def list_algorithms(self, filters: CatalogFilter | None = None) -> list[CatalogEntry]:
        entries = self._store.list_approved()
        if filters is None:
            return entries
        return [entry for entry in entries if filters.matches(entry)]

    def get_algorithm(self, algorithm_id: str) -> CatalogEntry:
        entry = self._store.get_by_id(algorithm_id)
        if entry is None:
            raise AlgorithmNotFoundError(
                code="algorithm_not_found",
                message="Algorithm not found",
                details={"algorithm_id": algorithm_id},
            )
        return entry

    def categories(self) -> list[str]:
        return _distinct([entry.category for entry in self._store.list_approved()])

    def tags(self) -> list[str]:
        return _distinct([tag for entry in self._store.list_approved() for tag in entry.tags])

    def submit(self, entry: CatalogEntry, submitted_by: str) -> str:
        """Validate and queue an entry for moderation; returns the submission id."""
        validate_submission(entry, submitted_by, self._limits)
        return self._store.add_submission(entry, submitted_by)
