"""Pydantic schemas for catalog entries, submissions and captcha challenges.

Wire and on-disk JSON use camelCase keys; Python code uses snake_case
attributes. Both spellings are accepted when parsing.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Step(CamelModel):
    """One step of a worked example."""

    description: str = ""
    state: str = Field("", description="Visual state of the data at this step.")


class Example(CamelModel):
    """A worked example walking through the algorithm on a concrete input."""

    title: str = ""
    description: str = ""
    input: str = ""
    output: str = ""
    visual: str | None = Field(None, description="Optional ASCII diagram.")
    steps: list[Step] = Field(default_factory=list)


class Complexity(CamelModel):
    time: str = ""
    space: str = ""


class CatalogEntry(CamelModel):
    """A reference entry describing one algorithm.

    Only entries with ``approved`` set are visible through public endpoints.
    """

    id: str = Field("", description="URL-safe slug, unique among approved entries.")
    name: str = ""
    category: str = ""
    difficulty: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    when_to_use: list[str] = Field(default_factory=list, description="Usage hints.")
    pseudo_code: str = ""
    complexity: Complexity = Field(default_factory=Complexity)
    aoc_examples: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    examples: list[Example] = Field(default_factory=list)
    prerequisites: list[str] | None = None
    key_insight: str | None = None
    common_pitfalls: list[str] | None = None
    related_algos: list[str] | None = None
    recognition_hints: list[str] | None = None
    approved: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    submitted_by: str | None = None


class SubmissionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Submission(CamelModel):
    """A proposed entry awaiting (or past) moderation. Never deleted."""

    id: str
    algorithm: CatalogEntry
    submitted_at: datetime = Field(default_factory=utcnow)
    status: SubmissionStatus = SubmissionStatus.PENDING
    reviewed_at: datetime | None = None


class CatalogSnapshot(CamelModel):
    """Shape of the persisted data file."""

    algorithms: list[CatalogEntry] = Field(default_factory=list)
    submissions: list[Submission] = Field(default_factory=list)


class CaptchaResponse(BaseModel):
    """Public view of a captcha challenge; the answer stays server-side."""

    id: str
    question: str


class SubmitRequest(CamelModel):
    captcha_id: str = ""
    captcha_answer: int | None = None
    submitted_by: str = ""
    algorithm: CatalogEntry = Field(default_factory=CatalogEntry)


class SubmitResponse(CamelModel):
    message: str
    submission_id: str


class MessageResponse(BaseModel):
    message: str


class ApproveResponse(CamelModel):
    message: str
    algorithm_id: str
