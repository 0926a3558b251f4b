"""Job post model.

Jobs come in two shapes that share one record type: a worker advertising
their availability ("worker") and an employer offering work ("employer").
The ``type`` tag decides what ``budget`` and ``skills`` mean; ``Job.terms``
resolves the per-tag payload so callers never reinterpret the raw fields.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, ValidationInfo, field_validator

from admin_console.models.base import Entity, PartyRef, decode_status, ensure_aware


class JobType(str, Enum):
    WORKER_SEEKING = "worker"
    EMPLOYER_POSTED = "employer"
    UNKNOWN = "unknown"


class JobStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    COMPLETED = "completed"
    UNKNOWN = "unknown"


class WorkerSeekingTerms(BaseModel):
    """A worker looking for work: budget is the salary they expect."""

    expected_salary: float | str | None = None
    skills: list[str] = Field(default_factory=list)
    availability: str | None = None
    experience: str | None = None

    budget_label: str = "Expected Salary"
    skills_label: str = "Skills"


class EmployerOfferTerms(BaseModel):
    """An employer offering work: budget is the amount on offer."""

    offered_budget: float | str | None = None
    required_skills: list[str] = Field(default_factory=list)
    payment_type: str | None = None
    rate_type: str | None = None
    applicant_count: int = 0

    budget_label: str = "Budget"
    skills_label: str = "Required Skills"


class Job(Entity):
    type: JobType = JobType.UNKNOWN
    collection: str | None = None
    is_approved: bool = Field(default=False, validation_alias=AliasChoices("isApproved", "is_approved"))
    status: JobStatus | None = None

    title: str = ""
    description: str | None = None
    location: str | None = None
    posted_by: PartyRef | None = Field(default=None, validation_alias=AliasChoices("postedBy", "posted_by"))
    urgent: bool = False

    # Shared raw fields; read them through ``terms``
    budget: float | str | None = None
    skills: list[str] = Field(default_factory=list)
    duration: str | None = None
    availability: str | None = None
    experience: str | None = None
    payment_type: str | None = Field(default=None, validation_alias=AliasChoices("paymentType", "payment_type"))
    rate_type: str | None = Field(default=None, validation_alias=AliasChoices("rateType", "rate_type"))
    applicant_count: int = Field(default=0, validation_alias=AliasChoices("applicants", "applicant_count"))

    completed_at: datetime | None = Field(default=None, validation_alias=AliasChoices("completedAt", "completed_at"))
    updated_at: datetime | None = Field(default=None, validation_alias=AliasChoices("updatedAt", "updated_at"))

    @field_validator("type", mode="before")
    @classmethod
    def _decode_type(cls, value: Any, info: ValidationInfo) -> JobType:
        return decode_status(JobType, value, info.data.get("id")) or JobType.UNKNOWN

    @field_validator("status", mode="before")
    @classmethod
    def _decode_status(cls, value: Any, info: ValidationInfo) -> JobStatus | None:
        return decode_status(JobStatus, value, info.data.get("id"))

    @field_validator("posted_by", mode="before")
    @classmethod
    def _weak_ref(cls, value: Any) -> PartyRef | None:
        return PartyRef.from_raw(value)

    @field_validator("applicant_count", mode="before")
    @classmethod
    def _count_applicants(cls, value: Any) -> int:
        if isinstance(value, (list, tuple)):
            return len(value)
        return value or 0

    @field_validator("skills", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("completed_at", "updated_at", mode="after")
    @classmethod
    def _aware(cls, value: datetime | None) -> datetime | None:
        return ensure_aware(value)

    @property
    def terms(self) -> WorkerSeekingTerms | EmployerOfferTerms | None:
        if self.type == JobType.WORKER_SEEKING:
            return WorkerSeekingTerms(
                expected_salary=self.budget,
                skills=list(self.skills),
                availability=self.availability,
                experience=self.experience,
            )
        if self.type == JobType.EMPLOYER_POSTED:
            return EmployerOfferTerms(
                offered_budget=self.budget,
                required_skills=list(self.skills),
                payment_type=self.payment_type,
                rate_type=self.rate_type,
                applicant_count=self.applicant_count,
            )
        return None

    @property
    def poster_name(self) -> str:
        if self.posted_by and self.posted_by.name:
            return self.posted_by.name
        return "Unknown"

    @property
    def completion_timestamp(self) -> datetime | None:
        """Best available date for when the job reached ``completed``."""
        return self.completed_at or self.updated_at or self.created_at
