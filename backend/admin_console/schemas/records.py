"""Pydantic schemas for user, job and booking list views."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from admin_console.models.base import PartyRef
from admin_console.models.booking import ApprovalStage, BookingStatus, PaymentStatus
from admin_console.models.job import EmployerOfferTerms, JobStatus, JobType, WorkerSeekingTerms
from admin_console.models.user import RatingBucket, UserRole, UserStatus
from admin_console.services.transitions import Action, EntityType, available_actions


class RecordRead(BaseModel):
    """Shared output fields; ``actions`` lists what the console may offer now."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime | None = None
    actions: list[Action] = []

    # Set on subclasses
    entity_type: EntityType

    @classmethod
    def from_entity(cls, entity: Any):
        record = cls.model_validate(entity)
        record.actions = available_actions(cls.model_fields["entity_type"].default, entity)
        return record


class UserRead(RecordRead):
    entity_type: EntityType = EntityType.USER

    role: UserRole
    status: UserStatus
    status_color: str
    display_name: str
    rating: float
    rating_bucket: RatingBucket
    email: str | None = None
    phone: str | None = None
    district: str | None = None
    city: str | None = None
    address: str | None = None
    skills: list[str] = []
    availability: list[str] = []
    company: str | None = None
    nid_number: str | None = None
    nid_front: str | None = None
    nid_back: str | None = None
    profile_photo: str | None = None
    total_jobs: int | None = None
    completed_jobs: int | None = None


class JobRead(RecordRead):
    entity_type: EntityType = EntityType.JOB

    type: JobType
    collection: str | None = None
    is_approved: bool
    status: JobStatus | None = None
    title: str
    description: str | None = None
    location: str | None = None
    posted_by: PartyRef | None = None
    poster_name: str
    urgent: bool = False
    duration: str | None = None
    terms: WorkerSeekingTerms | EmployerOfferTerms | None = None
    completed_at: datetime | None = None


class BookingRead(RecordRead):
    entity_type: EntityType = EntityType.BOOKING

    title: str
    booking_status: BookingStatus | None = None
    status: BookingStatus | None = None
    effective_status: BookingStatus | None = None
    status_color: str
    approval_stage: ApprovalStage | None = None
    admin_approval: bool
    worker_approval: bool
    payment_status: PaymentStatus | None = None
    payment_color: str
    admin_notes: str | None = None
    rejection_reason: str | None = None
    worker: PartyRef | None = None
    employer: PartyRef | None = None
    job: PartyRef | None = None
    amount: float | str | None = None
    duration: str | None = None
    area: str | None = None
    district: str | None = None
    job_description: str | None = None
