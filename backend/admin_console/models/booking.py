"""Booking between a worker and an employer for a job.

Bookings carry two overlapping status fields: the canonical
``bookingStatus`` and a legacy ``status`` written by older clients. They are
synonyms, resolved once here through ``effective_status``.
"""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, Field, ValidationInfo, field_validator, model_validator

from admin_console.models.base import Entity, PartyRef, decode_status


class BookingStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    UNKNOWN = "unknown"


class ApprovalStage(str, Enum):
    AWAITING_WORKER = "awaiting_worker"
    FULLY_APPROVED = "fully_approved"


BOOKING_STATUS_COLORS = {
    BookingStatus.PENDING: "orange",
    BookingStatus.ACCEPTED: "orange",
    BookingStatus.APPROVED: "green",
    BookingStatus.REJECTED: "red",
    BookingStatus.COMPLETED: "blue",
    BookingStatus.CANCELLED: "gray",
}

PAYMENT_STATUS_COLORS = {
    PaymentStatus.PAID: "green",
    PaymentStatus.PENDING: "orange",
    PaymentStatus.FAILED: "red",
}


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value not in (None, ""):
            return value
    return None


def _party(data: dict, prefix: str) -> PartyRef | None:
    """Build a weak reference from ``<prefix>`` / ``<prefix>Id`` / ``<prefix>Name`` fields."""
    ref = PartyRef.from_raw(data.get(prefix)) or PartyRef()
    ref_id = _first_present(data, f"{prefix}Id", f"{prefix}_id")
    name = _first_present(data, f"{prefix}Name", f"{prefix}_name")
    phone = _first_present(data, f"{prefix}Phone", f"{prefix}_phone")
    ref = ref.model_copy(update={
        "id": ref.id or (str(ref_id) if ref_id is not None else None),
        "name": ref.name or name,
        "phone": ref.phone or phone,
    })
    if ref.id is None and ref.name is None:
        return None
    return ref


class Booking(Entity):
    booking_status: BookingStatus | None = Field(
        default=None, validation_alias=AliasChoices("bookingStatus", "booking_status")
    )
    status: BookingStatus | None = None
    admin_approval: bool = Field(default=False, validation_alias=AliasChoices("adminApproval", "admin_approval"))
    worker_approval: bool = Field(default=False, validation_alias=AliasChoices("workerApproval", "worker_approval"))
    payment_status: PaymentStatus | None = Field(
        default=None, validation_alias=AliasChoices("paymentStatus", "payment_status")
    )
    admin_notes: str | None = Field(default=None, validation_alias=AliasChoices("adminNotes", "admin_notes"))
    rejection_reason: str | None = Field(
        default=None, validation_alias=AliasChoices("rejectionReason", "rejection_reason")
    )

    worker: PartyRef | None = None
    employer: PartyRef | None = None
    job: PartyRef | None = None

    amount: float | str | None = None
    duration: str | None = None
    area: str | None = None
    district: str | None = None
    job_description: str | None = Field(
        default=None, validation_alias=AliasChoices("jobDescription", "job_description")
    )

    @model_validator(mode="before")
    @classmethod
    def _collect_references(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        location = data.get("location") if isinstance(data.get("location"), dict) else {}
        data["worker"] = _party(data, "worker")
        data["employer"] = _party(data, "employer")
        job = _party(data, "job")
        title = _first_present(data, "jobTitle", "job_title")
        if title and (job is None or job.name is None):
            job = (job or PartyRef()).model_copy(update={"name": title})
        data["job"] = job
        if data.get("amount") in (None, ""):
            data["amount"] = _first_present(data, "totalAmount", "agreedRate", "budget")
        if data.get("duration") in (None, ""):
            data["duration"] = _first_present(data, "workDuration", "duration")
        data["area"] = data.get("area") or location.get("area")
        data["district"] = data.get("district") or location.get("district")
        return data

    @field_validator("booking_status", "status", mode="before")
    @classmethod
    def _decode_status(cls, value: Any, info: ValidationInfo) -> BookingStatus | None:
        return decode_status(BookingStatus, value, info.data.get("id"))

    @field_validator("payment_status", mode="before")
    @classmethod
    def _decode_payment(cls, value: Any, info: ValidationInfo) -> PaymentStatus | None:
        return decode_status(PaymentStatus, value, info.data.get("id"))

    @field_validator("admin_approval", "worker_approval", mode="before")
    @classmethod
    def _falsy_flags(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def effective_status(self) -> BookingStatus | None:
        if self.booking_status is not None:
            return self.booking_status
        return self.status

    @property
    def status_values(self) -> frozenset[BookingStatus]:
        """Every status either field currently claims."""
        return frozenset(s for s in (self.booking_status, self.status) if s is not None)

    def has_status(self, status: BookingStatus) -> bool:
        return status in self.status_values

    @property
    def approval_stage(self) -> ApprovalStage | None:
        if self.admin_approval and self.worker_approval:
            return ApprovalStage.FULLY_APPROVED
        if self.admin_approval:
            return ApprovalStage.AWAITING_WORKER
        return None

    @property
    def title(self) -> str:
        if self.job and self.job.name:
            return self.job.name
        return "No Title"

    @property
    def status_color(self) -> str:
        return BOOKING_STATUS_COLORS.get(self.effective_status, "gray")

    @property
    def payment_color(self) -> str:
        return PAYMENT_STATUS_COLORS.get(self.payment_status, "gray")
