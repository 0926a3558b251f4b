"""Pydantic schemas for moderation action requests and results."""

from typing import Any

from pydantic import BaseModel

from admin_console.models.booking import PaymentStatus
from admin_console.services.moderation import Outcome
from admin_console.services.transitions import Action, EntityType


class ApproveBookingRequest(BaseModel):
    admin_notes: str = ""


class RejectBookingRequest(BaseModel):
    # Emptiness is checked by the rules engine so the operator sees its message
    rejection_reason: str | None = None


class PaymentUpdateRequest(BaseModel):
    payment_status: PaymentStatus


class ActionResultRead(BaseModel):
    """Outcome of one moderation action."""

    ok: bool
    outcome: Outcome
    entity_type: EntityType
    entity_id: str
    action: Action
    message: str
    deleted: bool = False
    entity: dict[str, Any] | None = None
