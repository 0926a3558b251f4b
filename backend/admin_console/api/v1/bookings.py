"""Booking moderation API endpoints."""

from fastapi import APIRouter, Depends, Query

from admin_console.dependencies.auth import get_snapshot, require_admin
from admin_console.dependencies.moderation import action_response, confirmed
from admin_console.models.booking import BookingStatus
from admin_console.models.snapshot import Snapshot
from admin_console.schemas.moderation import (
    ActionResultRead,
    ApproveBookingRequest,
    PaymentUpdateRequest,
    RejectBookingRequest,
)
from admin_console.schemas.records import BookingRead
from admin_console.services.aggregation import BookingFilter, SortOrder, filter_bookings, sort_records
from admin_console.services.console import Console

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("", response_model=list[BookingRead])
async def list_bookings(
    snapshot: Snapshot = Depends(get_snapshot),
    status: BookingStatus | None = Query(None, description="Matches either status field"),
):
    """List bookings, newest first."""
    bookings = filter_bookings(snapshot.bookings, BookingFilter(status=status))
    return [BookingRead.from_entity(b) for b in sort_records(bookings, SortOrder.NEWEST, lambda b: b.title)]


@router.put("/{booking_id}/approve", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def approve_booking(
    booking_id: str,
    body: ApproveBookingRequest | None = None,
    console: Console = Depends(require_admin),
):
    notes = body.admin_notes if body else ""
    return action_response(await console.moderation.approve_booking(booking_id, notes))


@router.put("/{booking_id}/reject", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def reject_booking(
    booking_id: str,
    body: RejectBookingRequest,
    console: Console = Depends(require_admin),
):
    return action_response(await console.moderation.reject_booking(booking_id, body.rejection_reason))


@router.put("/{booking_id}/payment", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def update_payment(
    booking_id: str,
    body: PaymentUpdateRequest,
    console: Console = Depends(require_admin),
):
    return action_response(await console.moderation.update_payment(booking_id, body.payment_status.value))


@router.delete("/{booking_id}", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def delete_booking(
    booking_id: str,
    confirm: bool = Query(False, description="Confirm the permanent deletion"),
    console: Console = Depends(require_admin),
):
    return action_response(await console.moderation.delete_booking(booking_id, confirm=confirmed(confirm)))
