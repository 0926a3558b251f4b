"""Notification feed API endpoints."""

from fastapi import APIRouter, Depends

from admin_console.dependencies.auth import get_snapshot, require_admin
from admin_console.models.snapshot import Snapshot
from admin_console.schemas.dashboard import NotificationFeed
from admin_console.services.console import Console

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationFeed)
async def list_notifications(
    snapshot: Snapshot = Depends(get_snapshot),
    console: Console = Depends(require_admin),
):
    return console.notifications.feed(snapshot)


@router.post("/read-all", response_model=NotificationFeed)
async def mark_all_read(
    snapshot: Snapshot = Depends(get_snapshot),
    console: Console = Depends(require_admin),
):
    console.notifications.mark_all_read(snapshot)
    return console.notifications.feed(snapshot)


@router.post("/{notification_id}/read", response_model=NotificationFeed)
async def mark_read(
    notification_id: str,
    snapshot: Snapshot = Depends(get_snapshot),
    console: Console = Depends(require_admin),
):
    console.notifications.mark_read(notification_id)
    return console.notifications.feed(snapshot)
