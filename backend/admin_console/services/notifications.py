"""Notification feed with a persisted read-state."""

import logging
from datetime import datetime, timedelta

from admin_console.config import Settings, get_settings
from admin_console.models.snapshot import Snapshot
from admin_console.schemas.dashboard import NotificationFeed
from admin_console.services.aggregation import build_notifications, unread_count
from admin_console.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, store: SessionStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    @property
    def window(self) -> timedelta:
        return timedelta(hours=self.settings.notification_window_hours)

    def feed(self, snapshot: Snapshot, now: datetime | None = None) -> NotificationFeed:
        notifications = build_notifications(snapshot, self.store.get_read_ids(), now=now, window=self.window)
        return NotificationFeed(notifications=notifications, unread_count=unread_count(notifications))

    def mark_read(self, notification_id: str) -> None:
        # Read ids only ever grow
        read_ids = self.store.get_read_ids()
        if notification_id in read_ids:
            return
        self.store.set_read_ids(read_ids | {notification_id})

    def mark_all_read(self, snapshot: Snapshot, now: datetime | None = None) -> int:
        """Mark every notification currently in the feed read; returns how many changed."""
        read_ids = self.store.get_read_ids()
        current = {n.id for n in build_notifications(snapshot, read_ids, now=now, window=self.window)}
        fresh = current - read_ids
        if fresh:
            self.store.set_read_ids(read_ids | fresh)
            logger.info(f"Marked {len(fresh)} notifications read")
        return len(fresh)
