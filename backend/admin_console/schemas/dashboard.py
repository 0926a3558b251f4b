"""Pydantic schemas for dashboard aggregates and feeds."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Headline counts shown on the overview page."""

    total_users: int = 0
    pending_approvals: int = 0
    pending_jobs: int = 0
    active_jobs: int = 0
    completed_jobs: int = 0
    total_bookings: int = 0
    pending_bookings: int = 0


class NotificationCategory(str, Enum):
    USER_REGISTRATION = "user_registration"
    JOB_POST = "job_post"
    BOOKING = "booking"
    JOB_COMPLETED = "job_completed"


class Notification(BaseModel):
    """Uniform notification record derived from a pending or recent entity."""

    id: str
    category: NotificationCategory
    title: str
    message: str
    timestamp: datetime
    read: bool = False


class NotificationFeed(BaseModel):
    notifications: list[Notification]
    unread_count: int


class ActivityItem(BaseModel):
    """One line of the recent-activity panel."""

    id: str
    type: str
    name: str
    timestamp: datetime
    time_ago: str
    color: str


class UserFacetCounts(BaseModel):
    """Per-facet user counts shown next to the list filters."""

    pending: int = 0
    active: int = 0
    suspended: int = 0
    workers: int = 0
    employers: int = 0
    high_rating: int = 0
    medium_rating: int = 0
    low_rating: int = 0
    unrated: int = 0
