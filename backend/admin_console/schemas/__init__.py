"""Pydantic schemas package."""

from admin_console.schemas.auth import LoginRequest, LoginResponse, SessionRead
from admin_console.schemas.dashboard import (
    ActivityItem,
    DashboardStats,
    Notification,
    NotificationCategory,
    NotificationFeed,
    UserFacetCounts,
)
from admin_console.schemas.records import BookingRead, JobRead, RecordRead, UserRead

__all__ = [
    # Auth
    "LoginRequest",
    "LoginResponse",
    "SessionRead",
    # Dashboard
    "ActivityItem",
    "DashboardStats",
    "Notification",
    "NotificationCategory",
    "NotificationFeed",
    "UserFacetCounts",
    # Records
    "BookingRead",
    "JobRead",
    "RecordRead",
    "UserRead",
]
