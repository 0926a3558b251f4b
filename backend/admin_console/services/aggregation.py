"""Dashboard aggregation — counts, filters, sorting and derived feeds.

Everything here is a pure function of a snapshot (plus the read-notification
id set and the current time where relevant). Admin accounts never appear in
any view or count.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Iterable, TypeVar

from admin_console.models.base import Entity
from admin_console.models.booking import ApprovalStage, Booking, BookingStatus
from admin_console.models.job import Job, JobStatus, JobType
from admin_console.models.snapshot import Snapshot
from admin_console.models.user import RatingBucket, User, UserRole, UserStatus
from admin_console.schemas.dashboard import (
    ActivityItem,
    DashboardStats,
    Notification,
    NotificationCategory,
    UserFacetCounts,
)
from admin_console.services.transitions import is_booking_actionable

T = TypeVar("T", bound=Entity)

NOTIFICATION_WINDOW = timedelta(hours=24)


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    NAME = "name"


class JobView(str, Enum):
    APPROVED = "approved"
    PENDING = "pending"


# --- Counts ---

def compute_stats(snapshot: Snapshot) -> DashboardStats:
    users = snapshot.moderated_users
    approved = snapshot.approved_jobs
    return DashboardStats(
        total_users=sum(1 for u in users if u.status == UserStatus.ACTIVE),
        pending_approvals=sum(1 for u in users if u.status == UserStatus.PENDING),
        pending_jobs=len(snapshot.pending_jobs),
        active_jobs=sum(1 for j in approved if j.status == JobStatus.ACTIVE),
        completed_jobs=sum(1 for j in approved if j.status == JobStatus.COMPLETED),
        total_bookings=len(snapshot.bookings),
        pending_bookings=sum(1 for b in snapshot.bookings if b.effective_status == BookingStatus.PENDING),
    )


def user_facet_counts(users: Iterable[User]) -> UserFacetCounts:
    counts = UserFacetCounts()
    status_fields = {UserStatus.PENDING: "pending", UserStatus.ACTIVE: "active", UserStatus.SUSPENDED: "suspended"}
    role_fields = {UserRole.WORKER: "workers", UserRole.EMPLOYER: "employers"}
    bucket_fields = {
        RatingBucket.HIGH: "high_rating",
        RatingBucket.MEDIUM: "medium_rating",
        RatingBucket.LOW: "low_rating",
        RatingBucket.UNRATED: "unrated",
    }
    for user in users:
        if user.is_admin:
            continue
        for mapping, key in ((status_fields, user.status), (role_fields, user.role), (bucket_fields, user.rating_bucket)):
            name = mapping.get(key)
            if name:
                setattr(counts, name, getattr(counts, name) + 1)
    return counts


# --- Filters ---
# Each axis left as None means "all". Axes combine with AND, and every filter
# keeps input order, so filtering commutes with the stable sorts below.

@dataclass(frozen=True)
class UserFilter:
    status: UserStatus | None = None
    role: UserRole | None = None
    rating: RatingBucket | None = None

    def matches(self, user: User) -> bool:
        if user.is_admin:
            return False
        if self.status is not None and user.status != self.status:
            return False
        if self.role is not None and user.role != self.role:
            return False
        if self.rating is not None and user.rating_bucket != self.rating:
            return False
        return True


@dataclass(frozen=True)
class JobFilter:
    view: JobView | None = None
    type: JobType | None = None
    status: JobStatus | None = None

    def matches(self, job: Job) -> bool:
        if self.view == JobView.APPROVED and not job.is_approved:
            return False
        if self.view == JobView.PENDING and job.is_approved:
            return False
        if self.type is not None and job.type != self.type:
            return False
        if self.status is not None and job.status != self.status:
            return False
        return True


@dataclass(frozen=True)
class BookingFilter:
    status: BookingStatus | None = None

    def matches(self, booking: Booking) -> bool:
        # Either status field may carry the value being filtered on
        return self.status is None or booking.has_status(self.status)


def filter_users(users: Iterable[User], user_filter: UserFilter) -> list[User]:
    return [u for u in users if user_filter.matches(u)]


def filter_jobs(jobs: Iterable[Job], job_filter: JobFilter) -> list[Job]:
    return [j for j in jobs if job_filter.matches(j)]


def filter_bookings(bookings: Iterable[Booking], booking_filter: BookingFilter) -> list[Booking]:
    return [b for b in bookings if booking_filter.matches(b)]


# --- Sorting ---

def sort_records(records: Iterable[T], order: SortOrder, name: Callable[[T], str]) -> list[T]:
    """Stable sort: records with equal keys keep their input order."""
    order = SortOrder(order)
    if order == SortOrder.NEWEST:
        return sorted(records, key=lambda r: r.sort_timestamp, reverse=True)
    if order == SortOrder.OLDEST:
        return sorted(records, key=lambda r: r.sort_timestamp)
    return sorted(records, key=lambda r: name(r).casefold())


def sort_users(users: Iterable[User], order: SortOrder = SortOrder.NEWEST) -> list[User]:
    return sort_records(users, order, lambda u: u.display_name)


def sort_jobs(jobs: Iterable[Job], order: SortOrder = SortOrder.NEWEST) -> list[Job]:
    return sort_records(jobs, order, lambda j: j.title)


# --- Relative time ---

def time_ago(timestamp: datetime, now: datetime | None = None) -> str:
    """Render ``Ns ago``/``Nm ago``/``Nh ago``/``Nd ago`` with floor division."""
    now = now or datetime.now(timezone.utc)
    seconds = max(0, math.floor((now - timestamp).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


# --- Notification feed ---

def _booking_parties(booking: Booking) -> str:
    worker = booking.worker.name if booking.worker and booking.worker.name else "N/A"
    employer = booking.employer.name if booking.employer and booking.employer.name else "N/A"
    return f"{worker} with {employer}"


def build_notifications(
    snapshot: Snapshot,
    read_ids: Iterable[str] = (),
    now: datetime | None = None,
    window: timedelta = NOTIFICATION_WINDOW,
) -> list[Notification]:
    """Derive the notification feed, newest first.

    ``read`` comes only from membership in ``read_ids``; nothing on the
    source records is trusted for it.
    """
    now = now or datetime.now(timezone.utc)
    read_ids = set(read_ids)
    entries: list[tuple[str, NotificationCategory, str, str, datetime]] = []

    for user in snapshot.moderated_users:
        if user.status == UserStatus.PENDING:
            entries.append((
                f"user-{user.id}",
                NotificationCategory.USER_REGISTRATION,
                "New user registration",
                f"{user.display_name} registered as {user.role.value} and awaits approval",
                user.sort_timestamp,
            ))

    for job in snapshot.pending_jobs:
        entries.append((
            f"job-{job.id}",
            NotificationCategory.JOB_POST,
            "New job post",
            f'"{job.title}" by {job.poster_name} awaits approval',
            job.sort_timestamp,
        ))

    for booking in snapshot.bookings:
        if is_booking_actionable(booking):
            title = "Booking awaiting approval"
        elif booking.approval_stage == ApprovalStage.AWAITING_WORKER:
            title = "Booking awaiting worker"
        else:
            continue
        entries.append((
            f"booking-{booking.id}",
            NotificationCategory.BOOKING,
            title,
            f"{booking.title}: {_booking_parties(booking)}",
            booking.sort_timestamp,
        ))

    for job in snapshot.approved_jobs:
        completed = job.completion_timestamp
        if job.status != JobStatus.COMPLETED or completed is None:
            continue
        if now - window <= completed <= now:
            entries.append((
                f"job-completed-{job.id}",
                NotificationCategory.JOB_COMPLETED,
                "Job completed",
                f'"{job.title}" was completed',
                completed,
            ))

    notifications = [
        Notification(id=nid, category=category, title=title, message=message, timestamp=ts, read=nid in read_ids)
        for nid, category, title, message, ts in entries
    ]
    return sorted(notifications, key=lambda n: n.timestamp, reverse=True)


def unread_count(notifications: Iterable[Notification]) -> int:
    return sum(1 for n in notifications if not n.read)


# --- Recent activity ---

def recent_activity(
    snapshot: Snapshot,
    now: datetime | None = None,
    users_limit: int = 3,
    jobs_limit: int = 2,
    limit: int = 5,
) -> list[ActivityItem]:
    """Newest registrations and approved job posts, merged newest first."""
    now = now or datetime.now(timezone.utc)
    items = []

    for user in sort_users(snapshot.moderated_users, SortOrder.NEWEST)[:users_limit]:
        items.append(ActivityItem(
            id=f"user-{user.id}",
            type=f"New {user.role.value} registration",
            name=user.display_name,
            timestamp=user.sort_timestamp,
            time_ago=time_ago(user.sort_timestamp, now),
            color="green" if user.role == UserRole.WORKER else "yellow",
        ))

    for job in sort_jobs(snapshot.approved_jobs, SortOrder.NEWEST)[:jobs_limit]:
        items.append(ActivityItem(
            id=f"job-{job.id}",
            type="Job posted",
            name=job.title,
            timestamp=job.sort_timestamp,
            time_ago=time_ago(job.sort_timestamp, now),
            color="blue",
        ))

    items.sort(key=lambda item: item.timestamp, reverse=True)
    return items[:limit]
