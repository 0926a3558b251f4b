"""Immutable snapshot of the three moderated collections."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable

from admin_console.models.booking import Booking
from admin_console.models.job import Job
from admin_console.models.user import User

_COLLECTIONS = {"user": "users", "job": "jobs", "booking": "bookings"}


def _collection_name(entity_type: Any) -> str:
    key = entity_type.value if isinstance(entity_type, Enum) else entity_type
    return _COLLECTIONS[key]


def merge_by_id(*groups: Iterable[Any]) -> list:
    """Concatenate record lists, keeping the first record seen for each id."""
    seen = set()
    merged = []
    for group in groups:
        for record in group:
            if record.id in seen:
                continue
            seen.add(record.id)
            merged.append(record)
    return merged


@dataclass(frozen=True)
class Snapshot:
    users: tuple[User, ...] = ()
    jobs: tuple[Job, ...] = ()
    bookings: tuple[Booking, ...] = ()
    taken_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sequence: int = 0

    @classmethod
    def from_lists(cls, users=(), jobs=(), bookings=(), **kwargs) -> "Snapshot":
        return cls(
            users=tuple(merge_by_id(users)),
            jobs=tuple(merge_by_id(jobs)),
            bookings=tuple(merge_by_id(bookings)),
            **kwargs,
        )

    def _records(self, entity_type: str) -> tuple:
        return getattr(self, _collection_name(entity_type))

    def find(self, entity_type: str, entity_id: str) -> Any | None:
        for record in self._records(entity_type):
            if record.id == entity_id:
                return record
        return None

    def with_entity(self, entity_type: str, entity: Any, sequence: int) -> "Snapshot":
        """Return a copy with ``entity`` replacing the record of the same id."""
        name = _collection_name(entity_type)
        records = tuple(entity if r.id == entity.id else r for r in getattr(self, name))
        return replace(self, **{name: records}, sequence=sequence)

    def without(self, entity_type: str, entity_id: str, sequence: int) -> "Snapshot":
        name = _collection_name(entity_type)
        records = tuple(r for r in getattr(self, name) if r.id != entity_id)
        return replace(self, **{name: records}, sequence=sequence)

    @property
    def moderated_users(self) -> list[User]:
        """Users visible to moderation: everyone except admins."""
        return [u for u in self.users if not u.is_admin]

    @property
    def approved_jobs(self) -> list[Job]:
        return [j for j in self.jobs if j.is_approved]

    @property
    def pending_jobs(self) -> list[Job]:
        return [j for j in self.jobs if not j.is_approved]
