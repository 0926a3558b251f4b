"""Committed dashboard snapshot and the refresh that replaces it.

A refresh fans out every list call at once and joins all of them before
anything is committed. If any call fails the whole refresh fails and the
previous snapshot stays in place.

Commits are ordered by a logical sequence number taken when the work starts,
not by when it finishes. A refresh that started before the last commit,
whether that commit was another refresh or a local patch, is discarded when
it lands.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

from admin_console.exceptions import AggregationPartialFailure, UnauthorizedError
from admin_console.models.snapshot import Snapshot
from admin_console.services.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


class DashboardState:
    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway
        self.snapshot: Snapshot | None = None
        self.last_error: AggregationPartialFailure | None = None
        self._issued = 0
        self._committed = 0

    def next_sequence(self) -> int:
        self._issued += 1
        return self._issued

    @property
    def committed_sequence(self) -> int:
        return self._committed

    def commit(self, snapshot: Snapshot) -> bool:
        """Install ``snapshot`` unless something newer is already committed."""
        if snapshot.sequence <= self._committed:
            logger.info(
                f"Discarding stale snapshot #{snapshot.sequence} (committed #{self._committed})"
            )
            return False
        self.snapshot = snapshot
        self._committed = snapshot.sequence
        return True

    async def refresh(self) -> Snapshot:
        """Fetch all collections and commit the result.

        Raises AggregationPartialFailure if any call failed, or
        UnauthorizedError if any call was refused for lack of a session.
        """
        sequence = self.next_sequence()
        calls = {
            "users": self.gateway.list_users(),
            "pending_users": self.gateway.list_pending_users(),
            "approved_jobs": self.gateway.list_approved_jobs(),
            "pending_jobs": self.gateway.list_pending_jobs(),
            "bookings": self.gateway.list_bookings(),
        }
        results = await asyncio.gather(*calls.values(), return_exceptions=True)
        outcome: dict[str, Any] = dict(zip(calls, results))

        failures = {name: r for name, r in outcome.items() if isinstance(r, BaseException)}
        if failures:
            for error in failures.values():
                if isinstance(error, UnauthorizedError):
                    raise error
            self.last_error = AggregationPartialFailure(failures)
            logger.warning(f"Refresh #{sequence} failed: {self.last_error.message}; keeping previous snapshot")
            raise self.last_error

        snapshot = Snapshot.from_lists(
            users=[*outcome["users"], *outcome["pending_users"]],
            jobs=[*outcome["approved_jobs"], *outcome["pending_jobs"]],
            bookings=outcome["bookings"],
            taken_at=datetime.now(timezone.utc),
            sequence=sequence,
        )
        if self.commit(snapshot):
            self.last_error = None
            logger.info(
                f"Refresh #{sequence}: {len(snapshot.users)} users, "
                f"{len(snapshot.jobs)} jobs, {len(snapshot.bookings)} bookings"
            )
        return self.snapshot

    async def ensure_snapshot(self) -> Snapshot:
        if self.snapshot is None:
            return await self.refresh()
        return self.snapshot

    def patch(self, entity_type: str, entity: Any) -> None:
        """Replace one cached record after a confirmed mutation."""
        if self.snapshot is None:
            return
        self.commit(self.snapshot.with_entity(entity_type, entity, self.next_sequence()))

    def remove(self, entity_type: str, entity_id: str) -> None:
        if self.snapshot is None:
            return
        self.commit(self.snapshot.without(entity_type, entity_id, self.next_sequence()))

    def reset(self) -> None:
        """Forget everything; refreshes already in flight will be discarded."""
        self.snapshot = None
        self.last_error = None
        self._committed = self._issued
