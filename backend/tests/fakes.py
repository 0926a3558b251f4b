"""In-memory stand-in for the marketplace API."""

import asyncio
from typing import Any

from admin_console.exceptions import UnauthorizedError
from admin_console.models.booking import Booking, BookingStatus, PaymentStatus
from admin_console.models.job import Job, JobStatus
from admin_console.models.user import User, UserStatus
from admin_console.schemas.auth import LoginResponse


class FakeGateway:
    """In-memory marketplace backend.

    Records every call in ``calls``. ``failures`` maps a method name to an
    exception raised on its next call; ``gates`` maps a method name to an
    ``asyncio.Event`` that its next call waits on before doing anything.
    """

    def __init__(self, users=(), pending_users=(), jobs=(), bookings=()):
        self.users: list[User] = [User.model_validate(u) for u in users]
        self.pending_users: list[User] = [User.model_validate(u) for u in pending_users]
        self.jobs: list[Job] = [Job.model_validate(j) for j in jobs]
        self.bookings: list[Booking] = [Booking.model_validate(b) for b in bookings]
        self.calls: list[tuple] = []
        self.failures: dict[str, Exception] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.login_payload: dict[str, Any] = {
            "token": "tok-admin",
            "_id": "admin-1",
            "name": "Admin",
            "email": "admin@example.com",
            "type": "admin",
            "status": "active",
        }

    async def _enter(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        gate = self.gates.pop(name, None)
        if gate is not None:
            await gate.wait()
        error = self.failures.pop(name, None)
        if error is not None:
            raise error

    def calls_to(self, name: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == name]

    @property
    def mutation_calls(self) -> list[tuple]:
        return [c for c in self.calls if not c[0].startswith("list_") and c[0] != "login"]

    def _update_user(self, user_id: str, status: UserStatus) -> None:
        self.users = [u.model_copy(update={"status": status}) if u.id == user_id else u for u in self.users]
        self.pending_users = [u for u in self.pending_users if u.id != user_id]

    # --- Users ---

    async def list_users(self) -> list[User]:
        await self._enter("list_users")
        return list(self.users)

    async def list_pending_users(self) -> list[User]:
        await self._enter("list_pending_users")
        return list(self.pending_users)

    async def approve_user(self, user_id: str) -> Any:
        await self._enter("approve_user", user_id)
        self._update_user(user_id, UserStatus.ACTIVE)
        return {"message": "User approved"}

    async def suspend_user(self, user_id: str) -> Any:
        await self._enter("suspend_user", user_id)
        self._update_user(user_id, UserStatus.SUSPENDED)

    async def activate_user(self, user_id: str) -> Any:
        await self._enter("activate_user", user_id)
        self._update_user(user_id, UserStatus.ACTIVE)

    async def delete_user(self, user_id: str) -> Any:
        await self._enter("delete_user", user_id)
        self.users = [u for u in self.users if u.id != user_id]
        self.pending_users = [u for u in self.pending_users if u.id != user_id]

    # --- Jobs ---

    async def list_approved_jobs(self) -> list[Job]:
        await self._enter("list_approved_jobs")
        return [j for j in self.jobs if j.is_approved]

    async def list_pending_jobs(self) -> list[Job]:
        await self._enter("list_pending_jobs")
        return [j for j in self.jobs if not j.is_approved]

    async def approve_job(self, job_id: str, collection: str | None) -> Any:
        await self._enter("approve_job", job_id, collection)
        self.jobs = [
            j.model_copy(update={"is_approved": True, "collection": "jobs", "status": j.status or JobStatus.ACTIVE})
            if j.id == job_id else j
            for j in self.jobs
        ]

    async def set_job_status(self, job_id: str, status: JobStatus) -> Any:
        await self._enter("set_job_status", job_id, status)
        self.jobs = [j.model_copy(update={"status": status}) if j.id == job_id else j for j in self.jobs]

    async def delete_job(self, job_id: str, collection: str | None) -> Any:
        await self._enter("delete_job", job_id, collection)
        self.jobs = [j for j in self.jobs if j.id != job_id]

    # --- Bookings ---

    async def list_bookings(self) -> list[Booking]:
        await self._enter("list_bookings")
        return list(self.bookings)

    def _update_booking(self, booking_id: str, **update) -> None:
        self.bookings = [b.model_copy(update=update) if b.id == booking_id else b for b in self.bookings]

    async def approve_booking(self, booking_id: str, admin_notes: str) -> Any:
        await self._enter("approve_booking", booking_id, admin_notes)
        self._update_booking(booking_id, booking_status=BookingStatus.APPROVED, admin_approval=True, admin_notes=admin_notes)

    async def reject_booking(self, booking_id: str, rejection_reason: str) -> Any:
        await self._enter("reject_booking", booking_id, rejection_reason)
        self._update_booking(booking_id, booking_status=BookingStatus.REJECTED, rejection_reason=rejection_reason)

    async def set_payment_status(self, booking_id: str, payment_status: PaymentStatus) -> Any:
        await self._enter("set_payment_status", booking_id, payment_status)
        self._update_booking(booking_id, payment_status=payment_status)

    async def delete_booking(self, booking_id: str) -> Any:
        await self._enter("delete_booking", booking_id)
        self.bookings = [b for b in self.bookings if b.id != booking_id]

    # --- Auth ---

    async def login(self, email: str, password: str) -> LoginResponse:
        await self._enter("login", email)
        if password != "secret":
            raise UnauthorizedError("Invalid email or password", reason=UnauthorizedError.INVALID_CREDENTIALS)
        return LoginResponse.model_validate(self.login_payload)
