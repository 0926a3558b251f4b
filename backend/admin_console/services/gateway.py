"""Marketplace API client: the only place that talks to the upstream backend.

The upstream service owns persistence and enforces the real invariants; this
client maps its endpoints onto typed calls and its failures onto the console's
error taxonomy. No retries: a failed call is reported and the operator decides.
"""

import logging
from typing import Any, Callable, Protocol
from urllib.parse import quote

import httpx

from admin_console.config import Settings, get_settings
from admin_console.exceptions import GatewayError, UnauthorizedError
from admin_console.models.base import decode_records
from admin_console.models.booking import Booking, PaymentStatus
from admin_console.models.job import Job, JobStatus
from admin_console.models.user import User
from admin_console.schemas.auth import LoginResponse

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Operations the console needs from the marketplace backend."""

    async def list_users(self) -> list[User]: ...
    async def list_pending_users(self) -> list[User]: ...
    async def approve_user(self, user_id: str) -> Any: ...
    async def suspend_user(self, user_id: str) -> Any: ...
    async def activate_user(self, user_id: str) -> Any: ...
    async def delete_user(self, user_id: str) -> Any: ...

    async def list_approved_jobs(self) -> list[Job]: ...
    async def list_pending_jobs(self) -> list[Job]: ...
    async def approve_job(self, job_id: str, collection: str | None) -> Any: ...
    async def set_job_status(self, job_id: str, status: JobStatus) -> Any: ...
    async def delete_job(self, job_id: str, collection: str | None) -> Any: ...

    async def list_bookings(self) -> list[Booking]: ...
    async def approve_booking(self, booking_id: str, admin_notes: str) -> Any: ...
    async def reject_booking(self, booking_id: str, rejection_reason: str) -> Any: ...
    async def set_payment_status(self, booking_id: str, payment_status: PaymentStatus) -> Any: ...
    async def delete_booking(self, booking_id: str) -> Any: ...

    async def login(self, email: str, password: str) -> LoginResponse: ...


def _upstream_message(response: httpx.Response) -> str | None:
    """Pull the ``message`` field out of an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return None


def _items(payload: Any) -> list:
    """List endpoints answer with a bare array or with ``{"data": [...]}``."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "items", "results"):
            if isinstance(payload.get(key), list):
                return payload[key]
    logger.warning(f"Unexpected list payload of type {type(payload).__name__}")
    return []


def _stamp_provenance(jobs: list[Job], approved: bool, collection: str) -> list[Job]:
    """Approval follows the list a job was fetched from, not its own flag."""
    return [
        job.model_copy(update={"is_approved": approved, "collection": job.collection or collection})
        for job in jobs
    ]


def _path(*parts: str) -> str:
    return "/" + "/".join(quote(str(p), safe="") for p in parts)


class MarketplaceGateway:
    """httpx-based implementation of :class:`PersistenceGateway`."""

    def __init__(
        self,
        settings: Settings | None = None,
        token_provider: Callable[[], str | None] | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        settings = settings or get_settings()
        self.settings = settings
        self.token_provider = token_provider or (lambda: None)
        self._client = client or httpx.AsyncClient(
            base_url=settings.api_base_url,
            timeout=settings.request_timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None, params: dict | None = None) -> Any:
        headers = {}
        token = self.token_provider()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = await self._client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise GatewayError("Could not reach the marketplace API") from e

        if response.status_code == 401:
            message = _upstream_message(response)
            logger.warning(f"{method} {path} unauthorized")
            raise UnauthorizedError(message or "Session expired, please sign in again", upstream_message=message)

        if response.is_error:
            message = _upstream_message(response)
            logger.warning(f"{method} {path} returned {response.status_code}")
            raise GatewayError(
                message or f"Marketplace API returned {response.status_code}",
                status_code=response.status_code,
                upstream_message=message,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise GatewayError("Marketplace API returned a malformed response", status_code=response.status_code) from e

    # --- Users ---

    async def list_users(self) -> list[User]:
        return decode_records(User, _items(await self._request("GET", "/users")))

    async def list_pending_users(self) -> list[User]:
        return decode_records(User, _items(await self._request("GET", "/users/pending")))

    async def approve_user(self, user_id: str) -> Any:
        return await self._request("PUT", _path("users", user_id, "approve"))

    async def suspend_user(self, user_id: str) -> Any:
        return await self._request("PUT", _path("users", user_id, "suspend"))

    async def activate_user(self, user_id: str) -> Any:
        return await self._request("PUT", _path("users", user_id, "activate"))

    async def delete_user(self, user_id: str) -> Any:
        return await self._request("DELETE", _path("users", user_id))

    # --- Jobs ---

    async def list_approved_jobs(self) -> list[Job]:
        jobs = decode_records(Job, _items(await self._request("GET", "/jobs")))
        return _stamp_provenance(jobs, approved=True, collection=self.settings.approved_job_collection)

    async def list_pending_jobs(self) -> list[Job]:
        jobs = decode_records(Job, _items(await self._request("GET", "/jobs/pending")))
        return _stamp_provenance(jobs, approved=False, collection=self.settings.pending_job_collection)

    async def approve_job(self, job_id: str, collection: str | None) -> Any:
        return await self._request("PUT", _path("jobs", job_id, "approve"), json={"collection": collection})

    async def set_job_status(self, job_id: str, status: JobStatus) -> Any:
        return await self._request("PUT", _path("jobs", job_id, "status"), json={"status": JobStatus(status).value})

    async def delete_job(self, job_id: str, collection: str | None) -> Any:
        params = {"collection": collection} if collection else None
        return await self._request("DELETE", _path("jobs", job_id), params=params)

    # --- Bookings ---

    async def list_bookings(self) -> list[Booking]:
        return decode_records(Booking, _items(await self._request("GET", "/bookings")))

    async def approve_booking(self, booking_id: str, admin_notes: str) -> Any:
        return await self._request("PUT", _path("bookings", booking_id, "approve"), json={"adminNotes": admin_notes})

    async def reject_booking(self, booking_id: str, rejection_reason: str) -> Any:
        return await self._request(
            "PUT", _path("bookings", booking_id, "reject"), json={"rejectionReason": rejection_reason}
        )

    async def set_payment_status(self, booking_id: str, payment_status: PaymentStatus) -> Any:
        return await self._request(
            "PUT",
            _path("bookings", booking_id, "payment"),
            json={"paymentStatus": PaymentStatus(payment_status).value},
        )

    async def delete_booking(self, booking_id: str) -> Any:
        return await self._request("DELETE", _path("bookings", booking_id))

    # --- Auth ---

    async def login(self, email: str, password: str) -> LoginResponse:
        try:
            payload = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        except GatewayError as e:
            if e.status_code in (400, 403, 404):
                raise UnauthorizedError(
                    e.upstream_message or "Invalid email or password",
                    reason=UnauthorizedError.INVALID_CREDENTIALS,
                ) from e
            raise
        except UnauthorizedError as e:
            raise UnauthorizedError(
                e.upstream_message or "Invalid email or password",
                reason=UnauthorizedError.INVALID_CREDENTIALS,
                upstream_message=e.upstream_message,
            ) from e
        if not isinstance(payload, dict) or not payload.get("token"):
            raise GatewayError("Login response did not include a token")
        return LoginResponse.model_validate(payload)
