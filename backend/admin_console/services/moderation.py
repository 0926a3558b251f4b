"""Moderation controller: the only component that mutates upstream state.

Each action runs the same pipeline:

1. refuse re-entrant actions on an entity whose previous action is in flight
2. look the entity up in the committed snapshot
3. check the transition rules; refused actions never reach the network
4. ask for confirmation before destructive actions
5. make exactly one upstream call
6. on success update the cached snapshot; on failure leave it untouched

Actions that move a record between upstream collections (job approval, user
rejection) are followed by a full refresh. Everything else is patched into
the cached snapshot directly.

No exception escapes ``perform``; every outcome is an ``ActionResult``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from admin_console.config import Settings, get_settings
from admin_console.exceptions import ConsoleError, GatewayError, UnauthorizedError, ValidationError
from admin_console.services.dashboard import DashboardState
from admin_console.services.gateway import PersistenceGateway
from admin_console.services.transitions import Action, EntityType, Transition, next_state

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class Outcome(str, Enum):
    SUCCESS = "success"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"
    IN_FLIGHT = "in_flight"
    UNAUTHORIZED = "unauthorized"
    GATEWAY = "gateway"


@dataclass
class ActionResult:
    outcome: Outcome
    entity_type: EntityType
    entity_id: str
    action: Action
    message: str
    entity: Any = None
    deleted: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.SUCCESS


# Shown when the upstream error carries no message of its own
FALLBACK_MESSAGES = {
    (EntityType.USER, Action.APPROVE): "Failed to approve user",
    (EntityType.USER, Action.REJECT): "Failed to reject user",
    (EntityType.USER, Action.SUSPEND): "Failed to suspend user",
    (EntityType.USER, Action.ACTIVATE): "Failed to activate user",
    (EntityType.USER, Action.DELETE): "Failed to delete user",
    (EntityType.JOB, Action.APPROVE): "Failed to approve job",
    (EntityType.JOB, Action.TOGGLE_STATUS): "Failed to update job status",
    (EntityType.JOB, Action.DELETE): "Failed to delete job",
    (EntityType.BOOKING, Action.APPROVE): "Failed to approve booking",
    (EntityType.BOOKING, Action.REJECT): "Failed to reject booking",
    (EntityType.BOOKING, Action.UPDATE_PAYMENT): "Failed to update payment status",
    (EntityType.BOOKING, Action.DELETE): "Failed to delete booking",
}

REFRESH_AFTER = frozenset({
    (EntityType.JOB, Action.APPROVE),
    (EntityType.USER, Action.REJECT),
})


def _label(entity_type: EntityType, entity: Any) -> str:
    if entity_type == EntityType.USER:
        return entity.display_name
    if entity_type == EntityType.JOB:
        return f'"{entity.title}"'
    return "this booking"


def confirmation_prompt(entity_type: EntityType, action: Action, entity: Any) -> str | None:
    """Prompt for destructive actions; None when no confirmation is needed."""
    if entity_type == EntityType.USER and action == Action.REJECT:
        return f"Are you sure you want to reject {entity.display_name}? This will delete their account."
    if action == Action.DELETE:
        if entity_type == EntityType.USER:
            return f"Delete {entity.display_name}? This action cannot be undone."
        return f"Are you sure you want to delete {_label(entity_type, entity)}?"
    return None


def success_message(entity_type: EntityType, action: Action, entity: Any, transition: Transition) -> str:
    label = _label(entity_type, entity)
    if entity_type == EntityType.USER:
        verbs = {
            Action.APPROVE: "has been approved",
            Action.REJECT: "has been rejected and removed",
            Action.SUSPEND: "has been suspended",
            Action.ACTIVATE: "has been activated",
            Action.DELETE: "has been deleted",
        }
        return f"{label} {verbs[action]}."
    if entity_type == EntityType.JOB:
        if action == Action.TOGGLE_STATUS:
            return f"Job {label} is now {transition.entity.status.value}."
        return f"Job {label} {'approved' if action == Action.APPROVE else 'deleted'}."
    if action == Action.UPDATE_PAYMENT:
        return f"Payment marked {transition.entity.payment_status.value}."
    return {
        Action.APPROVE: "Booking approved.",
        Action.REJECT: "Booking rejected.",
        Action.DELETE: "Booking deleted.",
    }[action]


class ModerationController:
    def __init__(
        self,
        gateway: PersistenceGateway,
        state: DashboardState,
        settings: Settings | None = None,
    ):
        self.gateway = gateway
        self.state = state
        self.settings = settings or get_settings()
        self._in_flight: set[tuple[EntityType, str]] = set()
        self._unauthorized_hooks: list[Callable[[], Any]] = []

    def add_unauthorized_hook(self, hook: Callable[[], Any]) -> None:
        self._unauthorized_hooks.append(hook)

    def is_in_flight(self, entity_type: EntityType, entity_id: str) -> bool:
        return (EntityType(entity_type), entity_id) in self._in_flight

    def reset(self) -> None:
        self._in_flight.clear()

    def _session_expired(self) -> None:
        for hook in self._unauthorized_hooks:
            hook()

    def _dispatch(
        self, entity_type: EntityType, action: Action, entity: Any, payload: dict, transition: Transition
    ) -> Awaitable[Any]:
        gw = self.gateway
        if entity_type == EntityType.USER:
            return {
                Action.APPROVE: gw.approve_user,
                # Upstream has no separate reject endpoint; rejection deletes the account
                Action.REJECT: gw.delete_user,
                Action.SUSPEND: gw.suspend_user,
                Action.ACTIVATE: gw.activate_user,
                Action.DELETE: gw.delete_user,
            }[action](entity.id)
        if entity_type == EntityType.JOB:
            # Approve and delete must name the collection the record lives in now
            if action == Action.APPROVE:
                return gw.approve_job(entity.id, entity.collection)
            if action == Action.TOGGLE_STATUS:
                return gw.set_job_status(entity.id, transition.entity.status)
            return gw.delete_job(entity.id, entity.collection)
        if action == Action.APPROVE:
            return gw.approve_booking(entity.id, payload.get("admin_notes") or "")
        if action == Action.REJECT:
            return gw.reject_booking(entity.id, payload["rejection_reason"])
        if action == Action.UPDATE_PAYMENT:
            return gw.set_payment_status(entity.id, transition.entity.payment_status)
        return gw.delete_booking(entity.id)

    async def perform(
        self,
        entity_type: EntityType,
        entity_id: str,
        action: Action,
        payload: dict | None = None,
        confirm: Confirm | None = None,
    ) -> ActionResult:
        entity_type, action = EntityType(entity_type), Action(action)
        key = (entity_type, entity_id)

        def result(outcome: Outcome, message: str, **kwargs) -> ActionResult:
            return ActionResult(outcome, entity_type, entity_id, action, message, **kwargs)

        if key in self._in_flight:
            logger.warning(f"Ignoring {action.value} on {entity_type.value} {entity_id}: previous action in flight")
            return result(Outcome.IN_FLIGHT, "Another action on this record is still in progress")

        self._in_flight.add(key)
        try:
            return await self._perform(entity_type, entity_id, action, payload or {}, confirm, result)
        except ValidationError as e:
            logger.warning(f"Refused {action.value} on {entity_type.value} {entity_id}: {e.message}")
            return result(Outcome.VALIDATION, e.message)
        except UnauthorizedError as e:
            logger.warning(f"Session rejected during {action.value} on {entity_type.value} {entity_id}")
            self._session_expired()
            return result(Outcome.UNAUTHORIZED, e.message)
        except GatewayError as e:
            message = e.upstream_message or FALLBACK_MESSAGES[key[0], action]
            logger.warning(f"{action.value} on {entity_type.value} {entity_id} failed: {e.message}")
            return result(Outcome.GATEWAY, message)
        except Exception:
            logger.exception(f"Unexpected error during {action.value} on {entity_type.value} {entity_id}")
            return result(Outcome.GATEWAY, FALLBACK_MESSAGES.get((entity_type, action), "Action failed"))
        finally:
            self._in_flight.discard(key)

    async def _perform(self, entity_type, entity_id, action, payload, confirm, result) -> ActionResult:
        snapshot = self.state.snapshot
        entity = snapshot.find(entity_type, entity_id) if snapshot else None
        if entity is None:
            return result(Outcome.NOT_FOUND, f"{entity_type.value.capitalize()} not found")

        transition = next_state(
            entity_type, entity, action, payload,
            approved_collection=self.settings.approved_job_collection,
        )

        prompt = confirmation_prompt(entity_type, action, entity)
        if prompt is not None and (confirm is None or not confirm(prompt)):
            logger.info(f"{action.value} on {entity_type.value} {entity_id} not confirmed")
            return result(Outcome.CANCELLED, "Action cancelled")

        await self._dispatch(entity_type, action, entity, payload, transition)

        if transition.deleted:
            self.state.remove(entity_type, entity_id)
        else:
            self.state.patch(entity_type, transition.entity)
        if (entity_type, action) in REFRESH_AFTER:
            await self._refresh_after(entity_type, action)

        logger.info(f"{action.value} on {entity_type.value} {entity_id} succeeded")
        return result(
            Outcome.SUCCESS,
            success_message(entity_type, action, entity, transition),
            entity=transition.entity,
            deleted=transition.deleted,
        )

    async def _refresh_after(self, entity_type: EntityType, action: Action) -> None:
        try:
            await self.state.refresh()
        except UnauthorizedError:
            self._session_expired()
        except ConsoleError as e:
            # The mutation itself succeeded; the patched snapshot stands
            logger.warning(f"Refresh after {entity_type.value} {action.value} failed: {e.message}")

    # --- Convenience wrappers ---

    async def approve_user(self, user_id: str) -> ActionResult:
        return await self.perform(EntityType.USER, user_id, Action.APPROVE)

    async def reject_user(self, user_id: str, confirm: Confirm | None = None) -> ActionResult:
        return await self.perform(EntityType.USER, user_id, Action.REJECT, confirm=confirm)

    async def suspend_user(self, user_id: str) -> ActionResult:
        return await self.perform(EntityType.USER, user_id, Action.SUSPEND)

    async def activate_user(self, user_id: str) -> ActionResult:
        return await self.perform(EntityType.USER, user_id, Action.ACTIVATE)

    async def delete_user(self, user_id: str, confirm: Confirm | None = None) -> ActionResult:
        return await self.perform(EntityType.USER, user_id, Action.DELETE, confirm=confirm)

    async def approve_job(self, job_id: str) -> ActionResult:
        return await self.perform(EntityType.JOB, job_id, Action.APPROVE)

    async def toggle_job_status(self, job_id: str) -> ActionResult:
        return await self.perform(EntityType.JOB, job_id, Action.TOGGLE_STATUS)

    async def delete_job(self, job_id: str, confirm: Confirm | None = None) -> ActionResult:
        return await self.perform(EntityType.JOB, job_id, Action.DELETE, confirm=confirm)

    async def approve_booking(self, booking_id: str, admin_notes: str = "") -> ActionResult:
        return await self.perform(EntityType.BOOKING, booking_id, Action.APPROVE, {"admin_notes": admin_notes})

    async def reject_booking(self, booking_id: str, rejection_reason: str | None) -> ActionResult:
        return await self.perform(
            EntityType.BOOKING, booking_id, Action.REJECT, {"rejection_reason": rejection_reason}
        )

    async def update_payment(self, booking_id: str, payment_status: str) -> ActionResult:
        return await self.perform(
            EntityType.BOOKING, booking_id, Action.UPDATE_PAYMENT, {"payment_status": payment_status}
        )

    async def delete_booking(self, booking_id: str, confirm: Confirm | None = None) -> ActionResult:
        return await self.perform(EntityType.BOOKING, booking_id, Action.DELETE, confirm=confirm)
