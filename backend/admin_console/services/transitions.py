"""Moderation rules — which actions are legal for a user, job or booking.

Every (entity type, action) pair is registered with ``@register_rule``. A
rule has a guard on the entity's current state, an optional payload check and
an apply function producing the next state. Nothing here performs I/O; the
moderation controller persists the outcome.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from admin_console.exceptions import ValidationError
from admin_console.models.base import parse_status
from admin_console.models.booking import Booking, BookingStatus, PaymentStatus
from admin_console.models.job import Job, JobStatus
from admin_console.models.user import User, UserStatus

logger = logging.getLogger(__name__)

DEFAULT_APPROVED_COLLECTION = "jobs"


class EntityType(str, Enum):
    USER = "user"
    JOB = "job"
    BOOKING = "booking"


class Action(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    SUSPEND = "suspend"
    ACTIVATE = "activate"
    DELETE = "delete"
    TOGGLE_STATUS = "toggle_status"
    UPDATE_PAYMENT = "update_payment"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None


ALLOW = Decision(True)


def deny(reason: str) -> Decision:
    return Decision(False, reason)


@dataclass(frozen=True)
class Transition:
    """Outcome of an action: the new entity, or ``deleted`` for hard deletes."""

    entity: Any = None
    deleted: bool = False


@dataclass
class _Rule:
    guard: Callable[[Any], Decision]
    apply: Callable[[Any, dict, str], Transition]
    check_payload: Callable[[dict], Decision] | None = None
    offered: Callable[[Any], bool] | None = None


_RULES: dict[tuple[EntityType, Action], _Rule] = {}


def register_rule(
    entity_type: EntityType,
    action: Action,
    guard: Callable[[Any], Decision],
    check_payload: Callable[[dict], Decision] | None = None,
    offered: Callable[[Any], bool] | None = None,
):
    """Decorator to register the apply function of a transition rule."""
    def decorator(fn: Callable[[Any, dict, str], Transition]):
        _RULES[(entity_type, action)] = _Rule(guard=guard, apply=fn, check_payload=check_payload, offered=offered)
        logger.debug(f"Registered rule {entity_type.value}.{action.value}")
        return fn
    return decorator


def registered_actions(entity_type: EntityType) -> list[Action]:
    return [action for (etype, action) in _RULES if etype == entity_type]


# --- Users ---

def _moderatable(user: User) -> Decision:
    if user.is_admin:
        return deny("Admin accounts are not subject to moderation")
    return ALLOW


def _user_in(*statuses: UserStatus, verb: str):
    allowed = ", ".join(s.value for s in statuses)

    def guard(user: User) -> Decision:
        decision = _moderatable(user)
        if not decision.allowed:
            return decision
        if user.status not in statuses:
            return deny(f"Only {allowed} users can be {verb} (user is {user.status.value})")
        return ALLOW
    return guard


@register_rule(EntityType.USER, Action.APPROVE, _user_in(UserStatus.PENDING, verb="approved"))
def _approve_user(user: User, payload: dict, approved_collection: str) -> Transition:
    return Transition(user.model_copy(update={"status": UserStatus.ACTIVE}))


@register_rule(EntityType.USER, Action.REJECT, _user_in(UserStatus.PENDING, verb="rejected"))
def _reject_user(user: User, payload: dict, approved_collection: str) -> Transition:
    # Rejecting a registration removes the account
    return Transition(deleted=True)


@register_rule(EntityType.USER, Action.SUSPEND, _user_in(UserStatus.ACTIVE, verb="suspended"))
def _suspend_user(user: User, payload: dict, approved_collection: str) -> Transition:
    return Transition(user.model_copy(update={"status": UserStatus.SUSPENDED}))


@register_rule(EntityType.USER, Action.ACTIVATE, _user_in(UserStatus.SUSPENDED, verb="activated"))
def _activate_user(user: User, payload: dict, approved_collection: str) -> Transition:
    return Transition(user.model_copy(update={"status": UserStatus.ACTIVE}))


@register_rule(
    EntityType.USER, Action.DELETE, _user_in(UserStatus.PENDING, UserStatus.SUSPENDED, verb="deleted")
)
def _delete_user(user: User, payload: dict, approved_collection: str) -> Transition:
    return Transition(deleted=True)


# --- Jobs ---

def toggled_status(status: JobStatus | None) -> JobStatus | None:
    """Flip active and closed; every other value has no defined transition."""
    if status == JobStatus.ACTIVE:
        return JobStatus.CLOSED
    if status == JobStatus.CLOSED:
        return JobStatus.ACTIVE
    return status


def _job_unapproved(job: Job) -> Decision:
    if job.is_approved:
        return deny("Job is already approved")
    return ALLOW


def _job_toggleable(job: Job) -> Decision:
    if not job.is_approved:
        return deny("Job must be approved before its status can change")
    if toggled_status(job.status) == job.status:
        current = job.status.value if job.status else "unset"
        return deny(f"No status change is defined for a job that is {current}")
    return ALLOW


def _always(entity: Any) -> Decision:
    return ALLOW


@register_rule(EntityType.JOB, Action.APPROVE, _job_unapproved)
def _approve_job(job: Job, payload: dict, approved_collection: str) -> Transition:
    return Transition(job.model_copy(update={"is_approved": True, "collection": approved_collection}))


@register_rule(EntityType.JOB, Action.TOGGLE_STATUS, _job_toggleable)
def _toggle_job(job: Job, payload: dict, approved_collection: str) -> Transition:
    return Transition(job.model_copy(update={"status": toggled_status(job.status)}))


@register_rule(EntityType.JOB, Action.DELETE, _always)
def _delete_job(job: Job, payload: dict, approved_collection: str) -> Transition:
    return Transition(deleted=True)


# --- Bookings ---

_ACTIONABLE = frozenset({BookingStatus.PENDING, BookingStatus.ACCEPTED})


def is_booking_actionable(booking: Booking) -> bool:
    """Pending (or legacy accepted), and neither status field says approved or rejected.

    The admin/worker approval flags do not affect this.
    """
    return (
        booking.effective_status in _ACTIONABLE
        and not booking.has_status(BookingStatus.APPROVED)
        and not booking.has_status(BookingStatus.REJECTED)
    )


def _booking_actionable(booking: Booking) -> Decision:
    if not is_booking_actionable(booking):
        current = booking.effective_status.value if booking.effective_status else "unset"
        return deny(f"Booking is no longer awaiting a decision (status is {current})")
    return ALLOW


def _rejection_reason(payload: dict) -> Decision:
    reason = payload.get("rejection_reason")
    if not reason or not str(reason).strip():
        return deny("Please provide a rejection reason")
    return ALLOW


def _payment_target(payload: dict) -> Decision:
    try:
        target = parse_status(PaymentStatus, payload.get("payment_status"))
    except ValidationError as e:
        return deny(e.message)
    if target == PaymentStatus.UNKNOWN:
        return deny("Payment status must be pending, paid or failed")
    return ALLOW


@register_rule(EntityType.BOOKING, Action.APPROVE, _booking_actionable)
def _approve_booking(booking: Booking, payload: dict, approved_collection: str) -> Transition:
    return Transition(booking.model_copy(update={
        "booking_status": BookingStatus.APPROVED,
        "admin_approval": True,
        "admin_notes": payload.get("admin_notes") or "",
    }))


@register_rule(EntityType.BOOKING, Action.REJECT, _booking_actionable, check_payload=_rejection_reason)
def _reject_booking(booking: Booking, payload: dict, approved_collection: str) -> Transition:
    return Transition(booking.model_copy(update={
        "booking_status": BookingStatus.REJECTED,
        "rejection_reason": payload["rejection_reason"],
    }))


@register_rule(
    EntityType.BOOKING,
    Action.UPDATE_PAYMENT,
    _always,
    check_payload=_payment_target,
    offered=is_booking_actionable,
)
def _update_payment(booking: Booking, payload: dict, approved_collection: str) -> Transition:
    target = parse_status(PaymentStatus, payload["payment_status"])
    if booking.payment_status == target:
        return Transition(booking)
    return Transition(booking.model_copy(update={"payment_status": target}))


@register_rule(EntityType.BOOKING, Action.DELETE, _always)
def _delete_booking(booking: Booking, payload: dict, approved_collection: str) -> Transition:
    return Transition(deleted=True)


# --- Public API ---

def _lookup(entity_type: EntityType, action: Action) -> _Rule | None:
    return _RULES.get((EntityType(entity_type), Action(action)))


def can_transition(entity_type: EntityType, entity: Any, action: Action, payload: dict | None = None) -> Decision:
    """Decide whether ``action`` is legal for ``entity`` right now.

    Payload checks run first, so a booking rejection without a reason is
    refused whatever the booking's status.
    """
    rule = _lookup(entity_type, action)
    if rule is None:
        return deny(f"Cannot {Action(action).value} a {EntityType(entity_type).value}")
    if rule.check_payload is not None:
        decision = rule.check_payload(payload or {})
        if not decision.allowed:
            return decision
    return rule.guard(entity)


def ensure_allowed(entity_type: EntityType, entity: Any, action: Action, payload: dict | None = None) -> None:
    decision = can_transition(entity_type, entity, action, payload)
    if not decision.allowed:
        raise ValidationError(decision.reason or "Action not allowed")


def next_state(
    entity_type: EntityType,
    entity: Any,
    action: Action,
    payload: dict | None = None,
    *,
    approved_collection: str = DEFAULT_APPROVED_COLLECTION,
) -> Transition:
    """Describe the state ``entity`` moves to under ``action``.

    Raises ValidationError if the action is not legal. The input entity is
    never modified.
    """
    ensure_allowed(entity_type, entity, action, payload)
    rule = _lookup(entity_type, action)
    return rule.apply(entity, payload or {}, approved_collection)


def available_actions(entity_type: EntityType, entity: Any) -> list[Action]:
    """Actions a console should offer for ``entity``, ignoring payloads."""
    actions = []
    for action in registered_actions(EntityType(entity_type)):
        rule = _RULES[(EntityType(entity_type), action)]
        if not rule.guard(entity).allowed:
            continue
        if rule.offered is not None and not rule.offered(entity):
            continue
        actions.append(action)
    return actions
