"""Translate moderation results into HTTP responses."""

from fastapi import HTTPException

from admin_console.schemas.moderation import ActionResultRead
from admin_console.schemas.records import BookingRead, JobRead, UserRead
from admin_console.services.moderation import ActionResult, Outcome
from admin_console.services.transitions import EntityType

OUTCOME_STATUS = {
    Outcome.VALIDATION: 422,
    Outcome.NOT_FOUND: 404,
    Outcome.CANCELLED: 400,
    Outcome.IN_FLIGHT: 409,
    Outcome.UNAUTHORIZED: 401,
    Outcome.GATEWAY: 502,
}

READ_SCHEMAS = {
    EntityType.USER: UserRead,
    EntityType.JOB: JobRead,
    EntityType.BOOKING: BookingRead,
}


def confirmed(flag: bool):
    """Confirmation callback answering every prompt with the request's ``confirm`` flag."""
    return lambda prompt: flag


def action_response(result: ActionResult) -> ActionResultRead:
    """Return the result on success; raise the matching HTTPException otherwise."""
    if not result.ok:
        raise HTTPException(
            status_code=OUTCOME_STATUS[result.outcome],
            detail={"message": result.message, "outcome": result.outcome.value},
        )
    entity = None
    if result.entity is not None:
        entity = READ_SCHEMAS[result.entity_type].from_entity(result.entity).model_dump(mode="json")
    return ActionResultRead(
        ok=True,
        outcome=result.outcome,
        entity_type=result.entity_type,
        entity_id=result.entity_id,
        action=result.action,
        message=result.message,
        deleted=result.deleted,
        entity=entity,
    )
