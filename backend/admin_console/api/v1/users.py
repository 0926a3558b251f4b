"""User moderation API endpoints."""

from fastapi import APIRouter, Depends, Query

from admin_console.dependencies.auth import get_snapshot, require_admin
from admin_console.dependencies.moderation import action_response, confirmed
from admin_console.models.snapshot import Snapshot
from admin_console.models.user import RatingBucket, UserRole, UserStatus
from admin_console.schemas.dashboard import UserFacetCounts
from admin_console.schemas.moderation import ActionResultRead
from admin_console.schemas.records import UserRead
from admin_console.services.aggregation import SortOrder, UserFilter, filter_users, sort_users, user_facet_counts
from admin_console.services.console import Console

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
async def list_users(
    snapshot: Snapshot = Depends(get_snapshot),
    status: UserStatus | None = Query(None, description="Filter by account status"),
    role: UserRole | None = Query(None, description="Filter by role (worker, employer)"),
    rating: RatingBucket | None = Query(None, description="Filter by rating bucket"),
    sort: SortOrder = Query(SortOrder.NEWEST, description="newest, oldest or name"),
):
    """List non-admin users with filters."""
    users = filter_users(snapshot.users, UserFilter(status=status, role=role, rating=rating))
    return [UserRead.from_entity(u) for u in sort_users(users, sort)]


@router.get("/counts", response_model=UserFacetCounts)
async def user_counts(snapshot: Snapshot = Depends(get_snapshot)):
    """Per-facet counts for the filter bar."""
    return user_facet_counts(snapshot.users)


@router.put("/{user_id}/approve", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def approve_user(user_id: str, console: Console = Depends(require_admin)):
    return action_response(await console.moderation.approve_user(user_id))


@router.post("/{user_id}/reject", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def reject_user(
    user_id: str,
    confirm: bool = Query(False, description="Confirm that the account will be deleted"),
    console: Console = Depends(require_admin),
):
    return action_response(await console.moderation.reject_user(user_id, confirm=confirmed(confirm)))


@router.put("/{user_id}/suspend", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def suspend_user(user_id: str, console: Console = Depends(require_admin)):
    return action_response(await console.moderation.suspend_user(user_id))


@router.put("/{user_id}/activate", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def activate_user(user_id: str, console: Console = Depends(require_admin)):
    return action_response(await console.moderation.activate_user(user_id))


@router.delete("/{user_id}", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def delete_user(
    user_id: str,
    confirm: bool = Query(False, description="Confirm the permanent deletion"),
    console: Console = Depends(require_admin),
):
    return action_response(await console.moderation.delete_user(user_id, confirm=confirmed(confirm)))
