"""Dashboard overview API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from admin_console.dependencies.auth import get_snapshot, refresh_or_raise, require_admin
from admin_console.models.snapshot import Snapshot
from admin_console.schemas.dashboard import ActivityItem, DashboardStats
from admin_console.services.aggregation import compute_stats, recent_activity
from admin_console.services.console import Console

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(snapshot: Snapshot = Depends(get_snapshot)):
    return compute_stats(snapshot)


@router.get("/activity", response_model=list[ActivityItem])
async def dashboard_activity(
    snapshot: Snapshot = Depends(get_snapshot),
    console: Console = Depends(require_admin),
):
    """Newest registrations and approved job posts."""
    settings = console.settings
    return recent_activity(
        snapshot,
        now=datetime.now(timezone.utc),
        users_limit=settings.recent_users_limit,
        jobs_limit=settings.recent_jobs_limit,
        limit=settings.recent_activity_limit,
    )


@router.post("/refresh", response_model=DashboardStats)
async def refresh_dashboard(console: Console = Depends(require_admin)):
    """Re-fetch every collection; 503 keeps the previous snapshot in place."""
    snapshot = await refresh_or_raise(console)
    return compute_stats(snapshot)
