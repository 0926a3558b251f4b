"""Job moderation API endpoints."""

from fastapi import APIRouter, Depends, Query

from admin_console.dependencies.auth import get_snapshot, require_admin
from admin_console.dependencies.moderation import action_response, confirmed
from admin_console.models.job import JobStatus, JobType
from admin_console.models.snapshot import Snapshot
from admin_console.schemas.moderation import ActionResultRead
from admin_console.schemas.records import JobRead
from admin_console.services.aggregation import JobFilter, JobView, SortOrder, filter_jobs, sort_jobs
from admin_console.services.console import Console

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.get("", response_model=list[JobRead])
async def list_jobs(
    snapshot: Snapshot = Depends(get_snapshot),
    view: JobView = Query(JobView.APPROVED, description="approved or pending"),
    type: JobType | None = Query(None, description="worker (seeking work) or employer (offering work)"),
    status: JobStatus | None = Query(None, description="Filter approved jobs by status"),
    sort: SortOrder = Query(SortOrder.NEWEST, description="newest, oldest or name"),
):
    """List jobs in the approved or pending view."""
    jobs = filter_jobs(snapshot.jobs, JobFilter(view=view, type=type, status=status))
    return [JobRead.from_entity(j) for j in sort_jobs(jobs, sort)]


@router.put("/{job_id}/approve", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def approve_job(job_id: str, console: Console = Depends(require_admin)):
    return action_response(await console.moderation.approve_job(job_id))


@router.put("/{job_id}/toggle-status", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def toggle_job_status(job_id: str, console: Console = Depends(require_admin)):
    """Flip an approved job between active and closed."""
    return action_response(await console.moderation.toggle_job_status(job_id))


@router.delete("/{job_id}", response_model=ActionResultRead, dependencies=[Depends(get_snapshot)])
async def delete_job(
    job_id: str,
    confirm: bool = Query(False, description="Confirm the permanent deletion"),
    console: Console = Depends(require_admin),
):
    return action_response(await console.moderation.delete_job(job_id, confirm=confirmed(confirm)))
