"""Console and session dependencies for FastAPI routes."""

from fastapi import Depends, HTTPException, Request

from admin_console.exceptions import AggregationPartialFailure, UnauthorizedError
from admin_console.models.snapshot import Snapshot
from admin_console.services.console import Console


def get_console(request: Request) -> Console:
    """The console built at startup."""
    return request.app.state.console


def require_admin(console: Console = Depends(get_console)) -> Console:
    """Return the console if an admin is signed in, else raise 401."""
    if not console.gate.is_authenticated:
        raise HTTPException(status_code=401, detail="Login required")
    return console


async def refresh_or_raise(console: Console) -> Snapshot:
    """Run a dashboard refresh, translating its failures into HTTP errors."""
    try:
        snapshot = await console.state.refresh()
    except UnauthorizedError as e:
        console.gate.logout()
        raise HTTPException(status_code=401, detail=e.message)
    except AggregationPartialFailure as e:
        raise HTTPException(status_code=503, detail=e.message)
    if snapshot is None:
        # A logout landed while the refresh was in flight
        raise HTTPException(status_code=401, detail="Login required")
    return snapshot


async def get_snapshot(console: Console = Depends(require_admin)) -> Snapshot:
    """Committed snapshot, loading one first if the session has none yet."""
    if console.state.snapshot is not None:
        return console.state.snapshot
    return await refresh_or_raise(console)
