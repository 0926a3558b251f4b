"""API v1 router aggregation."""

from fastapi import APIRouter

from admin_console.api.v1.dashboard import router as dashboard_router
from admin_console.api.v1.users import router as users_router
from admin_console.api.v1.jobs import router as jobs_router
from admin_console.api.v1.bookings import router as bookings_router
from admin_console.api.v1.notifications import router as notifications_router

router = APIRouter(prefix="/api/v1")

router.include_router(dashboard_router)
router.include_router(users_router)
router.include_router(jobs_router)
router.include_router(bookings_router)
router.include_router(notifications_router)
