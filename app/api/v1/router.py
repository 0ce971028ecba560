from fastapi import APIRouter

from app.api.v1.endpoints import search, calendar, tasks, notifications, health

router = APIRouter(prefix="/api/v1")

router.include_router(search.router)
router.include_router(calendar.router)
router.include_router(tasks.router)
router.include_router(notifications.router)
router.include_router(health.router)
