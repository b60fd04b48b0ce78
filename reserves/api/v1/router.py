from fastapi import APIRouter
from reserves.api.v1.endpoints import (
    applications,
    cron,
    equipment,
    events,
    notifications,
    policies,
    trainings,
    users,
)

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

# Every endpoint module defines its own prefix (/events, /policies, ...)
api_router.include_router(events.router)
api_router.include_router(trainings.router)
api_router.include_router(equipment.router)
api_router.include_router(policies.router)
api_router.include_router(applications.router)
api_router.include_router(notifications.router)
api_router.include_router(users.router)
api_router.include_router(users.admin_router)

# Scheduler trigger for the hourly reminder sweep
api_router.include_router(cron.router)
