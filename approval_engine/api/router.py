"""
Main API router
"""
from fastapi import APIRouter, Depends

from approval_engine.api.v1 import (
    health,
    calendar,
    holidays,
    requests,
    leave_balances,
    approvals,
    notifications,
)
from approval_engine.core.deps import ensure_not_in_maintenance

api_router = APIRouter()

# Writes answer 503 while MAINTENANCE_MODE is on; health stays reachable
guarded = [Depends(ensure_not_in_maintenance)]

api_router.include_router(health.router, tags=["health"])
api_router.include_router(calendar.router, prefix="/calendar", tags=["calendar"], dependencies=guarded)
api_router.include_router(holidays.router, prefix="/holidays", tags=["holidays"], dependencies=guarded)
api_router.include_router(requests.router, prefix="/requests", tags=["requests"], dependencies=guarded)
api_router.include_router(leave_balances.router, prefix="/leave-balances", tags=["leave-balances"], dependencies=guarded)
api_router.include_router(approvals.router, prefix="/approvals", tags=["approvals"], dependencies=guarded)
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"], dependencies=guarded)
