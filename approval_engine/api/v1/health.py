"""
Health check endpoint
"""
from fastapi import APIRouter
from approval_engine.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint

    Returns service status, version and whether writes are paused.
    """
    return {
        "status": "ok",
        "service": "approval-engine",
        "version": settings.VERSION,
        "maintenance": settings.MAINTENANCE_MODE,
    }
