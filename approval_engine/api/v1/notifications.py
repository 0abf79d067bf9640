"""
In-app notification endpoints
"""
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from approval_engine.core.deps import get_db, get_current_user
from approval_engine.models.employee import Employee
from approval_engine.schemas.notification import NotificationOut
from approval_engine.services.notification_service import list_my_notifications, mark_read

router = APIRouter()


@router.get("/me", response_model=List[NotificationOut])
async def my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return list_my_notifications(db, current_user.id, unread_only=unread_only, limit=limit)


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: Employee = Depends(get_current_user),
):
    return mark_read(db, notification_id, current_user.id)
