"""
Notification schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_serializer
from approval_engine.models.notification import NotificationKind


class NotificationOut(BaseModel):
    id: int
    kind: NotificationKind
    request_id: Optional[int] = None
    message: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    @classmethod
    def _ser_datetime(cls, dt):
        from approval_engine.utils.datetime_utils import iso_local
        return iso_local(dt) if dt is not None else None
